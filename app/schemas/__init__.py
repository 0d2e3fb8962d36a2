# Schemas package (re-export feature modules for stable imports)
from .uploads.uploads import *
from .common.common import *
