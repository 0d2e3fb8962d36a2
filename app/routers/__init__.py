# Routers package
from . import uploads_router

__all__ = [
    "uploads_router",
]
