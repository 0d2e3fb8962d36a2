import os
import mimetypes
import uuid
from datetime import datetime

from ...application.ports.image_store import ImageStore
from ...exceptions import NotFound, StoreUnavailable


class LocalStorageRepository(ImageStore):
    """Filesystem image store. Files are served by the app under /uploads."""

    def __init__(self, upload_dir: str, base_url: str = "", subdir: str = "images") -> None:
        self.upload_dir = upload_dir
        self.base_url = base_url.rstrip("/")
        self.subdir = subdir

    def store(self, data: bytes, filename: str, content_type: str) -> str:
        ext = os.path.splitext(filename)[1] or mimetypes.guess_extension(content_type) or ".jpg"
        name = f"{int(datetime.utcnow().timestamp()*1000)}_{uuid.uuid4().hex}{ext}"
        dest_dir = os.path.join(self.upload_dir, self.subdir)
        try:
            os.makedirs(dest_dir, exist_ok=True)
            with open(os.path.join(dest_dir, name), "wb") as f:
                f.write(data)
        except OSError as e:
            raise StoreUnavailable(f"Could not write image to storage: {e}")
        return f"{self.base_url}/uploads/{self.subdir}/{name}"

    def delete(self, url: str) -> None:
        prefix = f"{self.base_url}/uploads/"
        if not url.startswith(prefix):
            raise NotFound("Image is not held by this store")
        rel_path = url[len(prefix):]
        # refuse anything that escapes the upload dir
        if os.path.isabs(rel_path) or ".." in rel_path.split("/"):
            raise NotFound("Image is not held by this store")
        path = os.path.join(self.upload_dir, *rel_path.split("/"))
        if not os.path.exists(path):
            raise NotFound("Image file does not exist")
        try:
            os.remove(path)
        except OSError as e:
            raise StoreUnavailable(f"Could not delete image from storage: {e}")
