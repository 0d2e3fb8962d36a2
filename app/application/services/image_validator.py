from dataclasses import dataclass, field
from typing import List

from ..dto import UploadableFile
from ...exceptions import InvalidType, TooLarge


@dataclass
class ImageValidator:
    allowed_types: List[str] = field(default_factory=lambda: ["image/jpeg", "image/jpg", "image/png", "image/webp"])
    max_file_size: int = 2 * 1024 * 1024
    compression_threshold: int = 500 * 1024

    def validate(self, file: UploadableFile) -> None:
        content_type = (file.content_type or "").lower()
        if not file.size:
            raise InvalidType("No file provided")
        if not content_type.startswith("image/"):
            raise InvalidType("File must be an image")
        if content_type not in {t.lower() for t in self.allowed_types}:
            raise InvalidType("Unsupported format. Use JPG, PNG or WebP")
        if file.size > self.max_file_size:
            raise TooLarge(f"File too large (max {self.max_file_size / (1024*1024):g}MB)")

    def needs_compression(self, file: UploadableFile) -> bool:
        return file.size > self.compression_threshold
