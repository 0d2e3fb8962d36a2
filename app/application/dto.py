from dataclasses import dataclass
from typing import Optional


@dataclass
class UploadableFile:
    data: bytes
    content_type: str
    size: int
    filename: str = "upload"

    @classmethod
    def from_bytes(cls, data: bytes, content_type: str, filename: str = "upload") -> "UploadableFile":
        return cls(data=data, content_type=content_type, size=len(data), filename=filename)


@dataclass
class CompressedImage:
    data: bytes
    content_type: str
    format: str
    width: int
    height: int
    quality: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadResult:
    ref: str
    id: str
    inline: bool
    content_type: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None
