from typing import Protocol


class ImageStore(Protocol):
    def store(self, data: bytes, filename: str, content_type: str) -> str:
        ...

    def delete(self, url: str) -> None:
        ...
