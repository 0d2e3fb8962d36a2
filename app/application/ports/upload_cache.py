from typing import Dict, Optional, Protocol
from dataclasses import dataclass
from datetime import datetime


@dataclass
class CacheEntry:
    ref: str
    id: str
    size: int
    created_at: datetime
    source_ref: str
    content_type: str
    inline: bool
    original_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None


class UploadCache(Protocol):
    def put(self, ref: str, entry: CacheEntry) -> None:
        ...

    def get(self, ref: str) -> CacheEntry:
        ...

    def remove(self, ref: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def snapshot(self) -> Dict[str, CacheEntry]:
        ...

    def __len__(self) -> int:
        ...

    def __contains__(self, ref: object) -> bool:
        ...
