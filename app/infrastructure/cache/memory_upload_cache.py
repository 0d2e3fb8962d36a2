import threading
from collections import OrderedDict
from typing import Dict

from ...application.ports.upload_cache import UploadCache, CacheEntry
from ...exceptions import NotFound


class InMemoryUploadCache(UploadCache):
    """Process-local upload bookkeeping. Keeps only the newest `max_entries` uploads."""

    def __init__(self, max_entries: int = 50) -> None:
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.max_entries = max_entries

    def put(self, ref: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[ref] = entry
            self._entries.move_to_end(ref)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def get(self, ref: str) -> CacheEntry:
        with self._lock:
            entry = self._entries.get(ref)
        if entry is None:
            raise NotFound("Image not found in upload cache")
        return entry

    def remove(self, ref: str) -> None:
        with self._lock:
            if ref not in self._entries:
                raise NotFound("Image not found in upload cache")
            del self._entries[ref]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def snapshot(self) -> Dict[str, CacheEntry]:
        with self._lock:
            return dict(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, ref: object) -> bool:
        with self._lock:
            return ref in self._entries
