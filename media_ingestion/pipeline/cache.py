"""In-memory resource cache owned by one attachment manager."""

from __future__ import annotations

from collections import OrderedDict
import threading

from media_ingestion.heads.base import MediaRecord


class ResourceCache:
    """URL -> record map. Unbounded unless ``max_entries`` is set, then least recently used entries go first."""

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, MediaRecord] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, url: str) -> MediaRecord | None:
        with self._lock:
            record = self._entries.get(url)
            if record is not None:
                self._entries.move_to_end(url)
            return record

    def set(self, url: str, record: MediaRecord) -> None:
        with self._lock:
            self._entries[url] = record
            self._entries.move_to_end(url)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
