"""In-memory implementation of EntryStore for tests and local runs."""

import threading
from collections.abc import Iterator
from dataclasses import replace

from translation_cache.entities import CacheEntryEntity


class InMemoryEntryRepository:
    """Dictionary-backed entry store.

    Mimics the Redis repository inside one process: last write wins,
    ``touch`` advances access metadata, no backend-side expiry.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntryEntity] = {}
        self._lock = threading.Lock()
        self.loads = 0

    def load(self, key: str) -> CacheEntryEntity | None:
        with self._lock:
            self.loads += 1
            return self._entries.get(key)

    def save(self, entry: CacheEntryEntity, ttl: int) -> None:
        with self._lock:
            self._entries[entry.key] = entry

    def touch(self, key: str, accessed_at: float) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return
            self._entries[key] = replace(
                entry,
                last_accessed_at=max(entry.last_accessed_at, accessed_at),
                access_count=entry.access_count + 1,
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def iter_keys(self) -> Iterator[str]:
        with self._lock:
            keys = list(self._entries)
        yield from keys

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def health_check(self) -> bool:
        return True
