"""Durable, cross-process translation cache.

Wraps an EntryStore with the absolute-TTL rules:

- an entry is valid for ``ttl`` seconds after ``created_at``; reads never extend it
- an expired entry is deleted the moment it is read, so no stale entry is
  returned even if the sweep has never run
- writes replace the whole entry (last write wins, ``created_at`` taken from
  the latest write)
"""

import logging
import time
from collections.abc import Callable

from translation_cache.entities import CacheEntryEntity, CacheKey
from translation_cache.protocols import EntryStore

logger = logging.getLogger(__name__)


class TierTwoCache:
    """TTL policy over a shared entry store.

    Example:
        ```python
        cache = TierTwoCache(store=RedisEntryRepository.create(settings), ttl=30 * 86400)
        entry = cache.get(key)
        ```
    """

    def __init__(
        self,
        store: EntryStore,
        ttl: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the tier-two cache.

        Args:
            store: Durable backend (required).
            ttl: Entry lifetime in seconds, absolute from creation.
            clock: Wall-clock source returning Unix timestamps.
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._store = store
        self._ttl = ttl
        self._clock = clock

    def get(self, key: CacheKey) -> CacheEntryEntity | None:
        """Return the live entry for ``key``, advancing its access metadata.

        Args:
            key: The cache key

        Returns:
            The entry as seen after this read, or None on miss/expiry
        """
        entry = self._store.load(key.token)
        if entry is None:
            return None

        now = self._clock()
        if entry.is_expired(now, self._ttl):
            logger.debug("Tier two entry %s expired; deleting", key.token[:12])
            self._store.delete(key.token)
            return None

        self._store.touch(key.token, now)
        return entry.touched(now)

    def put(self, key: CacheKey, entry: CacheEntryEntity) -> None:
        """Write an entry, replacing whatever was stored under ``key``.

        Args:
            key: The cache key
            entry: The entry to persist; its ``key`` must match
        """
        if entry.key != key.token:
            raise ValueError("entry.key does not match the cache key")
        self._store.save(entry, self._ttl)

    def invalidate(self, key: CacheKey) -> bool:
        """Delete one entry regardless of age."""
        return self._store.delete(key.token)

    def sweep_expired(self) -> int:
        """Delete every expired entry.

        Returns:
            Number of entries deleted
        """
        now = self._clock()
        deleted = 0
        for token in list(self._store.iter_keys()):
            entry = self._store.load(token)
            if entry is not None and entry.is_expired(now, self._ttl):
                if self._store.delete(token):
                    deleted += 1
        logger.info("Tier two sweep removed %d expired entries", deleted)
        return deleted

    def clear(self) -> int:
        """Delete all entries."""
        return self._store.clear()

    def count(self) -> int:
        """Count stored entries, expired or not."""
        return self._store.count()

    def health_check(self) -> bool:
        """Check if the backend is reachable."""
        return self._store.health_check()

    def get_stats(self) -> dict:
        """Get tier statistics."""
        return {
            "total_entries": self._store.count(),
            "ttl": self._ttl,
        }

    @property
    def ttl(self) -> int:
        """Entry lifetime in seconds."""
        return self._ttl

    @property
    def store(self) -> EntryStore:
        """Get the underlying store (for testing)."""
        return self._store
