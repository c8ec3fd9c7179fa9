"""Process-local, short-lived translation cache.

Absorbs bursts of identical requests within one process's uptime. Entries
expire a fixed time after insertion, or sooner when the caller passes a
shorter lifetime, and are dropped lazily when read; there is no background
sweep and no capacity bound.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from translation_cache.entities import CacheKey, InferenceResult


@dataclass(frozen=True)
class _Slot:
    result: InferenceResult
    expires_at: float


class TierOneCache:
    """In-memory map with insertion-time TTL.

    Safe to share between asyncio tasks and threads; every access holds a
    lock for the duration of one dictionary operation.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the tier-one cache.

        Args:
            ttl: Entry lifetime in seconds, measured from insertion.
            clock: Time source; tests inject a fake.
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._slots: dict[str, _Slot] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> InferenceResult | None:
        """Return the cached result, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            slot = self._slots.get(key.token)
            if slot is None:
                return None
            if now > slot.expires_at:
                del self._slots[key.token]
                return None
            return slot.result

    def put(self, key: CacheKey, result: InferenceResult, ttl: float | None = None) -> None:
        """Store a result; re-putting a key restarts its lifetime.

        Args:
            key: The cache key
            result: The result to keep
            ttl: Shorter lifetime for this entry; never longer than the cache TTL
        """
        lifetime = self._ttl if ttl is None else min(ttl, self._ttl)
        slot = _Slot(result=result, expires_at=self._clock() + lifetime)
        with self._lock:
            self._slots[key.token] = slot

    def invalidate(self, key: CacheKey) -> bool:
        """Drop one entry. Returns True if it was present."""
        with self._lock:
            return self._slots.pop(key.token, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [
                token for token, slot in self._slots.items()
                if now > slot.expires_at
            ]
            for token in expired:
                del self._slots[token]
        return len(expired)

    def clear(self) -> int:
        """Drop everything and return how many entries were removed."""
        with self._lock:
            count = len(self._slots)
            self._slots.clear()
        return count

    @property
    def ttl(self) -> float:
        """Entry lifetime in seconds."""
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)
