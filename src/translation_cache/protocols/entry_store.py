"""Durable entry store protocol.

Defines the interface for the shared, persistent backend behind the
tier-two cache. All access is by exact key; no secondary indexes.

Implementations can include:
- Redis hashes (default)
- In-memory dictionary (tests, local development)
- Any document store addressed by one key per entry
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from translation_cache.entities import CacheEntryEntity


@runtime_checkable
class EntryStore(Protocol):
    """Protocol for durable cache backends.

    Concurrent writers are expected; ``save`` is last-write-wins and the
    store is never used for locking.
    """

    def load(self, key: str) -> CacheEntryEntity | None:
        """Load an entry.

        Args:
            key: The cache key token

        Returns:
            The stored entry, or None if absent
        """
        ...

    def save(self, entry: CacheEntryEntity, ttl: int) -> None:
        """Write an entry, replacing any previous one under the same key.

        Args:
            entry: The entry to persist
            ttl: Backend-side expiry in seconds, counted from now
        """
        ...

    def touch(self, key: str, accessed_at: float) -> None:
        """Advance access metadata for a read.

        Args:
            key: The cache key token
            accessed_at: Unix timestamp of the read
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete an entry.

        Args:
            key: The cache key token

        Returns:
            True if deleted, False otherwise
        """
        ...

    def iter_keys(self) -> Iterator[str]:
        """Iterate over every stored key token."""
        ...

    def clear(self) -> int:
        """Delete all entries.

        Returns:
            Number of entries deleted
        """
        ...

    def count(self) -> int:
        """Count stored entries."""
        ...

    def health_check(self) -> bool:
        """Check if the backend is reachable."""
        ...
