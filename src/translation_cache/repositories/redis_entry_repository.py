"""Redis implementation of EntryStore.

One hash per entry at ``{namespace}:{token}`` whose fields are exactly the
cache entry's: key, sourceInput, targetVariant, result (JSON), createdAt,
lastAccessedAt, accessCount.
"""

import json
from collections.abc import Iterator

import redis

from translation_cache.config import Settings, get_redis_client
from translation_cache.entities import CacheEntryEntity, InferenceResult

# Advance access metadata atomically. lastAccessedAt only moves forward, and
# a hash deleted in the meantime is not recreated.
_TOUCH_SCRIPT = """
if redis.call("EXISTS", KEYS[1]) == 0 then
    return 0
end
redis.call("HINCRBY", KEYS[1], "accessCount", 1)
local current = tonumber(redis.call("HGET", KEYS[1], "lastAccessedAt") or "0")
if tonumber(ARGV[1]) > current then
    redis.call("HSET", KEYS[1], "lastAccessedAt", ARGV[1])
end
return 1
"""


class RedisEntryRepository:
    """Redis hash-per-entry store.

    This class satisfies the EntryStore protocol through structural
    typing - no explicit inheritance needed.

    Writes go through a pipeline so the hash and its EXPIRE land together;
    reads advance access metadata with a server-side script.
    EXPIRE is only a backstop; expiry on read is decided by the tier-two cache.
    """

    def __init__(self, redis_client: redis.Redis, namespace: str) -> None:
        """Initialize the Redis entry repository.

        Args:
            redis_client: Redis client created with ``decode_responses=True``.
            namespace: Key prefix shared by every entry of this cache.
        """
        self._client = redis_client
        self._namespace = namespace
        self._touch = redis_client.register_script(_TOUCH_SCRIPT)

    @classmethod
    def create(cls, settings: Settings) -> "RedisEntryRepository":
        """Factory method to create RedisEntryRepository from settings.

        Args:
            settings: Application settings (Redis URL, namespace).

        Returns:
            Configured RedisEntryRepository
        """
        return cls(redis_client=get_redis_client(settings), namespace=settings.cache_namespace)

    def _storage_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def load(self, key: str) -> CacheEntryEntity | None:
        """Load an entry by key token.

        Args:
            key: The cache key token

        Returns:
            The stored entry, or None if absent
        """
        storage_key = self._storage_key(key)
        data = self._client.hgetall(storage_key)
        if not data:
            return None
        if "result" not in data:
            # Partial hash without a payload (e.g. written by an older touch); drop it.
            self._client.delete(storage_key)
            return None
        return CacheEntryEntity(
            key=data["key"],
            source_input=data["sourceInput"],
            target_variant=data["targetVariant"],
            result=InferenceResult.from_dict(json.loads(data["result"])),
            created_at=float(data["createdAt"]),
            last_accessed_at=float(data["lastAccessedAt"]),
            access_count=int(data["accessCount"]),
        )

    def save(self, entry: CacheEntryEntity, ttl: int) -> None:
        """Overwrite the entry stored under ``entry.key``.

        Args:
            entry: The entry to persist
            ttl: Redis-side expiry in seconds
        """
        storage_key = self._storage_key(entry.key)
        pipe = self._client.pipeline()
        pipe.delete(storage_key)
        pipe.hset(
            storage_key,
            mapping={
                "key": entry.key,
                "sourceInput": entry.source_input,
                "targetVariant": entry.target_variant,
                "result": json.dumps(entry.result.to_dict(), ensure_ascii=False),
                "createdAt": repr(entry.created_at),
                "lastAccessedAt": repr(entry.last_accessed_at),
                "accessCount": str(entry.access_count),
            },
        )
        pipe.expire(storage_key, ttl)
        pipe.execute()

    def touch(self, key: str, accessed_at: float) -> None:
        """Advance access metadata for one read.

        Args:
            key: The cache key token
            accessed_at: Unix timestamp of the read
        """
        self._touch(keys=[self._storage_key(key)], args=[repr(accessed_at)])

    def delete(self, key: str) -> bool:
        """Delete a specific entry by key token.

        Args:
            key: The cache key token

        Returns:
            True if deleted, False otherwise
        """
        result: int = self._client.delete(self._storage_key(key))  # type: ignore[assignment]
        return result > 0

    def iter_keys(self) -> Iterator[str]:
        """Iterate over every key token in this namespace."""
        prefix = f"{self._namespace}:"
        for storage_key in self._client.scan_iter(match=f"{prefix}*"):
            yield storage_key[len(prefix):]

    def clear(self) -> int:
        """Clear all entries in this namespace.

        Returns:
            Number of entries deleted
        """
        count = 0
        for key in list(self.iter_keys()):
            if self.delete(key):
                count += 1
        return count

    def count(self) -> int:
        """Count total entries in this namespace."""
        return sum(1 for _ in self.iter_keys())

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
