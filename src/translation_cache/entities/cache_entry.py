"""Cache entry domain entity."""

from dataclasses import dataclass, replace

from .inference import InferenceResult


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a translation kept in the durable tier.

    Attributes:
        key: The cache key token this entry is stored under
        source_input: The original text
        target_variant: Target language code
        result: The cached inference result
        created_at: Unix timestamp of the write; never refreshed by reads
        last_accessed_at: Unix timestamp of the most recent read
        access_count: Number of reads, including the initial write
    """

    key: str
    source_input: str
    target_variant: str
    result: InferenceResult
    created_at: float
    last_accessed_at: float
    access_count: int = 1

    @classmethod
    def new(
        cls,
        key: str,
        source_input: str,
        target_variant: str,
        result: InferenceResult,
        now: float,
    ) -> "CacheEntryEntity":
        """Build the entry for a first successful inference."""
        return cls(
            key=key,
            source_input=source_input,
            target_variant=target_variant,
            result=result,
            created_at=now,
            last_accessed_at=now,
            access_count=1,
        )

    def is_expired(self, now: float, ttl: float) -> bool:
        """Return True once ``ttl`` seconds have passed since creation."""
        return now - self.created_at > ttl

    def touched(self, now: float) -> "CacheEntryEntity":
        """Return a copy with access metadata advanced by one read."""
        return replace(
            self,
            last_accessed_at=max(self.last_accessed_at, now),
            access_count=self.access_count + 1,
        )
