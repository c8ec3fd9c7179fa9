"""Cache key domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheKey:
    """Opaque, fixed-length lookup token for one cached translation.

    Attributes:
        token: 64-char sha256 hex digest over input digest, target variant
            and schema version
    """

    token: str

    def storage_key(self, namespace: str) -> str:
        """Return the key under which the durable store keeps this entry."""
        return f"{namespace}:{self.token}"

    def __str__(self) -> str:
        return self.token
