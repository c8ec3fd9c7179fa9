"""Cache key derivation.

Keys are sha256 digests over ``(input digest, target variant, schema version)``.
By default the whole input is hashed. Passing ``prefix_chars`` switches to
hashing only the first N characters of the input: inputs that agree on that
prefix and the target variant share one cache entry. That bound is exposed
as ``CacheKeyCodec.prefix_chars`` and is part of the codec's contract.
"""

from hashlib import sha256

from translation_cache.entities import CacheKey

_FIELD_SEPARATOR = "\x1f"


class CacheKeyCodec:
    """Derive stable, versioned cache keys from logical requests."""

    def __init__(self, prefix_chars: int | None = None) -> None:
        """Initialize the codec.

        Args:
            prefix_chars: Hash only this many leading characters of the input.
                None (default) hashes the full input.
        """
        if prefix_chars is not None and prefix_chars < 1:
            raise ValueError("prefix_chars must be a positive integer or None")
        self._prefix_chars = prefix_chars

    @property
    def prefix_chars(self) -> int | None:
        """Truncation bound applied to the input before hashing, or None."""
        return self._prefix_chars

    def input_digest(self, input: str) -> str:
        """Return the hex digest of the (possibly truncated) input text."""
        if self._prefix_chars is not None:
            input = input[: self._prefix_chars]
        return sha256(input.encode("utf-8")).hexdigest()

    def derive(self, input: str, target_variant: str, schema_version: str) -> CacheKey:
        """Derive the cache key for one request.

        Args:
            input: The source text, hashed byte-for-byte (no whitespace folding)
            target_variant: Target language code
            schema_version: Version of the request-shaping logic

        Returns:
            CacheKey with a 64-char hex token
        """
        material = _FIELD_SEPARATOR.join(
            (schema_version.strip(), target_variant.strip(), self.input_digest(input))
        )
        return CacheKey(token=sha256(material.encode("utf-8")).hexdigest())
