"""
Tests for cache key derivation.
"""

import pytest

from translation_cache.services import CacheKeyCodec


@pytest.fixture
def codec():
    """Codec hashing the full input."""
    return CacheKeyCodec()


def test_same_request_same_key(codec):
    """Equal inputs, variants and schema versions give equal keys."""
    first = codec.derive("Good morning", "ja", "v2")
    second = codec.derive("Good morning", "ja", "v2")
    assert first == second
    assert len(first.token) == 64


def test_target_variant_changes_key(codec):
    """Each target variant gets its own entry."""
    assert codec.derive("Good morning", "ja", "v2") != codec.derive("Good morning", "ko", "v2")


def test_schema_version_changes_key(codec):
    """Bumping the schema version orphans every old key."""
    assert codec.derive("Good morning", "ja", "v2") != codec.derive("Good morning", "ja", "v3")


def test_full_input_is_hashed_by_default(codec):
    """Inputs sharing a long prefix still get distinct keys."""
    prefix = "x" * 100
    assert codec.derive(prefix + "a", "en", "v2") != codec.derive(prefix + "b", "en", "v2")
    assert codec.prefix_chars is None


def test_whitespace_is_significant(codec):
    """The input is hashed byte-for-byte."""
    assert codec.derive("hello", "en", "v2") != codec.derive("hello ", "en", "v2")


def test_prefix_bound_collapses_long_inputs():
    """With a prefix bound, inputs agreeing on the prefix share a key."""
    codec = CacheKeyCodec(prefix_chars=50)
    prefix = "y" * 50
    assert codec.derive(prefix + "first", "en", "v2") == codec.derive(prefix + "second", "en", "v2")
    assert codec.derive("short a", "en", "v2") != codec.derive("short b", "en", "v2")
    assert codec.prefix_chars == 50


def test_fields_cannot_run_together(codec):
    """Moving characters between variant and schema never yields the same key."""
    assert codec.derive("text", "ab", "c") != codec.derive("text", "a", "bc")


def test_key_token_is_opaque(codec):
    """The token never embeds the input text."""
    key = codec.derive("secret message", "en", "v2")
    assert "secret" not in key.token
    assert str(key) == key.token
    assert key.storage_key("translation_cache") == f"translation_cache:{key.token}"


def test_invalid_prefix_rejected():
    """A non-positive prefix bound is a configuration error."""
    with pytest.raises(ValueError):
        CacheKeyCodec(prefix_chars=0)
