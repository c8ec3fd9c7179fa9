"""
Tests for the process-local cache tier.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from translation_cache.entities import CacheKey, InferenceResult
from translation_cache.services import TierOneCache

KEY = CacheKey(token="a" * 64)
OTHER = CacheKey(token="b" * 64)


@pytest.fixture
def cache(clock):
    """Tier one with a 600 second lifetime."""
    return TierOneCache(ttl=600, clock=clock)


def test_put_then_get(cache):
    """A stored result is returned while fresh."""
    result = InferenceResult(output="こんにちは")
    cache.put(KEY, result)
    assert cache.get(KEY) == result
    assert cache.get(OTHER) is None


def test_entry_expires_after_ttl(cache, clock):
    """Entries are dropped once the lifetime has passed."""
    cache.put(KEY, InferenceResult(output="hi"))
    clock.advance(600)
    assert cache.get(KEY) is not None
    clock.advance(1)
    assert cache.get(KEY) is None
    assert len(cache) == 0


def test_reads_do_not_extend_lifetime(cache, clock):
    """Lifetime is measured from insertion, not last access."""
    cache.put(KEY, InferenceResult(output="hi"))
    clock.advance(400)
    assert cache.get(KEY) is not None
    clock.advance(201)
    assert cache.get(KEY) is None


def test_reput_restarts_lifetime(cache, clock):
    """Putting the same key again starts a new lifetime."""
    cache.put(KEY, InferenceResult(output="old"))
    clock.advance(500)
    cache.put(KEY, InferenceResult(output="new"))
    clock.advance(500)
    assert cache.get(KEY).output == "new"


def test_invalidate_and_clear(cache):
    """Entries can be dropped individually or all at once."""
    cache.put(KEY, InferenceResult(output="a"))
    cache.put(OTHER, InferenceResult(output="b"))
    assert cache.invalidate(KEY) is True
    assert cache.invalidate(KEY) is False
    assert cache.clear() == 1
    assert len(cache) == 0


def test_purge_expired(cache, clock):
    """Only expired entries are purged."""
    cache.put(KEY, InferenceResult(output="a"))
    clock.advance(601)
    cache.put(OTHER, InferenceResult(output="b"))
    assert cache.purge_expired() == 1
    assert cache.get(OTHER) is not None


def test_per_entry_lifetime_is_capped(cache, clock):
    """A shorter lifetime wins; a longer one is held to the cache TTL."""
    cache.put(KEY, InferenceResult(output="short"), ttl=10)
    cache.put(OTHER, InferenceResult(output="long"), ttl=10_000)
    clock.advance(11)
    assert cache.get(KEY) is None
    clock.advance(590)
    assert cache.get(OTHER) is None


def test_concurrent_access_from_threads():
    """Parallel writers and readers never lose or corrupt entries."""
    cache = TierOneCache(ttl=600)

    def worker(worker_id: int) -> int:
        hits = 0
        for i in range(200):
            key = CacheKey(token=f"{worker_id:02d}{i:062d}")
            cache.put(key, InferenceResult(output=f"{worker_id}-{i}"))
            cache.put(KEY, InferenceResult(output="shared"))
            result = cache.get(key)
            if result is not None and result.output == f"{worker_id}-{i}":
                hits += 1
            assert cache.get(KEY).output == "shared"
        return hits

    with ThreadPoolExecutor(max_workers=8) as pool:
        hits = list(pool.map(worker, range(8)))

    assert hits == [200] * 8
    assert len(cache) == 8 * 200 + 1
