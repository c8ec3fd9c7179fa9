"""
Tests for resolving translations through both cache tiers.
"""

import asyncio

import pytest

from translation_cache.config import Settings
from translation_cache.entities import InferenceResult
from translation_cache.errors import (
    AuthFailure,
    NetworkFailure,
    RateLimited,
    ServiceUnavailable,
    SkippedIdentical,
)
from translation_cache.repositories import InMemoryEntryRepository
from translation_cache.services import CacheOrchestrator, CacheSource, RetryPolicy, TierTwoCache


class BrokenStore(InMemoryEntryRepository):
    """Store whose writes and reads can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False

    def save(self, entry, ttl):
        if self.fail_writes:
            raise ConnectionError("store unavailable")
        super().save(entry, ttl)

    def load(self, key):
        if self.fail_reads:
            raise ConnectionError("store unavailable")
        return super().load(key)


def resolve_all(orchestrator, *requests):
    async def scenario():
        resolutions = []
        for request in requests:
            resolutions.append(await orchestrator.resolve_detailed(*request))
        await orchestrator.flush()
        return resolutions

    return asyncio.run(scenario())


def test_identical_variants_never_reach_provider(make_orchestrator, stub_client, store):
    """Same source and target short-circuits before any cache or provider work."""
    orchestrator = make_orchestrator()

    with pytest.raises(SkippedIdentical) as exc_info:
        asyncio.run(orchestrator.resolve("謝謝", "zh-TW", "zh-TW"))

    assert exc_info.value.original_input == "謝謝"
    assert stub_client.calls == []
    assert store.loads == 0
    assert orchestrator.metrics.skipped_identical == 1


def test_miss_then_tier_one_hit(make_orchestrator, stub_client, store):
    """A repeated request is served from tier one without a durable read."""
    orchestrator = make_orchestrator()

    first, second = resolve_all(orchestrator, ("Hello", "en", "ja"), ("Hello", "en", "ja"))

    assert first.source is CacheSource.INFERENCE
    assert second.source is CacheSource.TIER_ONE
    assert second.result.output == "ja:Hello"
    assert second.served_from_cache
    assert len(stub_client.calls) == 1
    assert store.loads == 1
    assert store.count() == 1


def test_tier_two_hit_is_promoted(make_orchestrator, stub_client, store):
    """A durable hit fills tier one so the next call skips the store."""
    orchestrator = make_orchestrator()
    resolve_all(orchestrator, ("Hello", "en", "ja"))
    orchestrator.tier_one.clear()
    loads_before = store.loads

    durable, local = resolve_all(orchestrator, ("Hello", "en", "ja"), ("Hello", "en", "ja"))

    assert durable.source is CacheSource.TIER_TWO
    assert local.source is CacheSource.TIER_ONE
    assert store.loads == loads_before + 1
    assert len(stub_client.calls) == 1


def test_shared_durable_tier_between_processes(make_orchestrator, stub_client, clock, store):
    """A second orchestrator over the same store reuses earlier results."""
    first = make_orchestrator()
    resolve_all(first, ("Good night", None, "ko"))

    second = make_orchestrator()
    (resolution,) = resolve_all(second, ("Good night", None, "ko"))

    assert resolution.source is CacheSource.TIER_TWO
    assert len(stub_client.calls) == 1


def test_source_variant_is_not_part_of_key(make_orchestrator, stub_client):
    """Auto-detected and explicit sources share one entry."""
    orchestrator = make_orchestrator()

    _, second = resolve_all(orchestrator, ("Hello", None, "ja"), ("Hello", "en", "ja"))

    assert second.source is CacheSource.TIER_ONE
    assert len(stub_client.calls) == 1


def test_failures_are_never_cached(make_orchestrator, stub_client, store):
    """A failed request leaves both tiers empty and the next call retries."""
    orchestrator = make_orchestrator()
    stub_client.script = [AuthFailure("rejected")]

    with pytest.raises(AuthFailure):
        asyncio.run(orchestrator.resolve("Hello", "en", "ja"))

    assert store.count() == 0
    assert len(orchestrator.tier_one) == 0
    assert orchestrator.metrics.inference_failures == 1

    (resolution,) = resolve_all(orchestrator, ("Hello", "en", "ja"))
    assert resolution.source is CacheSource.INFERENCE
    assert len(stub_client.calls) == 2


def test_transient_failure_retried_then_cached(make_orchestrator, stub_client, sleeper, store):
    """Retries happen inside one resolve and only the success is stored."""
    orchestrator = make_orchestrator()
    stub_client.script = [ServiceUnavailable("503"), RateLimited("429", retry_after=3.0)]

    (resolution,) = resolve_all(orchestrator, ("Hello", "en", "th"))

    assert resolution.result.output == "th:Hello"
    assert len(stub_client.calls) == 3
    assert sleeper.delays == [1.0, 3.0]
    assert store.count() == 1


def test_write_failure_does_not_fail_request(make_orchestrator, clock, stub_client):
    """A durable write error is logged and counted, the result still returned."""
    broken = BrokenStore()
    broken.fail_writes = True
    orchestrator = make_orchestrator(tier_two=TierTwoCache(store=broken, ttl=86400, clock=clock))

    (resolution,) = resolve_all(orchestrator, ("Hello", "en", "ja"))

    assert resolution.result.output == "ja:Hello"
    assert orchestrator.metrics.cache_write_failures == 1
    assert broken.count() == 0


def test_read_failure_falls_through_to_provider(make_orchestrator, clock, stub_client):
    """An unreachable durable tier is treated as a miss."""
    broken = BrokenStore()
    broken.fail_reads = True
    orchestrator = make_orchestrator(tier_two=TierTwoCache(store=broken, ttl=86400, clock=clock))

    (resolution,) = resolve_all(orchestrator, ("Hello", "en", "ja"))

    assert resolution.source is CacheSource.INFERENCE
    assert len(stub_client.calls) == 1


def test_expired_durable_entry_is_refetched(make_orchestrator, stub_client, clock, store):
    """After the durable TTL the provider is called again."""
    orchestrator = make_orchestrator()
    resolve_all(orchestrator, ("Hello", "en", "ja"))
    orchestrator.tier_one.clear()
    clock.advance(30 * 86400 + 1)

    (resolution,) = resolve_all(orchestrator, ("Hello", "en", "ja"))

    assert resolution.source is CacheSource.INFERENCE
    assert len(stub_client.calls) == 2
    assert store.count() == 1


def test_slow_attempt_becomes_network_failure(make_orchestrator, stub_client, sleeper):
    """An attempt exceeding its deadline is a retryable network failure."""
    stub_client.delay = 0.2
    orchestrator = make_orchestrator(
        attempt_timeout=0.01,
        retry_policy=RetryPolicy(max_attempts=2, base_delay=0.0, sleeper=sleeper),
    )

    with pytest.raises(NetworkFailure) as exc_info:
        asyncio.run(orchestrator.resolve("Hello", "en", "ja"))

    assert exc_info.value.attempts == 2
    assert len(stub_client.calls) == 2


def test_translate_text_returns_output(make_orchestrator):
    """The convenience wrapper auto-detects the source."""
    orchestrator = make_orchestrator()

    async def scenario():
        text = await orchestrator.translate_text("Bonjour", "en")
        await orchestrator.flush()
        return text

    assert asyncio.run(scenario()) == "en:Bonjour"


def test_invalidate_removes_from_both_tiers(make_orchestrator, store):
    """An invalidated translation is fetched again."""
    orchestrator = make_orchestrator()
    resolve_all(orchestrator, ("Hello", "en", "ja"))

    assert asyncio.run(orchestrator.invalidate("Hello", "ja")) is True
    assert store.count() == 0
    assert asyncio.run(orchestrator.invalidate("Hello", "ja")) is False


def test_invalidate_waits_for_pending_write(make_orchestrator, store):
    """A write still in flight cannot restore an invalidated entry."""
    orchestrator = make_orchestrator()

    async def scenario():
        await orchestrator.resolve("Hello", "en", "ja")
        removed = await orchestrator.invalidate("Hello", "ja")
        await orchestrator.flush()
        return removed

    assert asyncio.run(scenario()) is True
    assert store.count() == 0
    assert len(orchestrator.tier_one) == 0


def test_clear_waits_for_pending_writes(make_orchestrator, store):
    """Clearing right after a miss leaves both tiers empty."""
    orchestrator = make_orchestrator()

    async def scenario():
        await orchestrator.resolve("Hello", "en", "ja")
        await orchestrator.resolve("Hello", "en", "ko")
        deleted = await orchestrator.clear()
        await orchestrator.flush()
        return deleted

    assert asyncio.run(scenario()) == 2
    assert store.count() == 0


def test_promotion_never_outlives_durable_expiry(make_orchestrator, stub_client, clock):
    """An entry promoted shortly before its durable expiry leaves tier one with it."""
    orchestrator = make_orchestrator()
    resolve_all(orchestrator, ("Hello", "en", "ja"))
    orchestrator.tier_one.clear()
    clock.advance(30 * 86400 - 100)

    (promoted,) = resolve_all(orchestrator, ("Hello", "en", "ja"))
    clock.advance(101)
    (refetched,) = resolve_all(orchestrator, ("Hello", "en", "ja"))

    assert promoted.source is CacheSource.TIER_TWO
    assert refetched.source is CacheSource.INFERENCE
    assert len(stub_client.calls) == 2


def test_stats(make_orchestrator):
    """Stats combine tier sizes and counters."""
    orchestrator = make_orchestrator()
    resolve_all(orchestrator, ("Hello", "en", "ja"), ("Hello", "en", "ja"))

    stats = orchestrator.get_stats()

    assert stats["tier_one_entries"] == 1
    assert stats["tier_two_entries"] == 1
    assert stats["tier_one_hits"] == 1
    assert stats["cache_misses"] == 1
    assert stats["hit_rate"] == 0.5
    assert stats["model"] == "stub-model"
    assert stats["pending_writes"] == 0


def test_create_from_settings(stub_client):
    """The factory wires TTLs, retry and schema version from settings."""
    settings = Settings(
        tier_two_backend="memory",
        tier_one_ttl=120,
        cache_expiration_days=7,
        schema_version="v9",
        key_prefix_chars=50,
        max_retry_attempts=4,
        retry_delay_ms=250,
        retry_max_delay_seconds=5.0,
    )

    orchestrator = CacheOrchestrator.create(
        settings=settings,
        store=InMemoryEntryRepository(),
        client=stub_client,
    )

    stats = orchestrator.get_stats()
    assert stats["tier_one_ttl"] == 120
    assert stats["tier_two_ttl"] == 7 * 86400
    assert stats["schema_version"] == "v9"
    assert stats["key_prefix_chars"] == 50
    assert stats["retry_max_delay"] == 5.0


def test_long_retry_after_is_capped(make_orchestrator, stub_client, sleeper):
    """A provider asking for a very long wait is held to the configured cap."""
    orchestrator = make_orchestrator(
        retry_policy=RetryPolicy(max_attempts=2, base_delay=1.0, max_delay=60.0, sleeper=sleeper),
    )
    stub_client.script = [RateLimited("429", retry_after=600.0)]

    (resolution,) = resolve_all(orchestrator, ("Hello", "en", "ja"))

    assert resolution.source is CacheSource.INFERENCE
    assert sleeper.delays == [60.0]


def test_cached_result_matches_original(make_orchestrator, stub_client):
    """Served results carry the original output and metadata."""
    orchestrator = make_orchestrator()
    first, second = resolve_all(orchestrator, ("Hi", "en", "vi"), ("Hi", "en", "vi"))

    assert second.result == first.result
    assert isinstance(second.result, InferenceResult)


def test_translate_text_returns_input_when_identical(make_orchestrator, stub_client):
    """Identical variants return the text unchanged."""
    orchestrator = make_orchestrator()

    assert asyncio.run(orchestrator.translate_text("Hola", "en", source_variant="en")) == "Hola"
    assert stub_client.calls == []
