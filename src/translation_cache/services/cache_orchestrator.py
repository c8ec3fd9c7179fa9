"""Two-tier cache orchestration around the inference provider.

Lookup order for one request:

1. identical source/target variants -> ``SkippedIdentical``, nothing else runs
2. derive the versioned cache key
3. tier one (process-local) -> return on hit
4. tier two (durable) -> promote into tier one, capped at the entry's remaining
   lifetime, return on hit
5. provider call through ``RetryPolicy``, each attempt under its own deadline
6. on success write tier one inline and tier two as a tracked background task
7. on failure propagate; failures are never cached

Two concurrent misses for the same key may both reach the provider. The
cache saves cost and latency; it is not a mutual-exclusion mechanism.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from translation_cache.config import Settings
from translation_cache.entities import CacheEntryEntity, CacheKey, InferenceRequest, InferenceResult
from translation_cache.errors import InferenceError, NetworkFailure, SkippedIdentical
from translation_cache.models import CacheMetrics
from translation_cache.protocols import EntryStore, InferenceClient
from translation_cache.services.key_codec import CacheKeyCodec
from translation_cache.services.retry_policy import RetryPolicy
from translation_cache.services.tier_one_cache import TierOneCache
from translation_cache.services.tier_two_cache import TierTwoCache

logger = logging.getLogger(__name__)


class CacheSource(str, Enum):
    """Where a resolved result came from."""

    TIER_ONE = "tier_one"
    TIER_TWO = "tier_two"
    INFERENCE = "inference"


@dataclass(frozen=True)
class Resolution:
    """A resolved result together with the layer that served it."""

    result: InferenceResult
    source: CacheSource
    key: CacheKey

    @property
    def served_from_cache(self) -> bool:
        """True when no provider call was needed."""
        return self.source is not CacheSource.INFERENCE


def _preview(text: str) -> str:
    return text[:50] + ("..." if len(text) > 50 else "")


class CacheOrchestrator:
    """Core resolve-through-cache service.

    This service depends on PROTOCOLS, not concrete implementations:
    - EntryStore (inside TierTwoCache): Redis, in-memory, ...
    - InferenceClient: OpenAI or any other adapter

    Example:
        ```python
        orchestrator = CacheOrchestrator.create(
            settings=settings,
            store=RedisEntryRepository.create(settings),
            client=OpenAIInferenceClient.create(settings),
        )
        result = await orchestrator.resolve("謝謝", None, "ja")
        ```
    """

    def __init__(
        self,
        codec: CacheKeyCodec,
        tier_one: TierOneCache,
        tier_two: TierTwoCache,
        client: InferenceClient,
        retry_policy: RetryPolicy,
        schema_version: str,
        attempt_timeout: float | None = None,
        clock: Callable[[], float] = time.time,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            codec: Cache key derivation.
            tier_one: Process-local cache.
            tier_two: Durable cache.
            client: Inference provider adapter.
            retry_policy: Retry/backoff policy for provider calls.
            schema_version: Version of the request-shaping logic, part of every key.
            attempt_timeout: Deadline in seconds for a single provider attempt.
            clock: Wall-clock source for entry timestamps.
            metrics: Counters; a fresh CacheMetrics if omitted.
        """
        self._codec = codec
        self._tier_one = tier_one
        self._tier_two = tier_two
        self._client = client
        self._retry = retry_policy
        self._schema_version = schema_version
        self._attempt_timeout = attempt_timeout
        self._clock = clock
        self._metrics = metrics or CacheMetrics()
        self._pending_writes: set[asyncio.Task] = set()

    @classmethod
    def create(
        cls,
        settings: Settings,
        store: EntryStore,
        client: InferenceClient,
    ) -> "CacheOrchestrator":
        """Factory method wiring every component from one Settings object.

        Args:
            settings: Application settings.
            store: Durable backend for tier two.
            client: Inference provider adapter.

        Returns:
            Configured CacheOrchestrator
        """
        return cls(
            codec=CacheKeyCodec(prefix_chars=settings.key_prefix_chars),
            tier_one=TierOneCache(ttl=settings.tier_one_ttl),
            tier_two=TierTwoCache(store=store, ttl=settings.tier_two_ttl),
            client=client,
            retry_policy=RetryPolicy(
                max_attempts=settings.max_retry_attempts,
                base_delay=settings.retry_base_delay,
                max_delay=settings.retry_max_delay_seconds,
            ),
            schema_version=settings.schema_version,
            attempt_timeout=settings.request_timeout_seconds,
        )

    def key_for(self, input: str, target_variant: str) -> CacheKey:
        """Derive the cache key used for ``(input, target_variant)``."""
        return self._codec.derive(input, target_variant, self._schema_version)

    async def resolve(
        self,
        input: str,
        source_variant: str | None,
        target_variant: str,
    ) -> InferenceResult:
        """Resolve one request through the cache tiers.

        Args:
            input: The source text
            source_variant: Source language code, or None for auto-detect
            target_variant: Target language code

        Returns:
            The cached or freshly inferred result

        Raises:
            SkippedIdentical: Source and target are the same variant
            InferenceError: The provider failed (after retries, when retryable)
        """
        resolution = await self.resolve_detailed(input, source_variant, target_variant)
        return resolution.result

    async def resolve_detailed(
        self,
        input: str,
        source_variant: str | None,
        target_variant: str,
    ) -> Resolution:
        """Like ``resolve`` but also report which layer served the result."""
        if source_variant is not None and source_variant == target_variant:
            self._metrics.skipped_identical += 1
            logger.debug("Skipping translation: source and target are both %s", target_variant)
            raise SkippedIdentical(input, target_variant)

        key = self.key_for(input, target_variant)

        cached = self._tier_one.get(key)
        if cached is not None:
            self._metrics.record_hit(CacheSource.TIER_ONE.value)
            logger.debug("Tier one hit for %s -> %s", _preview(input), target_variant)
            return Resolution(result=cached, source=CacheSource.TIER_ONE, key=key)

        entry = self._read_tier_two(key)
        if entry is not None:
            # Never outlive the durable entry's absolute expiry.
            remaining = entry.created_at + self._tier_two.ttl - self._clock()
            self._tier_one.put(key, entry.result, ttl=remaining)
            self._metrics.record_hit(CacheSource.TIER_TWO.value)
            logger.debug("Tier two hit for %s -> %s", _preview(input), target_variant)
            return Resolution(result=entry.result, source=CacheSource.TIER_TWO, key=key)

        self._metrics.record_miss()
        logger.debug("Cache miss for %s -> %s", _preview(input), target_variant)

        request = InferenceRequest(
            input=input,
            source_variant=source_variant,
            target_variant=target_variant,
        )
        try:
            result = await self._retry.execute(lambda: self._invoke_once(request))
        except InferenceError:
            self._metrics.record_failure()
            raise

        self._metrics.record_inference(result.elapsed_ms)
        logger.info("Translated to %s in %.0fms", target_variant, result.elapsed_ms)

        self._tier_one.put(key, result)
        self._schedule_tier_two_write(key, request, result)
        return Resolution(result=result, source=CacheSource.INFERENCE, key=key)

    async def translate_text(
        self,
        text: str,
        target_variant: str,
        source_variant: str | None = None,
    ) -> str:
        """Translate and return only the text; identical variants return ``text``."""
        try:
            result = await self.resolve(text, source_variant, target_variant)
        except SkippedIdentical:
            return text
        return result.output

    async def _invoke_once(self, request: InferenceRequest) -> InferenceResult:
        if self._attempt_timeout is None:
            return await self._client.invoke(request)
        try:
            return await asyncio.wait_for(self._client.invoke(request), self._attempt_timeout)
        except asyncio.TimeoutError as e:
            raise NetworkFailure(
                f"Inference call exceeded its {self._attempt_timeout:g}s deadline"
            ) from e

    def _read_tier_two(self, key: CacheKey) -> CacheEntryEntity | None:
        try:
            return self._tier_two.get(key)
        except Exception:
            logger.warning("Tier two read failed; treating as a miss", exc_info=True)
            return None

    def _schedule_tier_two_write(
        self,
        key: CacheKey,
        request: InferenceRequest,
        result: InferenceResult,
    ) -> None:
        entry = CacheEntryEntity.new(
            key=key.token,
            source_input=request.input,
            target_variant=request.target_variant,
            result=result,
            now=self._clock(),
        )
        task = asyncio.create_task(self._write_tier_two(key, entry))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_tier_two(self, key: CacheKey, entry: CacheEntryEntity) -> None:
        try:
            self._tier_two.put(key, entry)
        except Exception:
            self._metrics.cache_write_failures += 1
            logger.warning("Tier two write failed; result returned uncached", exc_info=True)

    async def flush(self) -> None:
        """Wait until every scheduled tier-two write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    async def aclose(self) -> None:
        """Flush pending writes; call once at shutdown."""
        await self.flush()

    async def invalidate(self, input: str, target_variant: str) -> bool:
        """Remove one translation from both tiers.

        Pending tier-two writes are flushed first so none of them can put
        the entry back afterwards.

        Returns:
            True if either tier held an entry
        """
        await self.flush()
        key = self.key_for(input, target_variant)
        removed_local = self._tier_one.invalidate(key)
        removed_durable = self._tier_two.invalidate(key)
        return removed_local or removed_durable

    def sweep_expired(self) -> int:
        """Sweep expired entries from both tiers.

        Returns:
            Number of durable entries deleted
        """
        self._tier_one.purge_expired()
        return self._tier_two.sweep_expired()

    async def clear(self) -> int:
        """Clear both tiers, after flushing pending tier-two writes.

        Returns:
            Number of durable entries deleted
        """
        await self.flush()
        self._tier_one.clear()
        return self._tier_two.clear()

    def get_stats(self) -> dict:
        """Get cache statistics."""
        stats = self._tier_two.get_stats()
        return {
            "tier_two_entries": stats["total_entries"],
            "tier_two_ttl": stats["ttl"],
            "tier_one_entries": len(self._tier_one),
            "tier_one_ttl": self._tier_one.ttl,
            "schema_version": self._schema_version,
            "key_prefix_chars": self._codec.prefix_chars,
            "model": self._client.model_name,
            "retries": self._retry.retry_count,
            "retry_max_delay": self._retry.max_delay,
            "pending_writes": len(self._pending_writes),
            **self._metrics.to_dict(),
        }

    def is_healthy(self) -> bool:
        """Check if the durable tier is reachable."""
        return self._tier_two.health_check()

    @property
    def metrics(self) -> CacheMetrics:
        """Get the counters."""
        return self._metrics

    @property
    def tier_one(self) -> TierOneCache:
        """Get the process-local tier (for testing)."""
        return self._tier_one

    @property
    def tier_two(self) -> TierTwoCache:
        """Get the durable tier (for testing)."""
        return self._tier_two
