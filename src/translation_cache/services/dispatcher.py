"""Bounded fan-out of one input to many target variants.

A fixed pool of worker tasks pulls variants from a shared queue; the pool
size is ``min(concurrency_limit, len(target_variants))`` however wide the
fan-out is. Each worker resolves one variant completely before taking the
next, and a failing variant only fills its own slot in the result map.
"""

import asyncio
import logging

from translation_cache.entities import BatchJob, ErrorRecord, InferenceResult
from translation_cache.errors import InferenceError, SkippedIdentical
from translation_cache.services.cache_orchestrator import CacheOrchestrator

logger = logging.getLogger(__name__)

BatchOutcome = InferenceResult | ErrorRecord


class ConcurrencyDispatcher:
    """Run batch jobs through the cache orchestrator under a concurrency cap.

    If the caller abandons ``run`` (its task is cancelled), calls already sent
    to the provider finish in the background and workers stop taking new
    variants. ``drain()`` waits for such leftovers at shutdown.
    """

    def __init__(self, orchestrator: CacheOrchestrator) -> None:
        """Initialize the dispatcher.

        Args:
            orchestrator: Resolves one (input, variant) pair through the cache tiers.
        """
        self._orchestrator = orchestrator
        self._in_flight: set[asyncio.Future] = set()

    async def run(self, job: BatchJob) -> dict[str, BatchOutcome]:
        """Resolve every target variant of ``job``.

        Args:
            job: The batch to run

        Returns:
            Map of variant to its InferenceResult or ErrorRecord; complete once
            this returns, in no particular order

        Raises:
            ValueError: If ``job.concurrency_limit`` is below 1
        """
        if job.concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")

        results: dict[str, BatchOutcome] = {}
        if not job.target_variants:
            return results

        queue: asyncio.Queue[str] = asyncio.Queue()
        for variant in sorted(job.target_variants):
            queue.put_nowait(variant)

        abandoned = asyncio.Event()
        worker_count = min(job.concurrency_limit, queue.qsize())
        workers = [
            asyncio.create_task(self._worker(job, queue, results, abandoned))
            for _ in range(worker_count)
        ]
        batch = asyncio.gather(*workers)
        self._in_flight.add(batch)
        batch.add_done_callback(self._in_flight.discard)

        try:
            await asyncio.shield(batch)
        except asyncio.CancelledError:
            abandoned.set()
            logger.warning(
                "Batch abandoned by caller; %d variant(s) not started, in-flight calls continue",
                queue.qsize(),
            )
            raise

        return results

    async def _worker(
        self,
        job: BatchJob,
        queue: "asyncio.Queue[str]",
        results: dict[str, BatchOutcome],
        abandoned: asyncio.Event,
    ) -> None:
        while not abandoned.is_set():
            try:
                variant = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[variant] = await self._resolve_one(job, variant)

    async def _resolve_one(self, job: BatchJob, variant: str) -> BatchOutcome:
        try:
            return await self._orchestrator.resolve(job.input, job.source_variant, variant)
        except SkippedIdentical as e:
            return InferenceResult(output=e.original_input, provider_metadata={"skipped": True})
        except InferenceError as e:
            logger.error("Variant %s failed: %s", variant, e)
            return ErrorRecord(variant=variant, kind=e.kind, message=str(e), attempts=e.attempts)
        except Exception as e:
            # Isolation: an unexpected bug in one variant must not sink its siblings.
            logger.exception("Variant %s failed unexpectedly", variant)
            return ErrorRecord(variant=variant, kind="unknown", message=str(e) or type(e).__name__)

    async def drain(self) -> None:
        """Wait for batches whose callers have gone away."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    @property
    def in_flight(self) -> int:
        """Number of batches still running."""
        return len(self._in_flight)
