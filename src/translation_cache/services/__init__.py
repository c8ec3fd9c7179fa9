"""Service layer for business logic.

This layer contains the cache tiers, the retry policy and the orchestration
around the inference provider. Services depend on protocols (interfaces),
not concrete implementations, making them testable and flexible.

Architecture:
    Handler -> Dispatcher -> Orchestrator -> Tier one / Tier two / RetryPolicy -> Client
    (HTTP)  -> (Batch)    -> (Business)   -> (Caching, retry)                  -> (Provider)

Usage:
    ```python
    from translation_cache.services import CacheOrchestrator, ConcurrencyDispatcher

    orchestrator = CacheOrchestrator.create(settings=settings, store=store, client=client)
    dispatcher = ConcurrencyDispatcher(orchestrator)
    ```
"""

from .cache_orchestrator import CacheOrchestrator, CacheSource, Resolution
from .dispatcher import BatchOutcome, ConcurrencyDispatcher
from .key_codec import CacheKeyCodec
from .retry_policy import RetryPolicy
from .tier_one_cache import TierOneCache
from .tier_two_cache import TierTwoCache

__all__ = [
    "BatchOutcome",
    "CacheKeyCodec",
    "CacheOrchestrator",
    "CacheSource",
    "ConcurrencyDispatcher",
    "Resolution",
    "RetryPolicy",
    "TierOneCache",
    "TierTwoCache",
]
