"""Translation Cache - two-tier cached, retrying access to an AI translation API.

This package provides a layered architecture for cached inference:

Layers:
    - protocols: Interface contracts (EntryStore, InferenceClient)
    - repositories: Data access implementations (Redis, in-memory, OpenAI)
    - services: Business logic (key codec, cache tiers, retry, orchestration, batching)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from translation_cache.config import get_settings
    from translation_cache.repositories import OpenAIInferenceClient, RedisEntryRepository
    from translation_cache.services import CacheOrchestrator

    settings = get_settings()
    orchestrator = CacheOrchestrator.create(
        settings=settings,
        store=RedisEntryRepository.create(settings),
        client=OpenAIInferenceClient.create(settings),
    )
    text = await orchestrator.translate_text("Good morning", "ja")
    ```

For HTTP API:
    ```python
    from translation_cache.api.app import app
    ```
"""

from translation_cache.config import Settings, get_redis_client, get_settings
from translation_cache.dto import BatchTranslateRequest, TranslateRequest
from translation_cache.entities import (
    BatchJob,
    CacheEntryEntity,
    CacheKey,
    ErrorRecord,
    InferenceRequest,
    InferenceResult,
)
from translation_cache.errors import InferenceError, SkippedIdentical
from translation_cache.handlers import TranslationHandler
from translation_cache.protocols import EntryStore, InferenceClient
from translation_cache.repositories import (
    InMemoryEntryRepository,
    OpenAIInferenceClient,
    RedisEntryRepository,
)
from translation_cache.services import CacheOrchestrator, ConcurrencyDispatcher

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    "get_redis_client",
    # Protocols (interfaces)
    "EntryStore",
    "InferenceClient",
    # Services (business logic)
    "CacheOrchestrator",
    "ConcurrencyDispatcher",
    # Handlers (HTTP)
    "TranslationHandler",
    # Repositories (data access)
    "RedisEntryRepository",
    "InMemoryEntryRepository",
    "OpenAIInferenceClient",
    # Entities (domain models)
    "BatchJob",
    "CacheEntryEntity",
    "CacheKey",
    "ErrorRecord",
    "InferenceRequest",
    "InferenceResult",
    # Errors
    "InferenceError",
    "SkippedIdentical",
    # DTOs (API contracts)
    "TranslateRequest",
    "BatchTranslateRequest",
]
