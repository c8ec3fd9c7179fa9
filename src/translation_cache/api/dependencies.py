"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services built once in the lifespan from one Settings object
    - Dependency functions retrieve from request.app.state
    - No module-level service singletons
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Header, Request

from translation_cache.config import Settings, get_settings
from translation_cache.handlers import TranslationHandler
from translation_cache.protocols import EntryStore, InferenceClient
from translation_cache.repositories import (
    InMemoryEntryRepository,
    OpenAIInferenceClient,
    RedisEntryRepository,
)
from translation_cache.services import CacheOrchestrator, ConcurrencyDispatcher

logger = logging.getLogger(__name__)

ANONYMOUS_CALLER = "anonymous"


def get_handler(request: Request) -> TranslationHandler:
    """Dependency injection for TranslationHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The TranslationHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "translation_handler", None)
    if handler is None:
        raise RuntimeError("TranslationHandler not initialized. Check lifespan setup.")
    return handler


def get_caller_id(x_caller_id: Annotated[str | None, Header()] = None) -> str:
    """Return the caller identity resolved upstream, or the anonymous marker.

    Token verification happens in the gateway in front of this service; it
    forwards the verified identity in ``X-Caller-Id``.
    """
    if x_caller_id and x_caller_id.strip():
        return x_caller_id.strip()
    return ANONYMOUS_CALLER


def build_store(settings: Settings) -> EntryStore:
    """Create the durable tier backend selected by ``TIER_TWO_BACKEND``."""
    if settings.tier_two_backend == "memory":
        return InMemoryEntryRepository()
    return RedisEntryRepository.create(settings)


def make_lifespan(
    settings: Settings | None = None,
    store_factory: Callable[[Settings], EntryStore] = build_store,
    client_factory: Callable[[Settings], InferenceClient] = OpenAIInferenceClient.create,
):
    """Build the lifespan context manager for the FastAPI app.

    Args:
        settings: Settings to use; ``get_settings()`` when omitted.
        store_factory: Builds the tier-two backend.
        client_factory: Builds the inference provider adapter.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize all layers and store them in app.state.

        Cleanup:
            Waits for abandoned batches and pending cache writes, closes the
            provider client, removes services from app.state.
        """
        resolved = settings or get_settings()
        logging.basicConfig(
            level=resolved.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        store = store_factory(resolved)
        client = client_factory(resolved)
        orchestrator = CacheOrchestrator.create(settings=resolved, store=store, client=client)
        dispatcher = ConcurrencyDispatcher(orchestrator)
        handler = TranslationHandler(orchestrator, dispatcher, resolved)

        app.state.settings = resolved
        app.state.orchestrator = orchestrator
        app.state.dispatcher = dispatcher
        app.state.translation_handler = handler

        logger.info(
            "Translation cache initialized (tier two: %s, schema %s, model %s)",
            resolved.tier_two_backend,
            resolved.schema_version,
            client.model_name,
        )
        if not orchestrator.is_healthy():
            logger.warning("Durable tier is not reachable; requests will fall through to the provider")

        yield

        await dispatcher.drain()
        await orchestrator.aclose()
        close = getattr(client, "close", None)
        if close is not None:
            await close()

        del app.state.translation_handler
        del app.state.dispatcher
        del app.state.orchestrator
        del app.state.settings
        logger.info("Translation cache shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[TranslationHandler, Depends(get_handler)]
CallerDep = Annotated[str, Depends(get_caller_id)]
