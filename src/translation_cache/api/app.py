from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from translation_cache.api.dependencies import CallerDep, HandlerDep, make_lifespan
from translation_cache.config import get_settings
from translation_cache.dto import (
    BatchTranslateRequest,
    BatchTranslateResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    InvalidateRequest,
    SweepResponse,
    TranslateRequest,
    TranslateResponse,
)


def create_app(lifespan=None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        lifespan: Lifespan context manager; ``make_lifespan()`` when omitted.
            Tests pass one built with stub factories.
    """
    app = FastAPI(
        title="Translation Cache API",
        description="Two-tier cached, retrying, bounded-concurrency translation service",
        version="0.1.0",
        lifespan=lifespan or make_lifespan(),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Translation Cache API",
            "version": "0.1.0",
            "endpoints": {
                "translate": "/translate",
                "batch": "/translate/batch",
                "cache": "/cache",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.post("/translate", response_model=TranslateResponse)
    async def translate(
        request: TranslateRequest,
        handler: HandlerDep,
        caller: CallerDep,
    ) -> TranslateResponse:
        """Translate one text, serving from cache when possible."""
        return await handler.translate(request, caller)

    @app.post("/translate/batch", response_model=BatchTranslateResponse)
    async def translate_batch(
        request: BatchTranslateRequest,
        handler: HandlerDep,
        caller: CallerDep,
    ) -> BatchTranslateResponse:
        """Translate one text into several languages with bounded concurrency."""
        return await handler.translate_batch(request, caller)

    @app.post("/cache/invalidate", response_model=SweepResponse)
    async def invalidate(request: InvalidateRequest, handler: HandlerDep) -> SweepResponse:
        """Drop one cached translation from both tiers."""
        return await handler.invalidate(request)

    @app.post("/cache/sweep", response_model=SweepResponse)
    async def sweep(handler: HandlerDep) -> SweepResponse:
        """Delete expired entries from the durable tier."""
        return await handler.sweep()

    @app.delete("/cache", response_model=SweepResponse)
    async def clear_cache(handler: HandlerDep) -> SweepResponse:
        """Clear all entries from both tiers."""
        return await handler.clear_cache()

    @app.get("/stats", response_model=CacheStatsResponse)
    async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
        """Get cache statistics."""
        return await handler.get_stats()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "translation_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
