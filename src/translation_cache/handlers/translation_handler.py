"""HTTP handlers for translation and cache maintenance.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging
import math

from fastapi import HTTPException, status

from translation_cache.config import Settings
from translation_cache.dto import (
    BatchTranslateRequest,
    BatchTranslateResponse,
    BatchVariantResult,
    CacheStatsResponse,
    HealthCheckResponse,
    InvalidateRequest,
    SweepResponse,
    TranslateRequest,
    TranslateResponse,
)
from translation_cache.entities import BatchJob, ErrorRecord
from translation_cache.errors import (
    AuthFailure,
    InferenceError,
    MalformedInput,
    NetworkFailure,
    RateLimited,
    ServiceUnavailable,
    SkippedIdentical,
)
from translation_cache.services import CacheOrchestrator, ConcurrencyDispatcher

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60


def inference_error_to_http(error: InferenceError) -> HTTPException:
    """Map a classified inference failure onto an HTTP error response."""
    if isinstance(error, RateLimited):
        if error.retry_after is None:
            retry_after = DEFAULT_RETRY_AFTER_SECONDS
        else:
            retry_after = math.ceil(error.retry_after)
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "Rate limit exceeded",
                "message": "Too many requests. Please try again later.",
                "retryAfter": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )
    if isinstance(error, AuthFailure):
        # The provider rejected our credentials, not the caller's.
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "API configuration error", "message": str(error)},
        )
    if isinstance(error, (ServiceUnavailable, NetworkFailure)):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Translation provider unavailable", "message": str(error)},
        )
    if isinstance(error, MalformedInput):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Bad Request", "message": str(error)},
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "Internal server error", "message": str(error)},
    )


class TranslationHandler:
    """HTTP handlers for translation operations.

    This handler delegates business logic to CacheOrchestrator and
    ConcurrencyDispatcher and handles HTTP-specific concerns like:
    - Validating languages and input length
    - Converting results to DTOs
    - Mapping failures to status codes

    Example:
        ```python
        handler = TranslationHandler(orchestrator, dispatcher, settings)

        @app.post("/translate", response_model=TranslateResponse)
        async def translate(request: TranslateRequest, caller: CallerDep):
            return await handler.translate(request, caller)
        ```
    """

    def __init__(
        self,
        orchestrator: CacheOrchestrator,
        dispatcher: ConcurrencyDispatcher,
        settings: Settings,
    ) -> None:
        """Initialize the translation handler.

        Args:
            orchestrator: Resolves single translations through the cache.
            dispatcher: Runs batch translations under a concurrency cap.
            settings: Validation limits and batch defaults.
        """
        self._orchestrator = orchestrator
        self._dispatcher = dispatcher
        self._settings = settings

    def _require_supported(self, *codes: str) -> None:
        unsupported = [code for code in codes if code not in self._settings.supported_languages]
        if unsupported:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "error": "Bad Request: Unsupported target language",
                    "unsupported": unsupported,
                    "supportedLanguages": list(self._settings.supported_languages),
                },
            )

    def _require_length(self, text: str) -> None:
        if len(text) > self._settings.max_input_length:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "error": "Bad Request: Text too long",
                    "maxLength": self._settings.max_input_length,
                },
            )

    def should_auto_translate(self, text: str) -> bool:
        """Return True if ``text`` is short enough for automatic translation."""
        return len(text) <= self._settings.max_auto_translate_length

    async def translate(self, request: TranslateRequest, caller_id: str) -> TranslateResponse:
        """Handle POST /translate requests.

        Args:
            request: The translate request DTO
            caller_id: Identity resolved by the surrounding gateway

        Returns:
            TranslateResponse with the translation and cache flag

        Raises:
            HTTPException: On validation or provider failure
        """
        self._require_supported(request.target_lang)
        self._require_length(request.text)

        try:
            resolution = await self._orchestrator.resolve_detailed(
                request.text,
                request.source_lang,
                request.target_lang,
            )
        except SkippedIdentical as e:
            return TranslateResponse(
                translated_text=e.original_input,
                cached=False,
                skipped=True,
                user_id=caller_id,
            )
        except InferenceError as e:
            logger.error("Translation for caller %s failed: %s", caller_id, e)
            raise inference_error_to_http(e) from e

        return TranslateResponse(
            translated_text=resolution.result.output,
            cached=resolution.served_from_cache,
            user_id=caller_id,
        )

    async def translate_batch(
        self,
        request: BatchTranslateRequest,
        caller_id: str,
    ) -> BatchTranslateResponse:
        """Handle POST /translate/batch requests.

        Args:
            request: The batch request DTO
            caller_id: Identity resolved by the surrounding gateway

        Returns:
            BatchTranslateResponse with one entry per target language
        """
        self._require_supported(*request.target_langs)
        self._require_length(request.text)

        if request.auto and not self.should_auto_translate(request.text):
            logger.info("Text too long (%d chars), skipping auto-translate", len(request.text))
            return BatchTranslateResponse(skipped_reason="too_long", user_id=caller_id)

        job = BatchJob.create(
            input=request.text,
            source_variant=request.source_lang,
            target_variants=request.target_langs,
            concurrency_limit=request.concurrency_limit or self._settings.batch_max_concurrent,
        )
        outcomes = await self._dispatcher.run(job)

        results: dict[str, BatchVariantResult] = {}
        for variant, outcome in outcomes.items():
            if isinstance(outcome, ErrorRecord):
                results[variant] = BatchVariantResult(
                    error=outcome.message,
                    kind=outcome.kind,
                    attempts=outcome.attempts,
                )
            else:
                results[variant] = BatchVariantResult(translated_text=outcome.output)

        return BatchTranslateResponse(results=results, user_id=caller_id)

    async def invalidate(self, request: InvalidateRequest) -> SweepResponse:
        """Handle POST /cache/invalidate requests."""
        removed = await self._orchestrator.invalidate(request.text, request.target_lang)
        return SweepResponse(
            success=True,
            deleted_count=1 if removed else 0,
            message="Entry removed" if removed else "No cached entry",
        )

    async def sweep(self) -> SweepResponse:
        """Handle POST /cache/sweep requests.

        Raises:
            HTTPException: If the durable tier cannot be swept
        """
        try:
            deleted = self._orchestrator.sweep_expired()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to sweep cache: {e}",
            ) from e

        return SweepResponse(
            success=True,
            deleted_count=deleted,
            message=f"Removed {deleted} expired entries",
        )

    async def clear_cache(self) -> SweepResponse:
        """Handle DELETE /cache requests."""
        try:
            deleted = await self._orchestrator.clear()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to clear cache: {e}",
            ) from e

        return SweepResponse(
            success=True,
            deleted_count=deleted,
            message="Cache cleared successfully",
        )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /stats requests."""
        try:
            return CacheStatsResponse(**self._orchestrator.get_stats())
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = self._orchestrator.is_healthy()
        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=is_healthy,
        )
