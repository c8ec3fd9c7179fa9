"""Inference provider protocol."""

from typing import Protocol, runtime_checkable

from translation_cache.entities import InferenceRequest, InferenceResult


@runtime_checkable
class InferenceClient(Protocol):
    """Protocol for external inference adapters.

    An adapter builds provider parameters from the request, issues exactly
    one call, and maps failures into ``translation_cache.errors``. It never
    retries and never caches.
    """

    @property
    def model_name(self) -> str:
        """Return the provider-assigned model identifier."""
        ...

    async def invoke(self, request: InferenceRequest) -> InferenceResult:
        """Run one inference call.

        Args:
            request: The logical request

        Returns:
            The provider result with elapsed time

        Raises:
            InferenceError: A classified failure
        """
        ...
