"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import BatchTranslateRequest, InvalidateRequest, TranslateRequest
from .responses import (
    BatchTranslateResponse,
    BatchVariantResult,
    CacheStatsResponse,
    HealthCheckResponse,
    SweepResponse,
    TranslateResponse,
)

__all__ = [
    "TranslateRequest",
    "BatchTranslateRequest",
    "InvalidateRequest",
    "TranslateResponse",
    "BatchVariantResult",
    "BatchTranslateResponse",
    "SweepResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
