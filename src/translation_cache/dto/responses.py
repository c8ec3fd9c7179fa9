"""Response DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class TranslateResponse(BaseModel):
    """Response DTO for a single translation."""

    model_config = ConfigDict(populate_by_name=True)

    translated_text: str = Field(..., alias="translatedText")
    cached: bool = Field(..., description="Whether the result came from either cache tier")
    skipped: bool = Field(False, description="Source and target were identical; text echoed")
    user_id: str = Field(..., alias="userId", description="Resolved caller identity")


class BatchVariantResult(BaseModel):
    """One target language's outcome in a batch."""

    model_config = ConfigDict(populate_by_name=True)

    translated_text: str | None = Field(None, alias="translatedText")
    error: str | None = None
    kind: str | None = Field(None, description="Failure class when the variant failed")
    attempts: int | None = None


class BatchTranslateResponse(BaseModel):
    """Response DTO for a batch translation."""

    model_config = ConfigDict(populate_by_name=True)

    results: dict[str, BatchVariantResult] = Field(default_factory=dict)
    skipped_reason: str | None = Field(None, alias="skippedReason")
    user_id: str = Field(..., alias="userId")


class SweepResponse(BaseModel):
    """Response DTO for cache maintenance operations."""

    success: bool = Field(..., description="Whether the operation succeeded")
    deleted_count: int = Field(..., description="Number of durable entries removed", ge=0)
    message: str = Field(..., description="Human-readable status message")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    model_config = ConfigDict(extra="allow")

    tier_one_entries: int = Field(..., ge=0)
    tier_two_entries: int = Field(..., ge=0)
    tier_one_ttl: float = Field(..., description="Tier one lifetime in seconds")
    tier_two_ttl: int = Field(..., description="Tier two lifetime in seconds")
    schema_version: str
    hit_rate: float = Field(..., ge=0.0, le=1.0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the durable tier is reachable")
