"""Request DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class TranslateRequest(BaseModel):
    """Request DTO for a single translation.

    The handler will convert this to internal calls to the service layer.
    """

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="The text to translate", min_length=1)
    source_lang: str | None = Field(
        None,
        alias="sourceLang",
        description="Source language code; omit to let the provider detect it",
    )
    target_lang: str = Field(..., alias="targetLang", description="Target language code")


class BatchTranslateRequest(BaseModel):
    """Request DTO for translating one text into several languages."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="The text to translate", min_length=1)
    source_lang: str | None = Field(None, alias="sourceLang")
    target_langs: list[str] = Field(..., alias="targetLangs", min_length=1)
    concurrency_limit: int | None = Field(
        None,
        alias="concurrencyLimit",
        description="Maximum concurrent provider calls; defaults to BATCH_MAX_CONCURRENT",
        ge=1,
        le=16,
    )
    auto: bool = Field(
        False,
        description="Automatic translation: skipped when the text exceeds MAX_AUTO_TRANSLATE_LENGTH",
    )


class InvalidateRequest(BaseModel):
    """Request DTO for dropping one cached translation."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1)
    target_lang: str = Field(..., alias="targetLang")
