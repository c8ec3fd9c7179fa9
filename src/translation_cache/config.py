import os
from dataclasses import dataclass, field
from functools import lru_cache

import redis
from dotenv import load_dotenv

from translation_cache.prompts import PROMPT_SCHEMA_VERSION

load_dotenv()

DEFAULT_SUPPORTED_LANGUAGES = ("zh-TW", "en", "ja", "ko", "vi", "th", "ms", "id")


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def _optional_float(name: str, default: str = "") -> float | None:
    raw = os.getenv(name, default).strip()
    return float(raw) if raw else None


def _language_list(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    codes = tuple(code.strip() for code in raw.split(",") if code.strip())
    return codes or DEFAULT_SUPPORTED_LANGUAGES


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    A single instance is built by the composing entry point (API lifespan or
    maintenance script) and handed to each component at construction.
    """

    # Redis (tier two)
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    cache_namespace: str = os.getenv("CACHE_NAMESPACE", "translation_cache")
    tier_two_backend: str = os.getenv("TIER_TWO_BACKEND", "redis")

    # Cache lifetimes
    tier_one_ttl: int = int(os.getenv("TRANSLATION_CACHE_TTL", "600"))  # 10 minutes
    cache_expiration_days: int = int(os.getenv("CACHE_EXPIRATION_DAYS", "30"))

    # Cache keys
    schema_version: str = os.getenv("CACHE_SCHEMA_VERSION", PROMPT_SCHEMA_VERSION)
    key_prefix_chars: int | None = _optional_int("CACHE_KEY_PREFIX_CHARS")

    # Inference provider
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    openai_max_tokens: int = int(os.getenv("OPENAI_MAX_TOKENS", "500"))
    openai_temperature: float = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

    # Retry / batching
    max_retry_attempts: int = int(os.getenv("MAX_RETRY_ATTEMPTS", "3"))
    retry_delay_ms: int = int(os.getenv("RETRY_DELAY_MS", "1000"))
    retry_max_delay_seconds: float | None = _optional_float("RETRY_MAX_DELAY_SECONDS", "60")
    batch_max_concurrent: int = int(os.getenv("BATCH_MAX_CONCURRENT", "2"))

    # Request validation
    max_input_length: int = int(os.getenv("MAX_INPUT_LENGTH", "5000"))
    max_auto_translate_length: int = int(os.getenv("MAX_AUTO_TRANSLATE_LENGTH", "500"))
    supported_languages: tuple[str, ...] = field(
        default_factory=lambda: _language_list("SUPPORTED_LANGUAGES")
    )

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def tier_two_ttl(self) -> int:
        """Durable tier lifetime in seconds."""
        return self.cache_expiration_days * 24 * 60 * 60

    @property
    def retry_base_delay(self) -> float:
        """Base backoff delay in seconds."""
        return self.retry_delay_ms / 1000.0

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.tier_two_backend not in ("redis", "memory"):
            raise ValueError(
                f"TIER_TWO_BACKEND must be 'redis' or 'memory', got {self.tier_two_backend!r}"
            )

        if self.tier_one_ttl <= 0 or self.cache_expiration_days <= 0:
            raise ValueError("Cache TTLs must be positive")

        if self.max_retry_attempts < 1:
            raise ValueError("MAX_RETRY_ATTEMPTS must be at least 1")

        if self.retry_max_delay_seconds is not None and self.retry_max_delay_seconds <= 0:
            raise ValueError("RETRY_MAX_DELAY_SECONDS must be positive when set")

        if self.batch_max_concurrent < 1:
            raise ValueError("BATCH_MAX_CONCURRENT must be at least 1")

        if self.key_prefix_chars is not None and self.key_prefix_chars < 1:
            raise ValueError("CACHE_KEY_PREFIX_CHARS must be a positive integer when set")

        if not self.schema_version.strip():
            raise ValueError("CACHE_SCHEMA_VERSION must not be empty")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_redis_client(settings: Settings) -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
