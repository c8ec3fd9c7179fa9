"""OpenAI chat-completions implementation of InferenceClient.

Sends exactly one request per ``invoke`` and maps every failure into the
taxonomy in ``translation_cache.errors``. Retrying and caching happen
elsewhere.
"""

import json
import re
import time
from typing import Any

import httpx

from translation_cache.config import Settings
from translation_cache.entities import InferenceRequest, InferenceResult
from translation_cache.errors import (
    AuthFailure,
    InferenceError,
    MalformedInput,
    NetworkFailure,
    RateLimited,
    ServiceUnavailable,
    UnknownInferenceError,
)
from translation_cache.prompts import PromptLibrary

_MAX_PROVIDER_MESSAGE_CHARS = 180


def _redact(text: str) -> str:
    """Redact API-key-like tokens from provider error content."""
    redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
    return re.sub(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}", "Bearer [redacted-token]", redacted)


def _short(text: str) -> str:
    compact = " ".join(text.split())
    if len(compact) <= _MAX_PROVIDER_MESSAGE_CHARS:
        return compact
    return f"{compact[: _MAX_PROVIDER_MESSAGE_CHARS - 1]}..."


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class OpenAIInferenceClient:
    """OpenAI-backed implementation of the InferenceClient protocol.

    This class satisfies the InferenceClient protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = OpenAIInferenceClient.create(settings)
        result = await client.invoke(InferenceRequest("謝謝", None, "ja"))
        print(result.output, result.elapsed_ms)
        ```
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        max_tokens: int = 500,
        temperature: float = 0.7,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        prompts: PromptLibrary | None = None,
    ) -> None:
        """Initialize the OpenAI inference client.

        Args:
            api_key: OpenAI API key. A missing key fails every call with AuthFailure.
            model: Provider-assigned model identifier.
            max_tokens: Completion token budget per call.
            temperature: Sampling temperature.
            base_url: API base URL.
            timeout: Per-request timeout in seconds.
            http_client: Pre-built client (tests inject one with a mock transport).
            prompts: Prompt builder. Defaults to PromptLibrary().
        """
        self._api_key = api_key.strip() if isinstance(api_key, str) else ""
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = http_client
        self._prompts = prompts or PromptLibrary()

    @classmethod
    def create(cls, settings: Settings) -> "OpenAIInferenceClient":
        """Factory method to create OpenAIInferenceClient from settings.

        Args:
            settings: Application settings (key, model, token budget, temperature).

        Returns:
            Configured OpenAIInferenceClient
        """
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout_seconds,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._model

    def build_payload(self, request: InferenceRequest) -> dict[str, Any]:
        """Build the chat-completions payload for one request."""
        return {
            "model": self._model,
            "messages": self._prompts.messages(
                request.input,
                request.source_variant,
                request.target_variant,
            ),
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    async def invoke(self, request: InferenceRequest) -> InferenceResult:
        """Translate one request with a single chat-completions call.

        Args:
            request: The logical request

        Returns:
            InferenceResult with the translated text, model and token usage

        Raises:
            InferenceError: One of the classified failures
        """
        if not self._api_key:
            raise AuthFailure("Missing OpenAI API key. Set OPENAI_API_KEY.")
        if not request.input.strip():
            raise MalformedInput("Input text is empty.")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                f"{self._base_url}/chat/completions",
                headers=headers,
                json=self.build_payload(request),
            )
        except httpx.TimeoutException as e:
            raise NetworkFailure("OpenAI request timed out.") from e
        except httpx.TransportError as e:
            raise NetworkFailure(f"OpenAI transport error: {_short(_redact(str(e)))}") from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code >= 400:
            raise self._classify_http_failure(response)

        return self._parse_result(response, elapsed_ms)

    def _parse_result(self, response: httpx.Response, elapsed_ms: float) -> InferenceResult:
        try:
            payload = response.json()
        except json.JSONDecodeError as e:
            raise UnknownInferenceError("OpenAI returned invalid JSON payload.") from e

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise UnknownInferenceError("OpenAI response missing non-empty `choices` list.")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise UnknownInferenceError("OpenAI response message content is empty.")

        usage = payload.get("usage") or {}
        return InferenceResult(
            output=content.strip(),
            provider_metadata={
                "provider": "openai",
                "model": payload.get("model", self._model),
                "tokens_used": usage.get("total_tokens"),
            },
            elapsed_ms=elapsed_ms,
        )

    @staticmethod
    def _provider_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except json.JSONDecodeError:
            return _short(_redact(response.text))
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            message = body["error"].get("message")
            if isinstance(message, str) and message.strip():
                return _short(_redact(message))
        return _short(_redact(response.text))

    @classmethod
    def _classify_http_failure(cls, response: httpx.Response) -> InferenceError:
        """Map an HTTP error response onto the failure taxonomy."""
        status_code = response.status_code
        message = cls._provider_message(response)
        detail = f"OpenAI request failed (HTTP {status_code})"
        if message:
            detail = f"{detail}: {message}"

        if status_code == 429:
            return RateLimited(
                detail,
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
            )
        if status_code in (401, 403):
            return AuthFailure(detail)
        if status_code in (408, 504):
            return NetworkFailure(detail)
        if status_code in (500, 502, 503):
            return ServiceUnavailable(detail)
        if status_code in (400, 404, 413, 422):
            return MalformedInput(detail)
        return UnknownInferenceError(detail)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
