"""Failure taxonomy for inference calls.

The provider adapter maps every provider or transport failure into one of
these classes. ``RetryPolicy`` decides on retries from ``retryable`` alone.
"""


class InferenceError(Exception):
    """Base class for classified inference failures."""

    kind = "unknown"
    retryable = False

    def __init__(self, detail: str = "", *, attempts: int = 1) -> None:
        super().__init__(detail or self.kind)
        self.detail = detail or self.kind
        self.attempts = attempts

    def with_attempts(self, attempts: int) -> "InferenceError":
        """Record how many attempts were made before this failure surfaced."""
        self.attempts = attempts
        return self

    def __str__(self) -> str:
        if self.attempts > 1:
            return f"{self.detail} (after {self.attempts} attempts)"
        return self.detail


class RateLimited(InferenceError):
    """The provider throttled the request (HTTP 429)."""

    kind = "rate_limited"
    retryable = True

    def __init__(
        self,
        detail: str = "",
        *,
        retry_after: float | None = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(detail, attempts=attempts)
        self.retry_after = retry_after


class AuthFailure(InferenceError):
    """Provider credentials were missing or rejected."""

    kind = "auth_failure"


class ServiceUnavailable(InferenceError):
    """The provider answered with a server-side error."""

    kind = "service_unavailable"
    retryable = True


class NetworkFailure(InferenceError):
    """Transport failure or a deadline expired before the provider answered."""

    kind = "network_failure"
    retryable = True


class MalformedInput(InferenceError):
    """The provider rejected the request itself; resending cannot succeed."""

    kind = "malformed_input"


class UnknownInferenceError(InferenceError):
    """Any failure that does not fit the classes above."""

    kind = "unknown"


class SkippedIdentical(Exception):
    """Source and target variants are equal, so no inference is needed.

    This is a no-op signal rather than a failure: callers use
    ``original_input`` as the result.
    """

    def __init__(self, original_input: str, variant: str) -> None:
        super().__init__(f"source and target are both {variant!r}; nothing to translate")
        self.original_input = original_input
        self.variant = variant
