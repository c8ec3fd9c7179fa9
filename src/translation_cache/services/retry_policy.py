"""Bounded exponential-backoff retry for inference calls.

This is the only place that decides whether and when a failed call is
attempted again. Retryable kinds are ``RateLimited``, ``ServiceUnavailable``
and ``NetworkFailure``; everything else surfaces after the first attempt.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from translation_cache.errors import InferenceError, RateLimited, UnknownInferenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retry classified transient failures with exponential backoff.

    The delay before retry ``n`` (0-based) is ``base_delay * 2**n``; for
    ``RateLimited`` it is never shorter than the provider's ``retry_after``.

    Example:
        ```python
        policy = RetryPolicy(max_attempts=3, base_delay=1.0)
        result = await policy.execute(lambda: client.invoke(request))
        ```
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float | None = None,
        sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the retry policy.

        Args:
            max_attempts: Total attempts including the first one.
            base_delay: Backoff base in seconds.
            max_delay: Optional cap for a single backoff sleep.
            sleeper: Async sleep function; tests inject a recorder.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay < 0:
            raise ValueError("base_delay must not be negative")
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sleeper = sleeper
        self.retry_count = 0

    def backoff_delay(self, attempt_index: int, error: InferenceError) -> float:
        """Return the sleep before the retry that follows ``attempt_index``."""
        delay = self._base_delay * (2**attempt_index)
        if isinstance(error, RateLimited) and error.retry_after is not None:
            delay = max(delay, error.retry_after)
        if self._max_delay is not None:
            delay = min(delay, self._max_delay)
        return delay

    async def execute(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` until it succeeds, fails fatally, or attempts run out.

        Args:
            fn: Zero-argument coroutine factory; called once per attempt

        Returns:
            The first successful result

        Raises:
            InferenceError: The last classified failure, with ``attempts`` set
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await fn()
            except InferenceError as e:
                error = e
            except Exception as e:
                raise UnknownInferenceError(str(e) or type(e).__name__).with_attempts(attempt) from e

            error.with_attempts(attempt)
            if not error.retryable:
                logger.error("Inference failed with %s; not retrying", error.kind)
                raise error
            if attempt >= self._max_attempts:
                logger.error("Inference failed with %s after %d attempts", error.kind, attempt)
                raise error

            delay = self.backoff_delay(attempt - 1, error)
            logger.warning(
                "Attempt %d/%d failed with %s; retrying in %.3fs",
                attempt,
                self._max_attempts,
                error.kind,
                delay,
            )
            self.retry_count += 1
            await self._sleeper(delay)

    @property
    def max_attempts(self) -> int:
        """Total attempts including the first one."""
        return self._max_attempts

    @property
    def base_delay(self) -> float:
        """Backoff base in seconds."""
        return self._base_delay

    @property
    def max_delay(self) -> float | None:
        """Cap for a single backoff sleep, or None."""
        return self._max_delay
