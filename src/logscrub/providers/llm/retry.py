"""Retry with exponential backoff for transient provider failures."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)

from .base import RetryExhaustedError, TransientProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP status codes that are retried: timeout, rate limit and server errors
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """
    Parse a Retry-After header value.

    Args:
        value: Header value, either delay seconds or an HTTP-date
        now: Reference time for HTTP-date values (defaults to the current UTC time)

    Returns:
        Delay in seconds (never negative), or None if absent or unreadable
    """
    if not value or not value.strip():
        return None
    value = value.strip()

    try:
        seconds = float(value)
        return max(seconds, 0.0) if math.isfinite(seconds) else None
    except ValueError:
        pass

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unreadable Retry-After header: {value!r}")
        return None

    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    return max((retry_at - now).total_seconds(), 0.0)


class RetryPolicy:
    """
    Retry policy with capped exponential backoff, run through tenacity.

    Only TransientProviderError is retried; every other exception propagates
    on the first occurrence. Backoff delays use ``asyncio.sleep``, so
    cancelling the calling task interrupts a pending delay immediately.
    """

    MAX_ATTEMPTS = 3
    BASE_DELAY = 2.0  # Seconds before the first retry
    MAX_DELAY = 60.0

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        max_delay: float = MAX_DELAY,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

    def compute_delay(self, attempt: int, retry_after: float | None = None) -> float:
        """
        Compute the delay before the next attempt.

        Args:
            attempt: 1-based number of the attempt that just failed
            retry_after: Server-supplied delay, used instead of the backoff when present

        Returns:
            Delay in seconds, capped at max_delay
        """
        if retry_after is not None:
            return min(max(retry_after, 0.0), self.max_delay)
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    def _wait(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        return self.compute_delay(
            retry_state.attempt_number, getattr(error, "retry_after", None)
        )

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        provider: str | None = None,
        description: str = "request",
    ) -> T:
        """
        Run an async operation, retrying transient failures.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            provider: Provider name for logging and errors
            description: What the operation does, for log messages

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: If every attempt failed with a transient error
        """

        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.warning(
                f"{provider or 'provider'} {description} failed "
                f"(attempt {retry_state.attempt_number}/{self.max_attempts}): "
                f"{getattr(error, 'message', error)}. Retrying in {delay:.1f}s..."
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(TransientProviderError),
            before_sleep=log_retry,
            sleep=_sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await operation()
        except RetryError as e:
            last_error = e.last_attempt.exception()
            raise RetryExhaustedError(
                message=(
                    f"{description} failed after {self.max_attempts} attempts: "
                    f"{getattr(last_error, 'message', last_error)}"
                ),
                provider=provider,
                error_code="max_retries_exceeded",
                details={"last_error_code": getattr(last_error, "error_code", None)},
            ) from last_error
