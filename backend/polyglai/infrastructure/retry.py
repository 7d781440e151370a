"""Per-call retry for speech service requests, built on tenacity."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A recognition call is user-facing: retry once, quickly
DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_INITIAL_WAIT = 0.5  # seconds
DEFAULT_MAX_WAIT = 4.0  # seconds
DEFAULT_JITTER = 0.25  # seconds


class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class TransientError(RetryableError):
    """Connect failures and timeouts that never produced a response."""

    pass


def log_retry(operation_name: str) -> Callable[[int, Exception], None]:
    """Build an ``on_retry`` callback that logs each retry."""

    def _on_retry(attempt: int, error: Exception) -> None:
        logger.warning(f"Retry attempt {attempt} for {operation_name} after: {error}")

    return _on_retry


async def retry_operation(
    operation: Callable[..., Awaitable[T]],
    *args,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_wait: float = DEFAULT_INITIAL_WAIT,
    max_wait: float = DEFAULT_MAX_WAIT,
    jitter: float = DEFAULT_JITTER,
    retryable_exceptions: tuple = (RetryableError,),
    on_retry: Callable[[int, Exception], None] | None = None,
    **kwargs,
) -> T:
    """Execute an async operation with exponential backoff and jitter.

    Wait formula: min(initial * 2^n, max) + random(0, jitter)

    Args:
        operation: Async function to execute
        *args: Positional arguments for operation
        max_attempts: Maximum number of attempts (1 disables retries)
        initial_wait: Initial wait time in seconds
        max_wait: Maximum wait time in seconds
        jitter: Upper bound of the random delay added to each wait
        retryable_exceptions: Exception types to retry on
        on_retry: Optional callback called on each retry with (attempt, exception)
        **kwargs: Keyword arguments for operation

    Returns:
        Result of the operation

    Raises:
        Exception: The last exception once attempts are exhausted, or the
            first non-retryable one
    """
    last_exception: Exception | None = None

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=initial_wait, max=max_wait) + wait_random(0, jitter),
        retry=retry_if_exception_type(retryable_exceptions),
        reraise=True,
    ):
        with attempt:
            attempt_num = attempt.retry_state.attempt_number
            if attempt_num > 1 and on_retry and last_exception:
                on_retry(attempt_num, last_exception)
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                last_exception = e
                raise
