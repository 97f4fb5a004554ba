"""Retry helpers for API calls."""

import typing as t

import structlog
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from .exceptions import APIError

logger = structlog.get_logger(__name__)

T = t.TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """Client errors (4xx) are final; server and network errors are worth another try."""
    if isinstance(exc, APIError):
        return not exc.is_client_error
    return True


def _log_retry(retry_state: t.Any) -> None:
    logger.warning(
        "request_retry_scheduled",
        attempt=retry_state.attempt_number,
        wait=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


async def retry_request(
    request_fn: t.Callable[[], t.Awaitable[T]],
    max_retries: int = 3,
    delay: float = 1.0,
) -> T:
    """Call `request_fn` up to `max_retries` times with exponential backoff.

    Waits `delay * 2**i` seconds after the i-th failure. A 4xx `APIError` is
    re-raised immediately, and the last error is re-raised once the attempts
    run out.

    Args:
        request_fn: Zero-argument coroutine function performing the call.
        max_retries: Total number of attempts.
        delay: Base delay in seconds.

    Returns:
        Whatever `request_fn` returns.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=delay, exp_base=2),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    )
    return await retrying(request_fn)
