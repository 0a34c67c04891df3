"""Bounded retries for retryable domain errors."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from agegate.core.config import RetrySettings, get_settings

from .exceptions import ConcurrencyConflictError, FeedUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (FeedUnavailableError, ConcurrencyConflictError)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying %s after %s (attempt %d)",
        getattr(retry_state.fn, "__qualname__", "operation"),
        exc.__class__.__name__ if exc else "error",
        retry_state.attempt_number,
    )


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    retry_on: tuple[type[Exception], ...] = RETRYABLE_ERRORS,
    settings: RetrySettings | None = None,
) -> T:
    """Run ``operation`` retrying only the given error types, then re-raise."""
    settings = settings or get_settings().retry
    result: T
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.max_attempts),
        wait=wait_exponential(multiplier=settings.initial_wait, max=settings.max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            result = await operation()
    return result


__all__ = ["RETRYABLE_ERRORS", "retry_async"]
