"""
Bounded retry for calls that leave the process.

Used by the boundary components (embedder, chat model call, record store,
checkpointer). Only transient failures are retried; anything else, including
validation errors, surfaces on the first attempt.

Usage:
    result = await call_external(
        "embedding", lambda: client.post(...), max_attempts=3, timeout=30,
    )
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

import httpx
import openai
import psycopg
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from hr_chatbot.core.errors import ExternalServiceError
from hr_chatbot.core.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_TRANSIENT_STATUS = {408, 409, 425, 429, 500, 502, 503, 504}

# Failures that belong to a remote service rather than to our own code
_EXTERNAL_ERRORS = (httpx.HTTPError, openai.APIError, psycopg.Error, TimeoutError, asyncio.TimeoutError)


def is_transient(exc: BaseException) -> bool:
    """True for failures worth another attempt (timeouts, dropped connections, 429/5xx)."""
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return True
    if isinstance(exc, (httpx.TransportError, psycopg.OperationalError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _TRANSIENT_STATUS
    if isinstance(exc, (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)):
        return True
    return False


def _log_retry(service: str):
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "external_call_retry",
            service=service,
            attempt=retry_state.attempt_number,
            error_type=type(exc).__name__ if exc else None,
            wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        )
    return before_sleep


def retrying(service: str, max_attempts: int = 3) -> AsyncRetrying:
    """Tenacity controller: exponential backoff (0.5s → 8s), transient failures only."""
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception(is_transient),
        before_sleep=_log_retry(service),
        reraise=True,
    )


async def call_external(
    service: str,
    call: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    timeout: float | None = None,
) -> T:
    """
    Await ``call()`` with a per-attempt timeout and bounded retry.

    Remote failures that survive the retries are re-raised as
    ExternalServiceError tagged with ``service``.
    """
    try:
        async for attempt in retrying(service, max_attempts):
            with attempt:
                if timeout is None:
                    return await call()
                return await asyncio.wait_for(call(), timeout)
    except _EXTERNAL_ERRORS as exc:
        log.error("external_call_failed", service=service, error_type=type(exc).__name__, error=str(exc))
        raise ExternalServiceError(service, f"{type(exc).__name__}: {exc}") from exc
    raise AssertionError("unreachable")  # pragma: no cover
