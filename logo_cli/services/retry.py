"""Retry wrapper for calls to the image-generation API."""

import asyncio
import logging
import random
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

import openai
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt
from tenacity.wait import wait_base

from ..errors import UpstreamError, UpstreamErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
BASE_DELAY_SECONDS = 1.0
MAX_DELAY_SECONDS = 30.0
JITTER_SECONDS = 1.0

_RATE_LIMIT_MARKERS = ("rate limit", "too many requests", "quota exceeded")
_TRANSIENT_MARKERS = ("network", "timeout", "connection", "econnreset", "socket hang up")


class FailureClass(str, Enum):
    RATE_LIMIT = "rate-limit"
    TRANSIENT = "transient-network"
    NON_RETRYABLE = "non-retryable"


def classify_failure(exc: BaseException) -> FailureClass:
    """Map an exception onto a retry class.

    Tagged ``UpstreamError`` instances are matched on their kind. Anything else
    (untyped errors from third-party clients) falls back to matching known
    phrases in the error message.
    """
    if isinstance(exc, UpstreamError):
        if exc.kind is UpstreamErrorKind.RATE_LIMITED:
            return FailureClass.RATE_LIMIT
        if exc.kind is UpstreamErrorKind.TRANSIENT:
            return FailureClass.TRANSIENT
        return FailureClass.NON_RETRYABLE
    if isinstance(exc, openai.RateLimitError):
        return FailureClass.RATE_LIMIT

    message = str(exc).lower()
    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return FailureClass.RATE_LIMIT
    if any(marker in message for marker in _TRANSIENT_MARKERS):
        return FailureClass.TRANSIENT
    return FailureClass.NON_RETRYABLE


def is_retryable(exc: BaseException) -> bool:
    return classify_failure(exc) is not FailureClass.NON_RETRYABLE


class wait_backoff_with_jitter(wait_base):
    """Exponential backoff plus up to one second of jitter, capped at 30s.

    The jitter is drawn again for every attempt.
    """

    def __init__(
        self,
        base: float = BASE_DELAY_SECONDS,
        cap: float = MAX_DELAY_SECONDS,
        jitter: float = JITTER_SECONDS,
        rng: Callable[[], float] = random.random,
    ):
        self.base = base
        self.cap = cap
        self.jitter = jitter
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        attempt = retry_state.attempt_number
        delay = self.base * 2 ** (attempt - 1) + self.rng() * self.jitter
        return min(delay, self.cap)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay_ms = round((retry_state.next_action.sleep if retry_state.next_action else 0) * 1000)
    label = "Rate limited" if exc and classify_failure(exc) is FailureClass.RATE_LIMIT else "Temporary error"
    max_attempts = getattr(retry_state.retry_object.stop, "max_attempt_number", "?")
    logger.warning(
        "%s. Retrying in %dms... (attempt %d/%s): %s",
        label,
        delay_ms,
        retry_state.attempt_number,
        max_attempts,
        exc,
    )


class RetryStrategy:
    """Runs an async operation, retrying rate-limit and transient failures."""

    def __init__(
        self,
        wait: Optional[wait_base] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.wait = wait or wait_backoff_with_jitter()
        self.sleep = sleep

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=self.wait,
            retry=retry_if_exception(is_retryable),
            before_sleep=_log_retry,
            sleep=self.sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await operation()
