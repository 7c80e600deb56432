"""Tenacity retry wrapper driven by BentoConfig."""

from typing import Callable, Optional

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import BentoConfig
from .errors import RateLimitError


def is_transient(exc: BaseException) -> bool:
    """Rate limits, transport timeouts/connection errors and 5xx answers."""
    return bool(getattr(exc, "transient", False))


def is_rate_limit(exc: BaseException) -> bool:
    """Only 429 answers: the server rejected the call before applying it."""
    return isinstance(exc, RateLimitError)


def with_retry(
    config: BentoConfig,
    *,
    retry_on: Callable[[BaseException], bool] = is_transient,
    before_sleep: Optional[Callable[[RetryCallState], None]] = None,
) -> Callable:
    """Return a tenacity retry decorator configured from *config*.

    The wrapped function is called at most ``config.max_attempts`` times.
    Delays double from ``retry_base_delay`` up to ``retry_max_delay``.
    When attempts run out, or the error is not retryable, the last error
    is re-raised unchanged.

    Usage::

        send = with_retry(config)(self._send)
        response = send('GET', url)
    """
    return retry(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(
            multiplier=config.retry_base_delay,
            min=config.retry_base_delay,
            max=config.retry_max_delay,
        ),
        retry=retry_if_exception(retry_on),
        before_sleep=before_sleep,
        reraise=True,
    )
