"""Retry engine with exponential backoff and jitter.

delay = min(base_delay * 2**attempt, max_delay) +/- jitter

Jitter is symmetric around the capped delay so independent callers that were
throttled together do not retry in lockstep. There is no circuit breaker;
retries are purely time-based.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
import math
import random
import re
import socket
from typing import Any, Generic, TypeVar

import httpx

from ..constants import NETWORK_ERROR_PATTERNS, RETRYABLE_STATUS_CODES
from .configuration import RetryPolicy

log = logging.getLogger(__name__)

T = TypeVar("T")

_STATUS_IN_MESSAGE = re.compile(r"status\s+(\d{3})")

_NETWORK_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ConnectionError,
    socket.gaierror,
    httpx.TransportError,
)


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    """Outcome of `retry_with_backoff`. Never raised, always returned."""

    success: bool
    attempts: int
    total_delay_ms: int
    value: T | None = None
    error: Exception | None = None


def is_retryable_error(error: object) -> bool:
    """Classify an error as transient.

    Rules, in order:
    1. An explicit ``retryable`` attribute wins; anything but ``True`` is
       permanent.
    2. Network-layer faults (by exception type or message signature) retry.
    3. A ``status NNN`` embedded in the message retries for 429/502/503.
    4. Everything else is permanent.
    """
    if hasattr(error, "retryable"):
        return getattr(error, "retryable") is True  # noqa: B009

    if not isinstance(error, BaseException):
        return False

    if isinstance(error, _NETWORK_EXCEPTIONS):
        return True

    message = str(error).lower()
    if any(pattern in message for pattern in NETWORK_ERROR_PATTERNS):
        return True

    match = _STATUS_IN_MESSAGE.search(message)
    if match:
        return int(match.group(1)) in RETRYABLE_STATUS_CODES

    return False


def calculate_delay(
    attempt: int,
    policy: RetryPolicy,
    *,
    rng: Callable[[], float] = random.random,
) -> int:
    """Backoff delay in milliseconds for a zero-based ``attempt``."""
    exponential = policy.base_delay_ms * (2**attempt)
    capped = min(exponential, policy.max_delay_ms)
    jitter = capped * policy.jitter_factor * (rng() * 2 - 1)
    return max(0, math.floor(capped + jitter))


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rng: Callable[[], float] = random.random,
) -> RetryResult[T]:
    """Call ``fn`` up to ``policy.max_retries + 1`` times.

    Non-retryable errors stop immediately. The returned failure always carries
    the last observed error, never an aggregate.
    """
    total_delay_ms = 0
    max_attempts = policy.max_retries + 1

    for attempt in range(max_attempts):
        try:
            value = await fn()
        except Exception as error:
            is_last_attempt = attempt == policy.max_retries
            if is_last_attempt or not is_retryable_error(error):
                if is_last_attempt and attempt > 0:
                    log.error(
                        "Giving up after %d attempt(s): %s", attempt + 1, error
                    )
                return RetryResult(
                    success=False,
                    attempts=attempt + 1,
                    total_delay_ms=total_delay_ms,
                    error=error,
                )

            delay_ms = calculate_delay(attempt, policy, rng=rng)
            total_delay_ms += delay_ms
            log.warning(
                "Retryable error (%s). Retrying in %.2fs (Attempt %d/%d)",
                type(error).__name__,
                delay_ms / 1000.0,
                attempt + 2,
                max_attempts,
            )
            await sleep(delay_ms / 1000.0)
        else:
            return RetryResult(
                success=True,
                attempts=attempt + 1,
                total_delay_ms=total_delay_ms,
                value=value,
            )

    # max_attempts >= 1, so the loop above always returns
    return RetryResult(  # pragma: no cover
        success=False, attempts=max_attempts, total_delay_ms=total_delay_ms
    )


async def retry_with_backoff_or_raise(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rng: Callable[[], float] = random.random,
) -> T:
    """Like `retry_with_backoff`, but raises the last error on failure."""
    result = await retry_with_backoff(fn, policy, sleep=sleep, rng=rng)
    if result.error is not None:
        raise result.error
    return result.value  # type: ignore[return-value]
