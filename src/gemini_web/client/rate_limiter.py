"""Token bucket rate limiting for Gemini API requests.

Tokens refill continuously at ``requests_per_minute / 60000`` per millisecond
up to ``max_burst``. Callers are never rejected, only delayed.
"""

import asyncio
from collections.abc import Awaitable, Callable
import logging
import math
import threading
import time

from ..constants import MS_PER_MINUTE
from .configuration import RateLimiterConfig

log = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class TokenBucket:
    """Manages admission of outbound requests with a token bucket.

    Mutations happen under a short-lived lock that is never held across an
    ``await``, so concurrent acquirers cannot over-admit.
    """

    def __init__(
        self,
        config: RateLimiterConfig,
        *,
        clock: Callable[[], float] = _monotonic_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Create a full bucket.

        Args:
            config: Requests-per-minute and burst capacity.
            clock: Monotonic clock returning milliseconds.
            sleep: Async sleep taking seconds.
        """
        self.config = config
        self.capacity = float(config.max_burst)
        self.refill_rate_per_ms = config.requests_per_minute / MS_PER_MINUTE
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = self.capacity
        self._last_refill = clock()

    def _refill(self) -> None:
        """Advance the bucket to the current time. Caller holds the lock."""
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        added = elapsed * self.refill_rate_per_ms
        self._tokens = min(self.capacity, self._tokens + added)
        self._last_refill = now

    def get_available_tokens(self) -> float:
        """Return the lazily refilled token count without consuming any."""
        with self._lock:
            self._refill()
            return self._tokens

    def calculate_wait_time(self, tokens: int = 1) -> int:
        """Milliseconds until ``tokens`` would be available, 0 if they already are."""
        with self._lock:
            return self._wait_time_locked(tokens)

    def _wait_time_locked(self, tokens: int) -> int:
        self._refill()
        if self._tokens >= tokens:
            return 0
        return math.ceil((tokens - self._tokens) / self.refill_rate_per_ms)

    def _try_debit(self, tokens: int) -> int:
        """Debit ``tokens`` if available and return 0, else return the wait in ms."""
        with self._lock:
            wait_ms = self._wait_time_locked(tokens)
            if wait_ms == 0:
                self._tokens -= tokens
            return wait_ms

    async def acquire(self, tokens: int = 1) -> None:
        """Suspend until ``tokens`` are available, then atomically debit them."""
        if tokens > self.capacity:
            raise ValueError(
                f"Cannot acquire {tokens} tokens from a bucket of "
                f"capacity {self.capacity:g}"
            )
        while True:
            wait_ms = self._try_debit(tokens)
            if wait_ms == 0:
                return
            log.debug(
                "Rate limit reached. Waiting %d ms for %d token(s).", wait_ms, tokens
            )
            await self._sleep(wait_ms / 1000.0)

    def reset(self) -> None:
        """Restore the bucket to full capacity."""
        with self._lock:
            self._tokens = self.capacity
            self._last_refill = self._clock()
