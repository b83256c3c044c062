"""
Client configuration handling for rate limiting and retries
"""

from dataclasses import dataclass

from ..constants import (
    DEFAULT_BASE_RETRY_DELAY_MS,
    DEFAULT_JITTER_FACTOR,
    DEFAULT_MAX_BURST,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_RETRY_DELAY_MS,
    DEFAULT_REQUESTS_PER_MINUTE,
)


@dataclass(frozen=True)
class RateLimiterConfig:
    """Token bucket parameters for API request throttling.

    Values below 1 are coerced to 1 so a misconfigured environment degrades to
    the slowest legal rate instead of a bucket that never refills.
    """

    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE
    max_burst: int = DEFAULT_MAX_BURST

    def __post_init__(self) -> None:
        rpm = max(1, int(self.requests_per_minute))
        object.__setattr__(self, "requests_per_minute", rpm)
        object.__setattr__(self, "max_burst", max(1, int(self.max_burst)))


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff parameters. Immutable after construction."""

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_RETRY_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_RETRY_DELAY_MS
    jitter_factor: float = DEFAULT_JITTER_FACTOR

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError("jitter_factor must be within [0, 1]")

    def with_max_retries(self, max_retries: int) -> "RetryPolicy":
        """Return a copy of this policy with a different retry budget."""
        return RetryPolicy(
            max_retries=max_retries,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            jitter_factor=self.jitter_factor,
        )
