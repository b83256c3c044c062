"""Resilience components for the grounded generation client."""

from .concurrency import AdmissionGate
from .configuration import RateLimiterConfig, RetryPolicy
from .error_handler import GenerationErrorHandler
from .metrics import MetricsTracker
from .rate_limiter import TokenBucket
from .resilient import ResilientClient
from .retry import (
    RetryResult,
    calculate_delay,
    is_retryable_error,
    retry_with_backoff,
    retry_with_backoff_or_raise,
)

__all__ = [
    "AdmissionGate",
    "GenerationErrorHandler",
    "MetricsTracker",
    "RateLimiterConfig",
    "ResilientClient",
    "RetryPolicy",
    "RetryResult",
    "TokenBucket",
    "calculate_delay",
    "is_retryable_error",
    "retry_with_backoff",
    "retry_with_backoff_or_raise",
]
