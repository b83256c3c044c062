"""Process-wide health counters for a `ResilientClient`."""

from collections.abc import Callable
import threading
import time

from ..constants import HEALTH_ERROR_WINDOW_SECONDS
from ..core.types import HealthMetrics


class MetricsTracker:
    """Counts requests and errors. All mutations happen under one lock."""

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        error_window_seconds: float = HEALTH_ERROR_WINDOW_SECONDS,
    ):
        self._clock = clock
        self._error_window = error_window_seconds
        self._lock = threading.Lock()
        self.start_timestamp = clock()
        self.requests_total = 0
        self.requests_pending = 0
        self.errors_total = 0
        self.last_error: Exception | None = None
        self.last_error_timestamp: float | None = None

    def request_started(self) -> None:
        with self._lock:
            self.requests_total += 1
            self.requests_pending += 1

    def request_rejected(self) -> None:
        """Count a call that failed before it was admitted (never pending)."""
        with self._lock:
            self.requests_total += 1

    def request_finished(self) -> None:
        with self._lock:
            self.requests_pending -= 1

    def record_error(self, error: Exception) -> None:
        with self._lock:
            self.errors_total += 1
            self.last_error = error
            self.last_error_timestamp = self._clock()

    def snapshot(self, *, rate_limit_tokens: float) -> HealthMetrics:
        """Read-only view; unhealthy while the last error is inside the window."""
        with self._lock:
            now = self._clock()
            last_ts = self.last_error_timestamp
            healthy = last_ts is None or (now - last_ts) > self._error_window
            return HealthMetrics(
                healthy=healthy,
                uptime_seconds=int(now - self.start_timestamp),
                requests_total=self.requests_total,
                requests_pending=self.requests_pending,
                errors_total=self.errors_total,
                rate_limit_tokens=rate_limit_tokens,
                last_error=str(self.last_error) if self.last_error else None,
                last_error_kind=(
                    type(self.last_error).__name__ if self.last_error else None
                ),
                last_error_timestamp=last_ts,
            )
