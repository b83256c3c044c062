"""Timing scopes and counters for the client, batch and research layers.

Telemetry is off unless ``GEMINI_WEB_TELEMETRY=1`` (or ``DEBUG=1``) is set or
``enabled=True`` is passed, and at least one reporter is supplied. When off,
every call site gets the same stateless no-op object, so instrumented code pays
for an attribute lookup and nothing else.

Scopes nest per task: ``with tele("client.generate"): with tele("client.attempt")``
reports ``client.generate.client.attempt``. Concurrent calls keep separate
stacks because the stack lives in a context variable.
"""

from collections import defaultdict, deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from functools import partial
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, TypeAlias, runtime_checkable

log = logging.getLogger(__name__)

_active_scopes: ContextVar[tuple[str, ...]] = ContextVar(
    "gemini_web_scopes", default=()
)

# Read once at import time
_ENV_ENABLED = os.getenv("GEMINI_WEB_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Receives finished scope timings and point metrics."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...


def _context_metadata(stack: tuple[str, ...], extra: dict[str, Any]) -> dict[str, Any]:
    return {
        "depth": len(stack),
        "parent_scope": ".".join(stack) or None,
        **extra,
    }


class _DisabledTelemetry:
    __slots__ = ()

    def __call__(self, name: str, **metadata: Any) -> Self:
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass

    def gauge(self, name: str, value: float, **metadata: Any) -> None:
        pass


class _ScopedTelemetry:
    """Forwards scopes and metrics to every reporter.

    A reporter that raises is logged and skipped; instrumentation never changes
    the outcome of the call being measured.
    """

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_ScopedTelemetry"]:
        return self._scope(name, metadata)

    @contextmanager
    def _scope(
        self, name: str, metadata: dict[str, Any]
    ) -> Iterator["_ScopedTelemetry"]:
        if not isinstance(name, str) or not name:
            raise ValueError("Scope name must be a non-empty string")

        parent = _active_scopes.get()
        token = _active_scopes.set((*parent, name))
        started = time.perf_counter()
        try:
            yield self
        finally:
            elapsed = time.perf_counter() - started
            _active_scopes.reset(token)
            path = ".".join((*parent, name))
            info = _context_metadata(parent, metadata)
            for reporter in self.reporters:
                self._deliver(reporter.record_timing, reporter, path, elapsed, info)

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        stack = _active_scopes.get()
        path = ".".join((*stack, name))
        info = _context_metadata(stack, metadata)
        for reporter in self.reporters:
            self._deliver(reporter.record_metric, reporter, path, value, info)

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        self.metric(name, increment, metric_type="counter", **metadata)

    def gauge(self, name: str, value: float, **metadata: Any) -> None:
        self.metric(name, value, metric_type="gauge", **metadata)

    @staticmethod
    def _deliver(
        method: Any,
        reporter: TelemetryReporter,
        path: str,
        value: Any,
        info: dict[str, Any],
    ) -> None:
        try:
            method(path, value, **info)
        except Exception as e:
            log.error(
                "Telemetry reporter '%s' failed on %s: %s",
                type(reporter).__name__,
                path,
                e,
                exc_info=True,
            )


_DISABLED = _DisabledTelemetry()

TelemetryContextProtocol: TypeAlias = _ScopedTelemetry | _DisabledTelemetry


def TelemetryContext(  # noqa: N802
    *reporters: TelemetryReporter, enabled: bool | None = None
) -> TelemetryContextProtocol:
    """Return an active context for ``reporters``, or the shared no-op one.

    ``enabled`` overrides the environment flag when given.
    """
    active = _ENV_ENABLED if enabled is None else enabled
    if active and reporters:
        return _ScopedTelemetry(*reporters)
    return _DISABLED


class SimpleReporter:
    """Keeps the last ``max_entries_per_scope`` records per path in memory."""

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        bounded = partial(deque, maxlen=max_entries_per_scope)
        self.timings: defaultdict[str, deque[tuple[float, dict[str, Any]]]] = (
            defaultdict(bounded)
        )
        self.metrics: defaultdict[str, deque[tuple[Any, dict[str, Any]]]] = (
            defaultdict(bounded)
        )

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self.timings[scope].append((duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self.metrics[scope].append((value, metadata))

    def get_report(self) -> str:
        lines = ["=== Telemetry Report ===", "", "--- Timings ---"]
        for scope in sorted(self.timings):
            durations = [d for d, _ in self.timings[scope]]
            total = sum(durations)
            lines.append(
                f"{scope:<40} | calls={len(durations):<4} "
                f"avg={total / len(durations):.4f}s total={total:.4f}s"
            )
        if self.metrics:
            lines += ["", "--- Metrics ---"]
            for scope in sorted(self.metrics):
                values = [v for v, _ in self.metrics[scope]]
                numeric = sum(v for v in values if isinstance(v, int | float))
                lines.append(f"{scope:<40} | n={len(values):<4} sum={numeric:,.0f}")
        return "\n".join(lines)
