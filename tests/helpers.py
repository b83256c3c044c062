"""Deterministic time doubles shared by the test suite."""


class FakeClock:
    """Manually advanced clock. Call it to read the current time."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float) -> None:
        self.now += amount


class RecordingSleep:
    """Async sleep that returns immediately and records requested durations.

    When ``clock_ms`` is given, each sleep advances it by the slept time so
    loops that recompute a wait converge without real waiting.
    """

    def __init__(self, clock_ms: FakeClock | None = None):
        self.calls: list[float] = []
        self._clock_ms = clock_ms

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._clock_ms is not None:
            self._clock_ms.advance(seconds * 1000.0)

    @property
    def total_ms(self) -> float:
        return sum(self.calls) * 1000.0
