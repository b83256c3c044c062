"""Optional admission control bounding the number of in-flight calls."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import asyncio
import logging

from ..exceptions import ConcurrencyLimitError

log = logging.getLogger(__name__)


class AdmissionGate:
    """Semaphore-backed gate with an optional bounded waiting queue.

    ``max_concurrent=0`` disables the gate entirely. With ``max_queued > 0``,
    a caller arriving while the queue is full is rejected with
    `ConcurrencyLimitError` instead of waiting.
    """

    def __init__(self, max_concurrent: int = 0, max_queued: int = 0):
        self.max_concurrent = max(0, max_concurrent)
        self.max_queued = max(0, max_queued)
        self._semaphore = (
            asyncio.Semaphore(self.max_concurrent) if self.max_concurrent else None
        )
        self._waiting = 0

    @property
    def waiting(self) -> int:
        return self._waiting

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one in-flight slot for the duration of the block."""
        if self._semaphore is None:
            yield
            return

        if self._semaphore.locked():
            if self.max_queued and self._waiting >= self.max_queued:
                raise ConcurrencyLimitError(
                    f"Admission queue full ({self._waiting} waiting, "
                    f"{self.max_concurrent} in flight)",
                    queue_position=self._waiting + 1,
                )
            log.debug("All %d slots busy; queueing call", self.max_concurrent)

        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1
        try:
            yield
        finally:
            self._semaphore.release()
