"""Concurrent execution of many generation requests with per-item isolation."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import dataclasses
import logging
from typing import TYPE_CHECKING

from .core.types import BatchOutcome, CallRequest, CallResult

if TYPE_CHECKING:
    from .client.resilient import ResilientClient

log = logging.getLogger(__name__)


class BatchExecutor:
    """Fans requests out through one client and collects every outcome.

    A failing item never affects its siblings; the returned list always has
    one `BatchOutcome` per input, carrying the input's index.
    """

    def __init__(self, client: ResilientClient):
        self._client = client

    async def run(
        self,
        requests: Sequence[CallRequest],
        *,
        timeout_ms: int | None = None,
    ) -> list[BatchOutcome[CallResult]]:
        """Run all ``requests`` concurrently.

        Args:
            requests: Requests to issue. May be empty.
            timeout_ms: Applied to every request that does not set its own.
        """
        if not requests:
            return []

        async def _run_one(index: int, request: CallRequest) -> BatchOutcome:
            if timeout_ms is not None and request.timeout_ms is None:
                request = dataclasses.replace(request, timeout_ms=timeout_ms)
            try:
                data = await self._client.generate_content(request)
            except Exception as e:
                return BatchOutcome(index=index, success=False, error=e)
            return BatchOutcome(index=index, success=True, data=data)

        with self._client.tele("batch.run", size=len(requests)):
            outcomes = await asyncio.gather(
                *(_run_one(i, r) for i, r in enumerate(requests))
            )

        failed = sum(1 for o in outcomes if not o.success)
        if failed:
            log.warning(
                "Batch finished with %d/%d failed item(s)", failed, len(outcomes)
            )
        return list(outcomes)
