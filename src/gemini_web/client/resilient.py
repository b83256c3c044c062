"""Resilient async client for grounded generation.

Every call passes, in order, through admission control, the token bucket, the
retry engine and (when the primary model is exhausted on a transient error) a
single fallback pass on the fallback model. Health counters are updated for
every call that reaches the bucket.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
import logging
import random
import time
from typing import TYPE_CHECKING, Any

from ..constants import (
    FALLBACK_MAX_RETRIES,
    HEALTH_CHECK_MAX_OUTPUT_TOKENS,
    HEALTH_CHECK_PROMPT,
    HEALTH_CHECK_TIMEOUT_MS,
)
from ..core.types import BatchOutcome, CallRequest, CallResult, HealthMetrics
from ..exceptions import MissingKeyError, RequestTimeoutError
from ..telemetry import TelemetryContext, TelemetryContextProtocol
from .concurrency import AdmissionGate
from .error_handler import GenerationErrorHandler
from .extraction import to_call_result
from .metrics import MetricsTracker
from .rate_limiter import TokenBucket, _monotonic_ms
from .retry import is_retryable_error, retry_with_backoff

if TYPE_CHECKING:
    from ..adapters.base import GenerationAdapter
    from ..config.types import FrozenConfig
    from .configuration import RetryPolicy

log = logging.getLogger(__name__)


class ResilientClient:
    """Rate-limited, retrying, fallback-capable wrapper around one adapter.

    Instances are cheap; each owns its own bucket and counters, so two clients
    built from the same configuration do not share quota.
    """

    def __init__(
        self,
        config: FrozenConfig,
        *,
        adapter: GenerationAdapter | None = None,
        telemetry: TelemetryContextProtocol | None = None,
        clock: Callable[[], float] = time.time,
        monotonic_ms: Callable[[], float] = _monotonic_ms,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        """Build a client.

        Args:
            config: Resolved, immutable configuration.
            adapter: Provider adapter. Defaults to `GoogleGenAIAdapter`, which
                requires ``config.api_key``.
            telemetry: Telemetry context; no-op when omitted.
            clock: Wall clock in seconds, used for health metrics.
            monotonic_ms: Monotonic clock in milliseconds for the bucket.
            sleep: Async sleep in seconds for throttling and backoff.
            rng: Uniform [0, 1) source for retry jitter.

        Raises:
            MissingKeyError: No adapter was given and no API key is configured.
        """
        self.config = config
        self._adapter = adapter if adapter is not None else _default_adapter(config)
        self.tele = telemetry if telemetry is not None else TelemetryContext()
        self._sleep = sleep
        self._rng = rng
        self._retry_policy: RetryPolicy = config.retry_policy
        self._rate_limiter = TokenBucket(
            config.rate_limit, clock=monotonic_ms, sleep=sleep
        )
        self._gate = AdmissionGate(
            config.max_concurrent_requests, config.max_queued_requests
        )
        self._error_handler = GenerationErrorHandler()
        self._metrics = MetricsTracker(clock=clock)
        log.debug(
            "ResilientClient ready: model=%s fallback=%s rpm=%d burst=%d",
            config.model,
            config.fallback_model or None,
            config.requests_per_minute,
            config.max_burst,
        )

    @property
    def rate_limiter(self) -> TokenBucket:
        return self._rate_limiter

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    # --- Single calls ---

    async def generate_content(self, request: CallRequest) -> CallResult:
        """Perform one grounded generation call.

        Raises:
            RequestTimeoutError: A single attempt exceeded its deadline and
                retries were exhausted.
            RateLimitError: The service kept throttling.
            ConcurrencyLimitError: The admission queue was full.
            Exception: Any non-retryable error, unchanged.
        """
        model = request.model or self.config.model
        timeout_ms = request.timeout_ms or self.config.timeout_ms

        with self.tele("client.generate", model=model):
            counted = False
            try:
                async with self._gate.slot():
                    await self._rate_limiter.acquire()
                    self._metrics.request_started()
                    counted = True
                    try:
                        return await self._generate_with_fallback(
                            request, model, timeout_ms
                        )
                    finally:
                        self._metrics.request_finished()
            except Exception as error:
                if not counted:
                    # Rejected before admission; still counts as a request
                    self._metrics.request_rejected()
                self._metrics.record_error(error)
                self.tele.count("client.error", kind=type(error).__name__)
                log.error(
                    "Generation failed for model '%s': %s",
                    model,
                    error,
                    exc_info=True,
                )
                raise

    async def _generate_with_fallback(
        self, request: CallRequest, model: str, timeout_ms: int
    ) -> CallResult:
        primary = await retry_with_backoff(
            lambda: self._execute_with_timeout(request, model, timeout_ms),
            self._retry_policy,
            sleep=self._sleep,
            rng=self._rng,
        )
        if primary.success:
            return primary.value  # type: ignore[return-value]
        if primary.attempts > 1:
            self.tele.count("client.retry", primary.attempts - 1)

        error: Exception = primary.error  # type: ignore[assignment]
        fallback = self.config.fallback_model
        if not fallback or fallback == model or not is_retryable_error(error):
            raise error

        log.warning(
            "Model '%s' exhausted after %d attempt(s) (%s); trying fallback '%s'",
            model,
            primary.attempts,
            type(error).__name__,
            fallback,
        )
        with self.tele("client.fallback", model=fallback):
            secondary = await retry_with_backoff(
                lambda: self._execute_with_timeout(request, fallback, timeout_ms),
                self._retry_policy.with_max_retries(FALLBACK_MAX_RETRIES),
                sleep=self._sleep,
                rng=self._rng,
            )
        if secondary.success:
            log.info("Fallback model '%s' succeeded", fallback)
            return secondary.value  # type: ignore[return-value]

        log.warning("Fallback model '%s' failed: %s", fallback, secondary.error)
        raise error

    async def _execute_with_timeout(
        self, request: CallRequest, model: str, timeout_ms: int
    ) -> CallResult:
        """One attempt, bounded by ``timeout_ms`` and normalized on failure."""
        api_config = request.api_config()
        api_config["timeout_ms"] = timeout_ms
        log.debug("Attempting generation on model '%s'", model)
        with self.tele("client.attempt", model=model):
            try:
                async with asyncio.timeout(timeout_ms / 1000.0):
                    raw = await self._adapter.generate(
                        model_name=model,
                        prompt=request.prompt,
                        api_config=api_config,
                    )
            except TimeoutError as e:
                raise RequestTimeoutError(
                    f"Request timed out after {timeout_ms} ms", timeout_ms
                ) from e
            except Exception as e:
                normalized = self._error_handler.normalize(e, timeout_ms)
                if normalized is e:
                    raise
                raise normalized from e
        return to_call_result(raw)

    # --- Batch ---

    async def generate_content_batch(
        self,
        requests: Sequence[CallRequest],
        timeout_ms: int | None = None,
    ) -> list[BatchOutcome[CallResult]]:
        """Run ``requests`` concurrently; one outcome per input, in input order."""
        from ..batch import BatchExecutor

        return await BatchExecutor(self).run(requests, timeout_ms=timeout_ms)

    # --- Health ---

    async def health_check(self, timeout_ms: int = HEALTH_CHECK_TIMEOUT_MS) -> bool:
        """Issue a tiny ungrounded probe; true iff it returned non-blank text.

        Never raises.
        """
        request = CallRequest(
            prompt=HEALTH_CHECK_PROMPT,
            max_output_tokens=HEALTH_CHECK_MAX_OUTPUT_TOKENS,
            use_search=False,
            timeout_ms=timeout_ms,
        )
        try:
            result = await self.generate_content(request)
        except Exception as e:
            log.warning("Health check failed: %s", e)
            return False
        return bool(result.text.strip())

    def get_metrics(self) -> HealthMetrics:
        return self._metrics.snapshot(
            rate_limit_tokens=self._rate_limiter.get_available_tokens()
        )

    def get_estimated_wait_time(self) -> int:
        """Milliseconds until the next call would be admitted by the bucket."""
        return self._rate_limiter.calculate_wait_time()


def _default_adapter(config: FrozenConfig) -> GenerationAdapter:
    if not config.api_key:
        raise MissingKeyError(
            "Missing GEMINI_API_KEY or GOOGLE_API_KEY. Set one of them, or pass "
            "an adapter explicitly."
        )
    from ..adapters.gemini import GoogleGenAIAdapter

    return GoogleGenAIAdapter(config.api_key, base_url=config.base_url)
