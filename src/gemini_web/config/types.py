"""Configuration data types: resolve once, freeze, then hand to the client."""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Literal, NamedTuple

from ..client.configuration import RateLimiterConfig, RetryPolicy
from ..constants import (
    DEFAULT_BASE_RETRY_DELAY_MS,
    DEFAULT_FALLBACK_MODEL,
    DEFAULT_JITTER_FACTOR,
    DEFAULT_MAX_BURST,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_RETRY_DELAY_MS,
    DEFAULT_MODEL,
    DEFAULT_REQUESTS_PER_MINUTE,
    DEFAULT_TIMEOUT_MS,
)

ConfigOrigin = Literal["programmatic", "env", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_SECRET_FIELDS = frozenset({"api_key"})

# Environment variable shown in audit output for env-sourced fields
ENV_NAMES: Mapping[str, str] = {
    "api_key": "GEMINI_API_KEY",
    "base_url": "GENAI_BASE_URL",
    "model": "GEMINI_MODEL",
    "fallback_model": "GEMINI_FALLBACK_MODEL",
    "timeout_ms": "REQUEST_TIMEOUT",
    "requests_per_minute": "RATE_LIMIT_RPM",
    "max_burst": "RATE_LIMIT_MAX_BURST",
    "max_retries": "MAX_RETRIES",
    "base_retry_delay_ms": "BASE_RETRY_DELAY",
    "max_retry_delay_ms": "MAX_RETRY_DELAY",
    "jitter_factor": "JITTER_FACTOR",
    "max_concurrent_requests": "MAX_CONCURRENT_REQUESTS",
    "max_queued_requests": "MAX_QUEUED_REQUESTS",
}


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration consumed by `ResilientClient`.

    Defaults mirror the settings schema, so ``FrozenConfig(api_key=...)`` is a
    usable configuration without touching the environment.
    """

    api_key: str | None = None
    base_url: str | None = None
    model: str = DEFAULT_MODEL
    fallback_model: str = DEFAULT_FALLBACK_MODEL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE
    max_burst: int = DEFAULT_MAX_BURST
    max_retries: int = DEFAULT_MAX_RETRIES
    base_retry_delay_ms: int = DEFAULT_BASE_RETRY_DELAY_MS
    max_retry_delay_ms: int = DEFAULT_MAX_RETRY_DELAY_MS
    jitter_factor: float = DEFAULT_JITTER_FACTOR
    max_concurrent_requests: int = 0
    max_queued_requests: int = 0

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay_ms=self.base_retry_delay_ms,
            max_delay_ms=self.max_retry_delay_ms,
            jitter_factor=self.jitter_factor,
        )

    @property
    def rate_limit(self) -> RateLimiterConfig:
        return RateLimiterConfig(
            requests_per_minute=self.requests_per_minute,
            max_burst=self.max_burst,
        )

    def to_dict(self, *, redact: bool = True) -> dict[str, object]:
        """Field values in declaration order, with secrets masked by default."""
        values: dict[str, object] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if redact and f.name in _SECRET_FIELDS and value:
                value = "[REDACTED]"
            values[f.name] = value
        return values

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        body = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"FrozenConfig({body})"

    def __repr__(self) -> str:
        return self.__str__()


class ResolvedConfig(NamedTuple):
    """A `FrozenConfig` together with where each of its values came from."""

    config: FrozenConfig
    origin: SourceMap

    def to_frozen(self) -> FrozenConfig:
        return self.config

    def __str__(self) -> str:
        return f"ResolvedConfig(config={self.config}, origin={dict(self.origin)!r})"

    def __repr__(self) -> str:
        return self.__str__()

    def audit(self) -> str:
        """Redacted report showing the origin of each field, one per line."""
        lines = []
        for name, value in self.config.to_dict().items():
            origin = self.origin.get(name, "default")
            if name in _SECRET_FIELDS:
                shown = "<redacted>" if value else "None"
                if origin == "env":
                    lines.append(f"{name}: env:{ENV_NAMES[name]}={shown}")
                else:
                    lines.append(f"{name}: {origin}:{shown}")
            elif origin == "env":
                lines.append(f"{name}: env:{ENV_NAMES[name]}={value}")
            else:
                lines.append(f"{name}: {origin}:{value}")
        return "\n".join(lines)
