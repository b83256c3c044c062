"""Core data types that flow between the client, batch and research layers.

Requests and results are immutable. Each call owns its `CallRequest`; results
are produced once per successful call and never mutated afterwards.
"""

from __future__ import annotations

import dataclasses
import enum
import typing

T = typing.TypeVar("T")


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


@dataclasses.dataclass(frozen=True, slots=True)
class CallRequest:
    """A single generation request.

    ``model`` may be left empty to use the client's default model, and
    ``timeout_ms`` left unset to use the client's default timeout.
    """

    prompt: str
    model: str = ""
    max_output_tokens: int | None = None
    system_instruction: str | None = None
    response_mime_type: str | None = None
    use_search: bool = True
    timeout_ms: int | None = None

    def __post_init__(self) -> None:
        _require(
            condition=isinstance(self.prompt, str),
            message="must be str",
            field_name="prompt",
            exc=TypeError,
        )
        _require(
            condition=self.max_output_tokens is None or self.max_output_tokens > 0,
            message="must be > 0 when provided",
            field_name="max_output_tokens",
        )
        _require(
            condition=self.timeout_ms is None or self.timeout_ms > 0,
            message="must be > 0 when provided",
            field_name="timeout_ms",
        )

    def api_config(self) -> dict[str, object]:
        """Provider-neutral generation options for the adapter."""
        config: dict[str, object] = {"use_search": self.use_search}
        if self.system_instruction:
            config["system_instruction"] = self.system_instruction
        if self.response_mime_type:
            config["response_mime_type"] = self.response_mime_type
        if self.max_output_tokens:
            config["max_output_tokens"] = self.max_output_tokens
        return config


@dataclasses.dataclass(frozen=True, slots=True)
class GroundingSource:
    """A web source the model cited while grounding an answer."""

    uri: str
    title: str = ""


def dedupe_sources(
    sources: typing.Iterable[GroundingSource],
) -> tuple[GroundingSource, ...]:
    """Drop repeated URIs, keeping the first occurrence and first-seen order."""
    seen: dict[str, GroundingSource] = {}
    for source in sources:
        if source.uri and source.uri not in seen:
            seen[source.uri] = source
    return tuple(seen.values())


@dataclasses.dataclass(frozen=True, slots=True)
class CallResult:
    """Normalized result of one successful generation call."""

    text: str
    sources: tuple[GroundingSource, ...] = ()
    queries: tuple[str, ...] = ()
    raw: typing.Any = dataclasses.field(default=None, repr=False, compare=False)


@dataclasses.dataclass(frozen=True, slots=True)
class BatchOutcome(typing.Generic[T]):
    """Per-item result of a batch run, aligned to the input ``index``."""

    index: int
    success: bool
    data: T | None = None
    error: Exception | None = None

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None

    @property
    def error_kind(self) -> str | None:
        return type(self.error).__name__ if self.error is not None else None


@dataclasses.dataclass(frozen=True, slots=True)
class HealthMetrics:
    """Read-only snapshot of a client's health counters."""

    healthy: bool
    uptime_seconds: int
    requests_total: int
    requests_pending: int
    errors_total: int
    rate_limit_tokens: float
    last_error: str | None = None
    last_error_kind: str | None = None
    last_error_timestamp: float | None = None


class PlanTier(str, enum.Enum):
    """Which parsing strategy produced a research plan."""

    STRICT = "strict"  # Well-formed structured output
    EXTRACTED = "extracted"  # Quoted list recovered from free text
    DEFAULT = "default"  # Single-item plan holding the original question


@dataclasses.dataclass(frozen=True, slots=True)
class ResearchPlan:
    """Ordered sub-queries derived from an original question."""

    queries: tuple[str, ...]
    notes: str | None = None
    tier: PlanTier = PlanTier.STRICT

    def __post_init__(self) -> None:
        _require(
            condition=len(self.queries) >= 1,
            message="must contain at least one query",
            field_name="queries",
        )

    def truncated(self, max_steps: int) -> ResearchPlan:
        """Keep the first ``max(1, max_steps)`` queries, preserving order."""
        return dataclasses.replace(self, queries=self.queries[: max(1, max_steps)])


@dataclasses.dataclass(frozen=True, slots=True)
class ResearchFinding:
    """What one executed sub-query produced (or why it failed)."""

    query: str
    text: str
    sources: tuple[GroundingSource, ...] = ()
    error: Exception | None = dataclasses.field(default=None, compare=False)

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclasses.dataclass(frozen=True, slots=True)
class ResearchResult:
    """Final output of a research call."""

    text: str
    sources: tuple[GroundingSource, ...]
    queries: tuple[str, ...]
    notes: str | None = None
    plan_tier: PlanTier = PlanTier.STRICT
    findings: tuple[ResearchFinding, ...] = ()
