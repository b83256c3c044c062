"""Scenario-first convenience helpers.

These functions are a thin entry point over `ResilientClient` and
`ResearchOrchestrator`. They hold no state of their own: build one client with
`create_client()` at startup and pass it to every call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from gemini_web.client.resilient import ResilientClient
from gemini_web.config import FrozenConfig, apply_overrides, resolve_config
from gemini_web.constants import DEFAULT_RESEARCH_STEPS
from gemini_web.core.types import CallRequest, CallResult, ResearchResult
from gemini_web.research.orchestrator import ExecutionMode, ResearchOrchestrator
from gemini_web.research.prompts import GROUNDED_RESEARCH_INSTRUCTION

if TYPE_CHECKING:  # pragma: no cover - typing only
    from gemini_web.adapters.base import GenerationAdapter
    from gemini_web.telemetry import TelemetryContextProtocol

SearchMode = Literal["normal", "research"]


def create_client(
    config: FrozenConfig | None = None,
    *,
    adapter: GenerationAdapter | None = None,
    telemetry: TelemetryContextProtocol | None = None,
    **overrides: Any,
) -> ResilientClient:
    """Build the client instance shared by all call sites.

    Args:
        config: Frozen configuration. Resolved from the environment if omitted.
        adapter: Provider adapter; the google-genai adapter by default.
        telemetry: Optional telemetry context.
        **overrides: Field overrides, e.g. ``model="gemini-2.5-pro"``. They
            are validated like any other configuration value.

    Example:
        ```python
        client = create_client(max_retries=2)
        result = await grounded_call(client, "What changed in Python 3.13?")
        ```
    """
    if config is None:
        final_cfg = resolve_config(overrides or None)
    elif overrides:
        final_cfg = apply_overrides(config, overrides)
    else:
        final_cfg = config
    return ResilientClient(final_cfg, adapter=adapter, telemetry=telemetry)


async def grounded_call(
    client: ResilientClient,
    query: str,
    *,
    model: str | None = None,
    max_output_tokens: int | None = None,
    timeout_ms: int | None = None,
) -> CallResult:
    """Single-pass grounded search with the research assistant instruction."""
    request = CallRequest(
        prompt=query,
        model=model or "",
        max_output_tokens=max_output_tokens,
        system_instruction=GROUNDED_RESEARCH_INSTRUCTION,
        use_search=True,
        timeout_ms=timeout_ms,
    )
    return await client.generate_content(request)


async def research_call(
    client: ResilientClient,
    question: str,
    *,
    max_steps: int = DEFAULT_RESEARCH_STEPS,
    mode: ExecutionMode = "parallel",
    timeout_ms: int | None = None,
    model: str | None = None,
    max_output_tokens: int | None = None,
) -> ResearchResult:
    """Plan, execute and synthesize a multi-step grounded answer.

    See Also:
        `ResearchOrchestrator.research` for the phase semantics.
    """
    return await ResearchOrchestrator(client).research(
        question,
        max_steps=max_steps,
        mode=mode,
        timeout_ms=timeout_ms,
        model=model,
        max_output_tokens=max_output_tokens,
    )


async def web_search(
    client: ResilientClient,
    q: str,
    *,
    mode: SearchMode = "normal",
    max_steps: int = DEFAULT_RESEARCH_STEPS,
    concurrency: ExecutionMode = "parallel",
    model: str | None = None,
    max_output_tokens: int | None = None,
    timeout_ms: int | None = None,
) -> CallResult | ResearchResult:
    """Grounded search: ``mode="normal"`` is one pass, ``"research"`` is multi-step.

    ``max_steps`` and ``concurrency`` apply to research mode only.
    """
    if mode == "research":
        return await research_call(
            client,
            q,
            max_steps=max_steps,
            mode=concurrency,
            timeout_ms=timeout_ms,
            model=model,
            max_output_tokens=max_output_tokens,
        )
    if mode != "normal":
        raise ValueError(f"mode must be 'normal' or 'research', got {mode!r}")
    return await grounded_call(
        client,
        q,
        model=model,
        max_output_tokens=max_output_tokens,
        timeout_ms=timeout_ms,
    )
