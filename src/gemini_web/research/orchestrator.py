"""Multi-step grounded research: plan, execute sub-queries, synthesize.

The phases are strictly ordered. Planning completes before any sub-query
starts, and every sub-query (or its error placeholder) is in hand before the
synthesis call is made.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING, Literal

from ..constants import (
    DEFAULT_RESEARCH_STEPS,
    MAX_RESEARCH_STEPS,
    PLAN_RESPONSE_MIME_TYPE,
)
from ..core.types import (
    CallRequest,
    ResearchFinding,
    ResearchPlan,
    ResearchResult,
    dedupe_sources,
)
from .planning import default_plan, parse_plan
from .prompts import (
    GROUNDED_RESEARCH_INSTRUCTION,
    build_plan_prompt,
    build_sub_query_prompt,
    build_synthesis_prompt,
)

if TYPE_CHECKING:
    from ..client.resilient import ResilientClient

log = logging.getLogger(__name__)

ExecutionMode = Literal["parallel", "sequential"]
_MODES: tuple[str, ...] = ("parallel", "sequential")


def clamp_steps(max_steps: int) -> int:
    """Bound a requested step count to the supported 1..6 range."""
    return min(MAX_RESEARCH_STEPS, max(1, int(max_steps)))


class ResearchOrchestrator:
    """Runs research workflows through a single `ResilientClient`."""

    def __init__(
        self,
        client: ResilientClient,
        *,
        system_instruction: str = GROUNDED_RESEARCH_INSTRUCTION,
    ):
        self._client = client
        self._system_instruction = system_instruction

    async def research(
        self,
        question: str,
        *,
        max_steps: int = DEFAULT_RESEARCH_STEPS,
        mode: ExecutionMode = "parallel",
        timeout_ms: int | None = None,
        model: str | None = None,
        max_output_tokens: int | None = None,
    ) -> ResearchResult:
        """Answer ``question`` with up to ``max_steps`` grounded sub-queries.

        Args:
            question: The original question. Must not be blank.
            max_steps: Number of planned sub-queries to run, clamped to 1..6.
            mode: ``"parallel"`` issues sub-queries concurrently;
                ``"sequential"`` runs them one at a time in plan order.
            timeout_ms: Per-call timeout for every call in the workflow.
            model: Model override; the client's default when omitted.
            max_output_tokens: Output budget for every call in the workflow.

        Returns:
            The synthesized answer with deduplicated sources and the executed
            queries. A failing sub-query appears as an ``[Error: ...]`` finding
            instead of aborting the workflow.

        Raises:
            ValueError: ``question`` is blank or ``mode`` is unknown.
            Exception: The synthesis call failed terminally.
        """
        if not question or not question.strip():
            raise ValueError("question must be a non-empty string")
        if mode not in _MODES:
            raise ValueError(f"mode must be one of {_MODES}, got {mode!r}")

        steps = clamp_steps(max_steps)
        tele = self._client.tele

        with tele("research.plan"):
            plan = await self._plan(question, model, timeout_ms, max_output_tokens)
        plan = plan.truncated(steps)
        log.debug(
            "Research plan (%s): %d sub-queries", plan.tier.value, len(plan.queries)
        )

        with tele("research.execute", mode=mode, steps=len(plan.queries)):
            if mode == "parallel":
                findings = await asyncio.gather(
                    *(
                        self._run_sub_query(
                            question, q, model, timeout_ms, max_output_tokens
                        )
                        for q in plan.queries
                    )
                )
            else:
                findings = []
                for q in plan.queries:
                    findings.append(
                        await self._run_sub_query(
                            question, q, model, timeout_ms, max_output_tokens
                        )
                    )

        with tele("research.synthesize"):
            text = await self._synthesize(
                question, findings, model, timeout_ms, max_output_tokens
            )

        return ResearchResult(
            text=text,
            sources=dedupe_sources(s for f in findings for s in f.sources),
            queries=plan.queries,
            notes=plan.notes,
            plan_tier=plan.tier,
            findings=tuple(findings),
        )

    def _request(
        self,
        prompt: str,
        model: str | None,
        timeout_ms: int | None,
        max_output_tokens: int | None,
        *,
        response_mime_type: str | None = None,
    ) -> CallRequest:
        return CallRequest(
            prompt=prompt,
            model=model or "",
            max_output_tokens=max_output_tokens,
            system_instruction=self._system_instruction,
            response_mime_type=response_mime_type,
            use_search=True,
            timeout_ms=timeout_ms,
        )

    async def _plan(
        self,
        question: str,
        model: str | None,
        timeout_ms: int | None,
        max_output_tokens: int | None,
    ) -> ResearchPlan:
        request = self._request(
            build_plan_prompt(question),
            model,
            timeout_ms,
            max_output_tokens,
            response_mime_type=PLAN_RESPONSE_MIME_TYPE,
        )
        try:
            result = await self._client.generate_content(request)
        except Exception as e:
            log.warning(
                "Planning call failed (%s); researching the question directly", e
            )
            return default_plan(question)
        return parse_plan(result.text, question)

    async def _run_sub_query(
        self,
        question: str,
        sub_query: str,
        model: str | None,
        timeout_ms: int | None,
        max_output_tokens: int | None,
    ) -> ResearchFinding:
        request = self._request(
            build_sub_query_prompt(question, sub_query),
            model,
            timeout_ms,
            max_output_tokens,
        )
        try:
            result = await self._client.generate_content(request)
        except Exception as e:
            log.warning("Sub-query %r failed: %s", sub_query, e)
            return ResearchFinding(query=sub_query, text=f"[Error: {e}]", error=e)
        return ResearchFinding(
            query=sub_query, text=result.text, sources=result.sources
        )

    async def _synthesize(
        self,
        question: str,
        findings: Sequence[ResearchFinding],
        model: str | None,
        timeout_ms: int | None,
        max_output_tokens: int | None,
    ) -> str:
        request = self._request(
            build_synthesis_prompt(question, findings),
            model,
            timeout_ms,
            max_output_tokens,
        )
        result = await self._client.generate_content(request)
        if result.text:
            return result.text
        log.info("Synthesis returned no text; joining sub-query findings")
        return "\n\n".join(f.text for f in findings)
