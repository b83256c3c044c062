import pytest

from gemini_web.core.types import GroundingSource, PlanTier
from gemini_web.research import GROUNDED_RESEARCH_INSTRUCTION, ResearchOrchestrator
from gemini_web.research.orchestrator import clamp_steps
from tests.adapters import ScriptedAdapter
from tests.fixtures.api_responses import grounded_response, plan_response

pytestmark = pytest.mark.unit

QUESTION = "foo bar"


class _ResearchScript:
    """Answers planning, sub-query and synthesis prompts differently."""

    def __init__(
        self,
        plan=None,
        sub_answers=None,
        synthesis=None,
        failing_sub_queries=(),
    ):
        self.plan = plan if plan is not None else plan_response(["q one", "q two"])
        self.sub_answers = sub_answers or {}
        self.synthesis = (
            synthesis if synthesis is not None else grounded_response("final answer")
        )
        self.failing = set(failing_sub_queries)

    def __call__(self, model_name, prompt, api_config):
        if api_config.get("response_mime_type") == "application/json":
            return self.plan
        if prompt.startswith("Research focus:"):
            sub_query = prompt.splitlines()[1].removeprefix("Sub-query: ")
            if sub_query in self.failing:
                return ValueError(f"{sub_query} exploded")
            return self.sub_answers.get(
                sub_query, grounded_response(f"notes on {sub_query}")
            )
        return self.synthesis


def _orchestrator(make_client, script, **overrides):
    adapter = ScriptedAdapter(responder=script)
    return ResearchOrchestrator(make_client(adapter, **overrides)), adapter


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", ["parallel", "sequential"])
async def test_plans_executes_and_synthesizes(make_client, mode):
    orchestrator, adapter = _orchestrator(make_client, _ResearchScript())

    result = await orchestrator.research(QUESTION, max_steps=2, mode=mode)

    assert result.text == "final answer"
    assert result.queries == ("q one", "q two")
    assert result.plan_tier is PlanTier.STRICT
    assert result.notes == "focus"
    assert [f.text for f in result.findings] == ["notes on q one", "notes on q two"]
    # plan + two sub-queries + synthesis
    assert len(adapter.calls) == 4
    assert all(
        c.api_config["system_instruction"] == GROUNDED_RESEARCH_INSTRUCTION
        for c in adapter.calls
    )
    assert all(c.api_config["use_search"] is True for c in adapter.calls)


@pytest.mark.asyncio
async def test_sequential_mode_runs_sub_queries_in_plan_order(make_client):
    script = _ResearchScript(plan=plan_response(["first", "second", "third"]))
    orchestrator, adapter = _orchestrator(make_client, script)

    await orchestrator.research(QUESTION, max_steps=3, mode="sequential")

    sub_prompts = [c.prompt for c in adapter.calls[1:-1]]
    assert [p.splitlines()[1] for p in sub_prompts] == [
        "Sub-query: first",
        "Sub-query: second",
        "Sub-query: third",
    ]


@pytest.mark.asyncio
async def test_sub_query_and_synthesis_prompts(make_client):
    orchestrator, adapter = _orchestrator(make_client, _ResearchScript())
    await orchestrator.research(QUESTION, max_steps=2)

    sub_prompt = adapter.calls[1].prompt
    assert sub_prompt.startswith(f"Research focus: {QUESTION}\nSub-query: ")
    assert "highlight relevant official docs and version info" in sub_prompt

    synthesis_prompt = adapter.calls[-1].prompt
    assert synthesis_prompt.startswith(
        f'Synthesize a concise answer for:\n"{QUESTION}"'
    )
    assert "Do NOT fabricate sources." in synthesis_prompt
    assert "Q1: q one\n---\nnotes on q one" in synthesis_prompt
    assert "Q2: q two\n---\nnotes on q two" in synthesis_prompt


@pytest.mark.asyncio
async def test_max_steps_truncates_and_is_clamped(make_client):
    script = _ResearchScript(plan=plan_response([f"q{i}" for i in range(6)]))
    orchestrator, _ = _orchestrator(make_client, script)

    assert (await orchestrator.research(QUESTION, max_steps=2)).queries == (
        "q0",
        "q1",
    )
    assert len((await orchestrator.research(QUESTION, max_steps=0)).queries) == 1
    assert len((await orchestrator.research(QUESTION, max_steps=50)).queries) == 6


def test_clamp_steps():
    assert [clamp_steps(n) for n in (-1, 0, 1, 3, 6, 7)] == [1, 1, 1, 3, 6, 6]


@pytest.mark.asyncio
async def test_unparsable_plan_falls_back_to_question(make_client):
    script = _ResearchScript(plan=grounded_response("I would search widely."))
    orchestrator, adapter = _orchestrator(make_client, script)

    result = await orchestrator.research(QUESTION)

    assert result.queries == (QUESTION,)
    assert result.plan_tier is PlanTier.DEFAULT
    assert len(adapter.calls) == 3


@pytest.mark.asyncio
async def test_failed_planning_call_falls_back_to_question(make_client):
    script = _ResearchScript(plan=ValueError("planner down"))
    orchestrator, _ = _orchestrator(make_client, script)

    result = await orchestrator.research(QUESTION)

    assert result.queries == (QUESTION,)
    assert result.text == "final answer"


@pytest.mark.asyncio
async def test_extracted_plan_tier_is_reported(make_client):
    script = _ResearchScript(
        plan=grounded_response('Plan: ["alpha docs", "beta changelog"] done')
    )
    orchestrator, _ = _orchestrator(make_client, script)
    result = await orchestrator.research(QUESTION)
    assert result.plan_tier is PlanTier.EXTRACTED
    assert result.queries == ("alpha docs", "beta changelog")


@pytest.mark.asyncio
async def test_sources_are_deduplicated_across_sub_queries(make_client):
    script = _ResearchScript(
        sub_answers={
            "q one": grounded_response(
                "a", [("https://example.com", "First title"), ("https://a.dev", "A")]
            ),
            "q two": grounded_response(
                "b", [("https://example.com", "Second title"), ("https://b.dev", "B")]
            ),
        }
    )
    orchestrator, _ = _orchestrator(make_client, script)

    result = await orchestrator.research(QUESTION, max_steps=2)

    assert result.sources == (
        GroundingSource("https://example.com", "First title"),
        GroundingSource("https://a.dev", "A"),
        GroundingSource("https://b.dev", "B"),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", ["parallel", "sequential"])
async def test_failed_sub_query_becomes_placeholder(make_client, mode):
    script = _ResearchScript(
        sub_answers={
            "q two": grounded_response("b", [("https://b.dev", "B")]),
        },
        failing_sub_queries={"q one"},
    )
    orchestrator, adapter = _orchestrator(make_client, script)

    result = await orchestrator.research(QUESTION, max_steps=2, mode=mode)

    failed, ok = result.findings
    assert failed.failed is True
    assert failed.text == "[Error: q one exploded]"
    assert failed.sources == ()
    assert ok.failed is False
    assert result.sources == (GroundingSource("https://b.dev", "B"),)
    assert "Q1: q one\n---\n[Error: q one exploded]" in adapter.calls[-1].prompt
    assert result.text == "final answer"


@pytest.mark.asyncio
async def test_empty_synthesis_joins_findings(make_client):
    script = _ResearchScript(synthesis=grounded_response(""))
    orchestrator, _ = _orchestrator(make_client, script)

    result = await orchestrator.research(QUESTION, max_steps=2)

    assert result.text == "notes on q one\n\nnotes on q two"


@pytest.mark.asyncio
async def test_failed_synthesis_propagates(make_client):
    script = _ResearchScript(synthesis=ValueError("synthesis failed"))
    orchestrator, _ = _orchestrator(make_client, script)

    with pytest.raises(ValueError, match="synthesis failed"):
        await orchestrator.research(QUESTION)


@pytest.mark.asyncio
async def test_call_options_flow_to_every_call(make_client):
    orchestrator, adapter = _orchestrator(make_client, _ResearchScript())

    await orchestrator.research(
        QUESTION, timeout_ms=2222, model="research-model", max_output_tokens=256
    )

    assert {c.model_name for c in adapter.calls} == {"research-model"}
    assert {c.api_config["timeout_ms"] for c in adapter.calls} == {2222}
    assert {c.api_config["max_output_tokens"] for c in adapter.calls} == {256}


@pytest.mark.asyncio
async def test_invalid_arguments_are_rejected(make_client):
    orchestrator, adapter = _orchestrator(make_client, _ResearchScript())
    with pytest.raises(ValueError):
        await orchestrator.research("   ")
    with pytest.raises(ValueError, match="mode"):
        await orchestrator.research(
            QUESTION, mode="eventually"  # type: ignore[arg-type]
        )
    assert adapter.calls == []


@pytest.mark.asyncio
async def test_plan_call_requests_json_output(make_client):
    orchestrator, adapter = _orchestrator(make_client, _ResearchScript())
    await orchestrator.research(QUESTION)
    plan_call = adapter.calls[0]
    assert plan_call.api_config["response_mime_type"] == "application/json"
    assert f'"{QUESTION}"' in plan_call.prompt
    assert '"queries"' in plan_call.prompt
