import pytest

from gemini_web import create_client, grounded_call, research_call, web_search
from gemini_web.config import FrozenConfig
from gemini_web.core.types import CallResult, ResearchResult
from gemini_web.exceptions import ConfigurationError, MissingKeyError
from gemini_web.research import GROUNDED_RESEARCH_INSTRUCTION
from tests.adapters import ScriptedAdapter
from tests.fixtures.api_responses import (
    SAMPLE_RESPONSES,
    grounded_response,
    plan_response,
)

pytestmark = pytest.mark.unit


def _research_responder(model_name, prompt, api_config):
    if api_config.get("response_mime_type") == "application/json":
        return plan_response(["first angle", "second angle"])
    if prompt.startswith("Synthesize a concise answer"):
        return grounded_response("combined answer")
    return grounded_response("finding", sources=[("https://a.example", "A")])


def test_create_client_resolves_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    monkeypatch.setenv("MODEL", "env-model")

    client = create_client(adapter=ScriptedAdapter())

    assert client.config.api_key == "env-key"
    assert client.config.model == "env-model"


def test_create_client_applies_overrides_to_given_config():
    base = FrozenConfig(api_key="k", model="a")
    client = create_client(base, adapter=ScriptedAdapter(), max_retries=1)

    assert client.config.model == "a"
    assert client.config.max_retries == 1
    assert base.max_retries != 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"timeout_ms": -1},
        {"max_retries": -2},
        {"jitter_factor": 3.0},
        {"base_retry_delay_ms": 5000, "max_retry_delay_ms": 10},
    ],
)
def test_create_client_validates_overrides_to_given_config(overrides):
    with pytest.raises(ConfigurationError):
        create_client(FrozenConfig(api_key="k"), adapter=ScriptedAdapter(), **overrides)


def test_create_client_coerces_overrides_to_given_config():
    client = create_client(
        FrozenConfig(api_key="k"),
        adapter=ScriptedAdapter(),
        requests_per_minute=0,
        not_a_field=1,
    )
    assert client.config.requests_per_minute == 1


def test_create_client_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("MODEL", "env-model")
    client = create_client(adapter=ScriptedAdapter(), model="code-model")
    assert client.config.model == "code-model"


def test_create_client_without_key_or_adapter_fails():
    with pytest.raises(MissingKeyError):
        create_client()


@pytest.mark.asyncio
async def test_grounded_call_uses_research_instruction():
    adapter = ScriptedAdapter([SAMPLE_RESPONSES["simple_answer"]])
    client = create_client(FrozenConfig(api_key="k"), adapter=adapter)

    result = await grounded_call(client, "What is HTTP/3?", max_output_tokens=64)

    assert isinstance(result, CallResult)
    (call,) = adapter.calls
    assert call.prompt == "What is HTTP/3?"
    assert call.api_config["system_instruction"] == GROUNDED_RESEARCH_INSTRUCTION
    assert call.api_config["use_search"] is True
    assert call.api_config["max_output_tokens"] == 64


@pytest.mark.asyncio
async def test_research_call_runs_full_workflow():
    adapter = ScriptedAdapter(responder=_research_responder)
    client = create_client(FrozenConfig(api_key="k"), adapter=adapter)

    result = await research_call(client, "Compare QUIC and TCP", max_steps=2)

    assert isinstance(result, ResearchResult)
    assert result.queries == ("first angle", "second angle")
    assert len(adapter.calls) == 4


@pytest.mark.asyncio
async def test_web_search_dispatches_on_mode():
    adapter = ScriptedAdapter(responder=_research_responder)
    client = create_client(FrozenConfig(api_key="k"), adapter=adapter)

    normal = await web_search(client, "Compare QUIC and TCP")
    assert isinstance(normal, CallResult)
    assert len(adapter.calls) == 1

    research = await web_search(
        client, "Compare QUIC and TCP", mode="research", concurrency="sequential"
    )
    assert isinstance(research, ResearchResult)


@pytest.mark.asyncio
async def test_web_search_rejects_unknown_mode():
    client = create_client(FrozenConfig(api_key="k"), adapter=ScriptedAdapter())
    with pytest.raises(ValueError, match="mode"):
        await web_search(client, "q", mode="deep")  # type: ignore[arg-type]
