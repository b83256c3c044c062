import json

import pytest

from gemini_web.core.types import PlanTier
from gemini_web.research.planning import (
    default_plan,
    parse_extracted,
    parse_plan,
    parse_strict,
)

pytestmark = pytest.mark.unit

QUESTION = "How do I paginate the Example API?"


def test_strict_tier_parses_queries_and_notes():
    text = json.dumps({"queries": ["a docs", " b guide "], "notes": " official first "})
    plan = parse_plan(text, QUESTION)
    assert plan.tier is PlanTier.STRICT
    assert plan.queries == ("a docs", "b guide")
    assert plan.notes == "official first"


def test_strict_tier_ignores_unknown_fields_and_missing_notes():
    plan = parse_strict(json.dumps({"queries": ["x"], "extra": 1}))
    assert plan is not None
    assert plan.notes is None


def test_strict_tier_rejects_non_json_and_wrong_shapes():
    assert parse_strict("not json") is None
    assert parse_strict(json.dumps({"notes": "no queries"})) is None
    assert parse_strict(json.dumps({"queries": "a string"})) is None
    assert parse_strict(json.dumps({"queries": ["", "  "]})) is None
    assert parse_strict(json.dumps({"queries": [None, {"q": 1}, True]})) is None


def test_strict_tier_keeps_usable_items_from_mixed_lists():
    text = json.dumps({"queries": ["a", 5, None, " ", ["nested"], "b"], "notes": "n"})
    plan = parse_plan(text, QUESTION)
    assert plan.tier is PlanTier.STRICT
    assert plan.queries == ("a", "5", "b")
    assert plan.notes == "n"


def test_strict_tier_tolerates_non_string_notes():
    plan = parse_strict(json.dumps({"queries": ["a"], "notes": 3}))
    assert plan is not None
    assert plan.notes is None


def test_extracted_tier_recovers_quoted_list_from_prose():
    text = 'Sure!\n```json\n{"queries": ["alpha docs", "beta changelog"]}\n```'
    plan = parse_plan(text, QUESTION)
    assert plan.tier is PlanTier.EXTRACTED
    assert plan.queries == ("alpha docs", "beta changelog")
    assert plan.notes is None


def test_extracted_tier_handles_multiline_lists():
    plan = parse_extracted('queries: [\n  "one",\n  "two" ,  "three"\n]')
    assert plan is not None
    assert plan.queries == ("one", "two", "three")


def test_default_tier_holds_question_verbatim():
    for text in ("no plan here", "", None, json.dumps({"queries": []}), "[]"):
        plan = parse_plan(text, QUESTION)
        assert plan.tier is PlanTier.DEFAULT
        assert plan.queries == (QUESTION,)


def test_plans_are_capped_at_six_queries():
    text = json.dumps({"queries": [f"q{i}" for i in range(10)]})
    assert len(parse_plan(text, QUESTION).queries) == 6


def test_truncation_keeps_order_and_at_least_one():
    plan = parse_plan(json.dumps({"queries": ["a", "b", "c"]}), QUESTION)
    assert plan.truncated(2).queries == ("a", "b")
    assert plan.truncated(0).queries == ("a",)


def test_default_plan_helper():
    assert default_plan("q").queries == ("q",)
