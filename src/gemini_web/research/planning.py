"""Three-tier parsing of a model-produced research plan.

1. Strict: the whole text is a JSON object ``{"queries": [...], "notes": ...}``.
2. Extracted: the first quoted list ``["a", "b"]`` found anywhere in the text.
3. Default: a single-query plan holding the original question verbatim.

Parsing never raises; the returned plan records which tier produced it.
"""

from collections.abc import Iterable
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ..constants import MAX_RESEARCH_STEPS
from ..core.types import PlanTier, ResearchPlan

log = logging.getLogger(__name__)

_QUOTED_LIST = re.compile(r'\[\s*"(.*?)"\s*\]', re.DOTALL)
_ITEM_SEPARATOR = re.compile(r'"\s*,\s*"')


class _PlanPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    queries: list[Any]
    notes: Any = None


def _clean(queries: Iterable[Any]) -> tuple[str, ...]:
    """Keep non-blank strings; numbers are kept as text, anything else dropped."""
    kept: list[str] = []
    for item in queries:
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            item = str(item)
        if isinstance(item, str) and item.strip():
            kept.append(item.strip())
    return tuple(kept)


def parse_strict(text: str) -> ResearchPlan | None:
    try:
        payload = _PlanPayload.model_validate_json(text)
    except ValidationError:
        return None
    queries = _clean(payload.queries)
    if not queries:
        return None
    notes = payload.notes.strip() if isinstance(payload.notes, str) else None
    return ResearchPlan(queries=queries, notes=notes or None, tier=PlanTier.STRICT)


def parse_extracted(text: str) -> ResearchPlan | None:
    match = _QUOTED_LIST.search(text)
    if match is None:
        return None
    queries = _clean(_ITEM_SEPARATOR.split(match.group(1)))
    if not queries:
        return None
    return ResearchPlan(queries=queries, tier=PlanTier.EXTRACTED)


def default_plan(question: str) -> ResearchPlan:
    return ResearchPlan(queries=(question,), tier=PlanTier.DEFAULT)


def parse_plan(text: str | None, question: str) -> ResearchPlan:
    """Parse ``text`` into a plan of at most six queries, falling back tier by tier."""
    raw = text or ""
    plan = parse_strict(raw) or parse_extracted(raw)
    if plan is None:
        log.info("Plan output was not usable; researching the question directly")
        plan = default_plan(question)
    elif plan.tier is PlanTier.EXTRACTED:
        log.debug("Plan recovered from free text (%d queries)", len(plan.queries))
    return plan.truncated(MAX_RESEARCH_STEPS)
