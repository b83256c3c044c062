"""Fixed instruction text and prompt builders for grounded research."""

from collections.abc import Sequence

from ..core.types import ResearchFinding

GROUNDED_RESEARCH_INSTRUCTION = "\n".join(
    [
        "You are a grounded web research assistant.",
        "Always use Google Search grounding; cite trustworthy primary sources.",
        "When the user is asking about an API/library/framework:",
        "- Prefer OFFICIAL documentation, standards, and vendor references.",
        "- State version numbers when available.",
        "- Provide minimal, correct examples (no pseudocode) only if helpful.",
        "When not about APIs, still provide concise, sourced answers.",
        "Return claims that require evidence with citations.",
    ]
)

_PLAN_TEMPLATE = """You will create a brief research plan for this question:

"{question}"

Return STRICT JSON with:
{{
  "queries": [ "query1", "query2", ... up to 6 ],
  "notes": "one sentence on focus"
}}

Queries should prefer authoritative sources (official docs, standards, \
vendors, primary reporting)."""


def build_plan_prompt(question: str) -> str:
    return _PLAN_TEMPLATE.format(question=question)


def build_sub_query_prompt(question: str, sub_query: str) -> str:
    return (
        f"Research focus: {question}\n"
        f"Sub-query: {sub_query}\n"
        "Synthesize key points with citations. If API/library related, "
        "highlight relevant official docs and version info."
    )


def build_synthesis_prompt(question: str, findings: Sequence[ResearchFinding]) -> str:
    """Label each finding ``Q1``, ``Q2``, ... in plan order."""
    blocks = "\n\n".join(
        f"Q{i}: {finding.query}\n---\n{finding.text}"
        for i, finding in enumerate(findings, start=1)
    )
    return (
        f'Synthesize a concise answer for:\n"{question}"\n\n'
        "Use these findings (markdown bullets allowed). "
        "Do NOT fabricate sources.\n\n"
        f"{blocks}\n"
    )
