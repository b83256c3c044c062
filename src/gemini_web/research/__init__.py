"""Multi-step grounded research on top of `ResilientClient`."""

from __future__ import annotations

__all__ = [
    "GROUNDED_RESEARCH_INSTRUCTION",
    "ResearchOrchestrator",
    "clamp_steps",
    "parse_plan",
]

from .orchestrator import ResearchOrchestrator, clamp_steps
from .planning import parse_plan
from .prompts import GROUNDED_RESEARCH_INSTRUCTION
