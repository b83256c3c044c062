"""Core data types shared across the client, batch and research layers."""

from gemini_web.core.types import (
    BatchOutcome,
    CallRequest,
    CallResult,
    GroundingSource,
    HealthMetrics,
    PlanTier,
    ResearchFinding,
    ResearchPlan,
    ResearchResult,
    dedupe_sources,
)

__all__ = [
    "BatchOutcome",
    "CallRequest",
    "CallResult",
    "GroundingSource",
    "HealthMetrics",
    "PlanTier",
    "ResearchFinding",
    "ResearchPlan",
    "ResearchResult",
    "dedupe_sources",
]
