"""Resilient grounded web search and research on the Gemini API."""

import importlib.metadata
import logging

from gemini_web.batch import BatchExecutor
from gemini_web.client import RateLimiterConfig, ResilientClient, RetryPolicy
from gemini_web.config import FrozenConfig, ResolvedConfig, resolve_config
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
)
from gemini_web.exceptions import (
    ConcurrencyLimitError,
    ConfigurationError,
    GeminiWebError,
    MissingKeyError,
    RateLimitError,
    RemoteAPIError,
    RequestTimeoutError,
)
from gemini_web.frontdoor import create_client, grounded_call, research_call, web_search
from gemini_web.research import ResearchOrchestrator
from gemini_web.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("gemini-web")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Front door
    "create_client",
    "grounded_call",
    "research_call",
    "web_search",
    # Components
    "ResilientClient",
    "BatchExecutor",
    "ResearchOrchestrator",
    # Configuration
    "FrozenConfig",
    "ResolvedConfig",
    "resolve_config",
    "RateLimiterConfig",
    "RetryPolicy",
    # Data types
    "BatchOutcome",
    "CallRequest",
    "CallResult",
    "GroundingSource",
    "HealthMetrics",
    "PlanTier",
    "ResearchFinding",
    "ResearchPlan",
    "ResearchResult",
    # Exceptions
    "GeminiWebError",
    "ConfigurationError",
    "MissingKeyError",
    "RemoteAPIError",
    "RateLimitError",
    "RequestTimeoutError",
    "ConcurrencyLimitError",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
]
