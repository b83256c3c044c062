"""
Project-wide constants for the Gemini web client
"""

# ==============================================================================
# Models
# ==============================================================================

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_FALLBACK_MODEL = "gemini-2.5-flash"

# ==============================================================================
# API and Network Configuration
# ==============================================================================

DEFAULT_TIMEOUT_MS = 60_000
HEALTH_CHECK_TIMEOUT_MS = 10_000
HEALTH_CHECK_PROMPT = "ping"
HEALTH_CHECK_MAX_OUTPUT_TOKENS = 5

# Health stays degraded until strictly more than this has passed since the last error
HEALTH_ERROR_WINDOW_SECONDS = 60.0

# ==============================================================================
# Rate Limiting
# ==============================================================================

DEFAULT_REQUESTS_PER_MINUTE = 60
DEFAULT_MAX_BURST = 10
MS_PER_MINUTE = 60_000

# ==============================================================================
# Retry Configuration
# ==============================================================================

DEFAULT_MAX_RETRIES = 5
DEFAULT_BASE_RETRY_DELAY_MS = 1_000
DEFAULT_MAX_RETRY_DELAY_MS = 60_000
DEFAULT_JITTER_FACTOR = 0.1

# Retry budget used for the single fallback-model pass
FALLBACK_MAX_RETRIES = 2

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503})

# Lower-cased substrings identifying low-level network faults
NETWORK_ERROR_PATTERNS = (
    "econnreset",
    "etimedout",
    "enotfound",
    "econnrefused",
    "socket hang up",
    "network error",
    "fetch failed",
    "connection reset",
    "connection refused",
    "name or service not known",
    "temporary failure in name resolution",
)

# ==============================================================================
# Research Configuration
# ==============================================================================

MAX_RESEARCH_STEPS = 6
DEFAULT_RESEARCH_STEPS = 3
PLAN_RESPONSE_MIME_TYPE = "application/json"
