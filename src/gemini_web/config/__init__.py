"""Configuration system: resolve once, freeze, then hand to the client.

Example:
    from gemini_web.config import resolve_config

    config = resolve_config({"max_retries": 2})
    print(resolve_config(explain=True).audit())
"""

from .api import apply_overrides, resolve_config
from .schema import GeminiWebSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigOrigin",
    "FrozenConfig",
    "GeminiWebSettings",
    "ResolvedConfig",
    "SourceMap",
    "apply_overrides",
    "resolve_config",
]
