"""Public entry point for configuration resolution.

Precedence: programmatic overrides > environment (and optional .env file) >
schema defaults.
"""

from collections.abc import Mapping
from dataclasses import fields
import logging
from pathlib import Path
from typing import Any, Literal, overload

from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .schema import GeminiWebSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig

log = logging.getLogger(__name__)

_FIELD_NAMES = tuple(f.name for f in fields(FrozenConfig))


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    env_file: str | Path | None = ...,
    explain: Literal[False] = ...,
) -> FrozenConfig: ...


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    env_file: str | Path | None = ...,
    explain: Literal[True],
) -> ResolvedConfig: ...


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
    explain: bool = False,
) -> FrozenConfig | ResolvedConfig:
    """Resolve configuration from all sources.

    Args:
        overrides: Programmatic values keyed by field name. Unknown keys are
            ignored.
        env_file: Optional .env file read in addition to the process
            environment.
        explain: Return a `ResolvedConfig` carrying per-field origins.

    Returns:
        `FrozenConfig`, or `ResolvedConfig` when ``explain`` is true.

    Raises:
        ConfigurationError: If any value fails validation.

    Example:
        config = resolve_config({"model": "gemini-2.5-pro", "max_retries": 2})
    """
    programmatic = _known_fields(overrides)

    try:
        from_env = GeminiWebSettings(_env_file=env_file)
    except ValidationError as e:
        raise ConfigurationError(f"Environment configuration error: {e}") from e

    # Overrides are validated by field name; the environment is not re-read.
    merged = {name: getattr(from_env, name) for name in _FIELD_NAMES}
    merged.update(programmatic)
    frozen = _validated(merged)
    if not explain:
        return frozen

    origin: dict[str, ConfigOrigin] = {}
    for name in _FIELD_NAMES:
        if name in programmatic:
            origin[name] = "programmatic"
        elif name in from_env.model_fields_set:
            origin[name] = "env"
        else:
            origin[name] = "default"
    return ResolvedConfig(config=frozen, origin=origin)


def apply_overrides(
    config: FrozenConfig, overrides: Mapping[str, Any] | None = None
) -> FrozenConfig:
    """Return ``config`` with ``overrides`` applied and re-validated.

    The environment is not consulted; unknown keys are ignored.

    Raises:
        ConfigurationError: If the combined values fail validation.
    """
    merged = config.to_dict(redact=False)
    merged.update(_known_fields(overrides))
    return _validated(merged)


def _known_fields(overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    known = {k: v for k, v in (overrides or {}).items() if k in _FIELD_NAMES}
    ignored = set(overrides or {}) - set(known)
    if ignored:
        log.debug("Ignoring unknown configuration keys: %s", sorted(ignored))
    return known


def _validated(values: Mapping[str, Any]) -> FrozenConfig:
    try:
        settings = GeminiWebSettings.model_validate(dict(values))
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
    return FrozenConfig(**{name: getattr(settings, name) for name in _FIELD_NAMES})
