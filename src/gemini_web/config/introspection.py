"""Configuration introspection for debugging.

Usage:
    python -m gemini_web.config
    python -m gemini_web.config --json
"""

import argparse
from collections.abc import Sequence
import json
import sys
from typing import Any

from ..exceptions import ConfigurationError
from .api import resolve_config

# ruff: noqa: T201


def get_config_info() -> dict[str, Any]:
    """Structured, redacted view of the effective configuration."""
    try:
        resolved = resolve_config(explain=True)
    except ConfigurationError as e:
        return {"status": "invalid", "error": str(e), "config": None, "sources": {}}

    config = resolved.config.to_dict()
    config["api_key"] = "[SET]" if resolved.config.api_key else "[NOT SET]"
    return {
        "status": "valid",
        "config": config,
        "sources": dict(resolved.origin),
        "warnings": _get_config_warnings(resolved.config.to_dict(redact=False)),
    }


def _get_config_warnings(values: dict[str, Any]) -> list[str]:
    warnings = []
    if not values["api_key"]:
        warnings.append("No API key configured (set GEMINI_API_KEY)")
    if not values["fallback_model"]:
        warnings.append("Fallback model disabled")
    elif values["fallback_model"] == values["model"]:
        warnings.append("Fallback model equals primary model; fallback is inert")
    return warnings


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Inspect gemini-web configuration",
        prog="python -m gemini_web.config",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of human-readable format",
    )
    args = parser.parse_args(argv)

    info = get_config_info()
    if args.json:
        print(json.dumps(info, indent=2))
        return 0 if info["status"] == "valid" else 1

    if info["status"] != "valid":
        print(f"Configuration error: {info['error']}", file=sys.stderr)
        return 1

    print("=== Effective Configuration ===")
    for name, value in info["config"].items():
        print(f"  {name}: {value}  ({info['sources'][name]})")
    for warning in info["warnings"]:
        print(f"  warning: {warning}")
    return 0
