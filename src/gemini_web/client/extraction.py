"""Normalization of raw generation responses into `CallResult`.

Works on google-genai response objects and on plain mappings (snake_case or
camelCase keys) so test doubles and recorded payloads go through the same
path as live responses.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from gemini_web.core.types import CallResult, GroundingSource, dedupe_sources

log = logging.getLogger(__name__)


def _field(obj: Any, *names: str) -> Any:
    """Read the first present attribute or mapping key among ``names``."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            if name in obj and obj[name] is not None:
                return obj[name]
        else:
            value = getattr(obj, name, None)
            if value is not None:
                return value
    return None


def _as_list(value: Any) -> list[Any]:
    if value is None or isinstance(value, str | bytes | Mapping):
        return []
    if isinstance(value, Iterable):
        return list(value)
    return []


def _first_candidate(response: Any) -> Any:
    candidates = _as_list(_field(response, "candidates"))
    return candidates[0] if candidates else None


def _grounding_metadata(response: Any) -> Any:
    return _field(_first_candidate(response), "grounding_metadata", "groundingMetadata")


def extract_text(response: Any) -> str:
    """Prefer the response's direct text; else the first text-bearing part."""
    try:
        direct = _field(response, "text")
    except (ValueError, AttributeError):
        # Some SDK versions raise when the candidate holds no text parts
        direct = None
    if isinstance(direct, str) and direct.strip():
        return direct.strip()

    content = _field(_first_candidate(response), "content")
    for part in _as_list(_field(content, "parts")):
        text = _field(part, "text")
        if isinstance(text, str) and text:
            return text
    return ""


def extract_sources(response: Any) -> tuple[GroundingSource, ...]:
    """Grounding sources, deduplicated by URI in first-seen order.

    Chunks without a web URI are skipped.
    """
    chunks = _as_list(
        _field(_grounding_metadata(response), "grounding_chunks", "groundingChunks")
    )
    sources: list[GroundingSource] = []
    for chunk in chunks:
        web = _field(chunk, "web")
        uri = _field(web, "uri")
        if not isinstance(uri, str) or not uri:
            continue
        title = _field(web, "title")
        if not isinstance(title, str):
            title = ""
        sources.append(GroundingSource(uri=uri, title=title))
    return dedupe_sources(sources)


def extract_queries(response: Any) -> tuple[str, ...]:
    """Search queries the remote system issued while grounding, if exposed."""
    queries = _as_list(
        _field(_grounding_metadata(response), "web_search_queries", "webSearchQueries")
    )
    return tuple(q for q in queries if isinstance(q, str))


def to_call_result(response: Any) -> CallResult:
    """Build a `CallResult` from a raw response."""
    result = CallResult(
        text=extract_text(response),
        sources=extract_sources(response),
        queries=extract_queries(response),
        raw=response,
    )
    log.debug(
        "Extracted %d chars, %d source(s), %d search quer(ies)",
        len(result.text),
        len(result.sources),
        len(result.queries),
    )
    return result
