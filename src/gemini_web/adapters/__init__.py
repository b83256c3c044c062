"""Provider adapters for the remote generation API."""

from gemini_web.adapters.base import GenerationAdapter

__all__ = ["GenerationAdapter"]
