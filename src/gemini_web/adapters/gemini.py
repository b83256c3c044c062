"""google-genai implementation of `GenerationAdapter`."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

log = logging.getLogger(__name__)


class GoogleGenAIAdapter:
    """Calls ``models.generate_content`` through the async google-genai client."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Create the adapter.

        Args:
            api_key: Gemini API key.
            base_url: Optional API endpoint override.
            client: Pre-built SDK client, mainly for tests.
        """
        if client is None:
            http_options = types.HttpOptions(base_url=base_url) if base_url else None
            client = genai.Client(api_key=api_key, http_options=http_options)
        self._client = client
        log.debug(
            "GoogleGenAIAdapter initialized (custom base URL: %s)", bool(base_url)
        )

    def build_config(
        self, api_config: dict[str, object]
    ) -> types.GenerateContentConfig:
        """Translate provider-neutral options into a `GenerateContentConfig`."""
        config = types.GenerateContentConfig()
        if api_config.get("use_search", True):
            config.tools = [types.Tool(google_search=types.GoogleSearch())]
        system_instruction = api_config.get("system_instruction")
        if system_instruction:
            config.system_instruction = str(system_instruction)
        mime_type = api_config.get("response_mime_type")
        if mime_type:
            config.response_mime_type = str(mime_type)
        max_tokens = api_config.get("max_output_tokens")
        if isinstance(max_tokens, int) and max_tokens > 0:
            config.max_output_tokens = max_tokens
        timeout_ms = api_config.get("timeout_ms")
        if isinstance(timeout_ms, int) and timeout_ms > 0:
            config.http_options = types.HttpOptions(timeout=timeout_ms)
        return config

    async def generate(
        self,
        *,
        model_name: str,
        prompt: str,
        api_config: dict[str, object],
    ) -> Any:
        return await self._client.aio.models.generate_content(
            model=model_name,
            contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
            config=self.build_config(api_config),
        )
