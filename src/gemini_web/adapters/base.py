"""Provider adapter protocol used by the resilient client.

The client depends on the remote generation API only through this seam, which
keeps SDK types out of the retry, batch and research layers.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GenerationAdapter(Protocol):
    """Minimal generation capability.

    ``api_config`` carries provider-neutral options: ``use_search``,
    ``system_instruction``, ``response_mime_type``, ``max_output_tokens`` and
    ``timeout_ms``. Implementations return the raw provider response and raise
    provider errors unchanged; normalization happens in the client.
    """

    async def generate(
        self,
        *,
        model_name: str,
        prompt: str,
        api_config: dict[str, object],
    ) -> Any: ...
