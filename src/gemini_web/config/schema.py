"""Configuration schema and validation using Pydantic.

Every field is read from the environment names listed in its alias choices
(first match wins) and may also be passed programmatically by field name.
"""

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    DEFAULT_BASE_RETRY_DELAY_MS,
    DEFAULT_FALLBACK_MODEL,
    DEFAULT_JITTER_FACTOR,
    DEFAULT_MAX_BURST,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_RETRY_DELAY_MS,
    DEFAULT_MODEL,
    DEFAULT_REQUESTS_PER_MINUTE,
    DEFAULT_TIMEOUT_MS,
)


class GeminiWebSettings(BaseSettings):
    """Pydantic settings schema for the grounded search client."""

    model_config = SettingsConfigDict(
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Credentials and endpoint ---

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
        description="Gemini API key",
    )
    base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GENAI_BASE_URL", "GEMINI_BASE_URL"),
        description="Optional API endpoint override",
    )

    # --- Models ---

    model: str = Field(
        default=DEFAULT_MODEL,
        validation_alias=AliasChoices("GEMINI_MODEL", "MODEL"),
        min_length=1,
    )
    fallback_model: str = Field(
        default=DEFAULT_FALLBACK_MODEL,
        validation_alias=AliasChoices("GEMINI_FALLBACK_MODEL"),
        description="Model used once the primary is exhausted; empty disables",
    )

    # --- Timing, throttling and retries (milliseconds) ---

    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        validation_alias=AliasChoices("REQUEST_TIMEOUT"),
        gt=0,
    )
    requests_per_minute: int = Field(
        default=DEFAULT_REQUESTS_PER_MINUTE,
        validation_alias=AliasChoices("RATE_LIMIT_RPM"),
    )
    max_burst: int = Field(
        default=DEFAULT_MAX_BURST,
        validation_alias=AliasChoices("RATE_LIMIT_MAX_BURST"),
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        validation_alias=AliasChoices("MAX_RETRIES"),
        ge=0,
    )
    base_retry_delay_ms: int = Field(
        default=DEFAULT_BASE_RETRY_DELAY_MS,
        validation_alias=AliasChoices("BASE_RETRY_DELAY"),
        gt=0,
    )
    max_retry_delay_ms: int = Field(
        default=DEFAULT_MAX_RETRY_DELAY_MS,
        validation_alias=AliasChoices("MAX_RETRY_DELAY"),
        gt=0,
    )
    jitter_factor: float = Field(
        default=DEFAULT_JITTER_FACTOR,
        validation_alias=AliasChoices("JITTER_FACTOR"),
        ge=0.0,
        le=1.0,
    )

    # --- Admission control (0 = unbounded) ---

    max_concurrent_requests: int = Field(
        default=0,
        validation_alias=AliasChoices("MAX_CONCURRENT_REQUESTS"),
        ge=0,
    )
    max_queued_requests: int = Field(
        default=0,
        validation_alias=AliasChoices("MAX_QUEUED_REQUESTS"),
        ge=0,
    )

    # --- Validation Rules ---

    @field_validator("api_key", "base_url", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("fallback_model", mode="before")
    @classmethod
    def strip_fallback(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("requests_per_minute", "max_burst", mode="after")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        """Throttle values below 1 degrade to the slowest legal rate."""
        return max(1, v)

    @model_validator(mode="after")
    def validate_delay_bounds(self) -> "GeminiWebSettings":
        if self.max_retry_delay_ms < self.base_retry_delay_ms:
            raise ValueError(
                "max_retry_delay_ms must be >= base_retry_delay_ms "
                f"(got {self.max_retry_delay_ms} < {self.base_retry_delay_ms}). "
                "Check MAX_RETRY_DELAY and BASE_RETRY_DELAY."
            )
        return self
