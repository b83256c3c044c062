"""Exception taxonomy for the Gemini web client."""


class GeminiWebError(Exception):
    """Base exception for gemini_web errors"""


class ConfigurationError(GeminiWebError):
    """Raised when configuration values are missing or invalid"""


class MissingKeyError(ConfigurationError):
    """Raised when an API key is required but none was configured"""


class RemoteAPIError(GeminiWebError):
    """Error reported by (or on the way to) the remote generation API.

    Attributes:
        code: Short machine-readable error code.
        status_code: HTTP-like status code, when known.
        retryable: Whether the retry engine may try the call again.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "REMOTE_API_ERROR",
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.retryable = retryable


class RateLimitError(RemoteAPIError):
    """The remote API throttled the request (HTTP 429)"""

    def __init__(self, message: str, retry_after_seconds: int | None = None) -> None:
        super().__init__(
            message, code="RATE_LIMIT_EXCEEDED", status_code=429, retryable=True
        )
        self.retry_after_seconds = retry_after_seconds


class RequestTimeoutError(RemoteAPIError):
    """The local deadline elapsed or the remote side signalled a timeout"""

    def __init__(self, message: str, timeout_ms: int) -> None:
        super().__init__(message, code="TIMEOUT", status_code=408, retryable=True)
        self.timeout_ms = timeout_ms


class ConcurrencyLimitError(RemoteAPIError):
    """The admission queue is full; the call was rejected before being sent"""

    def __init__(self, message: str, queue_position: int) -> None:
        super().__init__(
            message, code="CONCURRENCY_LIMIT", status_code=429, retryable=True
        )
        self.queue_position = queue_position
