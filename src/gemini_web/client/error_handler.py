"""Error normalization for Gemini API generation requests"""

import logging
from typing import Any

import httpx

from ..constants import RETRYABLE_STATUS_CODES
from ..exceptions import RateLimitError, RemoteAPIError, RequestTimeoutError
from .retry import is_retryable_error

log = logging.getLogger(__name__)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def extract_status_code(error: BaseException) -> int | None:
    """Find an HTTP-like status code on an SDK or transport error.

    Checks ``code`` (google-genai), ``status_code``, ``status`` and finally
    ``response.status_code``.
    """
    for attr in ("code", "status_code", "status"):
        status = _as_int(getattr(error, attr, None))
        if status is not None:
            return status
    response = getattr(error, "response", None)
    if response is not None:
        return _as_int(getattr(response, "status_code", None)) or _as_int(
            getattr(response, "status", None)
        )
    return None


def extract_retry_after(error: BaseException) -> int | None:
    """Parse a retry-after hint in whole seconds, if the error carries one."""
    candidates: list[Any] = []
    for holder in (getattr(error, "response", None), error):
        headers = getattr(holder, "headers", None)
        getter = getattr(headers, "get", None)
        if callable(getter):
            candidates.append(getter("retry-after"))
    candidates.append(getattr(error, "retry_after", None))

    for raw in candidates:
        if raw is None:
            continue
        try:
            return int(str(raw).strip())
        except ValueError:
            continue
    return None


def _looks_like_timeout(error: BaseException) -> bool:
    if isinstance(error, TimeoutError | httpx.TimeoutException):
        return True
    code = str(getattr(error, "code", "") or "").lower()
    message = str(error).lower()
    return "timedout" in code or "timeout" in message or "timed out" in message


class GenerationErrorHandler:
    """Translates errors from a generation attempt into the package taxonomy"""

    def normalize(self, error: Exception, timeout_ms: int) -> Exception:
        """Return the exception the retry engine should see for ``error``.

        Errors that are already part of the taxonomy, and errors without a
        status code that are not timeouts, are returned unchanged so the
        network-signature rules of the retry engine still apply to them.
        """
        if isinstance(error, RemoteAPIError):
            return error

        status = extract_status_code(error)
        message = str(error)

        if status == 429:
            retry_after = extract_retry_after(error)
            log.debug("Remote API throttled request (retry-after=%s)", retry_after)
            return RateLimitError(message or "Rate limit exceeded", retry_after)

        if _looks_like_timeout(error):
            return RequestTimeoutError(message or "Request timed out", timeout_ms)

        if status is not None:
            retryable = status in RETRYABLE_STATUS_CODES or is_retryable_error(error)
            status_name = getattr(error, "status", None)
            return RemoteAPIError(
                message or f"Remote API returned status {status}",
                code=status_name
                if isinstance(status_name, str) and status_name
                else f"HTTP_{status}",
                status_code=status,
                retryable=retryable,
            )

        return error
