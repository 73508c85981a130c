"""Error taxonomy and message translation for document analysis.

Every failure raised by the analysis pipeline derives from
``DocumentAnalysisError`` and carries a message that can be shown to a
user as-is. The helpers here turn service responses and arbitrary caught
values into such messages.
"""

import json
from collections.abc import Mapping
from typing import Any

from intake_ocr.utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "Azure API"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

_STATUS_MESSAGES: dict[int, str] = {
    401: "{service} authentication failed. Check the API key.",
    403: "{service} access was denied. Check the permissions of the API key.",
    404: "{service} endpoint was not found. Check the endpoint URL.",
    429: "{service} rate limit exceeded. Wait a moment and try again.",
}


class DocumentAnalysisError(Exception):
    """Base class for all document analysis failures."""


class InvalidInputError(DocumentAnalysisError):
    """Request rejected before any network call was made."""


class UnsupportedFileTypeError(InvalidInputError):
    """The uploaded file's MIME type is not supported."""


class InvalidApiKeyError(InvalidInputError):
    """The API key does not have the expected shape."""


class InvalidEndpointError(InvalidInputError, ValueError):
    """The service endpoint is empty or not an absolute URL."""


class TransportError(DocumentAnalysisError):
    """The service answered with a non-success status, or was unreachable.

    Args:
        message: Translated, user-facing message.
        status_code: HTTP status code, or ``None`` for network failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolViolationError(DocumentAnalysisError):
    """The service response broke the asynchronous job protocol."""


class MissingOperationHandleError(ProtocolViolationError):
    """Submission succeeded but no Operation-Location header was returned."""

    def __init__(self) -> None:
        super().__init__("Operation-Location header was not found in the response.")


class AnalysisFailedError(DocumentAnalysisError):
    """The service reported a terminal ``failed`` state.

    Args:
        detail: Error detail reported by the service.
    """

    def __init__(self, detail: Any = None) -> None:
        super().__init__(f"Analysis failed: {_to_json(detail)}")
        self.detail = detail


class AnalysisTimeoutError(DocumentAnalysisError):
    """Polling attempts were exhausted without a terminal state."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            "Timeout: document analysis did not complete "
            f"after {attempts} polling attempts. Try again in a few minutes, "
            "or submit a smaller document with fewer pages."
        )
        self.attempts = attempts


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def translate_service_error(
    status_code: int,
    status_text: str,
    body: Any,
    service: str = SERVICE_NAME,
) -> str:
    """Build a user-facing message from a failed service response.

    Status codes with a dedicated message take precedence over anything
    found in the body. This function never raises.

    Args:
        status_code: HTTP status code of the response.
        status_text: HTTP reason phrase of the response.
        body: Decoded JSON body, or ``None`` when the body was not JSON.
        service: Service name used as the message prefix.

    Returns:
        Human-readable error message.
    """
    try:
        if status_code in _STATUS_MESSAGES:
            return _STATUS_MESSAGES[status_code].format(service=service)

        error = body.get("error") if isinstance(body, Mapping) else None
        if error:
            if isinstance(error, Mapping) and "code" in error and "message" in error:
                return f"{service} error ({error['code']}): {error['message']}"
            if isinstance(error, str):
                return f"{service} error: {error}"
            return f"{service} error: {json.dumps(error, ensure_ascii=False)}"

        return f"{service} error ({status_code}): {status_text}"
    except Exception:
        logger.debug("Could not inspect error body for status %s", status_code)
        return f"{service} error ({status_code})"


def humanize_error_message(error: Any) -> str:
    """Convert an arbitrary caught error value into a display string.

    Args:
        error: Exception, string, mapping with a ``message`` key, or any
            other value.

    Returns:
        Message suitable for showing to a user.
    """
    if not error:
        return UNKNOWN_ERROR_MESSAGE

    if isinstance(error, str):
        return error

    if isinstance(error, BaseException):
        return str(error) or type(error).__name__

    if isinstance(error, Mapping) and "message" in error:
        return str(error["message"])

    return _to_json(error)
