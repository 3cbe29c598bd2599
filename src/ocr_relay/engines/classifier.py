"""Map failed HTTP responses to typed OCR errors."""

import json
import logging
from typing import Any, Callable

from ocr_relay.core.errors import ErrorKind, OCRError

logger = logging.getLogger(__name__)


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _structured_message(body: Any) -> str | None:
    """``{"message": ...}`` or ``{"detail": ...}`` (the documented error shape)."""
    if not isinstance(body, dict):
        return None
    return _non_empty(body.get("message")) or _non_empty(body.get("detail"))


def _generic_object(body: Any) -> str | None:
    """Loose object: ``detail``, ``error`` string, ``error.message``, ``message``."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    nested = error.get("message") if isinstance(error, dict) else None
    return (
        _non_empty(body.get("detail"))
        or _non_empty(error)
        or _non_empty(nested)
        or _non_empty(body.get("message"))
    )


def _error_list(body: Any) -> str | None:
    """List of error objects (validation errors): first ``msg`` or ``message``."""
    if not isinstance(body, list) or not body or not isinstance(body[0], dict):
        return None
    first = body[0]
    return _non_empty(first.get("msg")) or _non_empty(first.get("message"))


MESSAGE_DECODERS: tuple[Callable[[Any], str | None], ...] = (
    _structured_message,
    _generic_object,
    _error_list,
)

STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.INVALID_REQUEST,
    401: ErrorKind.AUTHENTICATION_FAILED,
    403: ErrorKind.ACCESS_DENIED,
    413: ErrorKind.FILE_TOO_LARGE,
    422: ErrorKind.UNPROCESSABLE_DOCUMENT,
    429: ErrorKind.RATE_LIMITED,
}


def extract_message(status_code: int, body: bytes | str) -> str:
    """Best human-readable message from an error body."""
    try:
        parsed = json.loads(body) if body else None
    except (ValueError, UnicodeDecodeError):
        parsed = None

    for decoder in MESSAGE_DECODERS:
        message = decoder(parsed)
        if message:
            return message
    return f"Unknown error (status {status_code})"


def classify(status_code: int, body: bytes | str) -> OCRError:
    """Pure mapping from (status, body) to an OCRError."""
    message = extract_message(status_code, body)

    if 500 <= status_code <= 599:
        return OCRError(ErrorKind.SERVER_ERROR, message, status_code=status_code)

    kind = STATUS_KINDS.get(status_code, ErrorKind.UNKNOWN)
    return OCRError(kind, message, status_code=status_code)


class ErrorClassifier:
    """Classify non-success responses from the OCR endpoint."""

    def classify(self, status_code: int, body: bytes | str) -> OCRError:
        error = classify(status_code, body)
        logger.error("API error %s: %s", status_code, error.message)
        return error
