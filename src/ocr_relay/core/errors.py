"""Error taxonomy for OCR processing."""

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to callers."""

    MISSING_CREDENTIAL = "missing-credential"
    AUTHENTICATION_FAILED = "authentication-failed"
    ACCESS_DENIED = "access-denied"
    RATE_LIMITED = "rate-limited"
    NETWORK_UNAVAILABLE = "network-unavailable"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNSUPPORTED_FORMAT = "unsupported-format"
    FILE_TOO_LARGE = "file-too-large"
    FILE_READ_ERROR = "file-read-error"
    FILE_UPLOAD_FAILED = "file-upload-failed"
    SIGNED_URL_FAILED = "signed-url-failed"
    INVALID_REQUEST = "invalid-request"
    UNPROCESSABLE_DOCUMENT = "unprocessable-document"
    SERVER_ERROR = "server-error"
    INVALID_RESPONSE = "invalid-response"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset({
    ErrorKind.RATE_LIMITED,
    ErrorKind.TIMEOUT,
    ErrorKind.NETWORK_UNAVAILABLE,
    ErrorKind.SERVER_ERROR,
})

RECOVERY_SUGGESTIONS: dict[ErrorKind, str | None] = {
    ErrorKind.MISSING_CREDENTIAL: "Add your Mistral API key in settings or set MISTRAL_API_KEY.",
    ErrorKind.AUTHENTICATION_FAILED: "Check your API key, or generate a new one at console.mistral.ai.",
    ErrorKind.ACCESS_DENIED: "Check your API key permissions.",
    ErrorKind.RATE_LIMITED: "Wait a moment and try again. Requests are retried automatically.",
    ErrorKind.NETWORK_UNAVAILABLE: "Check your internet connection and try again.",
    ErrorKind.TIMEOUT: "The document may be too complex. Try a smaller document.",
    ErrorKind.CANCELLED: None,
    ErrorKind.UNSUPPORTED_FORMAT: "Supported formats: PDF, PNG, JPEG, TIFF, GIF, WebP.",
    ErrorKind.FILE_TOO_LARGE: "Split the document into smaller files (max 100 MB each).",
    ErrorKind.FILE_READ_ERROR: "Check that the file exists and is accessible.",
    ErrorKind.FILE_UPLOAD_FAILED: "Try again. If this persists, check your API key permissions.",
    ErrorKind.SIGNED_URL_FAILED: "Try again. If this persists, check your API key permissions.",
    ErrorKind.INVALID_REQUEST: "Please try again with a different document.",
    ErrorKind.UNPROCESSABLE_DOCUMENT: "The document may be corrupted or password-protected.",
    ErrorKind.SERVER_ERROR: "Try again in a few minutes.",
    ErrorKind.INVALID_RESPONSE: "Try again. If this persists, contact support.",
    ErrorKind.UNKNOWN: "Try again. If this persists, contact support.",
}


class OCRError(Exception):
    """A processing failure of one specific kind.

    Carries only the data its message needs: an HTTP status code for
    upload/sign/server failures, a provider message for request-level
    failures, the offending path or extension for local file failures.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        *,
        status_code: int | None = None,
        path: Path | str | None = None,
        extension: str = "",
        size_bytes: int = 0,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.path = Path(path) if path is not None else None
        self.extension = extension
        self.size_bytes = size_bytes
        super().__init__(self.description)

    @property
    def description(self) -> str:
        """Short human-readable description."""
        kind = self.kind
        if kind == ErrorKind.MISSING_CREDENTIAL:
            return "No API key configured"
        if kind == ErrorKind.AUTHENTICATION_FAILED:
            return "API key is invalid or expired"
        if kind == ErrorKind.ACCESS_DENIED:
            return f"Access denied: {self.message}"
        if kind == ErrorKind.RATE_LIMITED:
            return "Rate limit exceeded"
        if kind == ErrorKind.NETWORK_UNAVAILABLE:
            return "No internet connection"
        if kind == ErrorKind.TIMEOUT:
            return "Request timed out"
        if kind == ErrorKind.CANCELLED:
            return "Processing was cancelled"
        if kind == ErrorKind.UNSUPPORTED_FORMAT:
            return f"Unsupported file format: .{self.extension}"
        if kind == ErrorKind.FILE_TOO_LARGE:
            if self.size_bytes > 0:
                return f"File too large: {self.size_bytes / (1024 * 1024):.1f} MB"
            return "File too large for processing"
        if kind == ErrorKind.FILE_READ_ERROR:
            name = self.path.name if self.path else "unknown"
            return f"Cannot read file: {name}"
        if kind == ErrorKind.FILE_UPLOAD_FAILED:
            return f"Failed to upload file (status {self.status_code})"
        if kind == ErrorKind.SIGNED_URL_FAILED:
            return f"Failed to get file URL (status {self.status_code})"
        if kind == ErrorKind.INVALID_REQUEST:
            return f"Invalid request: {self.message}"
        if kind == ErrorKind.UNPROCESSABLE_DOCUMENT:
            return f"Cannot process document: {self.message}"
        if kind == ErrorKind.SERVER_ERROR:
            return f"Server error ({self.status_code}): {self.message}"
        if kind == ErrorKind.INVALID_RESPONSE:
            return "Invalid response from server"
        return self.message or "Unknown error"

    @property
    def recovery_suggestion(self) -> str | None:
        """Optional hint on how the user can recover."""
        return RECOVERY_SUGGESTIONS[self.kind]

    @property
    def is_retryable(self) -> bool:
        """Whether the failure is presumed transient."""
        return self.kind in RETRYABLE_KINDS

    def __repr__(self) -> str:
        return f"OCRError({self.kind.value!r}, {self.description!r})"
