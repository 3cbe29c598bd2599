"""Core data models for ocr-relay."""

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.config import ProviderConfig, RelayConfig, RetryConfig
from ocr_relay.core.document import Document, DocumentKind
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.core.result import OCRPage, OCRResult, ProcessingProgress, ProcessingSettings

__all__ = [
    "CancellationToken",
    "ProviderConfig",
    "RelayConfig",
    "RetryConfig",
    "Document",
    "DocumentKind",
    "ErrorKind",
    "OCRError",
    "OCRPage",
    "OCRResult",
    "ProcessingProgress",
    "ProcessingSettings",
]
