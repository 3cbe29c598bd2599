"""ocr-relay - Reliable document submission to the Mistral OCR API."""

__version__ = "0.1.0"

from ocr_relay.core.config import RelayConfig
from ocr_relay.core.document import Document, DocumentKind
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.core.result import OCRPage, OCRResult, ProcessingSettings, TableFormat
from ocr_relay.pipeline.processor import OCRProcessor

__all__ = [
    "RelayConfig",
    "Document",
    "DocumentKind",
    "ErrorKind",
    "OCRError",
    "OCRPage",
    "OCRResult",
    "ProcessingSettings",
    "TableFormat",
    "OCRProcessor",
]
