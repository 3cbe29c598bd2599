"""Mistral OCR API adapters."""

from ocr_relay.engines.classifier import ErrorClassifier
from ocr_relay.engines.mistral import OCRRequestExecutor
from ocr_relay.engines.uploads import FileUploadClient
from ocr_relay.engines.wire import DocumentReference, InlineImage, OCRResponse, OCRSubmission

__all__ = [
    "ErrorClassifier",
    "OCRRequestExecutor",
    "FileUploadClient",
    "DocumentReference",
    "InlineImage",
    "OCRResponse",
    "OCRSubmission",
]
