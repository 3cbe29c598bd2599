"""Pipeline orchestration for OCR processing."""

from ocr_relay.pipeline.processor import OCRProcessor, ProcessingState

__all__ = ["OCRProcessor", "ProcessingState"]
