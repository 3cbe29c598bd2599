"""Document representation for OCR processing."""

import mimetypes
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import Path
from uuid import UUID, uuid4

from PIL import Image, UnidentifiedImageError

from ocr_relay.core.cost import CostCalculator
from ocr_relay.core.errors import ErrorKind, OCRError

SUPPORTED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "tif", "tiff", "gif", "webp", "bmp"}

MAX_FILE_SIZE = 100 * 1024 * 1024  # bytes


class DocumentKind(str, Enum):
    """Content-type classification used to pick the wire payload."""

    PDF = "pdf"
    IMAGE = "image"
    OTHER = "other"


def _sniff(path: Path) -> tuple[DocumentKind, str | None]:
    """Classify by file contents when the extension is not conclusive."""
    try:
        with open(path, "rb") as f:
            head = f.read(5)
    except OSError:
        return DocumentKind.OTHER, None
    if head == b"%PDF-":
        return DocumentKind.PDF, "application/pdf"

    try:
        with Image.open(path) as img:
            mime = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return DocumentKind.OTHER, None
    return DocumentKind.IMAGE, mime


def classify_path(path: Path) -> tuple[DocumentKind, str | None]:
    """Return the document kind and MIME type for a file."""
    mime, _ = mimetypes.guess_type(path.name)
    if mime == "application/pdf":
        return DocumentKind.PDF, mime
    if mime and mime.startswith("image/"):
        return DocumentKind.IMAGE, mime
    if path.suffix.lower().lstrip(".") in SUPPORTED_IMAGE_EXTENSIONS:
        return DocumentKind.IMAGE, mime
    return _sniff(path)


def count_pdf_pages(path: Path) -> int | None:
    """Exact page count for a PDF, or None if it cannot be opened."""
    import fitz  # PyMuPDF

    try:
        pdf = fitz.open(path)
    except (fitz.FileDataError, RuntimeError, OSError):
        return None
    try:
        # Page tree is unreadable until a password is supplied
        if pdf.is_encrypted:
            return None
        return len(pdf)
    finally:
        pdf.close()


def pdf_is_locked(path: Path) -> bool:
    """True if the PDF cannot be opened without a password."""
    import fitz  # PyMuPDF

    try:
        pdf = fitz.open(path)
    except (fitz.FileDataError, RuntimeError, OSError):
        return False
    try:
        return bool(pdf.is_encrypted)
    finally:
        pdf.close()


def validate_document(document: "Document", max_file_size: int = MAX_FILE_SIZE) -> None:
    """Reject documents the provider cannot accept before any upload.

    Raises OCRError for unreadable, oversized or password-protected files.
    """
    try:
        size = document.path.stat().st_size
    except OSError as e:
        raise OCRError(ErrorKind.FILE_READ_ERROR, path=document.path) from e

    if size > max_file_size:
        raise OCRError(ErrorKind.FILE_TOO_LARGE, size_bytes=size)

    if document.is_pdf and pdf_is_locked(document.path):
        raise OCRError(ErrorKind.UNPROCESSABLE_DOCUMENT, "PDF is password protected")


@dataclass(frozen=True)
class Document:
    """A document to be processed. Immutable for one processing call."""

    path: Path
    kind: DocumentKind = DocumentKind.OTHER
    mime_type: str | None = None
    estimated_page_count: int | None = None
    file_size: int = 0
    id: UUID = field(default_factory=uuid4)

    @property
    def display_name(self) -> str:
        """Filename without extension."""
        return self.path.stem

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def file_extension(self) -> str:
        return self.path.suffix.lower().lstrip(".")

    @property
    def is_pdf(self) -> bool:
        return self.kind == DocumentKind.PDF

    @property
    def is_image(self) -> bool:
        return self.kind == DocumentKind.IMAGE

    @property
    def size_mb(self) -> float:
        return self.file_size / (1024 * 1024)

    def estimated_cost(self, calculator: CostCalculator | None = None) -> Decimal | None:
        """Cost estimate from the page count, if known."""
        if self.estimated_page_count is None:
            return None
        return (calculator or CostCalculator()).calculate_cost(self.estimated_page_count)

    @classmethod
    def from_path(cls, path: Path | str) -> "Document":
        """Create a document, classifying it and counting pages where possible."""
        path = Path(path)
        kind, mime = classify_path(path)

        page_count: int | None = None
        if kind == DocumentKind.PDF and path.exists():
            page_count = count_pdf_pages(path)
        elif kind == DocumentKind.IMAGE:
            page_count = 1

        file_size = path.stat().st_size if path.exists() else 0

        return cls(
            path=path,
            kind=kind,
            mime_type=mime,
            estimated_page_count=page_count,
            file_size=file_size,
        )
