"""OCR result data structures."""

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class TableFormat(str, Enum):
    """How the provider should return tables."""

    INLINE = "inline"  # Tables stay inside the page markdown
    MARKDOWN = "markdown"
    HTML = "html"

    @property
    def api_value(self) -> str | None:
        """Value for the ``table_format`` request field (None means omit)."""
        if self == TableFormat.INLINE:
            return None
        return self.value


@dataclass(frozen=True)
class ProcessingSettings:
    """Options controlling what the provider extracts."""

    include_images: bool = False
    table_format: TableFormat = TableFormat.MARKDOWN
    extract_header: bool = False
    extract_footer: bool = False

    @classmethod
    def default(cls) -> "ProcessingSettings":
        return cls()

    @classmethod
    def full_export(cls) -> "ProcessingSettings":
        """Everything the provider can return, including page images."""
        return cls(
            include_images=True,
            table_format=TableFormat.MARKDOWN,
            extract_header=True,
            extract_footer=True,
        )


@dataclass(frozen=True)
class ProcessingProgress:
    """Snapshot emitted at discrete processing milestones."""

    current_page: int
    total_pages: int
    started_at: datetime
    attempt: int = 1  # Submission attempt this snapshot belongs to

    @property
    def elapsed_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()


@dataclass(frozen=True)
class PageDimensions:
    """Dimensions of a processed page."""

    width: float
    height: float
    unit: str = "px"

    @property
    def aspect_ratio(self) -> float:
        if self.height <= 0:
            return 1.0
        return self.width / self.height


@dataclass(frozen=True)
class ExtractedTable:
    """A table extracted from a page."""

    id: str
    markdown: str

    @property
    def row_count(self) -> int:
        """Number of body rows (header and separator excluded)."""
        lines = [line for line in self.markdown.splitlines() if line.strip().startswith("|")]
        return max(0, len(lines) - 2)

    @property
    def column_count(self) -> int:
        lines = self.markdown.splitlines()
        if not lines:
            return 0
        return max(0, len(lines[0].split("|")) - 2)


@dataclass(frozen=True)
class ExtractedImage:
    """An image region found on a page."""

    id: str
    top_left_x: float
    top_left_y: float
    bottom_right_x: float
    bottom_right_y: float
    image_base64: str | None = None

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        return (self.top_left_x, self.top_left_y, self.bottom_right_x, self.bottom_right_y)

    @property
    def width(self) -> float:
        return self.bottom_right_x - self.top_left_x

    @property
    def height(self) -> float:
        return self.bottom_right_y - self.top_left_y

    @property
    def has_image_data(self) -> bool:
        return bool(self.image_base64)


_HEADING = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_UNDER_BOLD = re.compile(r"__(.+?)__")
_UNDER_ITALIC = re.compile(r"_(.+?)_")
_IMAGE_REF = re.compile(r"!\[.*?\]\(.*?\)")
_LINK = re.compile(r"\[(.+?)\]\(.+?\)")


@dataclass(frozen=True)
class OCRPage:
    """OCR content for a single page."""

    index: int  # 0-based, as reported by the provider
    markdown: str
    tables: tuple[ExtractedTable, ...] = ()
    images: tuple[ExtractedImage, ...] = ()
    dimensions: PageDimensions | None = None
    header: str | None = None
    footer: str | None = None

    @property
    def page_number(self) -> int:
        """1-based page number for display."""
        return self.index + 1

    @property
    def plain_text(self) -> str:
        """Markdown with common formatting stripped."""
        text = _HEADING.sub("", self.markdown)
        text = _BOLD.sub(r"\1", text)
        text = _ITALIC.sub(r"\1", text)
        text = _UNDER_BOLD.sub(r"\1", text)
        text = _UNDER_ITALIC.sub(r"\1", text)
        text = _IMAGE_REF.sub("", text)
        text = _LINK.sub(r"\1", text)
        return text.strip()

    @property
    def word_count(self) -> int:
        return len(self.plain_text.split())


@dataclass(frozen=True)
class OCRResult:
    """Complete OCR result for a document."""

    document_id: UUID
    pages: tuple[OCRPage, ...]
    model: str
    cost: Decimal
    processing_duration: float  # seconds
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def full_markdown(self) -> str:
        return "\n\n---\n\n".join(page.markdown for page in self.pages)

    @property
    def full_plain_text(self) -> str:
        return "\n\n".join(page.plain_text for page in self.pages)

    @property
    def word_count(self) -> int:
        return sum(page.word_count for page in self.pages)

    @property
    def contains_tables(self) -> bool:
        return any(page.tables for page in self.pages)

    @property
    def contains_images(self) -> bool:
        return any(page.images for page in self.pages)

    @property
    def formatted_cost(self) -> str:
        from ocr_relay.core.cost import format_cost

        return format_cost(self.cost)

    @property
    def formatted_duration(self) -> str:
        """Duration like ``2.3s`` or ``1m 23s``."""
        if self.processing_duration < 60:
            return f"{self.processing_duration:.1f}s"
        minutes, seconds = divmod(int(self.processing_duration), 60)
        return f"{minutes}m {seconds}s"

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable representation."""
        data = asdict(self)
        data["document_id"] = str(self.document_id)
        data["cost"] = str(self.cost)
        data["completed_at"] = self.completed_at.isoformat()
        return data

    def to_markdown(self, title: str = "") -> str:
        """Export as a markdown document."""
        lines = [f"# OCR Result: {title or self.document_id}", ""]

        lines.append("## Summary")
        lines.append(f"- Pages: {self.page_count}")
        lines.append(f"- Model: {self.model}")
        lines.append(f"- Cost: {self.formatted_cost}")
        lines.append(f"- Duration: {self.formatted_duration}")
        lines.append("")

        lines.append("## Content")
        lines.append("")

        for page in self.pages:
            lines.append(f"--- Page {page.page_number} ---")
            if page.header:
                lines.append(f"> {page.header}")
            if page.markdown:
                lines.append(page.markdown)
            for table in page.tables:
                lines.append("")
                lines.append(f"**[Table {table.id}]**")
                lines.append(table.markdown)
            if page.footer:
                lines.append(f"> {page.footer}")
            lines.append("")

        return "\n".join(lines)
