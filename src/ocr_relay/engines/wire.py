"""Wire models for the Mistral OCR HTTP API.

Requests are encoded to plain dicts; responses are decoded into frozen
dataclasses. Decoding is strict: a missing required key or a value of the
wrong type raises ``WireFormatError`` instead of being defaulted.
"""

from dataclasses import dataclass
from typing import Any, Union

from ocr_relay.core.result import ProcessingSettings

DEFAULT_MODEL = "mistral-ocr-latest"


class WireFormatError(ValueError):
    """A response body did not have the expected JSON shape."""


# --- request models -----------------------------------------------------------


@dataclass(frozen=True)
class DocumentReference:
    """PDF uploaded beforehand and referenced by a signed URL."""

    url: str

    def to_wire(self) -> dict[str, str]:
        return {"type": "document_url", "document_url": self.url}


@dataclass(frozen=True)
class InlineImage:
    """Image embedded directly as a base64 data URL."""

    data_url: str

    def to_wire(self) -> dict[str, str]:
        return {"type": "image_url", "image_url": self.data_url}


DocumentPayload = Union[DocumentReference, InlineImage]


@dataclass(frozen=True)
class OCRSubmission:
    """Body of ``POST /ocr``. Optional fields are None when not requested."""

    document: DocumentPayload
    model: str = DEFAULT_MODEL
    include_image_base64: bool | None = None
    table_format: str | None = None
    extract_header: bool | None = None
    extract_footer: bool | None = None

    @classmethod
    def from_settings(
        cls,
        document: DocumentPayload,
        settings: ProcessingSettings,
        model: str = DEFAULT_MODEL,
    ) -> "OCRSubmission":
        return cls(
            document=document,
            model=model,
            include_image_base64=True if settings.include_images else None,
            table_format=settings.table_format.api_value,
            extract_header=True if settings.extract_header else None,
            extract_footer=True if settings.extract_footer else None,
        )

    def to_wire(self) -> dict[str, Any]:
        """Encode, leaving out every optional field that was not requested."""
        body: dict[str, Any] = {
            "model": self.model,
            "document": self.document.to_wire(),
        }
        optional = {
            "include_image_base64": self.include_image_base64,
            "table_format": self.table_format,
            "extract_header": self.extract_header,
            "extract_footer": self.extract_footer,
        }
        body.update({key: value for key, value in optional.items() if value is not None})
        return body


# --- decoding helpers ---------------------------------------------------------


def _expect_dict(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise WireFormatError(f"{where}: expected object, got {type(value).__name__}")
    return value


def _require(data: dict[str, Any], key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if key not in data:
        raise WireFormatError(f"{where}: missing '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        raise WireFormatError(f"{where}: '{key}' has wrong type bool")
    if not isinstance(value, kind):
        raise WireFormatError(f"{where}: '{key}' has wrong type {type(value).__name__}")
    return value


def _optional(data: dict[str, Any], key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if data.get(key) is None:
        return None
    return _require(data, key, kind, where)


def _optional_list(data: dict[str, Any], key: str, where: str) -> list[Any] | None:
    return _optional(data, key, list, where)


# --- response models ----------------------------------------------------------


@dataclass(frozen=True)
class WireTable:
    id: str
    markdown: str | None = None
    html: str | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "WireTable":
        data = _expect_dict(raw, "table")
        return cls(
            id=_require(data, "id", str, "table"),
            markdown=_optional(data, "markdown", str, "table"),
            html=_optional(data, "html", str, "table"),
        )


@dataclass(frozen=True)
class WireImage:
    id: str
    top_left_x: float
    top_left_y: float
    bottom_right_x: float
    bottom_right_y: float
    image_base64: str | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "WireImage":
        data = _expect_dict(raw, "image")
        number = (int, float)
        return cls(
            id=_require(data, "id", str, "image"),
            top_left_x=_require(data, "top_left_x", number, "image"),
            top_left_y=_require(data, "top_left_y", number, "image"),
            bottom_right_x=_require(data, "bottom_right_x", number, "image"),
            bottom_right_y=_require(data, "bottom_right_y", number, "image"),
            image_base64=_optional(data, "image_base64", str, "image"),
        )


@dataclass(frozen=True)
class WireDimensions:
    width: int
    height: int
    dpi: int | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "WireDimensions":
        data = _expect_dict(raw, "dimensions")
        return cls(
            width=_require(data, "width", (int, float), "dimensions"),
            height=_require(data, "height", (int, float), "dimensions"),
            dpi=_optional(data, "dpi", (int, float), "dimensions"),
        )


@dataclass(frozen=True)
class WirePage:
    index: int
    markdown: str
    tables: tuple[WireTable, ...] | None = None
    images: tuple[WireImage, ...] | None = None
    dimensions: WireDimensions | None = None
    header: str | None = None
    footer: str | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "WirePage":
        data = _expect_dict(raw, "page")
        tables = _optional_list(data, "tables", "page")
        images = _optional_list(data, "images", "page")
        dimensions = data.get("dimensions")
        return cls(
            index=_require(data, "index", int, "page"),
            markdown=_require(data, "markdown", str, "page"),
            tables=tuple(WireTable.from_dict(t) for t in tables) if tables is not None else None,
            images=tuple(WireImage.from_dict(i) for i in images) if images is not None else None,
            dimensions=WireDimensions.from_dict(dimensions) if dimensions is not None else None,
            header=_optional(data, "header", str, "page"),
            footer=_optional(data, "footer", str, "page"),
        )


@dataclass(frozen=True)
class UsageInfo:
    pages_processed: int  # Billing unit; may differ from the number of pages returned
    doc_size_bytes: int | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "UsageInfo":
        data = _expect_dict(raw, "usage_info")
        return cls(
            pages_processed=_require(data, "pages_processed", int, "usage_info"),
            doc_size_bytes=_optional(data, "doc_size_bytes", int, "usage_info"),
        )


@dataclass(frozen=True)
class OCRResponse:
    """Decoded body of a successful ``POST /ocr``."""

    pages: tuple[WirePage, ...]
    model: str
    usage_info: UsageInfo

    @classmethod
    def from_dict(cls, raw: Any) -> "OCRResponse":
        data = _expect_dict(raw, "response")
        pages = _require(data, "pages", list, "response")
        return cls(
            pages=tuple(WirePage.from_dict(p) for p in pages),
            model=_require(data, "model", str, "response"),
            usage_info=UsageInfo.from_dict(_require(data, "usage_info", dict, "response")),
        )


def decode_field(raw: Any, key: str, where: str) -> str:
    """Decode a single string field, e.g. ``{"id": ...}`` or ``{"url": ...}``."""
    return _require(_expect_dict(raw, where), key, str, where)
