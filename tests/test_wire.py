import pytest

from ocr_relay.core.result import ProcessingSettings, TableFormat
from ocr_relay.engines.wire import (
    DocumentReference,
    InlineImage,
    OCRResponse,
    OCRSubmission,
    WireFormatError,
    decode_field,
)

from conftest import ocr_body


def test_default_settings_only_send_table_format():
    submission = OCRSubmission.from_settings(DocumentReference("https://signed"), ProcessingSettings.default())

    assert submission.to_wire() == {
        "model": "mistral-ocr-latest",
        "document": {"type": "document_url", "document_url": "https://signed"},
        "table_format": "markdown",
    }


def test_inline_table_format_is_omitted():
    settings = ProcessingSettings(table_format=TableFormat.INLINE)
    body = OCRSubmission.from_settings(InlineImage("data:image/png;base64,AA=="), settings).to_wire()

    assert body == {
        "model": "mistral-ocr-latest",
        "document": {"type": "image_url", "image_url": "data:image/png;base64,AA=="},
    }


def test_full_export_sends_every_flag():
    body = OCRSubmission.from_settings(
        DocumentReference("u"), ProcessingSettings.full_export(), model="custom-ocr"
    ).to_wire()

    assert body["model"] == "custom-ocr"
    assert body["include_image_base64"] is True
    assert body["extract_header"] is True
    assert body["extract_footer"] is True
    assert body["table_format"] == "markdown"


def test_false_flags_are_omitted_not_sent_as_false():
    settings = ProcessingSettings(include_images=False, extract_header=True, table_format=TableFormat.HTML)
    body = OCRSubmission.from_settings(DocumentReference("u"), settings).to_wire()

    assert "include_image_base64" not in body
    assert "extract_footer" not in body
    assert body["extract_header"] is True
    assert body["table_format"] == "html"


def test_decode_full_response():
    raw = ocr_body(
        pages=1,
        tables=[{"id": "tbl-0", "markdown": "| a |\n|---|\n| 1 |"}],
        images=[{
            "id": "img-0",
            "top_left_x": 10,
            "top_left_y": 20,
            "bottom_right_x": 110.5,
            "bottom_right_y": 220,
            "image_base64": None,
        }],
        dimensions={"width": 800, "height": 1000, "dpi": 200},
        header="ACME Corp",
    )

    response = OCRResponse.from_dict(raw)

    page = response.pages[0]
    assert response.usage_info.pages_processed == 1
    assert page.tables[0].id == "tbl-0"
    assert page.images[0].bottom_right_x == 110.5
    assert page.images[0].image_base64 is None
    assert page.dimensions.dpi == 200
    assert page.header == "ACME Corp"
    assert page.footer is None


def test_absent_lists_decode_as_none():
    page = OCRResponse.from_dict(ocr_body()).pages[0]
    assert page.tables is None
    assert page.images is None
    assert page.dimensions is None


@pytest.mark.parametrize(
    "mutate",
    [
        lambda b: b.pop("pages"),
        lambda b: b.pop("usage_info"),
        lambda b: b["usage_info"].pop("pages_processed"),
        lambda b: b["usage_info"].update(pages_processed="3"),
        lambda b: b["usage_info"].update(pages_processed=True),
        lambda b: b["pages"][0].pop("markdown"),
        lambda b: b["pages"][0].update(index="0"),
        lambda b: b["pages"][0].update(tables="not a list"),
        lambda b: b.update(model=None),
    ],
)
def test_strict_decoding_rejects_bad_shapes(mutate):
    body = ocr_body()
    mutate(body)
    with pytest.raises(WireFormatError):
        OCRResponse.from_dict(body)


def test_non_object_response_is_rejected():
    with pytest.raises(WireFormatError):
        OCRResponse.from_dict([])


def test_decode_field():
    assert decode_field({"id": "file-1"}, "id", "upload") == "file-1"
    with pytest.raises(WireFormatError):
        decode_field({"id": 1}, "id", "upload")
    with pytest.raises(WireFormatError):
        decode_field({}, "url", "signed")
