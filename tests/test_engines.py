import json

import httpx
import pytest

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.config import ProviderConfig
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.engines.mistral import OCRRequestExecutor
from ocr_relay.engines.uploads import FileUploadClient
from ocr_relay.engines.wire import DocumentReference, OCRSubmission

from conftest import json_response, ocr_body

CONFIG = ProviderConfig(api_key="test-key")


@pytest.mark.asyncio
async def test_upload_sends_multipart_with_purpose(api):
    api.add("POST", "/v1/files", json_response(200, {"id": "file-123"}))

    async with api.client() as client:
        file_id = await FileUploadClient(client, CONFIG).upload(b"%PDF-1.4", "doc.pdf", "test-key")

    assert file_id == "file-123"
    request = api.calls("POST", "/v1/files")[0]
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="purpose"' in body
    assert b"ocr" in body
    assert b'filename="doc.pdf"' in body
    assert b"application/pdf" in body


@pytest.mark.asyncio
async def test_upload_failure_reports_status(api):
    api.add("POST", "/v1/files", json_response(413, {"message": "too big"}))

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await FileUploadClient(client, CONFIG).upload(b"x", "doc.pdf", "k")

    assert exc_info.value.kind == ErrorKind.FILE_UPLOAD_FAILED
    assert exc_info.value.status_code == 413


@pytest.mark.asyncio
async def test_signed_url_requests_expiry(api):
    api.add("GET", "/v1/files/file-9/url", json_response(200, {"url": "https://signed/file-9"}))

    async with api.client() as client:
        url = await FileUploadClient(client, CONFIG).get_signed_url("file-9", "k")

    assert url == "https://signed/file-9"
    assert api.requests[0].url.params["expiry"] == "24"


@pytest.mark.asyncio
async def test_signed_url_failure(api):
    api.add("GET", "/v1/files/file-9/url", json_response(404, {"detail": "gone"}))

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await FileUploadClient(client, CONFIG).get_signed_url("file-9", "k")

    assert exc_info.value.kind == ErrorKind.SIGNED_URL_FAILED
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_upload_response_without_id_is_invalid(api):
    api.add("POST", "/v1/files", json_response(200, {"name": "doc.pdf"}))

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await FileUploadClient(client, CONFIG).upload(b"x", "doc.pdf", "k")

    assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE


@pytest.mark.asyncio
async def test_upload_and_sign_runs_in_order(api):
    api.add("POST", "/v1/files", json_response(200, {"id": "f1"}))
    api.add("GET", "/v1/files/f1/url", json_response(200, {"url": "https://signed/f1"}))

    async with api.client() as client:
        url = await FileUploadClient(client, CONFIG).upload_and_sign(b"x", "doc.pdf", "k")

    assert url == "https://signed/f1"
    assert [r.url.path for r in api.requests] == ["/v1/files", "/v1/files/f1/url"]


@pytest.mark.asyncio
async def test_execute_posts_json_body(api):
    api.add("POST", "/v1/ocr", json_response(200, ocr_body(pages=2)))
    submission = OCRSubmission(document=DocumentReference("https://signed"), table_format="markdown")

    async with api.client() as client:
        response = await OCRRequestExecutor(client, CONFIG).execute(submission, "test-key")

    assert len(response.pages) == 2
    request = api.requests[0]
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert json.loads(request.content) == submission.to_wire()


@pytest.mark.asyncio
async def test_execute_classifies_error_status(api):
    api.add("POST", "/v1/ocr", json_response(422, {"detail": "password protected"}))

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await OCRRequestExecutor(client, CONFIG).execute(OCRSubmission(DocumentReference("u")), "k")

    assert exc_info.value.kind == ErrorKind.UNPROCESSABLE_DOCUMENT
    assert exc_info.value.message == "password protected"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"<html>oops</html>"),
        json_response(200, {"pages": [], "model": "m"}),
    ],
)
async def test_execute_rejects_malformed_success(api, response):
    api.add("POST", "/v1/ocr", response)

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await OCRRequestExecutor(client, CONFIG).execute(OCRSubmission(DocumentReference("u")), "k")

    assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, kind",
    [
        (httpx.ReadTimeout("slow"), ErrorKind.TIMEOUT),
        (httpx.ConnectError("offline"), ErrorKind.NETWORK_UNAVAILABLE),
    ],
)
async def test_transport_failures_are_mapped(api, exc, kind):
    api.add("POST", "/v1/ocr", exc)

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await OCRRequestExecutor(client, CONFIG).execute(OCRSubmission(DocumentReference("u")), "k")

    assert exc_info.value.kind == kind
    assert exc_info.value.is_retryable


@pytest.mark.asyncio
async def test_cancelled_token_blocks_request(api):
    token = CancellationToken()
    token.cancel()

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await OCRRequestExecutor(client, CONFIG).execute(
                OCRSubmission(DocumentReference("u")), "k", token
            )

    assert exc_info.value.kind == ErrorKind.CANCELLED
    assert api.requests == []


@pytest.mark.asyncio
async def test_undecodable_body_is_invalid_response(api):
    async def corrupt_gzip(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"Content-Encoding": "gzip", "Content-Type": "application/json"},
            stream=httpx.ByteStream(b"definitely not gzip"),
        )

    api.add("POST", "/v1/ocr", corrupt_gzip)

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await OCRRequestExecutor(client, CONFIG).execute(OCRSubmission(DocumentReference("u")), "k")

    assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE
    assert not exc_info.value.is_retryable


@pytest.mark.asyncio
async def test_other_request_errors_are_network_failures(api):
    api.add("GET", "/v1/files/f1/url", httpx.TooManyRedirects("redirect loop"))

    async with api.client() as client:
        with pytest.raises(OCRError) as exc_info:
            await FileUploadClient(client, CONFIG).get_signed_url("f1", "k")

    assert exc_info.value.kind == ErrorKind.NETWORK_UNAVAILABLE
