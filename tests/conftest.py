import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from ocr_relay.core.document import Document, DocumentKind

BASE_URL = "https://api.test/v1"


def ocr_body(pages: int = 1, pages_processed: int | None = None, **page_fields: Any) -> dict:
    """A successful ``/ocr`` response body."""
    return {
        "model": "mistral-ocr-latest",
        "pages": [
            {"index": i, "markdown": f"# Page {i + 1}\n\nHello world", **page_fields}
            for i in range(pages)
        ],
        "usage_info": {
            "pages_processed": pages if pages_processed is None else pages_processed,
            "doc_size_bytes": 1024,
        },
    }


class ScriptedAPI:
    """Serve canned responses per ``(method, path)`` and record every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> "ScriptedAPI":
        self.routes.setdefault((method, path), []).extend(responses)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            item = await item(request)
        return item

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url=BASE_URL)


def json_response(status: int, body: Any) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})


@pytest.fixture
def api() -> ScriptedAPI:
    return ScriptedAPI()


@pytest.fixture
def pdf_document(tmp_path: Path) -> Document:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4\n% fake pdf body\n%%EOF\n")
    return Document(
        path=path,
        kind=DocumentKind.PDF,
        mime_type="application/pdf",
        estimated_page_count=2,
        file_size=path.stat().st_size,
    )


@pytest.fixture
def image_document(tmp_path: Path) -> Document:
    path = tmp_path / "scan.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    return Document(
        path=path,
        kind=DocumentKind.IMAGE,
        mime_type="image/png",
        estimated_page_count=1,
        file_size=path.stat().st_size,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable:
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep
