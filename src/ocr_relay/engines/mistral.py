"""Mistral OCR request executor.

Sends one ``POST /ocr`` submission and decodes the result. Status handling
is delegated to the error classifier; retries live in the pipeline.
"""

import json
import logging

import httpx

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.config import ProviderConfig
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.engines.classifier import ErrorClassifier
from ocr_relay.engines.transport import decode_json, send
from ocr_relay.engines.wire import OCRResponse, OCRSubmission, WireFormatError

logger = logging.getLogger(__name__)


class OCRRequestExecutor:
    """Adapter for the Mistral ``/ocr`` endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ProviderConfig | None = None,
        classifier: ErrorClassifier | None = None,
    ) -> None:
        self.client = client
        self.config = config or ProviderConfig()
        self.classifier = classifier or ErrorClassifier()

    async def execute(
        self,
        submission: OCRSubmission,
        api_key: str,
        token: CancellationToken | None = None,
    ) -> OCRResponse:
        payload = json.dumps(submission.to_wire()).encode("utf-8")
        logger.debug("OCR request payload size: %d bytes", len(payload))

        response = await send(
            self.client,
            "POST",
            "/ocr",
            api_key=api_key,
            timeout=self.config.request_timeout,
            token=token,
            content=payload,
            headers={"Content-Type": "application/json"},
        )

        logger.debug("OCR response status: %s", response.status_code)

        if response.status_code != 200:
            raise self.classifier.classify(response.status_code, response.content)

        try:
            return OCRResponse.from_dict(decode_json(response))
        except WireFormatError as e:
            logger.error("Failed to decode OCR response: %s", e)
            logger.debug("Response body: %s", response.text[:1000])
            raise OCRError(ErrorKind.INVALID_RESPONSE) from e
