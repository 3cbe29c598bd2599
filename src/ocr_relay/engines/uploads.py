"""Upload PDFs to the Mistral Files API and obtain signed URLs."""

import logging

import httpx

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.config import ProviderConfig
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.engines.transport import decode_json, send
from ocr_relay.engines.wire import WireFormatError, decode_field

logger = logging.getLogger(__name__)


class FileUploadClient:
    """Two-step upload: ``POST /files`` then ``GET /files/{id}/url``.

    Neither step is retried here; the caller decides what to repeat.
    """

    def __init__(self, client: httpx.AsyncClient, config: ProviderConfig | None = None) -> None:
        self.client = client
        self.config = config or ProviderConfig()

    async def upload(
        self,
        data: bytes,
        filename: str,
        api_key: str,
        token: CancellationToken | None = None,
    ) -> str:
        """Upload raw bytes and return the provider's file id."""
        logger.debug("Uploading file: %s (%d bytes)", filename, len(data))

        response = await send(
            self.client,
            "POST",
            "/files",
            api_key=api_key,
            timeout=self.config.request_timeout,
            token=token,
            data={"purpose": "ocr"},
            files={"file": (filename, data, "application/pdf")},
        )

        if not response.is_success:
            logger.error("File upload failed (%s): %s", response.status_code, response.text[:500])
            raise OCRError(ErrorKind.FILE_UPLOAD_FAILED, status_code=response.status_code)

        try:
            file_id = decode_field(decode_json(response), "id", "upload response")
        except WireFormatError as e:
            raise OCRError(ErrorKind.INVALID_RESPONSE) from e

        logger.info("File uploaded, id=%s", file_id)
        return file_id

    async def get_signed_url(
        self,
        file_id: str,
        api_key: str,
        token: CancellationToken | None = None,
    ) -> str:
        """Exchange a file id for a time-limited signed URL."""
        response = await send(
            self.client,
            "GET",
            f"/files/{file_id}/url",
            api_key=api_key,
            timeout=self.config.sign_timeout,
            token=token,
            params={"expiry": str(self.config.signed_url_expiry_hours)},
        )

        if response.status_code != 200:
            logger.error("Get signed URL failed (%s): %s", response.status_code, response.text[:500])
            raise OCRError(ErrorKind.SIGNED_URL_FAILED, status_code=response.status_code)

        try:
            return decode_field(decode_json(response), "url", "signed URL response")
        except WireFormatError as e:
            raise OCRError(ErrorKind.INVALID_RESPONSE) from e

    async def upload_and_sign(
        self,
        data: bytes,
        filename: str,
        api_key: str,
        token: CancellationToken | None = None,
    ) -> str:
        file_id = await self.upload(data, filename, api_key, token)
        return await self.get_signed_url(file_id, api_key, token)
