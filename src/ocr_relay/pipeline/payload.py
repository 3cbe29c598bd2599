"""Turn a document on disk into the wire payload for ``/ocr``."""

import asyncio
import base64
import logging

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.document import MAX_FILE_SIZE, Document, validate_document
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.engines.uploads import FileUploadClient
from ocr_relay.engines.wire import DocumentPayload, DocumentReference, InlineImage

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/jpeg"


def image_data_url(data: bytes, mime_type: str | None) -> str:
    """Base64 data URL for an image."""
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_IMAGE_MIME};base64,{b64}"


class PayloadPreparer:
    """Pick the wire representation for a document.

    PDFs are uploaded and referenced by signed URL; images are inlined as
    data URLs without any network call.
    """

    def __init__(self, uploader: FileUploadClient, max_file_size: int = MAX_FILE_SIZE) -> None:
        self.uploader = uploader
        self.max_file_size = max_file_size

    async def _read(self, document: Document) -> bytes:
        try:
            return await asyncio.to_thread(document.path.read_bytes)
        except OSError as e:
            logger.error("Failed to read document %s: %s", document.path, e)
            raise OCRError(ErrorKind.FILE_READ_ERROR, path=document.path) from e

    async def prepare(
        self,
        document: Document,
        api_key: str,
        token: CancellationToken | None = None,
    ) -> DocumentPayload:
        if token is not None:
            token.raise_if_cancelled()

        await asyncio.to_thread(validate_document, document, self.max_file_size)
        data = await self._read(document)

        if token is not None:
            token.raise_if_cancelled()

        if document.is_pdf:
            logger.info("Uploading PDF %s to the Files API", document.filename)
            url = await self.uploader.upload_and_sign(data, document.filename, api_key, token)
            logger.info("Got signed URL for %s", document.filename)
            return DocumentReference(url=url)

        if document.is_image:
            return InlineImage(data_url=image_data_url(data, document.mime_type))

        raise OCRError(ErrorKind.UNSUPPORTED_FORMAT, extension=document.file_extension)
