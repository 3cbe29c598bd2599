"""Shared HTTP plumbing for the provider endpoints."""

import logging
from typing import Any

import httpx

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.errors import ErrorKind, OCRError

logger = logging.getLogger(__name__)


def bearer_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}


def decode_json(response: httpx.Response) -> Any:
    """Parse a response body, reporting malformed JSON as invalid-response."""
    try:
        return response.json()
    except ValueError as e:
        logger.error("Malformed JSON from %s: %s", response.request.url.path, e)
        raise OCRError(ErrorKind.INVALID_RESPONSE) from e


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    api_key: str,
    timeout: float,
    token: CancellationToken | None = None,
    headers: dict[str, str] | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Issue one request, mapping transport failures to OCR errors.

    Cancellation is checked before any bytes go out.
    """
    if token is not None:
        token.raise_if_cancelled()

    try:
        return await client.request(
            method,
            url,
            headers={**bearer_headers(api_key), **(headers or {})},
            timeout=timeout,
            **kwargs,
        )
    except httpx.TimeoutException as e:
        logger.warning("%s %s timed out after %.0fs", method, url, timeout)
        raise OCRError(ErrorKind.TIMEOUT) from e
    except httpx.DecodingError as e:
        logger.error("%s %s returned an undecodable body: %s", method, url, e)
        raise OCRError(ErrorKind.INVALID_RESPONSE) from e
    except httpx.TransportError as e:
        logger.warning("%s %s failed: %s", method, url, e)
        raise OCRError(ErrorKind.NETWORK_UNAVAILABLE) from e
    except httpx.RequestError as e:
        # e.g. TooManyRedirects
        logger.warning("%s %s failed: %s", method, url, e)
        raise OCRError(ErrorKind.NETWORK_UNAVAILABLE) from e
