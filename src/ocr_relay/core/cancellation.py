"""Cooperative cancellation for in-flight processing jobs."""

import asyncio
import contextlib

from ocr_relay.core.errors import ErrorKind, OCRError


class CancellationToken:
    """Flag shared by every suspension point of one processing job.

    Checked before each network call and awaited during retry sleeps, so a
    cancel request unwinds the pipeline without further I/O.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise OCRError(CANCELLED) if cancellation was requested."""
        if self._event.is_set():
            raise OCRError(ErrorKind.CANCELLED)

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """Sleep for ``delay`` seconds, waking early if cancelled."""
        self.raise_if_cancelled()
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._event.wait(), timeout=max(delay, 0.0))
        self.raise_if_cancelled()
