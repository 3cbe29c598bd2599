"""Bounded exponential backoff with jitter for the OCR submission."""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.config import RetryConfig
from ocr_relay.core.errors import ErrorKind, OCRError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retry an async operation on transient OCR errors.

    The delay before attempt ``k`` (k >= 2) is ``base * 2**(k - 2)`` plus a
    uniform jitter of up to ``jitter_ratio`` times that delay.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        jitter_ratio: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        rng: Callable[[], float] = random.random,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.jitter_ratio = jitter_ratio
        self._sleep = sleep
        self._rng = rng

    @classmethod
    def from_config(cls, config: RetryConfig, **kwargs) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay,
            jitter_ratio=config.jitter_ratio,
            **kwargs,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before ``attempt`` (1-based). Zero for the first."""
        if attempt <= 1:
            return 0.0
        delay = self.base_delay * (2 ** (attempt - 2))
        jitter = self._rng() * self.jitter_ratio * delay
        return delay + jitter

    async def _wait(self, delay: float, token: CancellationToken | None) -> None:
        if self._sleep is not None:
            await self._sleep(delay)
        elif token is not None:
            await token.sleep(delay)
        else:
            await asyncio.sleep(delay)
        if token is not None:
            token.raise_if_cancelled()

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        token: CancellationToken | None = None,
        on_retry: Callable[[int], None] | None = None,
    ) -> T:
        """Run ``operation`` until it succeeds, fails permanently, or attempts run out."""
        last_error: OCRError | None = None

        for attempt in range(1, self.max_attempts + 1):
            if token is not None:
                token.raise_if_cancelled()

            if attempt > 1:
                delay = self.delay_for(attempt)
                logger.info("Retry attempt %d after %.1fs delay", attempt, delay)
                if on_retry is not None:
                    on_retry(attempt)
                await self._wait(delay, token)

            try:
                return await operation()
            except OCRError as e:
                if e.kind == ErrorKind.CANCELLED or not e.is_retryable:
                    raise
                last_error = e
                logger.warning(
                    "Request failed (attempt %d/%d): %s",
                    attempt,
                    self.max_attempts,
                    e.description,
                )

        raise last_error or OCRError(
            ErrorKind.UNKNOWN,
            f"Request failed after {self.max_attempts} attempts",
        )
