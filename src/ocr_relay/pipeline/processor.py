"""Main OCR processing orchestrator."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable

import httpx

from ocr_relay.core.cancellation import CancellationToken
from ocr_relay.core.config import RelayConfig
from ocr_relay.core.cost import CostCalculator
from ocr_relay.core.credentials import (
    CredentialProvider,
    EnvCredentialProvider,
    StaticCredentialProvider,
)
from ocr_relay.core.document import Document
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.core.result import OCRResult, ProcessingProgress, ProcessingSettings
from ocr_relay.engines.mistral import OCRRequestExecutor
from ocr_relay.engines.uploads import FileUploadClient
from ocr_relay.engines.wire import OCRSubmission
from ocr_relay.pipeline.payload import PayloadPreparer
from ocr_relay.pipeline.retry import RetryPolicy
from ocr_relay.pipeline.transform import ResponseTransformer

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProcessingProgress], None]


class ProcessingState(str, Enum):
    """Lifecycle of the current (or last) processing job."""

    IDLE = "idle"
    PREPARING = "preparing"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class OCRProcessor:
    """Run documents through upload, submission, retry and transformation.

    Holds at most one in-flight job. The job handle is only assigned by
    ``process_document`` and cleared by ``cancel_processing`` or job
    completion, all on the event loop thread.
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        credentials: CredentialProvider | None = None,
        cost_calculator: CostCalculator | None = None,
        client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or RelayConfig()
        provider = self.config.provider

        if credentials is None:
            credentials = (
                StaticCredentialProvider(provider.api_key)
                if provider.api_key
                else EnvCredentialProvider()
            )
        self.credentials = credentials
        self.cost_calculator = cost_calculator or CostCalculator()

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=provider.base_url)

        self.uploader = FileUploadClient(self.client, provider)
        self.preparer = PayloadPreparer(self.uploader)
        self.executor = OCRRequestExecutor(self.client, provider)
        self.retry_policy = retry_policy or RetryPolicy.from_config(self.config.retry)
        self.transformer = ResponseTransformer(self.cost_calculator.calculate_cost)

        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._current_task: asyncio.Task[OCRResult] | None = None
        self._current_token: CancellationToken | None = None
        self.state = ProcessingState.IDLE

    @property
    def is_processing(self) -> bool:
        return self._current_task is not None and not self._current_task.done()

    async def process_document(
        self,
        document: Document,
        settings: ProcessingSettings | None = None,
        on_progress: ProgressSink | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> OCRResult:
        """Process one document and return its OCR result.

        Raises OCRError for every failure, including ``CANCELLED`` when
        ``cancel_processing`` is called or ``cancel_token`` fires.
        """
        logger.info("Starting OCR processing for: %s", document.display_name)

        api_key = self.credentials.retrieve_credential()
        if not api_key:
            logger.error("No API key available")
            # A rejected call never touches the state of a job it does not own
            if not self.is_processing:
                self.state = ProcessingState.FAILED
            raise OCRError(ErrorKind.MISSING_CREDENTIAL)

        if self.is_processing:
            raise RuntimeError("A document is already being processed; cancel it first")

        token = cancel_token or CancellationToken()
        task = asyncio.create_task(
            self._run(document, settings or self.config.settings, api_key, token, on_progress)
        )
        self._current_task = task
        self._current_token = token
        watcher = asyncio.create_task(self._watch(token, task))

        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            self._finish(task, ProcessingState.CANCELLED)
            if current is not None and current.cancelling():
                # The caller itself is being cancelled; honour that
                task.cancel()
                raise
            logger.info("OCR processing was cancelled")
            raise OCRError(ErrorKind.CANCELLED) from None
        except OCRError as e:
            cancelled = e.kind == ErrorKind.CANCELLED
            self._finish(task, ProcessingState.CANCELLED if cancelled else ProcessingState.FAILED)
            raise
        except Exception:
            self._finish(task, ProcessingState.FAILED)
            raise
        finally:
            watcher.cancel()

        self._finish(task, ProcessingState.COMPLETED)
        return result

    @staticmethod
    async def _watch(token: CancellationToken, task: asyncio.Task) -> None:
        """Interrupt the job's current await as soon as the token fires."""
        await token.wait()
        if not task.done():
            task.cancel()

    def cancel_processing(self) -> None:
        """Cancel the in-flight job, if any. Safe to call at any time."""
        task, token = self._current_task, self._current_token
        self._current_task = None
        self._current_token = None

        if token is not None:
            token.cancel()
        if task is not None and not task.done():
            task.cancel()
            logger.info("OCR processing cancelled by user")

    def _finish(self, task: asyncio.Task, state: ProcessingState) -> None:
        # A newer job may already own the handle; leave its handle and state alone
        if self._current_task is task:
            self._current_task = None
            self._current_token = None
        elif self._current_task is not None:
            return
        self.state = state

    async def _run(
        self,
        document: Document,
        settings: ProcessingSettings,
        api_key: str,
        token: CancellationToken,
        on_progress: ProgressSink | None,
    ) -> OCRResult:
        started_at = self._clock()
        total_pages = document.estimated_page_count or 1

        def emit(attempt: int) -> None:
            if on_progress is None or token.is_cancelled:
                return
            progress = ProcessingProgress(
                current_page=0,
                total_pages=total_pages,
                started_at=started_at,
                attempt=attempt,
            )
            try:
                on_progress(progress)
            except Exception:
                logger.exception("Progress callback failed")

        self.state = ProcessingState.PREPARING
        emit(1)

        payload = await self.preparer.prepare(document, api_key, token)
        submission = OCRSubmission.from_settings(payload, settings, model=self.config.provider.model)

        token.raise_if_cancelled()
        self.state = ProcessingState.AWAITING_RESPONSE

        response = await self.retry_policy.run(
            lambda: self.executor.execute(submission, api_key, token),
            token=token,
            on_retry=emit,
        )

        token.raise_if_cancelled()
        ended_at = self._clock()

        result = self.transformer.transform(response, document.id, started_at, ended_at)
        logger.info(
            "OCR completed: %d pages, %d words, %s",
            result.page_count,
            result.word_count,
            result.formatted_cost,
        )
        return result

    def _default_output_file(self, document: Document) -> Path:
        ext = self.config.output_extension
        stem = document.display_name or "output"
        return self.config.output_dir / stem / f"{stem}.{ext}"

    def save_output(
        self,
        result: OCRResult,
        document: Document,
        output_path: Path | str | None = None,
    ) -> Path:
        """Write the result next to a ``metadata.json`` and return the output file."""
        ext = self.config.output_extension

        if output_path is None:
            output_file = self._default_output_file(document)
        else:
            output_path = Path(output_path)
            if output_path.suffix:
                output_file = output_path
            else:
                output_file = output_path / f"{document.display_name}.{ext}"

        output_file.parent.mkdir(parents=True, exist_ok=True)

        output_format = self.config.output_format
        if output_format == "json":
            content = json.dumps(result.to_dict(), indent=2)
        elif output_format == "text":
            content = result.full_plain_text + "\n"
        else:
            content = result.to_markdown(title=document.filename)
        output_file.write_text(content, encoding="utf-8")

        metadata = {
            "source": str(document.path),
            "document_id": str(result.document_id),
            "output_file": str(output_file),
            "format": self.config.output_format,
            "model": result.model,
            "pages": result.page_count,
            "cost": str(result.cost),
            "processing_duration": result.processing_duration,
            "completed_at": result.completed_at.isoformat(),
        }
        (output_file.parent / "metadata.json").write_text(json.dumps(metadata, indent=2), encoding="utf-8")

        return output_file

    async def aclose(self) -> None:
        self.cancel_processing()
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "OCRProcessor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
