"""Progress display for OCR processing."""

from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from ocr_relay.core.result import ProcessingProgress
from ocr_relay.ui.theme import RELAY_THEME


class ProgressDisplay:
    """Rich progress bar fed by ``ProcessingProgress`` snapshots.

    Instances are callable so they can be passed straight to
    ``OCRProcessor.process_document`` as the progress sink.
    """

    def __init__(self, console: Console | None = None, max_attempts: int = 3):
        self.console = console or Console(theme=RELAY_THEME)
        self.max_attempts = max_attempts
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self.events: list[ProcessingProgress] = []

    def create_progress(self) -> Progress:
        """Create a styled progress bar."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40, complete_style="bright_blue", finished_style="green"),
            TextColumn("{task.completed}/{task.total} pages"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    @contextmanager
    def track(self, description: str = "processing") -> Generator["ProgressDisplay", None, None]:
        """Show the bar while the wrapped block runs."""
        progress = self.create_progress()
        self._progress = progress
        self._task_id = progress.add_task(f"[mistral]Mistral[/mistral] [dim]{description}[/dim]", total=None)
        try:
            with progress:
                yield self
        finally:
            self._progress = None
            self._task_id = None

    def __call__(self, snapshot: ProcessingProgress) -> None:
        self.events.append(snapshot)
        if self._progress is None or self._task_id is None:
            return

        description = "[mistral]Mistral[/mistral] [dim]processing[/dim]"
        if snapshot.attempt > 1:
            description += f" [retry](retry {snapshot.attempt}/{self.max_attempts})[/retry]"

        self._progress.update(
            self._task_id,
            description=description,
            total=snapshot.total_pages,
            completed=snapshot.current_page,
        )
