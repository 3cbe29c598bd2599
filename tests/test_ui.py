from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

pytest.importorskip("rich")

from rich.console import Console

from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.core.result import OCRPage, OCRResult, ProcessingProgress
from ocr_relay.ui.console import RelayConsole
from ocr_relay.ui.progress import ProgressDisplay
from ocr_relay.ui.theme import RELAY_THEME


def _console() -> Console:
    return Console(theme=RELAY_THEME, record=True, width=100, force_terminal=False)


def test_error_shows_recovery_suggestion():
    console = _console()
    RelayConsole(console=console).print_ocr_error(OCRError(ErrorKind.RATE_LIMITED))

    text = console.export_text()
    assert "Rate limit exceeded" in text
    assert "retried automatically" in text


def test_error_message_with_brackets_is_not_markup():
    console = _console()
    RelayConsole(console=console).print_error("Invalid request: field [model] missing")
    assert "[model]" in console.export_text()


def test_summary():
    console = _console()
    result = OCRResult(
        document_id=uuid4(),
        pages=(OCRPage(index=0, markdown="one two three"),),
        model="mistral-ocr-latest",
        cost=Decimal("0.001"),
        processing_duration=83.0,
        completed_at=datetime.now(timezone.utc),
    )

    RelayConsole(console=console).print_summary(result, "output/doc/doc.md")

    text = console.export_text()
    assert "1 pages" in text
    assert "3 words" in text
    assert "1m 23s" in text
    assert "$0.001" in text
    assert "output/doc/doc.md" in text


def test_info_only_when_verbose():
    console = _console()
    RelayConsole(console=console).print_info("quiet")
    RelayConsole(verbose=True, console=console).print_info("loud")

    text = console.export_text()
    assert "quiet" not in text
    assert "loud" in text


def test_progress_display_records_snapshots_outside_track():
    display = ProgressDisplay(console=_console())
    snapshot = ProcessingProgress(current_page=0, total_pages=4, started_at=datetime.now(timezone.utc))

    display(snapshot)

    assert display.events == [snapshot]


def test_progress_display_updates_bar():
    display = ProgressDisplay(console=_console(), max_attempts=3)
    started = datetime.now(timezone.utc)

    with display.track():
        display(ProcessingProgress(current_page=0, total_pages=4, started_at=started))
        display(ProcessingProgress(current_page=0, total_pages=4, started_at=started, attempt=2))
        task = display._progress.tasks[0]
        assert task.total == 4
        assert "retry 2/3" in task.description

    assert [e.attempt for e in display.events] == [1, 2]
