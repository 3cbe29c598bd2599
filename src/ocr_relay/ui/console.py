"""Minimal console interface for ocr-relay."""

from rich.console import Console
from rich.markup import escape

from ocr_relay import __version__
from ocr_relay.core.cost import format_cost
from ocr_relay.core.document import Document
from ocr_relay.core.errors import OCRError
from ocr_relay.core.result import OCRResult
from ocr_relay.ui.theme import RELAY_THEME, STATUS_ICONS


class RelayConsole:
    """Minimal terminal interface for ocr-relay."""

    def __init__(self, verbose: bool = False, console: Console | None = None):
        self.console = console or Console(theme=RELAY_THEME)
        self.verbose = verbose

    def print_header(self) -> None:
        self.console.print()
        self.console.print(f"[dim]ocr-relay v{__version__}[/dim]")
        self.console.print()

    def print_document_info(self, document: Document) -> None:
        """Print document information."""
        self.console.print(f"[header]{document.filename}[/header]")
        pages = document.estimated_page_count
        pages_text = f"{pages} pages" if pages is not None else "unknown pages"
        self.console.print(f"[dim]{pages_text}, {document.size_mb:.1f} MB, {document.kind.value}[/dim]")
        estimate = document.estimated_cost()
        if estimate is not None:
            self.console.print(f"[dim]estimated cost: {format_cost(estimate, estimate=True)}[/dim]")
        self.console.print()

    def print_summary(self, result: OCRResult, output_path: str) -> None:
        """Print the final summary."""
        self.console.print()
        self.console.print("[dim]---[/dim]")
        self.console.print()

        self.console.print(f"[success]{STATUS_ICONS['success']} done[/success] {result.page_count} pages")
        self.console.print(f"     {result.word_count} words")
        self.console.print(f"     {result.formatted_duration}")
        if result.cost > 0:
            self.console.print(f"     [cost]{result.formatted_cost}[/cost]")
        self.console.print(f"[dim]     [mistral]{result.model}[/mistral][/dim]")

        self.console.print()
        self.console.print(f"[dim]->[/dim] {output_path}")
        self.console.print()

    def print_ocr_error(self, error: OCRError) -> None:
        """Print an OCR failure with its recovery suggestion."""
        self.print_error(error.description)
        if error.recovery_suggestion:
            self.console.print(f"    [dim]{escape(error.recovery_suggestion)}[/dim]")

    def print_error(self, message: str) -> None:
        self.console.print(f"[error]{STATUS_ICONS['error']} {escape(message)}[/error]")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[warning]{STATUS_ICONS['warning']} {escape(message)}[/warning]")

    def print_info(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]    {escape(message)}[/dim]")
