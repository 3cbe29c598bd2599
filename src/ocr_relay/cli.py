"""CLI for ocr-relay - Reliable document submission to the Mistral OCR API."""

import asyncio
import contextlib
import dataclasses
import logging
import signal
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from ocr_relay import __version__
from ocr_relay.core.config import OUTPUT_EXTENSIONS, RelayConfig
from ocr_relay.core.cost import CostCalculator, format_cost
from ocr_relay.core.document import Document
from ocr_relay.core.errors import ErrorKind, OCRError
from ocr_relay.core.result import OCRResult, TableFormat
from ocr_relay.pipeline.processor import OCRProcessor
from ocr_relay.ui.console import RelayConsole
from ocr_relay.ui.progress import ProgressDisplay
from ocr_relay.ui.theme import RELAY_THEME

console = Console(theme=RELAY_THEME)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run_process(
    processor: OCRProcessor,
    document: Document,
    progress: ProgressDisplay,
) -> OCRResult:
    """Run one job, turning Ctrl+C into a cooperative cancel."""
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, processor.cancel_processing)
    try:
        async with processor:
            with progress.track():
                return await processor.process_document(document, on_progress=progress)
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)


@click.group()
@click.version_option(version=__version__, prog_name="ocr-relay")
def cli() -> None:
    """ocr-relay - Reliable document submission to the Mistral OCR API.

    Usage:
        ocr-relay process scan.pdf              # Markdown into output/
        ocr-relay process photo.png -f json     # JSON result
        ocr-relay estimate scan.pdf             # Cost estimate, no upload
    """


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    help="Output file path (default: output/<doc_stem>/<doc_stem>.<ext>)",
)
@click.option(
    "-f", "--format",
    type=click.Choice(list(OUTPUT_EXTENSIONS)),
    default=None,
    help="Output format (default: markdown)",
)
@click.option("--include-images", is_flag=True, help="Return base64 data for extracted images")
@click.option(
    "--table-format",
    type=click.Choice([f.value for f in TableFormat]),
    default=None,
    help="How tables are returned (default: markdown)",
)
@click.option("--extract-header", is_flag=True, help="Extract page headers separately")
@click.option("--extract-footer", is_flag=True, help="Extract page footers separately")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def process(
    file_path: Path,
    output: Path | None,
    format: str | None,
    include_images: bool,
    table_format: str | None,
    extract_header: bool,
    extract_footer: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Run OCR on a PDF or image.

    PDFs are uploaded to the Files API first; images are sent inline.
    Press Ctrl+C to cancel a running job.

    Example:
        ocr-relay process scan.pdf -o extracted.md
    """
    try:
        config = RelayConfig.from_file(config_path) if config_path else RelayConfig()
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--config")
    config.verbose = config.verbose or verbose
    if format:
        config.output_format = format

    overrides = {}
    if include_images:
        overrides["include_images"] = True
    if table_format:
        overrides["table_format"] = TableFormat(table_format)
    if extract_header:
        overrides["extract_header"] = True
    if extract_footer:
        overrides["extract_footer"] = True
    if overrides:
        config.settings = dataclasses.replace(config.settings, **overrides)

    setup_logging(config.verbose)

    ui = RelayConsole(verbose=config.verbose, console=console)
    ui.print_header()

    document = Document.from_path(file_path)
    ui.print_document_info(document)

    processor = OCRProcessor(config)
    progress = ProgressDisplay(console=console, max_attempts=config.retry.max_attempts)

    try:
        result = asyncio.run(run_process(processor, document, progress))
    except OCRError as e:
        if e.kind == ErrorKind.CANCELLED:
            ui.print_warning("Processing cancelled")
            raise click.Abort()
        ui.print_ocr_error(e)
        raise click.ClickException(e.description)

    output_path = processor.save_output(result, document, output)
    ui.print_summary(result, str(output_path))


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def estimate(file_path: Path) -> None:
    """Estimate the cost of processing a document. No network access."""
    document = Document.from_path(file_path)
    calculator = CostCalculator()

    console.print(f"[header]{document.filename}[/header] [dim]({document.kind.value})[/dim]")

    if document.estimated_page_count is None:
        console.print("[warning]Page count unknown; cost cannot be estimated[/warning]")
        return

    pages = document.estimated_page_count
    cost = calculator.calculate_cost(pages)
    console.print(f"  Pages: {pages}")
    console.print(f"  Estimated cost: {format_cost(cost, estimate=True)}")
    console.print(f"  [dim]{calculator.format_detailed_cost(cost, pages)}[/dim]")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
