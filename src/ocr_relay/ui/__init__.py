"""Rich terminal UI components for ocr-relay."""

from ocr_relay.ui.console import RelayConsole
from ocr_relay.ui.progress import ProgressDisplay

__all__ = ["RelayConsole", "ProgressDisplay"]
