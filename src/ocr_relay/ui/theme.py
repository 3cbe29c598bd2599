"""Color theme and styling for the ocr-relay terminal UI."""

from rich.style import Style
from rich.theme import Theme

MISTRAL_COLOR = "#9B59B6"  # Purple - provider

# Status colors
SUCCESS_COLOR = "#2ECC71"
WARNING_COLOR = "#F39C12"
ERROR_COLOR = "#E74C3C"
INFO_COLOR = "#3498DB"
DIM_COLOR = "#7F8C8D"

STATUS_ICONS = {
    "success": "✓",
    "warning": "⚠",
    "error": "✗",
    "info": "•",
}

RELAY_THEME = Theme({
    "mistral": Style(color=MISTRAL_COLOR, bold=True),
    "success": Style(color=SUCCESS_COLOR),
    "warning": Style(color=WARNING_COLOR),
    "error": Style(color=ERROR_COLOR),
    "info": Style(color=INFO_COLOR),
    "dim": Style(color=DIM_COLOR),
    "header": Style(color="#ECF0F1", bold=True),
    "retry": Style(color=WARNING_COLOR, italic=True),
    "cost": Style(color="#F1C40F", bold=True),
})
