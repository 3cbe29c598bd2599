"""Configuration for ocr-relay."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

from ocr_relay.core.result import ProcessingSettings, TableFormat

# Output format -> file extension
OUTPUT_EXTENSIONS = {
    "markdown": "md",
    "json": "json",
    "text": "txt",
}


@dataclass
class ProviderConfig:
    """Mistral OCR API configuration."""

    api_key: str = ""
    base_url: str = "https://api.mistral.ai/v1"
    model: str = "mistral-ocr-latest"
    request_timeout: float = 180.0  # seconds, upload and OCR submission
    sign_timeout: float = 30.0  # seconds, signed URL lookup is metadata-only
    signed_url_expiry_hours: int = 24

    def __post_init__(self) -> None:
        if not self.api_key:
            self.api_key = os.environ.get("MISTRAL_API_KEY", "")


@dataclass
class RetryConfig:
    """Retry policy for the OCR submission."""

    max_attempts: int = 3  # Total, including the first attempt
    base_delay: float = 1.0  # seconds
    jitter_ratio: float = 0.5  # Up to +50% of the computed delay


def _section(data: dict, name: str, cls: type) -> dict:
    """Check a YAML section against the dataclass it configures."""
    section = data[name]
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' must be a mapping")
    unknown = set(section) - {f.name for f in fields(cls)}
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}': {', '.join(sorted(unknown))}")
    return dict(section)


@dataclass
class RelayConfig:
    """Main configuration for ocr-relay."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    settings: ProcessingSettings = field(default_factory=ProcessingSettings)

    output_dir: Path = field(default_factory=lambda: Path("output"))
    output_format: str = "markdown"  # markdown, json, text
    verbose: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if self.output_format not in OUTPUT_EXTENSIONS:
            raise ValueError(
                f"Unknown output_format {self.output_format!r}; "
                f"expected one of {', '.join(OUTPUT_EXTENSIONS)}"
            )

    @property
    def output_extension(self) -> str:
        return OUTPUT_EXTENSIONS[self.output_format]

    @classmethod
    def from_file(cls, path: Path | str) -> "RelayConfig":
        """Load configuration from a YAML file.

        Raises ValueError for unknown keys or invalid values.
        """
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top level must be a mapping")

        top_level = {"provider", "retry", "settings", "output_dir", "output_format", "verbose"}
        unknown = set(data) - top_level
        if unknown:
            raise ValueError(f"Unknown key(s) in {path}: {', '.join(sorted(unknown))}")

        config = cls()

        if "provider" in data:
            config.provider = ProviderConfig(**_section(data, "provider", ProviderConfig))
        if "retry" in data:
            config.retry = RetryConfig(**_section(data, "retry", RetryConfig))
        if "settings" in data:
            settings = _section(data, "settings", ProcessingSettings)
            if "table_format" in settings:
                settings["table_format"] = TableFormat(settings["table_format"])
            config.settings = ProcessingSettings(**settings)

        for key in ["output_dir", "output_format", "verbose"]:
            if key in data:
                setattr(config, key, data[key])

        config.__post_init__()
        return config
