from pathlib import Path

import pytest
from click.testing import CliRunner

from ocr_relay import __version__
from ocr_relay.cli import cli


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    Image = pytest.importorskip("PIL.Image")
    path = tmp_path / "receipt.png"
    Image.new("RGB", (32, 32), "white").save(path)
    return path


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_estimate_image(png_file: Path):
    result = CliRunner().invoke(cli, ["estimate", str(png_file)])

    assert result.exit_code == 0, result.output
    assert "receipt.png" in result.output
    assert "Pages: 1" in result.output
    assert "~$0.001" in result.output


def test_estimate_unknown_page_count(tmp_path: Path):
    path = tmp_path / "notes.xyz"
    path.write_bytes(b"plain text")

    result = CliRunner().invoke(cli, ["estimate", str(path)])

    assert result.exit_code == 0
    assert "cannot be estimated" in result.output


def test_process_without_api_key(png_file: Path, monkeypatch, tmp_path: Path):
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)

    result = CliRunner().invoke(cli, ["process", str(png_file), "-o", str(tmp_path / "out.md")])

    assert result.exit_code == 1
    assert "No API key configured" in result.output
    assert not (tmp_path / "out.md").exists()


def test_process_rejects_bad_table_format(png_file: Path):
    result = CliRunner().invoke(cli, ["process", str(png_file), "--table-format", "csv"])
    assert result.exit_code == 2


def test_process_rejects_unknown_config_key(png_file: Path, tmp_path: Path):
    config_file = tmp_path / "relay.yaml"
    config_file.write_text("provider:\n  api_keey: k\n")

    result = CliRunner().invoke(cli, ["process", str(png_file), "--config", str(config_file)])

    assert result.exit_code == 2
    assert "api_keey" in result.output
    assert "Traceback" not in result.output


def test_process_accepts_text_format(png_file: Path, monkeypatch):
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    result = CliRunner().invoke(cli, ["process", str(png_file), "-f", "text"])
    # Fails on the missing key, not on option parsing
    assert result.exit_code == 1
    assert "No API key configured" in result.output
