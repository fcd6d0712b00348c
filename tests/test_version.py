"""Tests for version information."""

from typer.testing import CliRunner

import ticketflow_core
from ticketflow_core import __version__, __version_info__


def test_version_string_format():
    """Version string should follow semantic versioning format."""
    parts = __version__.split(".")
    assert len(parts) == 3, f"Version should have 3 parts, got {len(parts)}"
    for part in parts:
        assert part.isdigit(), f"Version part '{part}' should be numeric"


def test_version_consistency():
    """Version string and version info should be consistent."""
    major, minor, patch = __version_info__
    assert __version__ == f"{major}.{minor}.{patch}"


def test_version_accessible_from_package():
    assert ticketflow_core.__version__ == "0.1.0"
    assert "__version__" in ticketflow_core.__all__


def test_cli_help_lists_commands():
    from ticketflow_cli.cli import app

    result = CliRunner().invoke(app, ["--help"])
    assert result.exit_code == 0, result.output
    for command in ("parse", "items", "types", "export", "toggle", "set", "add", "remove-type", "init"):
        assert command in result.output
