from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from ticketflow_core.config import ConfigLoader, TicketflowConfig
from ticketflow_core.errors import BacklogError

# Global variable to store custom config file path
_global_config_file: Optional[Path] = None
_verbose = False


def set_global_config_file(config_file: Optional[Path]) -> None:
    """Set (or clear) the global config file path for use by utility functions."""
    global _global_config_file
    _global_config_file = config_file.resolve() if config_file else None


def get_global_config_file() -> Optional[Path]:
    """Get the global config file path if set."""
    return _global_config_file


def set_verbose(verbose: bool) -> None:
    global _verbose
    _verbose = verbose


def configure_stdio() -> None:
    """Make CLI output robust across Windows console encodings.

    Backlog files are full of accents and emoji; on a cp1252 console printing
    them raises UnicodeEncodeError. Replace unencodable characters instead.
    """

    if os.name != "nt":
        return

    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(errors="replace")
        except AttributeError:
            continue


def load_config(start: Optional[Path] = None) -> TicketflowConfig:
    """Effective config for a command; exits with code 1 on a bad config file."""
    try:
        return ConfigLoader.load(start=start, config_file=get_global_config_file())
    except BacklogError as exc:
        fail(exc)


def configure_logging(config: TicketflowConfig) -> None:
    level = logging.DEBUG if _verbose else config.log_level
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_backlog_path(path: Path, config: TicketflowConfig) -> Path:
    """Accept either the backlog file or the folder holding it."""
    if path.is_dir():
        return path / config.backlog.file_name
    return path


def fail(exc: Exception, code: int = 1) -> NoReturn:
    typer.secho(f"❌ {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code)
