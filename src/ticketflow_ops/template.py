"""Backlog file creation from the default template."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

import tomli_w

from ticketflow_core.config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, DEFAULT_BACKLOG_FILE_NAME
from ticketflow_core.errors import WriteError
from ticketflow_core.sections import render_backlog_template
from ticketflow_core.types import DEFAULT_TYPES, TypeDefinition

from .backlog_file import write_markdown

logger = logging.getLogger(__name__)


@dataclass
class CreateBacklogResult:
    """Result of creating a new backlog file."""

    path: Path
    project_name: str
    types: List[str]
    created_paths: List[Path] = field(default_factory=list)


def _write_config(directory: Path, file_name: str) -> Optional[Path]:
    config_path = directory / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    if config_path.exists():
        return None
    payload = {"backlog": {"file_name": file_name}, "log": {"verbosity": "warning"}}
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(tomli_w.dumps(payload), encoding="utf-8")
    except OSError as e:
        raise WriteError(f"Failed to write {config_path}: {e}")
    return config_path


def create_backlog(
    directory: Path,
    types: Optional[Sequence[TypeDefinition]] = None,
    project_name: Optional[str] = None,
    *,
    file_name: str = DEFAULT_BACKLOG_FILE_NAME,
    write_config: bool = False,
    today: Optional[date] = None,
) -> CreateBacklogResult:
    """Write a new backlog file into `directory`.

    Args:
        directory: Target folder (created if missing)
        types: Backlog types, sorted by `order` (defaults to DEFAULT_TYPES)
        project_name: Title of the document (defaults to the folder name)
        file_name: Backlog file name
        write_config: Also write `.ticketflow/config.toml` when absent
        today: Date shown in the header

    Raises:
        FileExistsError: If the backlog file already exists
    """
    directory = directory.resolve()
    path = directory / file_name
    if path.exists():
        raise FileExistsError(f"Backlog already exists: {path}")

    name = (project_name or "").strip() or directory.name or "Project"
    chosen = list(types or DEFAULT_TYPES)

    created: List[Path] = []
    if not directory.exists():
        directory.mkdir(parents=True)
        created.append(directory)

    write_markdown(path, render_backlog_template(name, chosen, today))
    created.append(path)
    logger.info(f"Created backlog {path}")

    if write_config:
        config_path = _write_config(directory, file_name)
        if config_path is not None:
            created.append(config_path)

    ordered = sorted(chosen, key=lambda t: t.order)
    return CreateBacklogResult(
        path=path,
        project_name=name,
        types=[t.id for t in ordered],
        created_paths=created,
    )
