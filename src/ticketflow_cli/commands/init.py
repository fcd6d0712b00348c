from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from ticketflow_core.errors import BacklogError
from ticketflow_core.types import DEFAULT_TYPES, TypeDefinition
from ticketflow_ops.template import create_backlog

from ..util import fail, load_config


def parse_type_options(values: List[str]) -> List[TypeDefinition]:
    """`["BUG:Bugs", "DOC"]` -> TypeDefinitions in the given order."""
    defaults = {t.id: t for t in DEFAULT_TYPES}
    result: List[TypeDefinition] = []
    for order, value in enumerate(values):
        type_id, _, label = value.partition(":")
        type_id = type_id.strip().upper()
        if not type_id:
            raise ValueError(f"Invalid type '{value}'")
        label = label.strip() or (defaults[type_id].label if type_id in defaults else type_id.title())
        result.append(TypeDefinition(id=type_id, label=label, order=order))
    return result


def init(
    directory: Path = typer.Argument(Path("."), help="Folder that will hold the backlog file"),
    type_specs: Optional[List[str]] = typer.Option(
        None, "--type", "-t", help="ID[:Label]; repeat for each section (default: BUG, CT, LT, AUTRE)"
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Project name (default: folder name)"),
    write_config: bool = typer.Option(
        False, "--write-config", help="Also write .ticketflow/config.toml"
    ),
):
    """Create a new backlog file from the template."""
    config = load_config(directory if directory.exists() else None)
    try:
        types = parse_type_options(type_specs) if type_specs else None
    except ValueError as exc:
        fail(exc)

    try:
        result = create_backlog(
            directory,
            types,
            name,
            file_name=config.backlog.file_name,
            write_config=write_config,
        )
    except FileExistsError as exc:
        fail(exc)
    except BacklogError as exc:
        fail(exc)

    typer.echo(f"OK: Created {result.path}")
    typer.echo(f"  Types: {', '.join(result.types)}")
