"""Commands that rewrite a backlog file: toggle, set, add, remove-type."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from pydantic import ValidationError

from ticketflow_core.errors import BacklogError
from ticketflow_ops import backlog_file

from ..util import fail, load_config, resolve_backlog_path

# Fields settable with --field; list fields accumulate repeated values.
SCALAR_FIELDS = ("title", "emoji", "component", "module", "severity", "priority", "effort", "description", "user_story")
LIST_FIELDS = ("specs", "reproduction", "screens", "dependencies", "constraints")


def parse_field_assignments(assignments: List[str]) -> Dict[str, Any]:
    """`["severity=P1", "specs=a", "specs=b"]` -> `{"severity": "P1", "specs": ["a", "b"]}`.

    An empty scalar value clears the field.
    """
    updates: Dict[str, Any] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        key = key.strip().lower().replace("-", "_")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{assignment}'")
        value = value.strip()
        if key in LIST_FIELDS:
            updates.setdefault(key, [])
            if value:
                updates[key].append(value)
        elif key in SCALAR_FIELDS:
            updates[key] = value or None
        else:
            raise ValueError(f"Unknown or read-only field '{key}'")
    return updates


def toggle(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    item_id: str = typer.Argument(..., help="Item ID, e.g. BUG-001"),
    index: int = typer.Argument(..., help="Zero-based acceptance criterion index"),
):
    """Check or uncheck one acceptance criterion in place."""
    path = resolve_backlog_path(file, load_config())
    try:
        result = backlog_file.toggle_criterion_in_file(path, item_id, index)
    except BacklogError as exc:
        fail(exc)

    if not result.changed:
        typer.echo(f"⚠️  {item_id} has no criterion #{index}; nothing changed")
        return
    criterion = result.item.criteria[index]
    mark = "x" if criterion.checked else " "
    typer.echo(f"OK: {item_id} [{mark}] {criterion.text}")


def set_fields(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    item_id: str = typer.Argument(..., help="Item ID, e.g. BUG-001"),
    fields: Optional[List[str]] = typer.Option(
        None, "--field", "-f", help="key=value; repeat for list fields (specs=..., specs=...)"
    ),
    output_format: str = typer.Option("plain", "--format", help="plain|json"),
):
    """Update item fields; the item is rewritten in canonical form."""
    if not fields:
        typer.echo("❌ Nothing to set: pass at least one --field key=value", err=True)
        raise typer.Exit(1)
    try:
        updates = parse_field_assignments(fields)
    except ValueError as exc:
        fail(exc)

    path = resolve_backlog_path(file, load_config())
    try:
        result = backlog_file.update_item_in_file(path, item_id, **updates)
    except (BacklogError, ValidationError) as exc:
        fail(exc)

    if output_format == "json":
        payload = result.item.model_dump(mode="json", exclude={"raw_markdown"})
        typer.echo(json.dumps(payload, ensure_ascii=True))
    else:
        typer.echo(f"OK: Updated {item_id} ({', '.join(sorted(updates))})")


def add(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    item_type: str = typer.Argument(..., help="Type code of the new item, e.g. BUG"),
    title: str = typer.Argument(..., help="Item title"),
    fields: Optional[List[str]] = typer.Option(
        None, "--field", "-f", help="key=value; repeat for list fields (specs=..., specs=...)"
    ),
):
    """Append a new item to the section holding its type."""
    try:
        updates = parse_field_assignments(fields or [])
    except ValueError as exc:
        fail(exc)
    updates.pop("title", None)

    path = resolve_backlog_path(file, load_config())
    try:
        result = backlog_file.add_item_to_file(path, item_type.upper(), title, **updates)
    except (BacklogError, ValidationError, ValueError) as exc:
        fail(exc)
    typer.echo(f"OK: Created {result.item_id}")


def remove_type(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    type_id: str = typer.Argument(..., help="Type code whose section is removed, e.g. CT"),
):
    """Remove a type's section, renumber the rest and rebuild the table of contents."""
    path = resolve_backlog_path(file, load_config())
    try:
        result = backlog_file.remove_type_from_file(path, type_id.upper())
    except BacklogError as exc:
        fail(exc)

    typer.echo(f"OK: Removed section for {result.type_id}")
    if result.remaining_types:
        typer.echo(f"  Remaining types: {', '.join(result.remaining_types)}")
