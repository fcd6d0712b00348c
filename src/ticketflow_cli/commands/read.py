"""Read-only commands: parse, items, types, export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ticketflow_core.errors import BacklogError
from ticketflow_core.labels import get_type_label
from ticketflow_core.models import BacklogItem
from ticketflow_ops import backlog_file
from ticketflow_ops.export import export_item

from ..util import fail, load_config, resolve_backlog_path

console = Console()


def _kind_summary(section) -> str:
    counts = {"item": 0, "table-group": 0, "raw-section": 0}
    for item in section.items:
        counts[item.kind] += 1
    return ", ".join(f"{count} {kind}" for kind, count in counts.items() if count)


def parse(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    output_format: str = typer.Option("table", "--format", "-f", help="table|json"),
):
    """Parse a backlog and show its section tree."""
    path = resolve_backlog_path(file, load_config())
    try:
        backlog = backlog_file.load_backlog(path)
    except BacklogError as exc:
        fail(exc)

    if output_format == "json":
        typer.echo(json.dumps(backlog.model_dump(mode="json"), ensure_ascii=True, indent=2))
        return

    table = Table(title=f"Sections ({path.name})")
    table.add_column("#", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Content", style="dim")
    for section in backlog.sections:
        table.add_row(section.id, section.title, _kind_summary(section) or "empty")
    console.print(table)


def _criteria_progress(item: BacklogItem) -> str:
    if not item.criteria:
        return "-"
    done = sum(1 for criterion in item.criteria if criterion.checked)
    return f"{done}/{len(item.criteria)}"


def items(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    item_type: Optional[str] = typer.Option(None, "--type", "-t", help="Only items of this type code"),
    output_format: str = typer.Option("table", "--format", "-f", help="table|json"),
):
    """List backlog items (one entry per ID, first occurrence wins)."""
    path = resolve_backlog_path(file, load_config())
    try:
        found = backlog_file.list_items(path, item_type)
    except BacklogError as exc:
        fail(exc)

    if output_format == "json":
        payload = [item.model_dump(mode="json", exclude={"raw_markdown"}) for item in found]
        typer.echo(json.dumps(payload, ensure_ascii=True, indent=2))
        return

    if not found:
        console.print("[yellow]No items found[/yellow]")
        return

    table = Table(title=f"Items ({len(found)})")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Severity")
    table.add_column("Priority")
    table.add_column("Effort")
    table.add_column("Criteria", style="green")
    for item in found:
        table.add_row(
            item.id,
            f"{item.emoji} {item.title}" if item.emoji else item.title,
            item.severity.value if item.severity else "",
            item.priority.value if item.priority else "",
            item.effort.value if item.effort else "",
            _criteria_progress(item),
        )
    console.print(table)


def types(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    output_format: str = typer.Option("plain", "--format", "-f", help="plain|json"),
):
    """Show the type codes present in a backlog."""
    path = resolve_backlog_path(file, load_config())
    try:
        found = backlog_file.list_types(path)
    except BacklogError as exc:
        fail(exc)

    if output_format == "json":
        typer.echo(json.dumps(found))
        return
    for type_id in found:
        typer.echo(f"{type_id}\t{get_type_label(type_id)}")


def export(
    file: Path = typer.Argument(..., help="Backlog markdown file or folder holding it"),
    item_id: str = typer.Argument(..., help="Item ID, e.g. BUG-001"),
    screenshots: Optional[str] = typer.Option(
        None, "--screenshots", help="Absolute screenshots folder (overrides [screenshots] base_path)"
    ),
):
    """Print an item as clipboard-ready markdown."""
    config = load_config()
    path = resolve_backlog_path(file, config)
    try:
        text = export_item(path, item_id, screenshots or config.screenshots.base_path)
    except BacklogError as exc:
        fail(exc)
    typer.echo(text)
