"""Clipboard export of a single item."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ticketflow_core.builder import export_item_for_clipboard

from .backlog_file import find_item, load_backlog


def export_item(path: Path, item_id: str, screenshot_base_path: Optional[str] = None) -> str:
    """Markdown for `item_id` headed by the absolute source path.

    When no screenshot folder is given, screenshots default to
    `<backlog dir>/.backlog-assets/screenshots`.
    """
    source = path.resolve()
    item = find_item(load_backlog(source), item_id)
    base = screenshot_base_path or str(source.parent / ".backlog-assets" / "screenshots")
    return export_item_for_clipboard(item, str(source), base)
