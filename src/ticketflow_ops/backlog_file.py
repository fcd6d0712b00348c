"""
backlog_file.py - Use-case functions over a backlog markdown file.

Each mutation reads the file, applies a pure core operation, and writes the
serialized result back as UTF-8 with LF line endings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from ticketflow_core import parser, serializer
from ticketflow_core.errors import (
    BacklogNotFoundError,
    ItemNotFoundError,
    SectionNotFoundError,
    WriteError,
)
from ticketflow_core.models import Backlog, BacklogItem, Section, TableGroup
from ticketflow_core.sections import remove_section_from_markdown
from ticketflow_core.types import (
    detect_types_from_markdown,
    find_target_section_index,
    generate_item_id,
    section_labels_for_type,
)

logger = logging.getLogger(__name__)


@dataclass
class ItemUpdateResult:
    """Result of updating one item in a backlog file."""
    item_id: str
    path: Path
    item: BacklogItem
    changed: bool


@dataclass
class SectionRemovalResult:
    """Result of removing a type section from a backlog file."""
    type_id: str
    path: Path
    removed: bool
    remaining_types: List[str]


def read_markdown(path: Path) -> str:
    if not path.is_file():
        raise BacklogNotFoundError(path)
    return path.read_text(encoding="utf-8")


def write_markdown(path: Path, markdown: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(markdown)
    except OSError as e:
        raise WriteError(f"Failed to write {path}: {e}")


def load_backlog(path: Path) -> Backlog:
    """Read and parse a backlog file."""
    return parser.parse_backlog(read_markdown(path))


def save_backlog(path: Path, backlog: Backlog) -> None:
    write_markdown(path, serializer.serialize_backlog(backlog))
    logger.debug(f"Saved backlog to {path}")


def find_item(backlog: Backlog, item_id: str) -> BacklogItem:
    """Look up an item by ID, raising ItemNotFoundError when absent."""
    item = parser.find_item(backlog, item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


def _replace_item(backlog: Backlog, updated: BacklogItem) -> Backlog:
    """Copy of `backlog` with the first item carrying `updated.id` swapped out."""
    sections: List[Section] = []
    replaced = False
    for section in backlog.sections:
        items = []
        for item in section.items:
            if not replaced and isinstance(item, BacklogItem) and item.id == updated.id:
                items.append(updated)
                replaced = True
            else:
                items.append(item)
        sections.append(section.model_copy(update={"items": items}))
    return backlog.model_copy(update={"sections": sections})


def update_item_in_file(path: Path, item_id: str, **updates: Any) -> ItemUpdateResult:
    """Merge `updates` into an item and rewrite the file.

    The item is rebuilt from its fields on save; every other item keeps its
    original text.
    """
    backlog = load_backlog(path)
    item = find_item(backlog, item_id)
    updated = serializer.update_item(item, **updates)
    save_backlog(path, _replace_item(backlog, updated))
    changed = updated.model_dump(exclude={"modified"}) != item.model_dump(exclude={"modified"})
    return ItemUpdateResult(item_id=item_id, path=path, item=updated, changed=changed)


def toggle_criterion_in_file(path: Path, item_id: str, index: int) -> ItemUpdateResult:
    """Flip one acceptance criterion and rewrite the file.

    Only the checkbox character changes on disk: the patched raw text is
    written as-is rather than rebuilt.
    """
    backlog = load_backlog(path)
    item = find_item(backlog, item_id)
    toggled = serializer.toggle_criterion(item, index)
    if toggled is item:
        logger.info(f"{item_id}: no criterion #{index}; file left untouched")
        return ItemUpdateResult(item_id=item_id, path=path, item=item, changed=False)

    toggled = toggled.model_copy(update={"modified": False})
    save_backlog(path, _replace_item(backlog, toggled))
    return ItemUpdateResult(item_id=item_id, path=path, item=toggled, changed=True)


def add_item_to_file(path: Path, item_type: str, title: str, **fields: Any) -> ItemUpdateResult:
    """Append a new item of `item_type` to the section that holds that type.

    The ID is the next free `TYPE-NNN`, counting table-group rows too.
    Raises ValueError when the backlog has no section at all.
    """
    backlog = load_backlog(path)
    if not backlog.sections:
        raise ValueError(f"No section to hold a new {item_type} item in {path}")

    existing = [item.id for item in parser.get_all_items(backlog)]
    for section in backlog.sections:
        for entry in section.items:
            if isinstance(entry, TableGroup):
                existing.extend(row.id for row in entry.items)
    item_id = generate_item_id(existing, item_type)
    item = BacklogItem.model_validate(
        {**fields, "id": item_id, "type": item_type, "title": title, "modified": True}
    )

    index = find_target_section_index(backlog.sections, item_type)
    target = backlog.sections[index]
    item = item.model_copy(update={"section_index": len(target.items)})
    sections = list(backlog.sections)
    sections[index] = target.model_copy(update={"items": [*target.items, item]})
    save_backlog(path, backlog.model_copy(update={"sections": sections}))
    logger.debug(f"Added {item_id} to section {target.id} ({target.title})")
    return ItemUpdateResult(item_id=item_id, path=path, item=item, changed=True)


def remove_type_from_file(path: Path, type_id: str) -> SectionRemovalResult:
    """Remove the section holding `type_id`, renumbering the rest and the TOC."""
    markdown = read_markdown(path).replace("\r\n", "\n")
    updated = remove_section_from_markdown(markdown, type_id)
    if updated == markdown:
        raise SectionNotFoundError(type_id, section_labels_for_type(type_id))
    write_markdown(path, updated)
    return SectionRemovalResult(
        type_id=type_id,
        path=path,
        removed=True,
        remaining_types=detect_types_from_markdown(updated),
    )


def list_items(path: Path, item_type: Optional[str] = None) -> List[BacklogItem]:
    backlog = load_backlog(path)
    if item_type:
        return parser.get_items_by_type(backlog, item_type)
    return parser.get_all_items(backlog)


def list_types(path: Path) -> List[str]:
    return detect_types_from_markdown(read_markdown(path))
