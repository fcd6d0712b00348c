"""Backlog -> markdown, and the item patch operations used before a save.

Items are written from their stored `raw_markdown` unless `modified` is set,
so content nobody touched comes back byte for byte.
"""

from __future__ import annotations

import logging
from typing import Any, List

from .builder import build_item_markdown
from .models import Backlog, BacklogItem, RawSection, Section, TableGroup
from .patterns import LineKind, classify_line

logger = logging.getLogger(__name__)

# Fields that identify an item or point into the source text.
PROTECTED_FIELDS = frozenset({"id", "type", "kind", "raw_markdown", "section_index"})

_RULE = "---"


def _serialize_item(item: Any) -> str:
    if isinstance(item, BacklogItem):
        if item.modified:
            return build_item_markdown(item)
        return item.raw_markdown
    if isinstance(item, (TableGroup, RawSection)):
        return item.raw_markdown
    raise TypeError(f"Unsupported section item: {type(item).__name__}")


def serialize_section(section: Section) -> str:
    body = ""
    for position, item in enumerate(section.items):
        if position:
            # a rebuilt item gets a blank line after a chunk that ends mid-line
            rebuilt = isinstance(item, BacklogItem) and item.modified
            body += "\n\n" if rebuilt and not body.endswith("\n") else "\n"
        body += _serialize_item(item)

    if not section.raw_header:
        return body
    if not section.items:
        return section.raw_header + "\n"
    return section.raw_header + "\n\n" + body


def serialize_backlog(backlog: Backlog) -> str:
    """Render a Backlog as markdown ending with exactly one newline."""
    parts: List[str] = []

    header = backlog.header.rstrip()
    if header:
        parts.append(header + "\n\n")

    toc = backlog.table_of_contents.rstrip()
    if toc.endswith(_RULE):
        toc = toc[: -len(_RULE)].rstrip()
    if toc:
        parts.append(toc + "\n\n" + _RULE + "\n\n")

    for position, section in enumerate(backlog.sections):
        text = serialize_section(section)
        if position == len(backlog.sections) - 1:
            parts.append(text)
            break
        body = text.rstrip("\n")
        if body.rstrip().endswith(_RULE):
            parts.append(body + "\n\n")
        else:
            parts.append(body + "\n\n" + _RULE + "\n\n")

    out = "".join(parts).rstrip("\n")
    if backlog.footer:
        out = (out + "\n\n" if out else "") + backlog.footer
    return out.rstrip("\n") + "\n"


def update_item(item: BacklogItem, **updates: Any) -> BacklogItem:
    """Return a copy of `item` with `updates` merged in and `modified` set.

    Identity and source-pointer fields are never overwritten. Values go through
    model validation, so `severity="P1"` is accepted and an unknown field or an
    invalid value raises pydantic.ValidationError.
    """
    ignored = PROTECTED_FIELDS.intersection(updates)
    if ignored:
        logger.debug(f"update_item({item.id}) ignoring protected fields: {sorted(ignored)}")
    merged = item.model_dump()
    merged.update({key: value for key, value in updates.items() if key not in PROTECTED_FIELDS})
    merged["modified"] = True
    return BacklogItem.model_validate(merged)


def _patch_checkbox(raw_markdown: str, index: int, checked: bool) -> str:
    """Rewrite the bracket character of the index-th checkbox line only."""
    lines = raw_markdown.split("\n")
    seen = 0
    in_code_block = False
    for line_no, line in enumerate(lines):
        classified = classify_line(line)
        if classified.kind == LineKind.CODE_FENCE:
            in_code_block = not in_code_block
            continue
        if in_code_block or classified.kind != LineKind.CHECKBOX:
            continue
        if seen == index:
            pos = classified.match.start(1)
            lines[line_no] = line[:pos] + ("x" if checked else " ") + line[pos + 1:]
            return "\n".join(lines)
        seen += 1
    logger.debug(f"No checkbox #{index} in raw markdown; leaving text untouched")
    return raw_markdown


def toggle_criterion(item: BacklogItem, index: int) -> BacklogItem:
    """Flip criterion `index`, patching only its bracket in `raw_markdown`.

    Returns the same item when there are no criteria or the index is out of
    range.
    """
    if not item.criteria or index < 0 or index >= len(item.criteria):
        return item

    criteria = [criterion.model_copy() for criterion in item.criteria]
    target = criteria[index]
    criteria[index] = target.model_copy(update={"checked": not target.checked})
    raw = _patch_checkbox(item.raw_markdown, index, criteria[index].checked)
    return item.model_copy(
        update={"criteria": criteria, "raw_markdown": raw, "modified": True},
        deep=True,
    )
