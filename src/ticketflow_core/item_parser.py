"""Item/field parser: one `### ID | Title` span -> BacklogItem.

Unknown labels, prose and malformed values are tolerated: they stay in
`raw_markdown` and the corresponding structured field is left empty.
"""

from __future__ import annotations

import logging
import unicodedata
from typing import Any, Dict, List, Optional, Tuple

from . import labels
from .models import (
    BacklogItem,
    Criterion,
    Effort,
    Priority,
    Screenshot,
    Severity,
    TableGroup,
    TableRow,
)
from .patterns import (
    EFFORT_CODE,
    IMAGE,
    ITEM_ID,
    SCREENSHOT_DIR,
    SCREENSHOT_FILENAME,
    SEVERITY_CODE,
    TABLE_SEPARATOR,
    LineKind,
    classify_line,
    split_table_cells,
)

logger = logging.getLogger(__name__)

# List context assigned to list lines seen before any label.
_DEFAULT_CONTEXT = "specs"
# List lines under an unrecognised label are not promoted to any field.
_IGNORED_CONTEXT = "ignored"

_LIST_FIELDS = ("specs", "reproduction", "screens", "dependencies", "constraints")

_EMOJI_RANGES = (
    (0x1F000, 0x1FAFF),
    (0x2600, 0x27BF),
    (0x2B00, 0x2BFF),
    (0x2190, 0x21FF),
    (0x2300, 0x23FF),
)
_EMOJI_JOINERS = {0xFE0F, 0xFE0E, 0x200D, 0x20E3}


def _is_pictographic(ch: str) -> bool:
    code = ord(ch)
    if code < 0x80:
        return False
    if any(lo <= code <= hi for lo, hi in _EMOJI_RANGES):
        return True
    return unicodedata.category(ch) == "So"


def split_emoji(title: str) -> Tuple[Optional[str], str]:
    """Split a leading pictographic token off a title.

    Returns:
        (emoji or None, remaining title stripped)
    """
    if not title or not _is_pictographic(title[0]):
        return None, title.strip()

    end = 1
    while end < len(title):
        code = ord(title[end])
        if code in _EMOJI_JOINERS or 0x1F3FB <= code <= 0x1F3FF:
            end += 1
            # ZWJ glues the next pictograph into the same emoji
            if code == 0x200D and end < len(title) and _is_pictographic(title[end]):
                end += 1
            continue
        break
    return title[:end], title[end:].strip()


def get_type_from_id(item_id: str) -> Optional[str]:
    """Extract the type code from a strict `UPPER-DIGITS` id.

    `get_type_from_id("BUG-001") == "BUG"`; lowercase, missing hyphen,
    digits-only or empty input yield None.
    """
    if not isinstance(item_id, str):
        return None
    match = ITEM_ID.match(item_id)
    return match.group(1) if match else None


def parse_severity(value: str) -> Optional[Severity]:
    """`P1 - Critique` -> Severity.P1."""
    match = SEVERITY_CODE.match(value)
    return Severity(match.group(1)) if match else None


def parse_priority(value: str) -> Optional[Priority]:
    key = labels.normalize_label(value)
    for priority in Priority:
        if key == labels.normalize_label(priority.value) or key.startswith(
            labels.normalize_label(priority.value) + " "
        ):
            return priority
    return None


def parse_effort(value: str) -> Optional[Effort]:
    """`M (Medium)` -> Effort.M."""
    match = EFFORT_CODE.match(value)
    return Effort(match.group(1)) if match else None


def parse_screenshot(alt: str, path: str) -> Screenshot:
    filename = path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    added_at = None
    stamp = SCREENSHOT_FILENAME.match(filename)
    if stamp:
        added_at = int(stamp.group(2))
    return Screenshot(filename=filename, alt=alt or None, added_at=added_at)


def _set_metadata(fields: Dict[str, Any], field: str, value: str) -> None:
    if not value:
        return
    if field == "severity":
        parsed: Any = parse_severity(value)
    elif field == "priority":
        parsed = parse_priority(value)
    elif field == "effort":
        parsed = parse_effort(value)
    else:
        parsed = value
    if parsed is None:
        logger.debug(f"Ignoring unrecognised {field} value: {value!r}")
        return
    fields[field] = parsed


def parse_item(lines: List[str], raw_markdown: str, section_index: int) -> BacklogItem:
    """Parse an item span whose first line is an item header.

    Args:
        lines: Lines of the span, header first
        raw_markdown: Exact source text of the span
        section_index: Position of the item within its section

    Returns:
        BacklogItem with every recognised field populated
    """
    header = classify_line(lines[0]) if lines else None
    if header is None or header.kind != LineKind.ITEM_HEADER:
        raise ValueError(f"Invalid item header: {lines[0] if lines else ''!r}")

    item_id = header.group(0)
    emoji, title = split_emoji(header.group(1))

    fields: Dict[str, Any] = {}
    lists: Dict[str, List[str]] = {name: [] for name in _LIST_FIELDS}
    criteria: List[Criterion] = []
    screenshots: List[Screenshot] = []
    story_parts: List[str] = []

    context: Optional[str] = None
    in_code_block = False

    for line in lines[1:]:
        classified = classify_line(line)
        kind = classified.kind

        if kind == LineKind.CODE_FENCE:
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue

        if kind == LineKind.METADATA:
            label, value = classified.group(0), classified.group(1)
            field = labels.metadata_field(label)
            if field:
                _set_metadata(fields, field, value)
                context = None
            else:
                context = labels.list_context(label) or _IGNORED_CONTEXT
                if context == "user_story" and value:
                    story_parts.append(value)
            continue

        if kind == LineKind.BLOCKQUOTE:
            if classified.group(0):
                story_parts.append(classified.group(0))
            continue

        if kind == LineKind.CHECKBOX:
            criteria.append(
                Criterion(
                    checked=classified.group(0).lower() == "x",
                    text=classified.group(1),
                )
            )
            continue

        if context == "screenshots" or kind == LineKind.OTHER:
            for match in IMAGE.finditer(line):
                alt, path = match.group(1), match.group(2)
                if context == "screenshots" or SCREENSHOT_DIR.search(path):
                    screenshots.append(parse_screenshot(alt, path))
            if context == "screenshots":
                continue

        if kind in (LineKind.NUMBERED, LineKind.BULLET):
            target = context or _DEFAULT_CONTEXT
            if target in lists:
                lists[target].append(classified.group(0))
            continue

        if kind == LineKind.SECTION_HEADER or kind == LineKind.RULE:
            context = None

    user_story = " ".join(story_parts).strip() or None
    return BacklogItem(
        id=item_id,
        type=get_type_from_id(item_id) or item_id.split("-", 1)[0],
        title=title,
        emoji=emoji,
        user_story=user_story,
        criteria=criteria,
        screenshots=screenshots,
        raw_markdown=raw_markdown,
        section_index=section_index,
        **fields,
        **lists,
    )


def parse_table_group(lines: List[str], raw_markdown: str, section_index: int) -> Optional[TableGroup]:
    """Parse a range header followed by a pipe table.

    Returns:
        TableGroup, or None when the span carries no table rows
    """
    header = classify_line(lines[0]) if lines else None
    if header is None or header.kind != LineKind.RANGE_HEADER:
        return None

    title = f"{header.group(0)} | {header.group(1)}"
    severity: Optional[Severity] = None
    rows: List[TableRow] = []
    saw_table = False

    for line in lines[1:]:
        classified = classify_line(line)
        if classified.kind == LineKind.METADATA:
            if labels.metadata_field(classified.group(0)) == "severity":
                severity = parse_severity(classified.group(1)) or severity
            continue
        if classified.kind != LineKind.TABLE_ROW:
            continue
        saw_table = True
        if TABLE_SEPARATOR.match(line):
            continue
        cells = split_table_cells(line)
        if len(cells) < 2 or not ITEM_ID.match(cells[0]):
            # header row ("| ID | Description | Action |") or free-form row
            continue
        rows.append(
            TableRow(
                id=cells[0],
                description=cells[1],
                action=cells[2] if len(cells) > 2 else "",
            )
        )

    if not saw_table:
        return None
    return TableGroup(
        title=title,
        severity=severity,
        items=rows,
        raw_markdown=raw_markdown,
        section_index=section_index,
    )
