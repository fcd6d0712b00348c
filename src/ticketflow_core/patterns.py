"""Line patterns of the backlog markdown dialect and a line classifier.

`classify_line` is the single place where a raw line is matched against the
dialect; the document and item scanners only look at the returned kind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

# "## 1. Title" or "## Title" (never "###")
SECTION_HEADER = re.compile(r"^##(?!#)\s*(?:(\d+)\.\s+)?(.+?)\s*$")

# "### BUG-001 | Title"
ITEM_HEADER = re.compile(r"^###\s+([A-Z]+-\d+)\s*\|\s*(.*?)\s*$")

# "### BUG-005 à 007 | Title", "### BUG-005 to BUG-007 | Title"
RANGE_HEADER = re.compile(
    r"^###\s+([A-Z]+-\d+\s*(?:à|a|to|–)\s*(?:[A-Z]+-)?\d+)\s*\|\s*(.*?)\s*$"
)

# "**Label:** value" (also tolerates "**Label**: value")
METADATA = re.compile(r"^\*\*([^*:]+?)\s*(?::\*\*|\*\*\s*:)\s*(.*?)\s*$")

BLOCKQUOTE = re.compile(r"^>\s?(.*?)\s*$")

CHECKBOX = re.compile(r"^\s*[-*+]\s+\[([ xX])\]\s*(.+?)\s*$")

NUMBERED = re.compile(r"^\s*\d+[.)]\s+(.+?)\s*$")

BULLET = re.compile(r"^\s*[-*+]\s+(.+?)\s*$")

CODE_FENCE = re.compile(r"^\s*(```|~~~)")

RULE = re.compile(r"^\s*(?:-{3,}|\*{3,}|_{3,})\s*$")

TABLE_ROW = re.compile(r"^\s*\|(.*)\|\s*$")

TABLE_SEPARATOR = re.compile(r"^\s*\|?\s*:?-{2,}:?\s*(?:\|\s*:?-{2,}:?\s*)*\|?\s*$")

# "![alt](path)"
IMAGE = re.compile(r"!\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")

SCREENSHOT_DIR = re.compile(r"(?:^|[/\\])\.?backlog-assets[/\\]screenshots[/\\]|(?:^|[/\\])screenshots[/\\]")

SCREENSHOT_FILENAME = re.compile(r"^([A-Z]+-\d+)_(\d+)\.png$")

# "BUG-001": type code is the letters before the hyphen
ITEM_ID = re.compile(r"^([A-Z]+)-([0-9]+)\Z")

TYPE_MARKER = re.compile(r"<!--\s*Type:\s*([A-Za-z][A-Za-z0-9_]*)\s*-->", re.IGNORECASE)

SEVERITY_CODE = re.compile(r"^\s*(P[0-4])\b")

EFFORT_CODE = re.compile(r"^\s*(XS|XL|S|M|L)\b")


class LineKind(str, Enum):
    SECTION_HEADER = "section-header"
    ITEM_HEADER = "item-header"
    RANGE_HEADER = "range-header"
    METADATA = "metadata"
    BLOCKQUOTE = "blockquote"
    CHECKBOX = "checkbox"
    NUMBERED = "numbered"
    BULLET = "bullet"
    CODE_FENCE = "code-fence"
    RULE = "rule"
    TABLE_ROW = "table-row"
    BLANK = "blank"
    OTHER = "other"


@dataclass(frozen=True)
class LineMatch:
    """Classified line with the groups captured by its pattern."""

    kind: LineKind
    groups: Tuple[Optional[str], ...] = ()
    match: Optional[re.Match] = None

    def group(self, index: int) -> str:
        if index >= len(self.groups):
            return ""
        return self.groups[index] or ""


# Checked in order; first hit wins.
_CLASSIFIERS: Tuple[Tuple[LineKind, re.Pattern], ...] = (
    (LineKind.CODE_FENCE, CODE_FENCE),
    (LineKind.RANGE_HEADER, RANGE_HEADER),
    (LineKind.ITEM_HEADER, ITEM_HEADER),
    (LineKind.SECTION_HEADER, SECTION_HEADER),
    (LineKind.RULE, RULE),
    (LineKind.METADATA, METADATA),
    (LineKind.BLOCKQUOTE, BLOCKQUOTE),
    (LineKind.CHECKBOX, CHECKBOX),
    (LineKind.NUMBERED, NUMBERED),
    (LineKind.BULLET, BULLET),
    (LineKind.TABLE_ROW, TABLE_ROW),
)


def classify_line(line: str) -> LineMatch:
    """Return the structural kind of a single line."""
    if not line.strip():
        return LineMatch(LineKind.BLANK)
    for kind, pattern in _CLASSIFIERS:
        match = pattern.match(line)
        if match:
            return LineMatch(kind, match.groups(), match)
    return LineMatch(LineKind.OTHER)


def split_table_cells(line: str) -> list[str]:
    """Cells of a `| a | b | c |` row, stripped."""
    match = TABLE_ROW.match(line)
    if not match:
        return []
    return [cell.strip() for cell in match.group(1).split("|")]
