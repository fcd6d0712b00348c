"""Item type codes: detection from markdown, section matching and ID generation."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from . import labels
from .item_parser import get_type_from_id
from .models import BacklogItem, RawSection, Section
from .patterns import TYPE_MARKER

__all__ = [
    "DEFAULT_TYPES",
    "TypeDefinition",
    "detect_types_from_markdown",
    "extract_type_from_section_title",
    "find_target_section_index",
    "generate_item_id",
    "get_type_from_id",
    "section_labels_for_type",
]

_ITEM_TYPE_IN_HEADER = re.compile(r"^###\s*([A-Z]+)-\d+", re.MULTILINE)
_NUMBERED_SECTION = re.compile(r"^##\s*\d+\.\s*(.+)$", re.MULTILINE)
_CUSTOM_TYPE_TITLE = re.compile(r"^[A-Z0-9À-ÖØ-Þ\s_-]+$")


class TypeDefinition(BaseModel):
    """A backlog type and the section that holds it."""

    id: str = Field(..., description="Short code used in IDs (e.g., BUG)")
    label: str = Field(..., description="Readable label (e.g., Bugs)")
    order: int = 0
    visible: bool = True


DEFAULT_TYPES: List[TypeDefinition] = [
    TypeDefinition(id="BUG", label="Bugs", order=0),
    TypeDefinition(id="CT", label="Court Terme", order=1),
    TypeDefinition(id="LT", label="Long Terme", order=2),
    TypeDefinition(id="AUTRE", label="Autres Idées", order=3),
]


def extract_type_from_section_title(title: str) -> Optional[str]:
    """Map a section title to a type code.

    Examples:
        "BUGS" -> "BUG", "BUGS (Hotfix)" -> "BUG", "BUG V5" -> "BUG_V5",
        "Custom Type" -> "CUSTOM_TYPE", "Légende" -> None
    """
    upper = title.strip().upper()
    if not upper or labels.is_toc_title(upper):
        return None
    if labels.is_raw_section_title(upper):
        return None

    if upper in labels.SECTION_TO_TYPE:
        return labels.SECTION_TO_TYPE[upper]

    # Known label followed by "(", "-" or ":" only; "BUG V5" is a custom type
    for key, type_id in labels.SECTION_TO_TYPE.items():
        if re.match(rf"^{re.escape(key)}(?:\s*[(\-:]|$)", upper):
            return type_id

    if _CUSTOM_TYPE_TITLE.match(upper):
        return re.sub(r"[\s-]+", "_", upper.strip())
    return None


def detect_types_from_markdown(markdown: str) -> List[str]:
    """Type codes present in a document, in order of first appearance.

    Sources: item headers (`### BUG-001 | ...`), `<!-- Type: X -->` markers
    and numbered section headings. A marker inside a section overrides the
    type derived from that section's heading.
    """
    found: dict[str, None] = {}
    heading_type: Optional[str] = None

    for line in markdown.replace("\r\n", "\n").split("\n"):
        if line.startswith("##") and not line.startswith("###"):
            if heading_type:
                found.setdefault(heading_type, None)
            section = _NUMBERED_SECTION.match(line)
            heading_type = extract_type_from_section_title(section.group(1)) if section else None
            continue
        item = _ITEM_TYPE_IN_HEADER.match(line)
        if item:
            found.setdefault(item.group(1), None)
        for marker in TYPE_MARKER.finditer(line):
            found.setdefault(marker.group(1).upper(), None)
            heading_type = None

    if heading_type:
        found.setdefault(heading_type, None)
    return list(found)


def section_labels_for_type(type_id: str) -> List[str]:
    """Section titles that may hold `type_id`."""
    if type_id in labels.TYPE_TO_SECTION_LABELS:
        return list(labels.TYPE_TO_SECTION_LABELS[type_id])
    candidates = [type_id]
    if "_" in type_id:
        candidates.append(type_id.replace("_", " "))
    return candidates


def _title_matches(title: str, candidates: Sequence[str]) -> bool:
    upper = title.upper()
    return any(upper == label.upper() or label.upper() in upper for label in candidates)


def find_target_section_index(sections: Sequence[Section], item_type: str) -> int:
    """Index of the section a new item of `item_type` belongs to.

    Tried in order: a section already holding that type, a section whose
    title matches the type's labels, a `<!-- Type: X -->` marker, the first
    section not made only of raw content, then 0.
    """
    for index, section in enumerate(sections):
        if any(isinstance(item, BacklogItem) and item.type == item_type for item in section.items):
            return index

    candidates = section_labels_for_type(item_type)
    for index, section in enumerate(sections):
        if _title_matches(section.title, candidates):
            return index

    marker = f"<!-- Type: {item_type} -->"
    for index, section in enumerate(sections):
        if any(isinstance(item, RawSection) and marker in item.raw_markdown for item in section.items):
            return index

    for index, section in enumerate(sections):
        if not section.items or not isinstance(section.items[0], RawSection):
            return index
    return 0


def generate_item_id(existing_ids: Sequence[str], item_type: str) -> str:
    """Next `TYPE-NNN` id after the highest existing number for the type."""
    numbers = []
    for item_id in existing_ids:
        if get_type_from_id(item_id) == item_type:
            numbers.append(int(item_id.split("-", 1)[1]))
    return f"{item_type}-{max(numbers, default=0) + 1:03d}"
