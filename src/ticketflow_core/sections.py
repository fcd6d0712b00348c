"""Text-level section surgery and templates.

Removal works on the raw document rather than the parsed tree because it has
to rewrite the table of contents too, which lives outside the sections.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date
from typing import List, Optional, Sequence

from . import labels
from .patterns import RULE
from .types import DEFAULT_TYPES, TypeDefinition, section_labels_for_type

logger = logging.getLogger(__name__)

_SECTION_LINE = re.compile(r"^##(?!#)\s*(?:(\d+)\.\s*)?(.+)$")
_NUMBERED_SECTION_LINE = re.compile(r"^##(?!#)\s*(\d+)\.\s*(.+)$")


def section_anchor(number: int, title: str) -> str:
    """`section_anchor(4, "Légende") == "4-legende"`."""
    slug = unicodedata.normalize("NFD", title.lower())
    slug = "".join(ch for ch in slug if not unicodedata.combining(ch))
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    return f"{number}-{slug}"


def _separator_key(text: str) -> str:
    return re.sub(r"[_\s-]+", " ", text).strip().upper()


def _matches_type(label: str, type_id: str, candidates: Sequence[str]) -> bool:
    upper = label.upper()
    for candidate in candidates:
        wanted = candidate.upper()
        if upper == wanted or upper.startswith(wanted):
            return True
    return _separator_key(label) == _separator_key(type_id)


def remove_section_from_markdown(markdown: str, type_id: str) -> str:
    """Remove the first section holding `type_id`, renumber and rebuild the TOC.

    Returns the input unchanged when no section matches.
    """
    lines = markdown.split("\n")
    candidates = section_labels_for_type(type_id)

    start: Optional[int] = None
    end = len(lines)
    number: Optional[str] = None
    for index, line in enumerate(lines):
        match = _SECTION_LINE.match(line)
        if not match:
            continue
        if start is None:
            if labels.is_toc_title(match.group(2)):
                continue
            if _matches_type(match.group(2).strip(), type_id, candidates):
                start, number = index, match.group(1)
        else:
            end = index
            break

    if start is None:
        logger.debug(f"No section matches type {type_id}; markdown unchanged")
        return markdown

    logger.debug(f"Removing section for {type_id}: lines {start}..{end}")
    head = lines[:start]
    if end == len(lines):
        # last section: drop the rule and blank lines left in front of it
        while head and (not head[-1].strip() or RULE.match(head[-1])):
            head.pop()
        if head:
            head.append("")
    remaining = head + lines[end:]

    if number is not None:
        current = 1
        for index, line in enumerate(remaining):
            match = _NUMBERED_SECTION_LINE.match(line)
            if match:
                remaining[index] = f"## {current}. {match.group(2).strip()}"
                current += 1

    return update_table_of_contents("\n".join(remaining))


def update_table_of_contents(markdown: str) -> str:
    """Rewrite the TOC body from the numbered `## N. Title` headings present.

    The TOC body runs from its heading to the first rule or the next
    level-2 heading. Documents without a TOC are returned unchanged.
    """
    lines = markdown.split("\n")
    toc_start: Optional[int] = None
    toc_end: Optional[int] = None

    for index, line in enumerate(lines):
        stripped = line.strip()
        if toc_start is None:
            match = _SECTION_LINE.match(stripped)
            if match and labels.is_toc_title(match.group(2)):
                toc_start = index + 1
            continue
        if stripped == "---" or _SECTION_LINE.match(stripped):
            toc_end = index
            break

    if toc_start is None:
        return markdown
    if toc_end is None:
        toc_end = len(lines)

    entries = [""]
    for line in lines:
        match = _NUMBERED_SECTION_LINE.match(line)
        if match:
            number, title = int(match.group(1)), match.group(2).strip()
            entries.append(f"{number}. [{title}]({'#' + section_anchor(number, title)})")
    entries.append("")

    return "\n".join(lines[:toc_start] + entries + lines[toc_end:])


def render_type_section(number: int, type_def: TypeDefinition) -> str:
    """Empty section for a type, with the marker that keeps it detectable."""
    return f"## {number}. {type_def.label.upper()}\n\n<!-- Type: {type_def.id} -->\n"


_LEGEND = """### Légende Effort

| Code | Signification | Estimation |
|------|---------------|------------|
| XS | Extra Small | < 2h |
| S | Small | 2-4h |
| M | Medium | 1-2 jours |
| L | Large | 3-5 jours |
| XL | Extra Large | 1-2 semaines |

---

### Conventions

{conventions}

---

### Sévérité (Bugs)

| Code | Signification |
|------|---------------|
| P0 | Bloquant - Production down |
| P1 | Critique - Impact majeur |
| P2 | Moyenne - Contournable |
| P3 | Faible - Mineur |
| P4 | Cosmétique |

---

### Priorité (Features)

| Niveau | Signification |
|--------|---------------|
| Haute | Sprint actuel |
| Moyenne | Prochain sprint |
| Faible | Backlog |
"""


def render_backlog_template(
    project_name: str,
    types: Optional[Sequence[TypeDefinition]] = None,
    today: Optional[date] = None,
) -> str:
    """Full markdown for a brand-new backlog: header, TOC, one section per type, legend."""
    ordered: List[TypeDefinition] = sorted(types or DEFAULT_TYPES, key=lambda t: t.order)
    today = today or date.today()
    legend_number = len(ordered) + 1

    toc = [
        f"{i}. [{t.label}](#{section_anchor(i, t.label)})" for i, t in enumerate(ordered, 1)
    ]
    toc.append(f"{legend_number}. [Légende](#{section_anchor(legend_number, 'Légende')})")

    sections = "\n---\n\n".join(render_type_section(i, t) for i, t in enumerate(ordered, 1))
    conventions = "\n".join(f"- **{t.id}-XXX** : {t.label}" for t in ordered)

    return (
        f"# {project_name} - Product Backlog\n\n"
        "> Document de référence pour le développement\n"
        f"> Dernière mise à jour : {today.isoformat()}\n\n"
        "---\n\n"
        "## Table des matières\n\n"
        + "\n".join(toc)
        + "\n\n---\n\n"
        + sections
        + "\n---\n\n"
        f"## {legend_number}. Légende\n\n"
        + _LEGEND.format(conventions=conventions)
    )
