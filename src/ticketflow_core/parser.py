"""Markdown -> Backlog parser.

Every item keeps its verbatim `raw_markdown` so the serializer can write
untouched content back byte for byte. Parsing is total: malformed input
degrades to RawSection items instead of raising.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from . import labels
from .item_parser import parse_item, parse_table_group
from .models import Backlog, BacklogItem, RawSection, Section, SectionItem
from .patterns import SECTION_HEADER, LineKind, classify_line
from .types import extract_type_from_section_title

logger = logging.getLogger(__name__)

# "## 1. BUGS---## 2. FEATURES", "text---### ITEM"
_RULE_GLUED_AFTER_TEXT = re.compile(r"^([^\n]*?[^\s\-])[ \t]*-{3,}[ \t]*(?=#{2,3} )", re.MULTILINE)
# "---## 2. TITLE", "---### ITEM"
_RULE_GLUED_BEFORE_HEADER = re.compile(r"^[ \t]*-{3,}[ \t]*(?=#{2,3} )", re.MULTILINE)
# "## 1. BUGS---" at end of a heading line
_RULE_TRAILING_HEADER = re.compile(r"^(#{2,3} [^\n]*?[^\s\-])[ \t]*-{3,}[ \t]*$", re.MULTILINE)
# "## Title### Item", "# Title## Section"
_HEADER_GLUED_HEADER = re.compile(r"^(#{1,2} [^#\n]+?)[ \t]*(?=#{2,3} )", re.MULTILINE)


def normalize_markdown(markdown: str) -> str:
    """Normalize line endings to LF and split fused separators/headings."""
    text = markdown.replace("\r\n", "\n").replace("\r", "\n")
    text = _RULE_GLUED_AFTER_TEXT.sub("\\1\n\n---\n\n", text)
    text = _RULE_GLUED_BEFORE_HEADER.sub("---\n\n", text)
    text = _RULE_TRAILING_HEADER.sub("\\1\n\n---", text)
    text = _HEADER_GLUED_HEADER.sub("\\1\n\n", text)
    return text


def _is_blank(lines: Sequence[str]) -> bool:
    return all(not line.strip() for line in lines)


def _strip_leading_blank(lines: List[str]) -> List[str]:
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    return lines[start:]


def _find_section_headers(lines: List[str]) -> List[Tuple[int, re.Match]]:
    """Level-2 headings outside fenced code blocks."""
    headers: List[Tuple[int, re.Match]] = []
    in_code_block = False
    for index, line in enumerate(lines):
        classified = classify_line(line)
        if classified.kind == LineKind.CODE_FENCE:
            in_code_block = not in_code_block
            continue
        if in_code_block or classified.kind != LineKind.SECTION_HEADER:
            continue
        match = SECTION_HEADER.match(line)
        if match:
            headers.append((index, match))
    return headers


def _toc_block(lines: List[str]) -> str:
    """TOC heading through its closing rule (or through the whole block)."""
    for index in range(1, len(lines)):
        if classify_line(lines[index]).kind == LineKind.RULE:
            if _is_blank(lines[index + 1:]):
                return "\n".join(lines[: index + 1])
            break
    return "\n".join(lines).rstrip("\n")


def _item_starts(body: List[str]) -> List[int]:
    starts: List[int] = []
    in_code_block = False
    for index, line in enumerate(body):
        kind = classify_line(line).kind
        if kind == LineKind.CODE_FENCE:
            in_code_block = not in_code_block
        elif not in_code_block and kind in (LineKind.ITEM_HEADER, LineKind.RANGE_HEADER):
            starts.append(index)
    return starts


def _parse_span(span: List[str], title: str, position: int) -> SectionItem:
    raw = "\n".join(span)
    kind = classify_line(span[0]).kind
    if kind == LineKind.RANGE_HEADER:
        group = parse_table_group(span, raw, position)
        if group is not None:
            return group
        logger.debug(f"Range header without table kept raw: {span[0]!r}")
        return RawSection(title=title, raw_markdown=raw, section_index=position)
    return parse_item(span, raw, position)


def parse_section(header_line: str, match: re.Match, body: List[str], section_id: str) -> Section:
    """Parse one `## [N. ]Title` section from its heading and body lines."""
    title = match.group(2).strip()
    body = _strip_leading_blank(body)
    section = Section(id=section_id, title=title, raw_header=header_line)

    if all(not line.strip() or classify_line(line).kind == LineKind.RULE for line in body):
        # Empty typed section: keep a marker so the type survives round-trips
        type_id = extract_type_from_section_title(title)
        if type_id:
            section.items.append(RawSection(title=title, raw_markdown=f"<!-- Type: {type_id} -->"))
        return section

    if labels.is_raw_section_title(title):
        section.items.append(RawSection(title=title, raw_markdown="\n".join(body)))
        return section

    starts = _item_starts(body)
    if not starts:
        section.items.append(RawSection(title=title, raw_markdown="\n".join(body)))
        return section

    preamble = body[: starts[0]]
    if not _is_blank(preamble):
        section.items.append(RawSection(title=title, raw_markdown="\n".join(preamble)))

    bounds = starts + [len(body)]
    for start, end in zip(bounds, bounds[1:]):
        section.items.append(_parse_span(body[start:end], title, len(section.items)))
    return section


def _parse(markdown: str) -> Backlog:
    text = normalize_markdown(markdown)
    if not text.strip():
        return Backlog()

    lines = text.split("\n")
    headers = _find_section_headers(lines)
    first = headers[0][0] if headers else len(lines)

    backlog = Backlog(header="\n".join(lines[:first]))
    toc_blocks: List[str] = []

    for position, (start, match) in enumerate(headers):
        end = headers[position + 1][0] if position + 1 < len(headers) else len(lines)
        title = match.group(2).strip()
        if labels.is_toc_title(title):
            toc_blocks.append(_toc_block(lines[start:end]))
            continue
        section_id = match.group(1) or str(len(backlog.sections) + 1)
        backlog.sections.append(parse_section(lines[start], match, lines[start + 1:end], section_id))

    backlog.table_of_contents = "\n\n".join(toc_blocks)
    return backlog


def parse_backlog(markdown: str) -> Backlog:
    """Parse backlog markdown into a Backlog tree.

    Never raises: on an unexpected failure the whole input is returned as a
    single RawSection.
    """
    if not markdown:
        return Backlog()
    try:
        return _parse(markdown)
    except Exception as e:
        logger.warning(f"Backlog parse degraded to raw passthrough: {e}")
        text = markdown.replace("\r\n", "\n").replace("\r", "\n")
        return Backlog(
            sections=[
                Section(id="1", title="", raw_header="", items=[RawSection(raw_markdown=text)])
            ]
        )


def get_all_items(backlog: Backlog) -> List[BacklogItem]:
    """Flat list of BacklogItems in document order, first occurrence of each ID wins."""
    seen: dict[str, BacklogItem] = {}
    for section in backlog.sections:
        for item in section.items:
            if not isinstance(item, BacklogItem):
                continue
            if item.id in seen:
                logger.debug(f"Dropping duplicate item {item.id} in section {section.id}")
                continue
            seen[item.id] = item
    return list(seen.values())


def get_items_by_type(backlog: Backlog, item_type: str) -> List[BacklogItem]:
    return [item for item in get_all_items(backlog) if item.type == item_type]


def find_item(backlog: Backlog, item_id: str) -> Optional[BacklogItem]:
    for item in get_all_items(backlog):
        if item.id == item_id:
            return item
    return None
