"""Canonical markdown for a single backlog item.

`build_item_markdown` is used for new items, for rebuilding modified items on
save, for clipboard export and for section templates.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Union

from . import labels
from .models import BacklogItem, Effort, Severity

SCREENSHOTS_RELATIVE_DIR = ".backlog-assets/screenshots"


class ItemMarkdownInput(Protocol):
    """Anything exposing BacklogItem field names: a model, a form object or a dict."""

    id: str
    title: str


@dataclass
class BuildOptions:
    """Options for build_item_markdown."""

    # Absolute folder for screenshot links (clipboard export); relative links when None
    screenshot_base_path: Optional[str] = None


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        value = item.get(name, default)
    else:
        value = getattr(item, name, default)
    return default if value is None else value


def _value(value: Any) -> str:
    return str(getattr(value, "value", value))


def _severity_text(value: Any) -> str:
    try:
        return labels.SEVERITY_FULL_LABELS[Severity(_value(value))]
    except ValueError:
        return _value(value)


def _effort_text(value: Any) -> str:
    try:
        return Effort(_value(value)).value
    except ValueError:
        return _value(value)


def _criterion(entry: Any) -> tuple[str, bool]:
    return str(_field(entry, "text", "")), bool(_field(entry, "checked", False))


def screenshot_markdown_ref(filename: str, alt: Optional[str] = None) -> str:
    """`![alt](.backlog-assets/screenshots/<filename>)`; alt defaults to the bare filename."""
    alt_text = alt or filename.replace(".png", "")
    return f"![{alt_text}]({SCREENSHOTS_RELATIVE_DIR}/{filename})"


def _absolute_screenshot_ref(filename: str, alt: Optional[str], base_path: str) -> str:
    alt_text = alt or filename.replace(".png", "")
    sep = "\\" if "\\" in base_path else "/"
    base = base_path.rstrip("/\\")
    return f"![{alt_text}]({base}{sep}{filename})"


def _block(lines: List[str], label: str, entries: Iterable[str]) -> None:
    lines.append("")
    lines.append(f"**{label}:**")
    lines.extend(entries)


def build_item_markdown(
    item: Union[ItemMarkdownInput, Mapping[str, Any]], options: Optional[BuildOptions] = None
) -> str:
    """Render an item-like value as canonical markdown.

    Args:
        item: BacklogItem, mapping or object with the same field names
        options: Build options (absolute screenshot folder)

    Returns:
        Item text ending with a blank line, a rule and a newline
    """
    options = options or BuildOptions()
    lines: List[str] = []

    emoji = _field(item, "emoji")
    prefix = f"{emoji} " if emoji else ""
    lines.append(f"### {_field(item, 'id', '')} | {prefix}{_field(item, 'title', '')}")

    if _field(item, "component"):
        lines.append(f"**{labels.LABEL_COMPONENT}:** {_field(item, 'component')}")
    if _field(item, "module"):
        lines.append(f"**{labels.LABEL_MODULE}:** {_field(item, 'module')}")
    if _field(item, "severity"):
        lines.append(f"**{labels.LABEL_SEVERITY}:** {_severity_text(_field(item, 'severity'))}")
    if _field(item, "priority"):
        lines.append(f"**{labels.LABEL_PRIORITY}:** {_value(_field(item, 'priority'))}")
    if _field(item, "effort"):
        lines.append(f"**{labels.LABEL_EFFORT}:** {_effort_text(_field(item, 'effort'))}")
    if _field(item, "description"):
        lines.append(f"**{labels.LABEL_DESCRIPTION}:** {_field(item, 'description')}")

    if _field(item, "user_story"):
        _block(lines, labels.LABEL_USER_STORY, [f"> {_field(item, 'user_story')}"])

    reproduction: Sequence[str] = _field(item, "reproduction", [])
    if reproduction:
        _block(lines, labels.LABEL_REPRODUCTION, [f"{i}. {step}" for i, step in enumerate(reproduction, 1)])

    specs: Sequence[str] = _field(item, "specs", [])
    if specs:
        _block(lines, labels.LABEL_SPECS, [f"- {spec}" for spec in specs])

    screens: Sequence[str] = _field(item, "screens", [])
    if screens:
        _block(lines, labels.LABEL_SCREENS, [f"{i}. {screen}" for i, screen in enumerate(screens, 1)])

    criteria = _field(item, "criteria", [])
    if criteria:
        entries = []
        for entry in criteria:
            text, checked = _criterion(entry)
            entries.append(f"- [{'x' if checked else ' '}] {text}")
        _block(lines, labels.LABEL_CRITERIA, entries)

    dependencies: Sequence[str] = _field(item, "dependencies", [])
    if dependencies:
        _block(lines, labels.LABEL_DEPENDENCIES, [f"- {dep}" for dep in dependencies])

    constraints: Sequence[str] = _field(item, "constraints", [])
    if constraints:
        _block(lines, labels.LABEL_CONSTRAINTS, [f"- {constraint}" for constraint in constraints])

    screenshots = _field(item, "screenshots", [])
    if screenshots:
        refs = []
        for shot in screenshots:
            filename = str(_field(shot, "filename", ""))
            alt = _field(shot, "alt")
            if options.screenshot_base_path:
                refs.append(_absolute_screenshot_ref(filename, alt, options.screenshot_base_path))
            else:
                refs.append(screenshot_markdown_ref(filename, alt))
        _block(lines, labels.LABEL_SCREENSHOTS, refs)

    lines.extend(["", "---", ""])
    return "\n".join(lines)


def export_item_for_clipboard(
    item: BacklogItem,
    source_path: str,
    screenshot_base_path: Optional[str] = None,
) -> str:
    """Item markdown prefixed with its source file, screenshots as absolute paths."""
    body = build_item_markdown(item, BuildOptions(screenshot_base_path=screenshot_base_path))
    return "\n".join([f"From {source_path} :", "", body.rstrip()])
