"""Tests for file-level backlog operations."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ticketflow_core.errors import BacklogNotFoundError, ItemNotFoundError, SectionNotFoundError
from ticketflow_core.models import Severity
from ticketflow_core.parser import get_all_items, parse_backlog
from ticketflow_core.types import TypeDefinition
from ticketflow_ops import backlog_file
from ticketflow_ops.export import export_item
from ticketflow_ops.template import create_backlog

from conftest import SAMPLE_BACKLOG, THREE_SECTIONS, write_backlog


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(BacklogNotFoundError) as exc_info:
        backlog_file.load_backlog(tmp_path / "missing.md")
    assert exc_info.value.path == tmp_path / "missing.md"


def test_load_and_save_round_trip(backlog_path):
    backlog = backlog_file.load_backlog(backlog_path)
    backlog_file.save_backlog(backlog_path, backlog)
    assert _read(backlog_path) == SAMPLE_BACKLOG


def test_save_normalizes_crlf_input(tmp_path):
    path = tmp_path / "crlf.md"
    path.write_bytes(SAMPLE_BACKLOG.replace("\n", "\r\n").encode("utf-8"))
    backlog_file.save_backlog(path, backlog_file.load_backlog(path))
    assert path.read_bytes() == SAMPLE_BACKLOG.encode("utf-8")


def test_find_item_unknown_id(backlog_path):
    backlog = backlog_file.load_backlog(backlog_path)
    with pytest.raises(ItemNotFoundError, match="BUG-404"):
        backlog_file.find_item(backlog, "BUG-404")


def test_toggle_in_file_changes_only_the_checkbox(backlog_path):
    result = backlog_file.toggle_criterion_in_file(backlog_path, "BUG-001", 0)

    assert result.changed is True
    assert result.item.criteria[0].checked is True
    assert _read(backlog_path) == SAMPLE_BACKLOG.replace("- [ ] Plus de crash", "- [x] Plus de crash")


def test_toggle_in_file_twice_restores_file(backlog_path):
    backlog_file.toggle_criterion_in_file(backlog_path, "BUG-001", 1)
    backlog_file.toggle_criterion_in_file(backlog_path, "BUG-001", 1)
    assert _read(backlog_path) == SAMPLE_BACKLOG


def test_toggle_in_file_out_of_range_leaves_file(backlog_path):
    before = backlog_path.stat().st_mtime_ns
    result = backlog_file.toggle_criterion_in_file(backlog_path, "CT-001", 0)
    assert result.changed is False
    assert backlog_path.stat().st_mtime_ns == before
    assert _read(backlog_path) == SAMPLE_BACKLOG


def test_update_in_file_rewrites_only_target(backlog_path):
    result = backlog_file.update_item_in_file(backlog_path, "BUG-001", severity="P0")

    assert result.changed is True
    text = _read(backlog_path)
    assert "**Sévérité:** P0 - Bloquant" in text
    tail = SAMPLE_BACKLOG[SAMPLE_BACKLOG.index("### BUG-005"):]
    assert text.endswith(tail)
    assert text.startswith(SAMPLE_BACKLOG[: SAMPLE_BACKLOG.index("### BUG-001")])

    item = backlog_file.find_item(parse_backlog(text), "BUG-001")
    assert item.severity == Severity.P0
    assert item.component == "Core"
    assert [c.checked for c in item.criteria] == [False, True]


def test_update_in_file_same_value_is_unchanged(backlog_path):
    result = backlog_file.update_item_in_file(backlog_path, "CT-001", effort="L")
    assert result.changed is False


def test_update_in_file_rejects_invalid_value(backlog_path):
    with pytest.raises(ValidationError):
        backlog_file.update_item_in_file(backlog_path, "BUG-001", severity="urgent")
    assert _read(backlog_path) == SAMPLE_BACKLOG


def test_update_in_file_unknown_item(backlog_path):
    with pytest.raises(ItemNotFoundError):
        backlog_file.update_item_in_file(backlog_path, "LT-001", title="x")


def test_add_item_appends_to_type_section(backlog_path):
    result = backlog_file.add_item_to_file(backlog_path, "BUG", "Nouveau")

    # BUG-005 to 007 live in a table group, so numbering continues after them
    assert result.item_id == "BUG-008"
    anchor = "| BUG-007 | Lien mort | Supprimer |\n\n---\n\n"
    expected = SAMPLE_BACKLOG.replace(anchor, anchor + "### BUG-008 | Nouveau\n\n---\n\n")
    assert _read(backlog_path) == expected


def test_add_item_with_fields(backlog_path):
    backlog_file.add_item_to_file(backlog_path, "CT", "Import CSV", priority="Moyenne", specs=["UTF-8"])

    backlog = backlog_file.load_backlog(backlog_path)
    item = backlog_file.find_item(backlog, "CT-002")
    assert item.priority.value == "Moyenne"
    assert item.specs == ["UTF-8"]
    assert [i.id for i in backlog.sections[1].items] == ["CT-001", "CT-002"]


def test_add_item_to_document_without_sections(tmp_path):
    path = write_backlog(tmp_path, "# Vide\n")
    with pytest.raises(ValueError):
        backlog_file.add_item_to_file(path, "BUG", "x")


def test_remove_type_from_file(tmp_path):
    path = write_backlog(tmp_path, THREE_SECTIONS)
    result = backlog_file.remove_type_from_file(path, "CT")

    assert result.removed is True
    assert result.remaining_types == ["BUG", "LT"]
    text = _read(path)
    assert "COURT TERME" not in text
    assert "## 2. LONG TERME" in text


def test_remove_unknown_type_raises(tmp_path):
    path = write_backlog(tmp_path, THREE_SECTIONS)
    with pytest.raises(SectionNotFoundError) as exc_info:
        backlog_file.remove_type_from_file(path, "DOC")
    assert exc_info.value.candidates == ["DOC"]
    assert _read(path) == THREE_SECTIONS


def test_list_items_and_types(backlog_path):
    assert [i.id for i in backlog_file.list_items(backlog_path)] == ["BUG-001", "CT-001"]
    assert [i.id for i in backlog_file.list_items(backlog_path, "CT")] == ["CT-001"]
    assert backlog_file.list_types(backlog_path) == ["BUG", "CT"]


def test_create_backlog_writes_parseable_template(tmp_path):
    target = tmp_path / "proj"
    result = create_backlog(target, project_name="Demo")

    assert result.path == (target / "TICKETFLOW_Backlog.md").resolve()
    assert result.types == ["BUG", "CT", "LT", "AUTRE"]
    text = _read(result.path)
    assert text.startswith("# Demo - Product Backlog\n")
    backlog = parse_backlog(text)
    assert [s.title for s in backlog.sections] == ["BUGS", "COURT TERME", "LONG TERME", "AUTRES IDÉES", "Légende"]
    assert get_all_items(backlog) == []


def test_create_backlog_custom_types_and_config(tmp_path):
    types = [TypeDefinition(id="DOC", label="Documentation", order=1), TypeDefinition(id="BUG", label="Bugs", order=0)]
    result = create_backlog(tmp_path, types, write_config=True)

    assert result.types == ["BUG", "DOC"]
    config_path = tmp_path.resolve() / ".ticketflow" / "config.toml"
    assert config_path in result.created_paths
    assert 'file_name = "TICKETFLOW_Backlog.md"' in _read(config_path)
    assert result.project_name == tmp_path.name


def test_create_backlog_refuses_overwrite(backlog_path):
    with pytest.raises(FileExistsError):
        create_backlog(backlog_path.parent)
    assert _read(backlog_path) == SAMPLE_BACKLOG


def test_export_item_defaults_screenshots_next_to_backlog(backlog_path):
    text = export_item(backlog_path, "BUG-001")

    source = backlog_path.resolve()
    assert text.startswith(f"From {source} :\n\n### BUG-001 | 🐛 Crash au démarrage\n")
    shots = source.parent / ".backlog-assets" / "screenshots"
    assert f"![crash]({shots}/BUG-001_1704153600000.png)" in text
    assert not text.endswith("\n")


def test_export_item_unknown_id(backlog_path):
    with pytest.raises(ItemNotFoundError):
        export_item(backlog_path, "BUG-999")
