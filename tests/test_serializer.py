"""Tests for serialization and the item patch operations."""

import pytest
from pydantic import ValidationError

from ticketflow_core.builder import build_item_markdown
from ticketflow_core.models import (
    Backlog,
    BacklogItem,
    Criterion,
    Priority,
    RawSection,
    Section,
    Severity,
)
from ticketflow_core.parser import get_all_items, parse_backlog
from ticketflow_core.serializer import serialize_backlog, toggle_criterion, update_item


def test_sample_round_trips_byte_for_byte(sample_markdown):
    assert serialize_backlog(parse_backlog(sample_markdown)) == sample_markdown


def test_minimal_scenario_round_trips():
    md = "# B\n\n## 1. BUGS\n\n### BUG-001 | T\n**Description:** d\n\n---\n"
    assert serialize_backlog(parse_backlog(md)) == md


def test_empty_backlog_serializes_to_newline():
    assert serialize_backlog(Backlog()) == "\n"


def test_output_ends_with_single_newline():
    md = "# B\n\n## 1. BUGS\n\n### BUG-001 | T\n\n\n\n"
    assert serialize_backlog(parse_backlog(md)).endswith("T\n")


def test_toc_trailing_rule_is_not_duplicated():
    backlog = Backlog(
        header="# P",
        table_of_contents="## Table des matières\n\n1. [Bugs](#1-bugs)\n\n---\n",
        sections=[Section(id="1", title="BUGS", raw_header="## 1. BUGS")],
    )
    out = serialize_backlog(backlog)
    assert out == "# P\n\n## Table des matières\n\n1. [Bugs](#1-bugs)\n\n---\n\n## 1. BUGS\n"
    assert out.count("---") == 1


def test_rule_inserted_between_sections_only_when_missing():
    backlog = Backlog(
        sections=[
            Section(id="1", title="A", raw_header="## 1. A", items=[RawSection(raw_markdown="texte")]),
            Section(id="2", title="B", raw_header="## 2. B", items=[RawSection(raw_markdown="suite\n\n---\n")]),
            Section(id="3", title="C", raw_header="## 3. C"),
        ]
    )
    assert serialize_backlog(backlog) == (
        "## 1. A\n\ntexte\n\n---\n\n## 2. B\n\nsuite\n\n---\n\n## 3. C\n"
    )


def test_footer_is_emitted():
    backlog = Backlog(header="# P", footer="_fin_")
    assert serialize_backlog(backlog) == "# P\n\n_fin_\n"


def test_unmodified_items_keep_raw_text():
    md = "## 1. BUGS\n\n### BUG-001 | T\n**Description:**   d   \n<!-- note -->\n\n---\n"
    assert serialize_backlog(parse_backlog(md)) == md


def test_modified_item_is_rebuilt_others_untouched(sample_markdown):
    backlog = parse_backlog(sample_markdown)
    section = backlog.sections[1]
    item = section.items[0]
    updated = update_item(item, priority=Priority.FAIBLE)
    section.items[0] = updated

    out = serialize_backlog(backlog)
    assert build_item_markdown(updated) in out
    assert "**Priorité:** Faible" in out
    bug = backlog.sections[0].items[0]
    assert bug.raw_markdown in out


def test_update_item_returns_new_value():
    item = BacklogItem(id="BUG-001", type="BUG", title="Old", raw_markdown="### BUG-001 | Old\n")
    updated = update_item(item, title="New", severity="P1")

    assert updated is not item
    assert updated.title == "New"
    assert updated.severity == Severity.P1
    assert updated.modified is True
    assert item.title == "Old"
    assert item.modified is False


def test_update_item_ignores_identity_fields():
    item = BacklogItem(id="BUG-001", type="BUG", title="T", raw_markdown="raw", section_index=3)
    updated = update_item(item, id="BUG-999", type="CT", raw_markdown="x", section_index=0, kind="raw-section")

    assert updated.id == "BUG-001"
    assert updated.type == "BUG"
    assert updated.raw_markdown == "raw"
    assert updated.section_index == 3
    assert updated.kind == "item"
    assert updated.modified is True


def test_update_item_with_no_changes_still_marks_modified():
    item = BacklogItem(id="BUG-001", type="BUG", title="T")
    assert update_item(item).modified is True


def test_update_item_rejects_invalid_values():
    item = BacklogItem(id="BUG-001", type="BUG", title="T")
    with pytest.raises(ValidationError):
        update_item(item, priority="Urgent")
    with pytest.raises(ValidationError):
        update_item(item, colour="red")


ITEM_WITH_CRITERIA = """### CT-001 | Tâche
**Critères d'acceptation:**
- [ ] premier
- [x] second
-   [ ] troisième espacé

---
"""


def _criteria_item() -> BacklogItem:
    return get_all_items(parse_backlog("## 1. CT\n\n" + ITEM_WITH_CRITERIA))[0]


def test_toggle_criterion_patches_only_the_bracket():
    item = _criteria_item()
    toggled = toggle_criterion(item, 0)

    before, after = item.raw_markdown, toggled.raw_markdown
    assert len(before) == len(after)
    diffs = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
    assert len(diffs) == 1
    assert after[diffs[0]] == "x"
    assert "- [x] second" in after
    assert toggled.criteria[0].checked is True
    assert toggled.criteria[1].checked is True
    assert toggled.modified is True


def test_toggle_criterion_unchecks_and_handles_spacing():
    item = _criteria_item()
    assert "- [ ] second" in toggle_criterion(item, 1).raw_markdown
    assert "-   [x] troisième espacé" in toggle_criterion(item, 2).raw_markdown


def test_toggle_criterion_does_not_mutate_input():
    item = _criteria_item()
    toggle_criterion(item, 0)
    assert item.criteria[0].checked is False
    assert item.modified is False


@pytest.mark.parametrize("index", [3, 10, -1])
def test_toggle_criterion_out_of_range_is_identity(index):
    item = _criteria_item()
    assert toggle_criterion(item, index) is item


def test_toggle_criterion_without_criteria_is_identity():
    item = BacklogItem(id="BUG-001", type="BUG", title="T")
    assert toggle_criterion(item, 0) is item


def test_toggled_item_serializes_rebuilt():
    backlog = parse_backlog("## 1. CT\n\n" + ITEM_WITH_CRITERIA)
    backlog.sections[0].items[0] = toggle_criterion(backlog.sections[0].items[0], 0)
    out = serialize_backlog(backlog)
    assert "- [x] premier" in out
    reparsed = get_all_items(parse_backlog(out))[0]
    assert [c.checked for c in reparsed.criteria] == [True, True, False]


def test_criterion_model_defaults():
    assert Criterion(text="a").checked is False
