"""Tests for type code helpers."""

import pytest

from ticketflow_core.parser import parse_backlog
from ticketflow_core.types import (
    DEFAULT_TYPES,
    detect_types_from_markdown,
    extract_type_from_section_title,
    find_target_section_index,
    generate_item_id,
    get_type_from_id,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("BUG-001", "BUG"),
        ("AUTRE-12", "AUTRE"),
        ("bug-001", None),
        ("BUG001", None),
        ("001", None),
        ("", None),
        ("BUG-", None),
        ("BUG-001 ", None),
        ("BUG-001\n", None),
        ("BUG-\u0661\u0662", None),
    ],
)
def test_get_type_from_id(value, expected):
    assert get_type_from_id(value) == expected


@pytest.mark.parametrize(
    "title,expected",
    [
        ("BUGS", "BUG"),
        ("Bugs", "BUG"),
        ("BUGS (Hotfix)", "BUG"),
        ("COURT TERME", "CT"),
        ("Court-Terme", "CT"),
        ("AUTRES IDÃES", "AUTRE"),
        ("BUG V5", "BUG_V5"),
        ("BUGFIX", "BUGFIX"),
        ("Custom Type", "CUSTOM_TYPE"),
        ("LÃ©gende", None),
        ("Roadmap", None),
        ("Table des matiÃ¨res", None),
        ("Notes & idÃ©es", None),
        ("", None),
    ],
)
def test_extract_type_from_section_title(title, expected):
    assert extract_type_from_section_title(title) == expected


def test_detect_types_in_document_order(sample_markdown):
    assert detect_types_from_markdown(sample_markdown) == ["BUG", "CT"]


def test_detect_types_from_markers_and_headers():
    md = "\n".join(
        [
            "## 1. BUGS",
            "",
            "## 2. LONG TERME",
            "",
            "## 3. Documentation",
            "",
            "<!-- Type: doc -->",
            "",
            "## 4. BUG V5",
            "",
            "## 5. LÃ©gende",
        ]
    )
    assert detect_types_from_markdown(md) == ["BUG", "LT", "DOC", "BUG_V5"]


def test_detect_types_ignores_unnumbered_headings():
    assert detect_types_from_markdown("## IdÃ©es en vrac\n\ntexte\n") == []


def test_detect_types_on_empty_input():
    assert detect_types_from_markdown("") == []


def test_default_types():
    assert [t.id for t in DEFAULT_TYPES] == ["BUG", "CT", "LT", "AUTRE"]
    assert [t.order for t in DEFAULT_TYPES] == [0, 1, 2, 3]


def test_find_target_section_index():
    backlog = parse_backlog(
        "\n".join(
            [
                "## 1. Roadmap",
                "",
                "Q3",
                "",
                "## 2. COURT TERME",
                "",
                "### CT-001 | A",
                "",
                "## 3. Divers",
                "",
                "<!-- Type: DOC -->",
                "",
                "## 4. BUGS",
                "",
            ]
        )
    )
    sections = backlog.sections
    assert find_target_section_index(sections, "CT") == 1
    assert find_target_section_index(sections, "BUG") == 3
    assert find_target_section_index(sections, "DOC") == 2
    assert find_target_section_index(sections, "ZZZ") == 1
    assert find_target_section_index([], "BUG") == 0


def test_generate_item_id():
    existing = ["BUG-001", "BUG-007", "CT-003", "bug-999"]
    assert generate_item_id(existing, "BUG") == "BUG-008"
    assert generate_item_id(existing, "CT") == "CT-004"
    assert generate_item_id(existing, "LT") == "LT-001"
