"""Localized vocabulary of the backlog markdown dialect.

Field labels, severity/effort display strings and section title synonyms.
Lookups go through `normalize_label`, so accents and case never matter.
"""

from __future__ import annotations

import unicodedata
from typing import Dict, List, Optional

from .models import Severity


def strip_accents(text: str) -> str:
    """Drop combining marks after NFD decomposition (é -> e)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_label(label: str) -> str:
    """Lowercase, accent-free, whitespace-collapsed form of a label."""
    return " ".join(strip_accents(label).lower().replace("’", "'").split())


# Labels written by the builder, in emission order.
LABEL_COMPONENT = "Composant"
LABEL_MODULE = "Module"
LABEL_SEVERITY = "Sévérité"
LABEL_PRIORITY = "Priorité"
LABEL_EFFORT = "Effort"
LABEL_DESCRIPTION = "Description"
LABEL_USER_STORY = "User Story"
LABEL_REPRODUCTION = "Reproduction"
LABEL_SPECS = "Spécifications"
LABEL_SCREENS = "Écrans"
LABEL_CRITERIA = "Critères d'acceptation"
LABEL_DEPENDENCIES = "Dépendances"
LABEL_CONSTRAINTS = "Contraintes"
LABEL_SCREENSHOTS = "Screenshots"

# Scalar metadata: normalized label -> BacklogItem field
METADATA_FIELDS: Dict[str, str] = {
    "composant": "component",
    "component": "component",
    "module": "module",
    "severite": "severity",
    "severity": "severity",
    "priorite": "priority",
    "priority": "priority",
    "effort": "effort",
    "description": "description",
}

# List blocks: normalized label fragment -> list context. Order matters:
# "screenshot" must win over "screen".
LIST_CONTEXTS: List[tuple[str, str]] = [
    ("user story", "user_story"),
    ("screenshot", "screenshots"),
    ("specification", "specs"),
    ("reproduction", "reproduction"),
    ("critere", "criteria"),
    ("acceptation", "criteria"),
    ("acceptance", "criteria"),
    ("dependance", "dependencies"),
    ("dependenc", "dependencies"),
    ("contrainte", "constraints"),
    ("constraint", "constraints"),
    ("ecran", "screens"),
    ("screen", "screens"),
]


def metadata_field(label: str) -> Optional[str]:
    return METADATA_FIELDS.get(normalize_label(label))


def list_context(label: str) -> Optional[str]:
    key = normalize_label(label)
    for fragment, context in LIST_CONTEXTS:
        if fragment in key:
            return context
    return None


SEVERITY_LABELS: Dict[Severity, str] = {
    Severity.P0: "Bloquant",
    Severity.P1: "Critique",
    Severity.P2: "Moyenne",
    Severity.P3: "Faible",
    Severity.P4: "Mineure",
}

SEVERITY_FULL_LABELS: Dict[Severity, str] = {
    severity: f"{severity.value} - {label}" for severity, label in SEVERITY_LABELS.items()
}

# Headings that introduce the table of contents (normalized).
TOC_TITLES = (
    "table des matieres",
    "table of contents",
    "sommaire",
    "contents",
)

# Section titles kept as opaque RawSection content even if they contain ### headings.
RAW_SECTION_NAMES = ("roadmap", "legende", "conventions", "severite", "priorite")

# Type code -> section titles that hold it.
TYPE_TO_SECTION_LABELS: Dict[str, List[str]] = {
    "BUG": ["BUGS", "BUG"],
    "CT": ["COURT TERME", "COURT-TERME", "CT"],
    "LT": ["LONG TERME", "LONG-TERME", "LT"],
    "AUTRE": ["AUTRES IDÉES", "AUTRES IDEES", "AUTRES", "AUTRE"],
    "TEST": ["TESTS", "TEST"],
}

# Section title -> type code (exact, uppercase).
SECTION_TO_TYPE: Dict[str, str] = {
    label: type_id
    for type_id, labels in TYPE_TO_SECTION_LABELS.items()
    for label in labels
}

TYPE_LABELS: Dict[str, str] = {
    "BUG": "Bugs",
    "CT": "Court Terme",
    "LT": "Long Terme",
    "AUTRE": "Autres Idées",
}


def is_toc_title(title: str) -> bool:
    key = normalize_label(title)
    return any(toc in key for toc in TOC_TITLES)


def is_raw_section_title(title: str) -> bool:
    key = normalize_label(title)
    return any(name in key for name in RAW_SECTION_NAMES)


def get_type_label(type_id: str) -> str:
    return TYPE_LABELS.get(type_id, type_id)
