from pathlib import Path

import pytest
from hypothesis import settings

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("ticketflow-tests", database=None)
settings.load_profile("ticketflow-tests")


SAMPLE_BACKLOG = """# Demo - Product Backlog

> Document de référence

---

## Table des matières

1. [Bugs](#1-bugs)
2. [Court Terme](#2-court-terme)
3. [Légende](#3-legende)

---

## 1. BUGS

### BUG-001 | 🐛 Crash au démarrage
**Composant:** Core
**Sévérité:** P1 - Critique
**Effort:** M
**Description:** L'application plante au lancement.

**Reproduction:**
1. Ouvrir l'app
2. Cliquer sur Démarrer

**Critères d'acceptation:**
- [ ] Plus de crash
- [x] Test de non-régression

**Screenshots:**
![crash](.backlog-assets/screenshots/BUG-001_1704153600000.png)

---

### BUG-005 à 007 | Bugs mineurs
**Sévérité:** P3 - Faible

| ID | Description | Action |
|----|-------------|--------|
| BUG-005 | Typo accueil | Corriger |
| BUG-006 | Icône floue | Remplacer |
| BUG-007 | Lien mort | Supprimer |

---

## 2. COURT TERME

### CT-001 | Export PDF
**Module:** Rapports
**Priorité:** Haute
**Effort:** L
**Description:** Exporter le backlog en PDF.

**User Story:**
> En tant qu'utilisateur, je veux exporter en PDF.

**Spécifications:**
- Format A4
- Logo en en-tête

**Dépendances:**
- BUG-001

---

## 3. Légende

### Légende Effort

| Code | Signification |
|------|---------------|
| XS | Extra Small |
"""


THREE_SECTIONS = """# P

## Table des matières

1. [Bugs](#1-bugs)
2. [Court Terme](#2-court-terme)
3. [Long Terme](#3-long-terme)

---

## 1. BUGS

### BUG-001 | Crash

---

## 2. COURT TERME

### CT-001 | Export

---

## 3. LONG TERME

### LT-001 | Sync

---
"""


def write_backlog(directory: Path, content: str = SAMPLE_BACKLOG, name: str = "TICKETFLOW_Backlog.md") -> Path:
    """Write a backlog file with LF line endings and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content)
    return path


@pytest.fixture
def sample_markdown() -> str:
    return SAMPLE_BACKLOG


@pytest.fixture
def backlog_path(tmp_path: Path) -> Path:
    return write_backlog(tmp_path)
