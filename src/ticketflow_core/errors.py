"""Exception taxonomy for ticketflow-core.

Parsing and serialization never raise: malformed content degrades to
RawSection items or absent fields. These exceptions cover configuration,
file access and lookups performed around the pure document model.
"""

from pathlib import Path
from typing import List


class BacklogError(Exception):
    """Base exception for all backlog errors."""

    pass


# Config errors


class ConfigError(BacklogError):
    """Failed to load or validate configuration."""

    pass


# Backlog file errors


class BacklogNotFoundError(BacklogError):
    """Backlog markdown file not found."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Backlog file not found: {path}")


class ItemNotFoundError(BacklogError):
    """No item with the requested ID exists in the backlog."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class SectionNotFoundError(BacklogError):
    """No section matches the requested type."""

    def __init__(self, type_id: str, candidates: List[str]) -> None:
        self.type_id = type_id
        self.candidates = candidates
        labels = ", ".join(candidates)
        super().__init__(f"No section for type '{type_id}' (looked for: {labels})")


class WriteError(BacklogError):
    """Failed to write backlog file."""

    pass
