"""Ticketflow Core - Backlog markdown <-> typed tree transformer."""

from .__version__ import __version__, __version_info__

from .models import (
    Backlog,
    BacklogItem,
    Criterion,
    Effort,
    Priority,
    RawSection,
    Screenshot,
    Section,
    SectionItem,
    Severity,
    TableGroup,
    TableRow,
)
from .parser import (
    find_item,
    get_all_items,
    get_items_by_type,
    normalize_markdown,
    parse_backlog,
)
from .builder import (
    BuildOptions,
    build_item_markdown,
    export_item_for_clipboard,
    screenshot_markdown_ref,
)
from .serializer import serialize_backlog, toggle_criterion, update_item
from .sections import (
    remove_section_from_markdown,
    render_backlog_template,
    render_type_section,
    section_anchor,
    update_table_of_contents,
)
from .types import (
    DEFAULT_TYPES,
    TypeDefinition,
    detect_types_from_markdown,
    extract_type_from_section_title,
    find_target_section_index,
    generate_item_id,
    get_type_from_id,
)
from .labels import TYPE_TO_SECTION_LABELS
from .config import ConfigLoader, TicketflowConfig
from .errors import (
    BacklogError,
    BacklogNotFoundError,
    ConfigError,
    ItemNotFoundError,
    SectionNotFoundError,
    WriteError,
)

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Models
    "Backlog",
    "BacklogItem",
    "Criterion",
    "Effort",
    "Priority",
    "RawSection",
    "Screenshot",
    "Section",
    "SectionItem",
    "Severity",
    "TableGroup",
    "TableRow",
    # Parser
    "find_item",
    "get_all_items",
    "get_items_by_type",
    "normalize_markdown",
    "parse_backlog",
    # Builder
    "BuildOptions",
    "build_item_markdown",
    "export_item_for_clipboard",
    "screenshot_markdown_ref",
    # Serializer
    "serialize_backlog",
    "toggle_criterion",
    "update_item",
    # Sections
    "remove_section_from_markdown",
    "render_backlog_template",
    "render_type_section",
    "section_anchor",
    "update_table_of_contents",
    # Types
    "DEFAULT_TYPES",
    "TYPE_TO_SECTION_LABELS",
    "TypeDefinition",
    "detect_types_from_markdown",
    "extract_type_from_section_title",
    "find_target_section_index",
    "generate_item_id",
    "get_type_from_id",
    # Config
    "ConfigLoader",
    "TicketflowConfig",
    # Errors
    "BacklogError",
    "BacklogNotFoundError",
    "ConfigError",
    "ItemNotFoundError",
    "SectionNotFoundError",
    "WriteError",
]
