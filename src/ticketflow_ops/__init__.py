"""
ticketflow_ops - Use-case functions over backlog files.

CLI commands delegate to these functions; the document logic itself lives in
ticketflow_core and never touches the filesystem.

Modules:
    backlog_file: Load, save and mutate a backlog markdown file
    template: New backlog file creation
    export: Clipboard export of a single item
"""

from .backlog_file import (
    ItemUpdateResult,
    SectionRemovalResult,
    add_item_to_file,
    find_item,
    list_items,
    list_types,
    load_backlog,
    remove_type_from_file,
    save_backlog,
    toggle_criterion_in_file,
    update_item_in_file,
)
from .template import CreateBacklogResult, create_backlog
from .export import export_item

__all__ = [
    # Backlog file
    "ItemUpdateResult",
    "SectionRemovalResult",
    "add_item_to_file",
    "find_item",
    "list_items",
    "list_types",
    "load_backlog",
    "remove_type_from_file",
    "save_backlog",
    "toggle_criterion_in_file",
    "update_item_in_file",
    # Template
    "CreateBacklogResult",
    "create_backlog",
    # Export
    "export_item",
]
