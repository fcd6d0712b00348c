"""Pydantic models for the parsed backlog document."""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Bug severity short code."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class Priority(str, Enum):
    """Business priority."""

    HAUTE = "Haute"
    MOYENNE = "Moyenne"
    FAIBLE = "Faible"


class Effort(str, Enum):
    """T-shirt size effort estimate."""

    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"


class Criterion(BaseModel):
    """Single acceptance criterion checkbox."""

    text: str
    checked: bool = False


class Screenshot(BaseModel):
    """Image attached to an item."""

    filename: str = Field(..., description="e.g., BUG-001_1704153600000.png")
    alt: Optional[str] = None
    added_at: Optional[int] = Field(None, description="Millisecond timestamp from the filename")


class TableRow(BaseModel):
    """Row of a table group: one compact item."""

    id: str
    description: str = ""
    action: str = ""


class BacklogItem(BaseModel):
    """Single ticket parsed from a `### ID | Title` block."""

    kind: Literal["item"] = "item"

    id: str = Field(..., description="Display ID (e.g., BUG-001)")
    type: str = Field(..., description="Letters portion of the ID (e.g., BUG)")
    title: str
    emoji: Optional[str] = None

    # Metadata lines
    component: Optional[str] = None
    module: Optional[str] = None
    severity: Optional[Severity] = None
    priority: Optional[Priority] = None
    effort: Optional[Effort] = None

    # Text content
    description: Optional[str] = None
    user_story: Optional[str] = None

    # Lists
    specs: List[str] = Field(default_factory=list)
    reproduction: List[str] = Field(default_factory=list)
    screens: List[str] = Field(default_factory=list)
    criteria: List[Criterion] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    screenshots: List[Screenshot] = Field(default_factory=list)

    # Round-trip bookkeeping
    raw_markdown: str = Field("", description="Verbatim source span, trailing separator included")
    section_index: int = Field(0, description="Position within the owning section")
    modified: bool = Field(False, description="Rebuild from fields on serialize instead of raw_markdown")

    model_config = ConfigDict(use_enum_values=False, extra="forbid")


class TableGroup(BaseModel):
    """Range header (e.g. `BUG-005 à 007 | ...`) backed by a pipe table."""

    kind: Literal["table-group"] = "table-group"
    title: str
    severity: Optional[Severity] = None
    items: List[TableRow] = Field(default_factory=list)
    raw_markdown: str = ""
    section_index: int = 0


class RawSection(BaseModel):
    """Opaque passthrough block (legends, roadmap prose, type markers)."""

    kind: Literal["raw-section"] = "raw-section"
    title: str = ""
    raw_markdown: str = ""
    section_index: int = 0


SectionItem = Annotated[Union[BacklogItem, TableGroup, RawSection], Field(discriminator="kind")]


class Section(BaseModel):
    """Top-level `## [N. ]Title` grouping."""

    id: str = Field(..., description="Section number, auto-assigned when absent")
    title: str
    raw_header: str = Field(..., description="Header line exactly as written")
    items: List[SectionItem] = Field(default_factory=list)


class Backlog(BaseModel):
    """Parsed backlog document."""

    header: str = ""
    table_of_contents: str = ""
    sections: List[Section] = Field(default_factory=list)
    footer: Optional[str] = None
