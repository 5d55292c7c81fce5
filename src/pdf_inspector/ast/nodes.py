#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/ast/nodes.py
"""Block node classes produced by the structural analyzer.

Blocks carry text only; positions are discarded once the analyzer has
classified a line. The order of a block list is the final document order.

Node Hierarchy
--------------
All nodes inherit from :class:`Block` and support the visitor pattern:

    - Header, Paragraph, ListItem, CodeBlock
    - TableRow, Footnote, PageBreak

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

Alignment = Literal["left", "center", "right"]


class ListKind(str, Enum):
    """Marker family of a list item."""

    BULLET = "bullet"
    NUMBERED = "numbered"
    LETTERED = "lettered"


class Block(ABC):
    """Abstract base class for analyzer output blocks."""

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Dispatch to the matching ``visit_*`` method of ``visitor``."""


@dataclass
class Header(Block):
    """Heading block.

    Parameters
    ----------
    text : str
        Heading text
    level : int
        Heading level (1-6, where 1 is most important)

    """

    text: str
    level: int

    def __post_init__(self) -> None:
        """Validate heading level is between 1 and 6."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Header level must be 1-6, got {self.level}")

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_header(self)


@dataclass
class Paragraph(Block):
    """Body text joined from one or more consecutive lines."""

    text: str

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_paragraph(self)


@dataclass
class ListItem(Block):
    """One list entry.

    Parameters
    ----------
    text : str
        Item text without its marker
    kind : ListKind
        Bullet, numbered or lettered
    depth : int, default 0
        Nesting level, 0 for top-level items
    marker : str, default ""
        Normalized marker value (``"3"`` for ``3.``, ``"b"`` for ``(b)``)

    """

    text: str
    kind: ListKind = ListKind.BULLET
    depth: int = 0
    marker: str = ""

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_list_item(self)


@dataclass
class CodeBlock(Block):
    """Run of monospace or code-like lines, rendered as a fenced block."""

    lines: list[str] = field(default_factory=list)
    language: str | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_code_block(self)


@dataclass
class TableRow(Block):
    """One row of a reconstructed table.

    Parameters
    ----------
    cells : list of str
        Cell text, one entry per column
    alignments : list of str
        Column alignment (``"left"``, ``"center"``, ``"right"``), shared by all
        rows of the same table
    is_header : bool, default False
        Whether this is the first row of its table
    table_index : int, default 0
        Distinguishes adjacent tables

    """

    cells: list[str]
    alignments: list[Alignment] = field(default_factory=list)
    is_header: bool = False
    table_index: int = 0

    @property
    def text(self) -> str:
        return " ".join(self.cells)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_table_row(self)


@dataclass
class Footnote(Block):
    """Footnote text with its reference marker (``"1"``, ``"*"``)."""

    text: str
    marker: str

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_footnote(self)


@dataclass
class PageBreak(Block):
    """Boundary between two pages; ``page_number`` is the page that follows."""

    page_number: int

    @property
    def text(self) -> str:
        return ""

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_page_break(self)


__all__ = [
    "Alignment",
    "Block",
    "CodeBlock",
    "Footnote",
    "Header",
    "ListItem",
    "ListKind",
    "PageBreak",
    "Paragraph",
    "TableRow",
]
