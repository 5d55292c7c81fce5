#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/ast/visitors.py
"""Visitor base class for block traversal.

Renderers subclass :class:`BlockVisitor` and implement one ``visit_*``
method per block type; ``Block.accept`` dispatches to them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pdf_inspector.ast.nodes import (
    CodeBlock,
    Footnote,
    Header,
    ListItem,
    PageBreak,
    Paragraph,
    TableRow,
)

__all__ = ["BlockVisitor"]


class BlockVisitor(ABC):
    """Abstract base class for block visitors.

    Examples
    --------
    Count headers in a block list:

        >>> class HeaderCounter(BlockVisitor):
        ...     def __init__(self):
        ...         self.count = 0
        ...     def visit_header(self, node):
        ...         self.count += 1
        ...     # remaining visit_* methods do nothing
        ...
        >>> counter = HeaderCounter()
        >>> for block in blocks:
        ...     block.accept(counter)

    """

    @abstractmethod
    def visit_header(self, node: Header) -> Any:
        """Visit a Header block."""

    @abstractmethod
    def visit_paragraph(self, node: Paragraph) -> Any:
        """Visit a Paragraph block."""

    @abstractmethod
    def visit_list_item(self, node: ListItem) -> Any:
        """Visit a ListItem block."""

    @abstractmethod
    def visit_code_block(self, node: CodeBlock) -> Any:
        """Visit a CodeBlock block."""

    @abstractmethod
    def visit_table_row(self, node: TableRow) -> Any:
        """Visit a TableRow block."""

    @abstractmethod
    def visit_footnote(self, node: Footnote) -> Any:
        """Visit a Footnote block."""

    @abstractmethod
    def visit_page_break(self, node: PageBreak) -> Any:
        """Visit a PageBreak block."""
