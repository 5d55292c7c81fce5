#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/ast/__init__.py
"""Block-level document model shared by the analyzer and renderers."""

from pdf_inspector.ast.nodes import (
    Alignment,
    Block,
    CodeBlock,
    Footnote,
    Header,
    ListItem,
    ListKind,
    PageBreak,
    Paragraph,
    TableRow,
)
from pdf_inspector.ast.visitors import BlockVisitor

__all__ = [
    "Alignment",
    "Block",
    "BlockVisitor",
    "CodeBlock",
    "Footnote",
    "Header",
    "ListItem",
    "ListKind",
    "PageBreak",
    "Paragraph",
    "TableRow",
]
