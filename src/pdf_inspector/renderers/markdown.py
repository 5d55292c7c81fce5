#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/renderers/markdown.py
"""Markdown rendering from analyzed blocks.

This module provides the MarkdownRenderer class which serializes the block
list produced by the structural analyzer. Blocks are rendered in the order
given; the renderer never reorders content except for collecting each page's
footnotes into a reference section at the end of that page.

The rendering process uses the visitor pattern: every block accepts the
renderer, which appends a chunk of Markdown tagged with a grouping key.
Chunks in the same group (the items of one list, the rows of one table,
the footnotes of one page) are separated by a single newline, all other
chunks by a blank line.

"""

from __future__ import annotations

import re
from typing import Hashable

from pdf_inspector.ast.nodes import (
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
from pdf_inspector.constants import DEFAULT_CODE_FENCE, LIST_INDENT
from pdf_inspector.options.markdown import MarkdownOptions
from pdf_inspector.parsers._pdf_structure import format_urls, is_code_like, match_list_marker

__all__ = ["MarkdownRenderer", "render_plain_text"]

_LIST_GROUP = "list"
_FOOTNOTE_GROUP = "footnote"


class MarkdownRenderer(BlockVisitor):
    """Render blocks to Markdown text.

    Parameters
    ----------
    options : MarkdownOptions, optional
        Supplies ``page_break_marker``

    Examples
    --------
        >>> from pdf_inspector.ast import Header, ListItem
        >>> MarkdownRenderer().render([Header("Title", 1), ListItem("item1"), ListItem("item2")])
        '# Title\\n\\n- item1\\n- item2\\n'

    """

    def __init__(self, options: MarkdownOptions | None = None):
        self.options = options or MarkdownOptions()
        self._chunks: list[tuple[Hashable | None, str]] = []
        self._footnotes: list[Footnote] = []
        self._table_columns: dict[tuple[int, int], int] = {}
        self._page = 0

    def render(self, blocks: list[Block]) -> str:
        """Render ``blocks`` to a Markdown string.

        Parameters
        ----------
        blocks : list of Block
            Analyzer output in document order

        Returns
        -------
        str
            Markdown ending in exactly one newline, or ``""`` for no content

        """
        self._chunks = []
        self._footnotes = []
        self._table_columns = {}
        self._page = 0

        for block in blocks:
            block.accept(self)
        self._flush_footnotes()

        result = self._join_chunks()
        self._chunks.clear()
        return self._cleanup_output(result)

    def _join_chunks(self) -> str:
        parts: list[str] = []
        prev_group: Hashable | None = None
        for group, text in self._chunks:
            if parts:
                parts.append("\n" if group is not None and group == prev_group else "\n\n")
            parts.append(text)
            prev_group = group
        return "".join(parts)

    def _cleanup_output(self, text: str) -> str:
        """Collapse blank-line runs and normalize the trailing newline.

        Parameters
        ----------
        text : str
            Raw markdown text

        Returns
        -------
        str
            Cleaned markdown text

        """
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = re.sub(r"\n{3,}", "\n\n", text)
        text = text.strip("\n")
        if not text.strip():
            return ""
        return text + "\n"

    def _emit(self, text: str, group: Hashable | None = None) -> None:
        self._chunks.append((group, text))

    def _flush_footnotes(self) -> None:
        for note in self._footnotes:
            self._emit(f"[^{note.marker}]: {note.text}", _FOOTNOTE_GROUP)
        self._footnotes.clear()

    def visit_header(self, node: Header) -> None:
        """Render a Header block as an ATX heading."""
        self._emit(f"{'#' * node.level} {node.text.strip()}")

    def visit_paragraph(self, node: Paragraph) -> None:
        text = node.text.strip()
        if text:
            self._emit(text)

    def visit_list_item(self, node: ListItem) -> None:
        """Render a ListItem block.

        Bullets become ``-``; numbered items keep their original number and
        lettered items their letter. Each depth level indents by two spaces.
        """
        if node.kind in (ListKind.NUMBERED, ListKind.LETTERED) and node.marker:
            marker = f"{node.marker}."
        else:
            marker = "-"
        self._emit(f"{LIST_INDENT * node.depth}{marker} {node.text.strip()}", _LIST_GROUP)

    def visit_code_block(self, node: CodeBlock) -> None:
        """Render a CodeBlock as a fenced block.

        The fence grows past the longest backtick run in the content so that
        embedded fences cannot close the block early.
        """
        content = node.text
        fence_char = DEFAULT_CODE_FENCE[0]
        fence_length = len(DEFAULT_CODE_FENCE)
        if fence_char in content:
            longest = max(len(run) for run in re.findall(rf"{re.escape(fence_char)}+", content))
            fence_length = max(fence_length, longest + 1)
        fence = fence_char * fence_length
        self._emit(f"{fence}{node.language or ''}\n{content}\n{fence}")

    def visit_table_row(self, node: TableRow) -> None:
        """Render a TableRow; the header row is followed by the alignment row."""
        key = (self._page, node.table_index)
        num_cols = self._table_columns.setdefault(key, max(len(node.cells), len(node.alignments)))
        cells = [cell.replace("|", "\\|").strip() for cell in node.cells]
        cells = (cells + [""] * num_cols)[:num_cols]
        row = "| " + " | ".join(cells) + " |"
        if node.is_header:
            row += "\n" + self._generate_alignment_row(node, num_cols)
        self._emit(row, ("table", *key))

    @staticmethod
    def _generate_alignment_row(node: TableRow, num_cols: int) -> str:
        """Generate the alignment separator row.

        Parameters
        ----------
        node : TableRow
            Header row carrying the column alignments
        num_cols : int
            Number of columns

        Returns
        -------
        str
            Alignment row string

        """
        alignments = []
        for j in range(num_cols):
            alignment = node.alignments[j] if j < len(node.alignments) else None
            if alignment == "center":
                alignments.append(":---:")
            elif alignment == "right":
                alignments.append("---:")
            elif alignment == "left":
                alignments.append(":---")
            else:
                alignments.append("---")
        return "| " + " | ".join(alignments) + " |"

    def visit_footnote(self, node: Footnote) -> None:
        self._footnotes.append(node)

    def visit_page_break(self, node: PageBreak) -> None:
        """End the current page: flush its footnotes, then emit the marker."""
        self._flush_footnotes()
        self._page += 1
        if self.options.page_break_marker is not None:
            self._emit(self.options.page_break_marker)


def render_plain_text(text: str, options: MarkdownOptions | None = None) -> str:
    """Convert already-extracted plain text to Markdown line by line.

    No font information is available, so headers are never inferred. Blank
    lines end lists and code blocks; bullet glyphs are normalized to ``-``;
    code-like lines are fenced.

    Parameters
    ----------
    text : str
        Plain text, one line per text line
    options : MarkdownOptions, optional
        ``detect_lists``, ``detect_code`` and ``format_urls`` apply

    Returns
    -------
    str
        Markdown text

    """
    options = options or MarkdownOptions()
    symbol_min = options.structure.code_symbol_min
    out: list[str] = []
    in_code = False

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            if in_code:
                out.append(DEFAULT_CODE_FENCE)
                in_code = False
            out.append("")
            continue

        marker = match_list_marker(line) if options.detect_lists else None
        if marker is not None and not in_code:
            if marker.kind is ListKind.BULLET:
                prefix = "-"
            else:
                prefix = f"{marker.marker}."
            body = format_urls(marker.text) if options.format_urls else marker.text
            out.append(f"{prefix} {body}")
            continue

        if options.detect_code and is_code_like(line, symbol_min):
            if not in_code:
                out.append(DEFAULT_CODE_FENCE)
                in_code = True
            out.append(line)
            continue
        if in_code:
            out.append(DEFAULT_CODE_FENCE)
            in_code = False

        out.append(format_urls(line) if options.format_urls else line)

    if in_code:
        out.append(DEFAULT_CODE_FENCE)

    result = re.sub(r"\n{3,}", "\n\n", "\n".join(out)).strip("\n")
    return result + "\n" if result.strip() else ""
