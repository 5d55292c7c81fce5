#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_structure.py
"""Structural analysis of reading-order lines.

Classifies the lines produced by the layout reconstructor into document
blocks. Passes run in this order for each page:

1. Page-number noise removal (document-wide, sequential)
2. Footnote separation
3. Headers, with adjacent same-level header lines merged
4. List items with nesting depth and continuation lines
5. Code blocks
6. Tables
7. Paragraph joining
8. URL formatting

A ``PageBreak`` block separates consecutive pages.
"""

from __future__ import annotations

import logging
import re
import statistics
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import groupby
from typing import Callable, Iterable

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
from pdf_inspector.constants import (
    BULLET_MARKERS,
    CODE_LINE_PREFIXES,
    CODE_SPECIAL_CHARS,
    CODE_SYMBOL_CHARS,
    DEFAULT_LEADING_RATIO,
    FOOTNOTE_MARKERS,
)
from pdf_inspector.models import TextLine
from pdf_inspector.options.markdown import MarkdownOptions, StructureOptions
from pdf_inspector.parsers._pdf_headers import IdentifyHeaders
from pdf_inspector.parsers._pdf_layout import body_font_size
from pdf_inspector.parsers._pdf_tables import TableRegion, detect_table_regions

logger = logging.getLogger(__name__)

__all__ = [
    "ListMarker",
    "StructureAnalyzer",
    "analyze",
    "format_urls",
    "is_code_like",
    "match_list_marker",
]

_DISTINCT_BULLETS = "".join(m for m in BULLET_MARKERS if m not in "-*–")
_TEXT_BULLETS = "".join(m for m in BULLET_MARKERS if m in "-*–")

_LIST_PATTERNS: tuple[tuple[re.Pattern[str], ListKind], ...] = (
    (re.compile(rf"^([{re.escape(_DISTINCT_BULLETS)}])\s*(\S.*)$"), ListKind.BULLET),
    (re.compile(rf"^([{re.escape(_TEXT_BULLETS)}])\s+(\S.*)$"), ListKind.BULLET),
    (re.compile(r"^(\d{1,3})[.)]\s+(\S.*)$"), ListKind.NUMBERED),
    (re.compile(r"^\((\d{1,3})\)\s+(\S.*)$"), ListKind.NUMBERED),
    (re.compile(r"^([a-z])[.)]\s+(\S.*)$"), ListKind.LETTERED),
    (re.compile(r"^\(([a-z])\)\s+(\S.*)$"), ListKind.LETTERED),
)

_PAGE_NUMBER_RE = re.compile(r"^(?:page\s+)?[-–]?\s*(\d{1,4})\s*[-–]?(?:\s+of\s+\d{1,4})?$", re.IGNORECASE)
_FOOTNOTE_MARKER_RE = re.compile(
    rf"^(?:<sup>)?(\d{{1,3}}|[{re.escape(''.join(FOOTNOTE_MARKERS))}])(?:</sup>)?[.)]?\s+(\S.*)$"
)
_SUPERSCRIPT_REF_RE = re.compile(r"<sup>([^<]{1,4})</sup>")
_SCRIPT_TAG_RE = re.compile(r"</?su[bp]>")
_URL_RE = re.compile(r"(?<![\[(<])\b((?:https?://|www\.)[^\s<>\[\]]+)")

# Footnote lines are set smaller than body text
_FOOTNOTE_SIZE_RATIO = 0.9
_FOOTNOTE_GAP_RATIO = 1.5
_IMPORT_RE = re.compile(
    r"^(?:import\s+[\w.]+(?:\s+as\s+\w+)?(?:,\s*[\w.]+)*"
    r"|from\s+[\w.]+\s+import\s+\S.*"
    r"|#include\s+\S+)$"
)


@dataclass(frozen=True)
class ListMarker:
    """A recognized list marker and the text that follows it."""

    kind: ListKind
    marker: str
    text: str


def match_list_marker(text: str) -> ListMarker | None:
    """Return the list marker at the start of ``text``, if any.

    Parameters
    ----------
    text : str
        Line text, leading whitespace allowed

    Returns
    -------
    ListMarker or None
        Kind, normalized marker value and remaining text

    """
    stripped = text.lstrip()
    for pattern, kind in _LIST_PATTERNS:
        match = pattern.match(stripped)
        if match:
            return ListMarker(kind=kind, marker=match.group(1), text=match.group(2).strip())
    return None


def _has_code_keyword(text: str) -> bool:
    if not text.startswith(CODE_LINE_PREFIXES):
        return False
    has_symbol = any(ch in CODE_SPECIAL_CHARS for ch in text) or text.endswith(":")
    return has_symbol or bool(_IMPORT_RE.match(text))


def _has_statement_evidence(text: str) -> bool:
    stripped = text.strip()
    return _has_code_keyword(stripped) or stripped.endswith((";", "{", "}"))


def is_code_like(text: str, code_symbol_min: int = 3) -> bool:
    """Whether ``text`` reads as source code by keyword or punctuation.

    A line qualifies when it starts with a language keyword, contains at least
    ``code_symbol_min`` of ``;{}=<>`` outside URLs and script tags, or ends
    with ``;``, ``{`` or ``}``. Brackets and parentheses are not counted.
    """
    stripped = text.strip()
    if not stripped:
        return False
    if _has_code_keyword(stripped):
        return True
    without_urls = _SCRIPT_TAG_RE.sub("", _URL_RE.sub("", stripped))
    symbols = sum(1 for ch in without_urls if ch in CODE_SYMBOL_CHARS)
    if symbols >= code_symbol_min and len(stripped) < 200:
        return True
    return stripped.endswith((";", "{", "}"))


def _link_url(match: re.Match[str]) -> str:
    url = match.group(1)
    original = url
    has_query = "?" in url

    if not has_query:
        url = url.rstrip(".,;:!?")
    else:
        url = url.rstrip(",;")

    # Drop closing parens that have no opening partner inside the URL
    close_count = url.count(")")
    open_count = url.count("(")
    while close_count > open_count and url.endswith(")"):
        url = url[:-1]
        close_count -= 1

    if not has_query:
        url = url.rstrip(".,;:!?")

    suffix = original[len(url) :]
    href = url if "://" in url else f"https://{url}"
    return f"[{url}]({href}){suffix}"


def format_urls(text: str) -> str:
    """Wrap bare ``http(s)://`` and ``www.`` URLs as Markdown links.

    Trailing sentence punctuation and unbalanced closing parentheses stay
    outside the link.

    Examples
    --------
    >>> format_urls("See https://example.com.")
    'See [https://example.com](https://example.com).'

    """
    if "http" not in text and "www." not in text:
        return text
    return _URL_RE.sub(_link_url, text)


def _marker_prefix(text: str, rest: str) -> str:
    stripped = text.lstrip()
    pos = stripped.find(rest[:10]) if rest else -1
    return stripped[:pos] if pos > 0 else stripped[:2]


@dataclass
class _Entry:
    line: TextLine
    text: str


@dataclass
class _PageState:
    """Mutable state while classifying one page."""

    blocks: list[Block] = field(default_factory=list)
    prev_entry: _Entry | None = None
    list_base_x: float | None = None
    list_text_x: float = 0.0
    table_index: int = 0


class StructureAnalyzer:
    """Classify reading-order lines into Markdown blocks.

    Parameters
    ----------
    options : MarkdownOptions, optional
        Detection switches, header ratios and structure thresholds

    """

    def __init__(self, options: MarkdownOptions | None = None):
        self.options = options or MarkdownOptions()
        self.structure: StructureOptions = self.options.structure
        self._space_gap_ratio = self.options.layout.space_gap_ratio
        self._headers: IdentifyHeaders | None = None
        self._body_size = 0.0

    def analyze(self, lines: list[TextLine]) -> list[Block]:
        """Return the blocks for ``lines``, pages in ascending order.

        Parameters
        ----------
        lines : list of TextLine
            Lines in reading order, grouped by page

        Returns
        -------
        list of Block
            Blocks in document order with ``PageBreak`` between pages

        """
        if not lines:
            return []

        self._headers = IdentifyHeaders(lines, self.options)
        self._body_size = self._headers.body_size or body_font_size(i for line in lines for i in line.items)
        logger.debug("Header analysis: %s", self._headers.get_debug_info())

        pages: list[tuple[int, list[_Entry]]] = []
        by_page = sorted(lines, key=lambda ln: ln.page_number)
        for page_number, page_lines in groupby(by_page, key=lambda ln: ln.page_number):
            entries = [_Entry(line, line.text(self._space_gap_ratio).strip()) for line in page_lines]
            pages.append((page_number, [entry for entry in entries if entry.text]))

        if self.options.remove_page_numbers:
            self._remove_page_numbers(pages)

        if self.options.max_workers > 1 and len(pages) > 1:
            with ThreadPoolExecutor(max_workers=self.options.max_workers) as executor:
                page_blocks = list(executor.map(lambda page: self._analyze_page(page[1]), pages))
        else:
            page_blocks = [self._analyze_page(entries) for _, entries in pages]

        blocks: list[Block] = []
        for idx, ((page_number, _), page) in enumerate(zip(pages, page_blocks)):
            if idx > 0:
                blocks.append(PageBreak(page_number=page_number))
            blocks.extend(page)
        return blocks

    # Noise

    def _remove_page_numbers(self, pages: list[tuple[int, list[_Entry]]]) -> None:
        """Drop running page numbers found in the top or bottom zone of each page."""
        last_value: int | None = None
        for page_number, entries in pages:
            if not entries:
                continue
            top = max(e.line.y for e in entries)
            bottom = min(e.line.y for e in entries)
            zone = (top - bottom) * self.structure.page_number_zone_ratio

            kept: list[_Entry] = []
            for entry in entries:
                match = _PAGE_NUMBER_RE.match(entry.text)
                in_zone = entry.line.y >= top - zone or entry.line.y <= bottom + zone
                if match and in_zone:
                    value = int(match.group(1))
                    if value == page_number or (last_value is not None and value == last_value + 1):
                        logger.debug("Removed page number %d on page %d", value, page_number)
                        last_value = value
                        continue
                kept.append(entry)
            entries[:] = kept

    # Footnotes

    def _typical_spacing(self, entries: list[_Entry]) -> float:
        gaps = [
            prev.line.y - cur.line.y
            for prev, cur in zip(entries, entries[1:])
            if prev.line.column == cur.line.column and prev.line.y > cur.line.y
        ]
        if gaps:
            return statistics.median(gaps)
        return self._body_size * DEFAULT_LEADING_RATIO

    def _split_footnotes(self, entries: list[_Entry], spacing: float) -> tuple[list[_Entry], list[Footnote]]:
        if len(entries) < 2:
            return entries, []
        top = max(e.line.y for e in entries)
        bottom = min(e.line.y for e in entries)
        limit = bottom + (top - bottom) * self.structure.footnote_zone_ratio

        references = {ref for e in entries for ref in _SUPERSCRIPT_REF_RE.findall(e.text)}

        start = len(entries)
        while start > 0 and entries[start - 1].line.y <= limit:
            start -= 1

        first = None
        for idx in range(max(start, 1), len(entries)):
            entry = entries[idx]
            match = _FOOTNOTE_MARKER_RE.match(entry.text)
            if match and match.group(1) in references:
                first = idx
                break
            small = 0 < entry.line.font_size < _FOOTNOTE_SIZE_RATIO * self._body_size
            gap = entries[idx - 1].line.y - entry.line.y
            if small and gap > _FOOTNOTE_GAP_RATIO * spacing:
                first = idx
                break
        if first is None:
            return entries, []

        footnotes: list[Footnote] = []
        for entry in entries[first:]:
            match = _FOOTNOTE_MARKER_RE.match(entry.text)
            if match:
                footnotes.append(Footnote(text=match.group(2), marker=match.group(1)))
            elif footnotes:
                footnotes[-1].text = f"{footnotes[-1].text} {entry.text}"
            else:
                footnotes.append(Footnote(text=entry.text, marker=str(len(footnotes) + 1)))
        logger.debug("Found %d footnotes on page %d", len(footnotes), entries[first].line.page_number)
        return entries[:first], footnotes

    # Line classification

    def _monospace_share(self, line: TextLine) -> float:
        patterns = self.structure.monospace_font_patterns
        total = line.char_count
        if total == 0:
            return 0.0
        mono = 0
        for item in line.items:
            name = (item.base_font or item.font_name).lower()
            if item.flags.is_monospace or any(pattern in name for pattern in patterns):
                mono += len(item.text.strip())
        return mono / total

    def _is_monospace(self, entry: _Entry) -> bool:
        return self._monospace_share(entry.line) >= self.structure.monospace_ratio

    def _header_level(self, entry: _Entry) -> int:
        if not self.options.detect_headers or self._headers is None:
            return 0
        return self._headers.get_header_level(entry.line, entry.text)

    def _code_run_end(self, entries: list[_Entry], start: int, stops: Iterable[int] = ()) -> int:
        """Return the end of the code run starting at ``start`` (start itself if none)."""
        stops = set(stops)

        def qualifies(entry: _Entry) -> bool:
            if self._header_level(entry) or entry.line.approximate:
                return False
            if self.options.detect_lists and match_list_marker(entry.text):
                return False
            return self._is_monospace(entry) or is_code_like(entry.text, self.structure.code_symbol_min)

        end = start
        while end < len(entries) and (end == start or end not in stops) and qualifies(entries[end]):
            end += 1
        run = entries[start:end]
        # Punctuation alone never makes a run; one line must look like a statement
        if len(run) >= 2 and any(self._is_monospace(e) or _has_statement_evidence(e.text) for e in run):
            return end
        if end - start == 1:
            entry = entries[start]
            if self._is_monospace(entry) or _has_code_keyword(entry.text):
                return end
        return start

    def _table_regions(self, entries: list[_Entry], claimed: Callable[[_Entry], bool]) -> dict[int, TableRegion]:
        """Find tables among runs of entries not claimed by other block kinds."""
        regions: dict[int, TableRegion] = {}
        idx = 0
        while idx < len(entries):
            if claimed(entries[idx]):
                idx += 1
                continue
            end = idx
            while end < len(entries) and not claimed(entries[end]):
                end += 1
            run = [e.line for e in entries[idx:end]]
            for region in detect_table_regions(run, self.structure):
                region.start += idx
                region.end += idx
                regions[region.start] = region
            idx = end
        return regions

    # Page assembly

    def _analyze_page(self, entries: list[_Entry]) -> list[Block]:
        if not entries:
            return []
        spacing = self._typical_spacing(entries)

        footnotes: list[Footnote] = []
        if self.options.detect_footnotes:
            entries, footnotes = self._split_footnotes(entries, spacing)

        def claimed(entry: _Entry) -> bool:
            return bool(
                self._header_level(entry)
                or (self.options.detect_lists and match_list_marker(entry.text))
                or (self.options.detect_code and self._is_monospace(entry))
            )

        regions = self._table_regions(entries, claimed) if self.options.detect_tables else {}

        state = _PageState()
        idx = 0
        while idx < len(entries):
            entry = entries[idx]

            region = regions.get(idx)
            if region is not None:
                state.blocks.extend(region.to_blocks(state.table_index))
                state.table_index += 1
                state.list_base_x = None
                state.prev_entry = entries[region.end - 1]
                idx = region.end
                continue

            level = self._header_level(entry)
            if level:
                self._add_header(state, entry, level)
                idx += 1
                continue

            if self.options.detect_lists:
                marker = match_list_marker(entry.text)
                if marker is not None:
                    self._add_list_item(state, entry, marker)
                    idx += 1
                    continue
                item = self._continued_list_item(state, entry, spacing)
                if item is not None:
                    item.text = f"{item.text} {entry.text}"
                    state.prev_entry = entry
                    idx += 1
                    continue

            if self.options.detect_code:
                end = self._code_run_end(entries, idx, regions)
                if end > idx:
                    state.blocks.append(CodeBlock(lines=[e.text for e in entries[idx:end]]))
                    state.list_base_x = None
                    state.prev_entry = entries[end - 1]
                    idx = end
                    continue

            self._add_paragraph_line(state, entry, spacing)
            idx += 1

        blocks = state.blocks
        if footnotes:
            blocks = self._link_footnote_references(blocks, footnotes)
            blocks.extend(footnotes)
        if self.options.format_urls:
            self._format_block_urls(blocks)
        return blocks

    def _add_header(self, state: _PageState, entry: _Entry, level: int) -> None:
        last = state.blocks[-1] if state.blocks else None
        adjacent = state.prev_entry is not None and state.prev_entry.line.column == entry.line.column
        if isinstance(last, Header) and last.level == level and adjacent:
            last.text = f"{last.text} {entry.text}"
        else:
            state.blocks.append(Header(text=entry.text, level=level))
        state.list_base_x = None
        state.prev_entry = entry

    def _add_list_item(self, state: _PageState, entry: _Entry, marker: ListMarker) -> None:
        line = entry.line
        last = state.blocks[-1] if state.blocks else None
        if state.list_base_x is None or not isinstance(last, ListItem):
            state.list_base_x = line.x_start
        depth = max(0, round((line.x_start - state.list_base_x) / self.structure.list_indent_step))
        if isinstance(last, ListItem):
            depth = min(depth, last.depth + 1)
        else:
            depth = 0
        state.blocks.append(ListItem(text=marker.text, kind=marker.kind, depth=depth, marker=marker.marker))
        state.list_text_x = self._list_text_x(line, marker)
        state.prev_entry = entry

    @staticmethod
    def _list_text_x(line: TextLine, marker: ListMarker) -> float:
        first = line.items[0]
        if len(line.items) > 1 and match_list_marker(first.text) is None:
            return line.items[1].x
        prefix = len(_marker_prefix(first.text, marker.text))
        return first.x + prefix * first.font_size * 0.5

    def _continued_list_item(self, state: _PageState, entry: _Entry, spacing: float) -> ListItem | None:
        """Return the open list item ``entry`` continues, if any."""
        last = state.blocks[-1] if state.blocks else None
        prev = state.prev_entry
        if state.list_base_x is None or not isinstance(last, ListItem) or prev is None:
            return None
        if prev.line.column != entry.line.column:
            return None
        gap = prev.line.y - entry.line.y
        if gap <= 0 or gap > self.structure.paragraph_gap_ratio * spacing:
            return None
        tolerance = entry.line.font_size * 0.5
        return last if entry.line.x_start >= state.list_text_x - tolerance else None

    def _add_paragraph_line(self, state: _PageState, entry: _Entry, spacing: float) -> None:
        last = state.blocks[-1] if state.blocks else None
        prev = state.prev_entry
        joined = False
        if isinstance(last, Paragraph) and prev is not None and prev.line.column == entry.line.column:
            gap = prev.line.y - entry.line.y
            if 0 < gap <= self.structure.paragraph_gap_ratio * spacing:
                last.text = f"{last.text} {entry.text}"
                joined = True
        if not joined:
            state.blocks.append(Paragraph(text=entry.text))
        state.list_base_x = None
        state.prev_entry = entry

    # Post-processing

    @staticmethod
    def _link_footnote_references(blocks: list[Block], footnotes: list[Footnote]) -> list[Block]:
        """Rewrite ``<sup>n</sup>`` references to footnotes as ``[^n]``."""
        markers = {note.marker for note in footnotes}

        def replace_ref(match: re.Match[str]) -> str:
            ref = match.group(1)
            return f"[^{ref}]" if ref in markers else match.group(0)

        for block in blocks:
            if isinstance(block, (Paragraph, Header, ListItem)):
                block.text = _SUPERSCRIPT_REF_RE.sub(replace_ref, block.text)
        return blocks

    @staticmethod
    def _format_block_urls(blocks: Iterable[Block]) -> None:
        for block in blocks:
            if isinstance(block, (Paragraph, Header, ListItem, Footnote)):
                block.text = format_urls(block.text)
            elif isinstance(block, TableRow):
                block.cells = [format_urls(cell) for cell in block.cells]


def analyze(lines: list[TextLine], options: MarkdownOptions | None = None) -> list[Block]:
    """Classify reading-order lines into blocks.

    Parameters
    ----------
    lines : list of TextLine
        Output of the layout reconstructor
    options : MarkdownOptions, optional
        Detection switches and thresholds

    Returns
    -------
    list of Block
        Blocks in document order

    """
    return StructureAnalyzer(options).analyze(lines)
