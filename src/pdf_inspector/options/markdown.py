#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/options/markdown.py
"""Configuration options for structural analysis and Markdown output."""

from __future__ import annotations

from dataclasses import dataclass, field

from pdf_inspector.constants import (
    DEFAULT_CODE_SYMBOL_MIN,
    DEFAULT_FOOTNOTE_ZONE_RATIO,
    DEFAULT_HEADER_MAX_LINE_LENGTH,
    DEFAULT_HEADER_RATIOS,
    DEFAULT_LIST_INDENT_STEP,
    DEFAULT_MAX_WORKERS,
    DEFAULT_MONOSPACE_RATIO,
    DEFAULT_PAGE_BREAK_MARKER,
    DEFAULT_PAGE_NUMBER_ZONE_RATIO,
    DEFAULT_PARAGRAPH_GAP_RATIO,
    DEFAULT_TABLE_MAX_CELL_LENGTH,
    DEFAULT_TABLE_MIN_COLUMNS,
    DEFAULT_TABLE_MIN_ROWS,
    DEFAULT_TABLE_X_TOLERANCE,
    MONOSPACE_FONT_PATTERNS,
)
from pdf_inspector.exceptions import ValidationError
from pdf_inspector.options.base import CloneFrozenMixin, require_positive, require_ratio
from pdf_inspector.options.layout import LayoutOptions


@dataclass(frozen=True)
class StructureOptions(CloneFrozenMixin):
    """Thresholds for the structural analyzer.

    Parameters
    ----------
    monospace_font_patterns : tuple[str, ...]
        Lower-case substrings of font names treated as monospace.
    monospace_ratio : float, default 0.6
        Fraction of a line's characters that must be monospace for a code line.
    code_symbol_min : int, default 3
        Special characters a line needs before punctuation alone marks it as code.
    list_indent_step : float, default 15.0
        Horizontal points per list nesting level.
    table_x_tolerance : float, default 8.0
        Points within which item x-starts are considered the same column.
    table_min_columns : int, default 2
        Shared column offsets required for a table region.
    table_min_rows : int, default 2
        Consecutive aligned lines required for a table region.
    table_max_cell_length : int, default 60
        Cells longer than this read as prose and disqualify a candidate row.
    footnote_zone_ratio : float, default 0.12
        Bottom fraction of the text extent searched for footnotes.
    page_number_zone_ratio : float, default 0.08
        Top and bottom fraction of the text extent searched for page numbers.
    paragraph_gap_ratio : float, default 1.8
        Vertical gap, relative to typical line spacing, that starts a new paragraph.

    """

    monospace_font_patterns: tuple[str, ...] = field(
        default=MONOSPACE_FONT_PATTERNS,
        metadata={"help": "Font name substrings treated as monospace", "importance": "advanced"},
    )
    monospace_ratio: float = field(
        default=DEFAULT_MONOSPACE_RATIO,
        metadata={"help": "Monospace character share for code lines", "type": float, "importance": "advanced"},
    )
    code_symbol_min: int = field(
        default=DEFAULT_CODE_SYMBOL_MIN,
        metadata={"help": "Special characters marking a code-like line", "type": int, "importance": "advanced"},
    )
    list_indent_step: float = field(
        default=DEFAULT_LIST_INDENT_STEP,
        metadata={"help": "Points of indentation per list level", "type": float, "importance": "advanced"},
    )
    table_x_tolerance: float = field(
        default=DEFAULT_TABLE_X_TOLERANCE,
        metadata={"help": "Column alignment tolerance in points", "type": float, "importance": "advanced"},
    )
    table_min_columns: int = field(
        default=DEFAULT_TABLE_MIN_COLUMNS,
        metadata={"help": "Minimum columns for a table", "type": int, "importance": "advanced"},
    )
    table_min_rows: int = field(
        default=DEFAULT_TABLE_MIN_ROWS,
        metadata={"help": "Minimum rows for a table", "type": int, "importance": "advanced"},
    )
    table_max_cell_length: int = field(
        default=DEFAULT_TABLE_MAX_CELL_LENGTH,
        metadata={"help": "Maximum characters per table cell", "type": int, "importance": "advanced"},
    )
    footnote_zone_ratio: float = field(
        default=DEFAULT_FOOTNOTE_ZONE_RATIO,
        metadata={"help": "Bottom page fraction searched for footnotes", "type": float, "importance": "advanced"},
    )
    page_number_zone_ratio: float = field(
        default=DEFAULT_PAGE_NUMBER_ZONE_RATIO,
        metadata={"help": "Page fraction searched for page numbers", "type": float, "importance": "advanced"},
    )
    paragraph_gap_ratio: float = field(
        default=DEFAULT_PARAGRAPH_GAP_RATIO,
        metadata={"help": "Line-gap ratio that splits paragraphs", "type": float, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate thresholds.

        Raises
        ------
        ValidationError
            If any field value is outside its valid range.

        """
        require_ratio("monospace_ratio", self.monospace_ratio, inclusive_zero=False)
        require_positive("code_symbol_min", self.code_symbol_min)
        require_positive("list_indent_step", self.list_indent_step)
        require_positive("table_x_tolerance", self.table_x_tolerance)
        if self.table_min_columns < 2:
            raise ValidationError(
                f"table_min_columns must be at least 2, got {self.table_min_columns}",
                parameter_name="table_min_columns",
                parameter_value=self.table_min_columns,
            )
        require_positive("table_min_rows", self.table_min_rows)
        require_positive("table_max_cell_length", self.table_max_cell_length)
        require_ratio("footnote_zone_ratio", self.footnote_zone_ratio)
        require_ratio("page_number_zone_ratio", self.page_number_zone_ratio)
        require_positive("paragraph_gap_ratio", self.paragraph_gap_ratio)


@dataclass(frozen=True)
class MarkdownOptions(CloneFrozenMixin):
    """Configuration options for PDF-to-Markdown conversion.

    Parameters
    ----------
    detect_headers : bool, default True
        Classify lines with enlarged fonts as headings.
    detect_lists : bool, default True
        Recognize bullet, numbered and lettered list items.
    detect_code : bool, default True
        Group monospace or code-like lines into fenced blocks.
    detect_tables : bool, default True
        Reconstruct pipe tables from column-aligned lines.
    detect_footnotes : bool, default True
        Move footnotes into a reference section per page.
    detect_columns : bool, default True
        Reorder multi-column pages column by column.
    base_font_size : float, optional
        Body text size; when unset, the most common size in the document is used.
    header_ratios : tuple of float, default (1.8, 1.5, 1.3, 1.15)
        Minimum size ratios for H1 through H4, in descending order.
    header_max_length : int, default 100
        Lines longer than this are never headings.
    remove_page_numbers : bool, default True
        Drop running page numbers found near the top or bottom of a page.
    format_urls : bool, default True
        Turn bare URLs into Markdown links.
    fix_hyphenation : bool, default True
        Rejoin words hyphenated across line breaks.
    merge_drop_caps : bool, default True
        Merge oversized initial letters into their paragraph.
    merge_scripts : bool, default True
        Merge superscript and subscript runs into their base line.
    page_break_marker : str or None, default "---"
        Line emitted between pages; ``None`` disables page-break markers.
    max_workers : int, default 1
        Worker threads used for per-page layout and analysis.
    layout : LayoutOptions
        Geometry thresholds for the reconstructor.
    structure : StructureOptions
        Thresholds for the structural analyzer.

    """

    detect_headers: bool = field(default=True, metadata={"help": "Detect headings", "importance": "core"})
    detect_lists: bool = field(default=True, metadata={"help": "Detect list items", "importance": "core"})
    detect_code: bool = field(default=True, metadata={"help": "Detect code blocks", "importance": "core"})
    detect_tables: bool = field(default=True, metadata={"help": "Detect aligned tables", "importance": "core"})
    detect_footnotes: bool = field(default=True, metadata={"help": "Detect footnotes", "importance": "advanced"})
    detect_columns: bool = field(default=True, metadata={"help": "Detect multi-column layout", "importance": "core"})
    base_font_size: float | None = field(
        default=None,
        metadata={"help": "Body font size (default: most common size)", "type": float, "importance": "advanced"},
    )
    header_ratios: tuple[float, ...] = field(
        default=DEFAULT_HEADER_RATIOS,
        metadata={"help": "Size ratios for H1..H4", "importance": "advanced"},
    )
    header_max_length: int = field(
        default=DEFAULT_HEADER_MAX_LINE_LENGTH,
        metadata={"help": "Maximum heading length in characters", "type": int, "importance": "advanced"},
    )
    remove_page_numbers: bool = field(
        default=True, metadata={"help": "Remove running page numbers", "importance": "core"}
    )
    format_urls: bool = field(default=True, metadata={"help": "Convert bare URLs to links", "importance": "core"})
    fix_hyphenation: bool = field(
        default=True, metadata={"help": "Rejoin words hyphenated across lines", "importance": "core"}
    )
    merge_drop_caps: bool = field(default=True, metadata={"help": "Merge drop caps", "importance": "advanced"})
    merge_scripts: bool = field(
        default=True, metadata={"help": "Merge superscripts and subscripts", "importance": "advanced"}
    )
    page_break_marker: str | None = field(
        default=DEFAULT_PAGE_BREAK_MARKER,
        metadata={"help": "Marker emitted between pages (None to disable)", "importance": "core"},
    )
    max_workers: int = field(
        default=DEFAULT_MAX_WORKERS,
        metadata={"help": "Threads for per-page processing", "type": int, "importance": "advanced"},
    )
    layout: LayoutOptions = field(default_factory=LayoutOptions, metadata={"importance": "advanced"})
    structure: StructureOptions = field(default_factory=StructureOptions, metadata={"importance": "advanced"})

    def __post_init__(self) -> None:
        """Validate header ratios, sizes, and worker count.

        Raises
        ------
        ValidationError
            If any field value is outside its valid range.

        """
        if self.base_font_size is not None:
            require_positive("base_font_size", self.base_font_size)
        if not 1 <= len(self.header_ratios) <= 6:
            raise ValidationError(
                f"header_ratios must define between 1 and 6 levels, got {len(self.header_ratios)}",
                parameter_name="header_ratios",
                parameter_value=self.header_ratios,
            )
        if list(self.header_ratios) != sorted(self.header_ratios, reverse=True) or min(self.header_ratios) <= 1.0:
            raise ValidationError(
                f"header_ratios must be descending and greater than 1.0, got {self.header_ratios}",
                parameter_name="header_ratios",
                parameter_value=self.header_ratios,
            )
        require_positive("header_max_length", self.header_max_length)
        require_positive("max_workers", self.max_workers)
