#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/options/layout.py
"""Thresholds for line, column and reading-order reconstruction."""

from __future__ import annotations

from dataclasses import dataclass, field

from pdf_inspector.constants import (
    DEFAULT_AVG_CHAR_WIDTH_RATIO,
    DEFAULT_BASELINE_TOLERANCE_RATIO,
    DEFAULT_COLUMN_GAP_RATIO,
    DEFAULT_COLUMN_SPANNING_THRESHOLD,
    DEFAULT_DROP_CAP_SIZE_RATIO,
    DEFAULT_EXPECTED_COLUMNS,
    DEFAULT_MIN_LINES_PER_COLUMN,
    DEFAULT_SCRIPT_OFFSET_RATIO,
    DEFAULT_SCRIPT_SIZE_RATIO,
    DEFAULT_SPACE_GAP_RATIO,
)
from pdf_inspector.options.base import CloneFrozenMixin, require_positive, require_ratio


@dataclass(frozen=True)
class LayoutOptions(CloneFrozenMixin):
    """Geometry thresholds used by the reconstructor.

    All ratios are relative to the font size of the text involved unless
    noted otherwise.

    Parameters
    ----------
    baseline_tolerance_ratio : float, default 0.5
        Items whose baselines differ by less than this fraction of the smaller
        font size belong to the same line.
    script_size_ratio : float, default 0.85
        A line set at most this fraction of its neighbour's size is a
        superscript/subscript candidate.
    script_offset_ratio : float, default 0.15
        Minimum baseline offset, as a fraction of the neighbour's size, before
        a small run counts as raised or lowered.
    column_gap_ratio : float, default 0.12
        Gap between sorted line x-starts, as a fraction of the expected column
        width, that opens a new column band.
    expected_columns : int, default 2
        Number of columns assumed when deriving the gap threshold.
    min_lines_per_column : int, default 3
        Bands with fewer lines are folded into their nearest neighbour.
    column_spanning_threshold : float, default 0.65
        Lines wider than this fraction of the text extent span all columns.
    drop_cap_size_ratio : float, default 2.5
        Minimum size ratio of a single letter over body text to be a drop cap.
    space_gap_ratio : float, default 0.15
        Horizontal gap, relative to font size, that inserts a space between items.
    avg_char_width_ratio : float, default 0.5
        Average glyph advance used to estimate run widths.

    """

    baseline_tolerance_ratio: float = field(
        default=DEFAULT_BASELINE_TOLERANCE_RATIO,
        metadata={"help": "Same-line tolerance as a fraction of font size", "type": float, "importance": "advanced"},
    )
    script_size_ratio: float = field(
        default=DEFAULT_SCRIPT_SIZE_RATIO,
        metadata={"help": "Size ratio below which a run is a script candidate", "type": float, "importance": "advanced"},
    )
    script_offset_ratio: float = field(
        default=DEFAULT_SCRIPT_OFFSET_RATIO,
        metadata={"help": "Minimum baseline offset for a script run", "type": float, "importance": "advanced"},
    )
    column_gap_ratio: float = field(
        default=DEFAULT_COLUMN_GAP_RATIO,
        metadata={"help": "Column gap as a fraction of expected column width", "type": float, "importance": "advanced"},
    )
    expected_columns: int = field(
        default=DEFAULT_EXPECTED_COLUMNS,
        metadata={"help": "Expected number of text columns", "type": int, "importance": "core"},
    )
    min_lines_per_column: int = field(
        default=DEFAULT_MIN_LINES_PER_COLUMN,
        metadata={"help": "Minimum lines for a column band", "type": int, "importance": "advanced"},
    )
    column_spanning_threshold: float = field(
        default=DEFAULT_COLUMN_SPANNING_THRESHOLD,
        metadata={"help": "Width ratio for lines spanning columns", "type": float, "importance": "advanced"},
    )
    drop_cap_size_ratio: float = field(
        default=DEFAULT_DROP_CAP_SIZE_RATIO,
        metadata={"help": "Size ratio identifying drop caps", "type": float, "importance": "advanced"},
    )
    space_gap_ratio: float = field(
        default=DEFAULT_SPACE_GAP_RATIO,
        metadata={"help": "Gap ratio that inserts a space between runs", "type": float, "importance": "advanced"},
    )
    avg_char_width_ratio: float = field(
        default=DEFAULT_AVG_CHAR_WIDTH_RATIO,
        metadata={"help": "Average glyph advance as a fraction of font size", "type": float, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate thresholds.

        Raises
        ------
        ValidationError
            If any field value is outside its valid range.

        """
        require_positive("baseline_tolerance_ratio", self.baseline_tolerance_ratio)
        require_ratio("script_size_ratio", self.script_size_ratio, inclusive_zero=False)
        require_ratio("script_offset_ratio", self.script_offset_ratio)
        require_positive("column_gap_ratio", self.column_gap_ratio)
        require_positive("expected_columns", self.expected_columns)
        require_positive("min_lines_per_column", self.min_lines_per_column)
        require_ratio("column_spanning_threshold", self.column_spanning_threshold, inclusive_zero=False)
        require_positive("drop_cap_size_ratio", self.drop_cap_size_ratio)
        require_positive("space_gap_ratio", self.space_gap_ratio)
        require_positive("avg_char_width_ratio", self.avg_char_width_ratio)
