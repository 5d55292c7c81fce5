#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_columns.py
"""Column detection for reconstructed text lines.

Columns are found by 1-D gap clustering of line x-starts: sorted starts are
split wherever consecutive values are further apart than a gap threshold
derived from the text extent. Candidate bands are then checked for a real
whitespace gutter so that indented paragraphs and nested lists in a single
column are not mistaken for a second column.

Lines much wider than a column, or lines that cross a column boundary, are
"spanning" and keep their vertical position in the reading order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pdf_inspector.models import TextLine
from pdf_inspector.options.layout import LayoutOptions

logger = logging.getLogger(__name__)

__all__ = ["ColumnLayout", "detect_columns"]

SPANNING = -1

# Share of left-band lines that must end before the right band starts
_GUTTER_CLEAR_RATIO = 0.9


@dataclass(frozen=True)
class ColumnLayout:
    """Column boundaries detected on one page.

    Attributes
    ----------
    boundaries : tuple of float
        Left edge of every column after the first, ascending
    gap_threshold : float
        Gap used to separate bands; also the slack allowed when deciding
        whether a line crosses a boundary

    """

    boundaries: tuple[float, ...] = ()
    gap_threshold: float = 0.0

    @property
    def column_count(self) -> int:
        return len(self.boundaries) + 1

    def column_of(self, line: TextLine, extent: float, spanning_threshold: float) -> int:
        """Return the column index of ``line`` or ``SPANNING``."""
        if not self.boundaries:
            return 0
        if line.approximate:
            return SPANNING
        if extent > 0 and line.width > spanning_threshold * extent:
            return SPANNING
        column = 0
        for boundary in self.boundaries:
            if line.x_start >= boundary - self.gap_threshold / 2:
                column += 1
        # A line that starts in one column and runs well into the next spans both
        if column < len(self.boundaries):
            next_boundary = self.boundaries[column]
            if line.x_end > next_boundary + self.gap_threshold:
                return SPANNING
        return column


def _text_extent(lines: list[TextLine]) -> tuple[float, float]:
    return min(line.x_start for line in lines), max(line.x_end for line in lines)


def _cluster_by_gaps(lines: list[TextLine], gap_threshold: float) -> list[list[TextLine]]:
    """Split lines into bands wherever sorted x-starts jump by more than the threshold."""
    ordered = sorted(lines, key=lambda line: line.x_start)
    bands: list[list[TextLine]] = [[ordered[0]]]
    for prev, line in zip(ordered, ordered[1:]):
        if line.x_start - prev.x_start > gap_threshold:
            bands.append([])
        bands[-1].append(line)
    return bands


def _merge_small_bands(bands: list[list[TextLine]], min_lines: int) -> list[list[TextLine]]:
    """Fold bands with fewer than ``min_lines`` lines into their nearest neighbour."""
    bands = [list(band) for band in bands]
    while len(bands) > 1:
        smallest = min(range(len(bands)), key=lambda i: len(bands[i]))
        if len(bands[smallest]) >= min_lines:
            break
        band = bands.pop(smallest)
        if smallest == 0:
            target = 0
        elif smallest >= len(bands):
            target = len(bands) - 1
        else:
            left_gap = band[0].x_start - bands[smallest - 1][-1].x_start
            right_gap = bands[smallest][0].x_start - band[-1].x_start
            target = smallest - 1 if left_gap <= right_gap else smallest
        bands[target].extend(band)
        bands[target].sort(key=lambda line: line.x_start)
    return bands


def _has_gutter(left: list[TextLine], right: list[TextLine], slack: float) -> bool:
    """Check that most lines of ``left`` end before ``right`` begins."""
    right_start = min(line.x_start for line in right)
    clear = sum(1 for line in left if line.x_end <= right_start + slack)
    return clear >= _GUTTER_CLEAR_RATIO * len(left)


def detect_columns(lines: list[TextLine], layout: LayoutOptions | None = None) -> ColumnLayout:
    """Detect column boundaries among the lines of one page.

    Parameters
    ----------
    lines : list of TextLine
        Lines of a single page
    layout : LayoutOptions, optional
        Thresholds; defaults are used when omitted

    Returns
    -------
    ColumnLayout
        Detected boundaries; empty for single-column pages

    """
    layout = layout or LayoutOptions()
    measurable = [line for line in lines if not line.approximate and line.items]
    if len(measurable) < 2 * layout.min_lines_per_column:
        return ColumnLayout()

    x_min, x_max = _text_extent(measurable)
    extent = x_max - x_min
    if extent <= 0:
        return ColumnLayout()

    gap_threshold = extent / layout.expected_columns * layout.column_gap_ratio
    candidates = [line for line in measurable if line.width <= layout.column_spanning_threshold * extent]
    if len(candidates) < 2 * layout.min_lines_per_column:
        return ColumnLayout()

    bands = _merge_small_bands(_cluster_by_gaps(candidates, gap_threshold), layout.min_lines_per_column)

    # Merge neighbours that are not separated by a whitespace gutter
    merged: list[list[TextLine]] = [bands[0]]
    for band in bands[1:]:
        if _has_gutter(merged[-1], band, slack=gap_threshold / 2):
            merged.append(band)
        else:
            merged[-1] = sorted(merged[-1] + band, key=lambda line: line.x_start)

    if len(merged) < 2:
        return ColumnLayout()

    boundaries = tuple(min(line.x_start for line in band) for band in merged[1:])
    logger.debug("Detected %d columns on page %d at %s", len(merged), lines[0].page_number, boundaries)
    return ColumnLayout(boundaries=boundaries, gap_threshold=gap_threshold)
