#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_tables.py
"""Table detection from column-aligned text lines.

A table region is a run of consecutive lines on one page whose cells start at
shared x offsets. Cells are formed by merging the items of a line that sit
closer together than a word gap; their x-starts are clustered with a small
tolerance to find column anchors. Regions that read as key/value forms or
have inconsistent column counts are rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pdf_inspector.ast.nodes import Alignment, TableRow
from pdf_inspector.models import TextLine
from pdf_inspector.options.markdown import StructureOptions

logger = logging.getLogger(__name__)

__all__ = ["Cell", "TableRegion", "detect_table_regions", "line_cells"]

# Items closer than this many font sizes belong to the same cell
_CELL_GAP_RATIO = 1.0


@dataclass(frozen=True)
class Cell:
    """Text of one cell with its horizontal extent."""

    text: str
    x_start: float
    x_end: float

    @property
    def center(self) -> float:
        return (self.x_start + self.x_end) / 2


@dataclass
class TableRegion:
    """A detected table: a slice of lines plus column anchors.

    Attributes
    ----------
    start, end : int
        Slice bounds into the page's line list (end exclusive)
    anchors : list of float
        Column x-starts, ascending
    rows : list of list of str
        Cell text per row, one entry per column
    alignments : list of str
        Column alignment

    """

    start: int
    end: int
    anchors: list[float]
    rows: list[list[str]] = field(default_factory=list)
    alignments: list[Alignment] = field(default_factory=list)

    def to_blocks(self, table_index: int) -> list[TableRow]:
        return [
            TableRow(cells=row, alignments=list(self.alignments), is_header=i == 0, table_index=table_index)
            for i, row in enumerate(self.rows)
        ]


def line_cells(line: TextLine) -> list[Cell]:
    """Merge a line's items into cells separated by wide horizontal gaps."""
    cells: list[Cell] = []
    parts: list[str] = []
    start = end = 0.0
    prev = None
    for item in line.items:
        if prev is not None and item.x - prev.x_end > _CELL_GAP_RATIO * max(prev.font_size, item.font_size):
            cells.append(Cell(" ".join(p for p in parts if p), start, end))
            parts = []
        if not parts:
            start = end = item.x
        parts.append(item.text.strip())
        end = max(end, item.x_end)
        prev = item
    if parts:
        cells.append(Cell(" ".join(p for p in parts if p), start, end))
    return [cell for cell in cells if cell.text]


def _cluster_anchors(cell_rows: list[list[Cell]], tolerance: float) -> list[tuple[float, int]]:
    """Cluster cell x-starts; return (anchor, number of rows using it)."""
    starts = sorted((cell.x_start, row_idx) for row_idx, row in enumerate(cell_rows) for cell in row)
    clusters: list[list[tuple[float, int]]] = []
    for x, row_idx in starts:
        if clusters and x - clusters[-1][-1][0] <= tolerance:
            clusters[-1].append((x, row_idx))
        else:
            clusters.append([(x, row_idx)])
    return [(min(x for x, _ in cluster), len({r for _, r in cluster})) for cluster in clusters]


def _nearest(anchors: list[float], x: float) -> int:
    return min(range(len(anchors)), key=lambda i: abs(anchors[i] - x))


def _is_key_value_layout(rows: list[list[str]]) -> bool:
    """Two-column label/value forms (``Name: Alice``) are not tables."""
    if not rows or len(rows[0]) != 2:
        return False
    labels = sum(1 for row in rows if row[0].endswith(":"))
    return labels >= len(rows) / 2


def _has_consistent_columns(rows: list[list[str]]) -> bool:
    """At least 40% of rows must fill the most common number of columns."""
    if len(rows) < 3:
        return True
    counts = [sum(1 for cell in row if cell) for row in rows]
    modal = max(set(counts), key=counts.count)
    return counts.count(modal) >= 0.4 * len(rows) and modal >= 2


def _infer_alignment(cells: list[Cell], tolerance: float) -> Alignment:
    if len(cells) < 2:
        return "left"
    spread = lambda values: max(values) - min(values)  # noqa: E731
    if spread([c.x_start for c in cells]) <= tolerance:
        return "left"
    if spread([c.x_end for c in cells]) <= tolerance:
        return "right"
    if spread([c.center for c in cells]) <= tolerance:
        return "center"
    return "left"


def _build_region(lines: list[TextLine], start: int, end: int, options: StructureOptions) -> TableRegion | None:
    cell_rows = [line_cells(line) for line in lines[start:end]]
    anchors_with_counts = _cluster_anchors(cell_rows, options.table_x_tolerance)
    min_rows_per_column = max(2, len(cell_rows) // 2)
    anchors = [x for x, rows in anchors_with_counts if rows >= min_rows_per_column]
    if len(anchors) < options.table_min_columns:
        return None

    grid: list[list[list[Cell]]] = [[[] for _ in anchors] for _ in cell_rows]
    for row_idx, row in enumerate(cell_rows):
        for cell in row:
            grid[row_idx][_nearest(anchors, cell.x_start)].append(cell)

    rows = [[" ".join(c.text for c in column) for column in row] for row in grid]
    if _is_key_value_layout(rows) or not _has_consistent_columns(rows):
        return None

    alignments: list[Alignment] = []
    for col in range(len(anchors)):
        column_cells = [cell for row in grid for cell in row[col]]
        alignments.append(_infer_alignment(column_cells, options.table_x_tolerance))
    return TableRegion(start=start, end=end, anchors=anchors, rows=rows, alignments=alignments)


def _is_candidate(line: TextLine, options: StructureOptions) -> bool:
    if line.approximate:
        return False
    cells = line_cells(line)
    return len(cells) >= 2 and all(len(cell.text) <= options.table_max_cell_length for cell in cells)


def detect_table_regions(lines: list[TextLine], options: StructureOptions | None = None) -> list[TableRegion]:
    """Find tables among the reading-order lines of one page.

    Parameters
    ----------
    lines : list of TextLine
        Lines of a single page in reading order
    options : StructureOptions, optional
        Alignment tolerance and minimum table size

    Returns
    -------
    list of TableRegion
        Non-overlapping regions in line order

    """
    options = options or StructureOptions()
    regions: list[TableRegion] = []
    i = 0
    n = len(lines)
    while i < n:
        if not _is_candidate(lines[i], options):
            i += 1
            continue
        j = i
        while j < n and _is_candidate(lines[j], options) and lines[j].column == lines[i].column:
            j += 1
        if j - i >= options.table_min_rows:
            region = _build_region(lines, i, j, options)
            if region is not None:
                logger.debug(
                    "Table on page %d: %d rows x %d columns", lines[i].page_number, j - i, len(region.anchors)
                )
                regions.append(region)
        i = j
    return regions

