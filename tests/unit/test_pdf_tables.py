"""Unit tests for table detection from aligned text lines."""

from dataclasses import replace

import pytest
from utils import make_item, make_line

from pdf_inspector.models import TextLine
from pdf_inspector.options import StructureOptions
from pdf_inspector.parsers._pdf_tables import detect_table_regions, line_cells


def row(cells, y: float, *, column: int = 0) -> TextLine:
    """Build a line from ``(text, x)`` pairs at 12pt."""
    return TextLine([make_item(text, x, y) for text, x in cells], y=y, page_number=1, column=column)


def grid(rows, top: float = 700.0, spacing: float = 16.0, **kw) -> list[TextLine]:
    return [row(cells, top - i * spacing, **kw) for i, cells in enumerate(rows)]


PRICE_ROWS = [
    [("Item", 72), ("Amount", 264)],
    [("Tea", 72), ("12.50", 270)],
    [("Cake", 72), ("9.75", 276)],
]


@pytest.mark.unit
class TestLineCells:
    """Test splitting a line into cells."""

    def test_word_gap_stays_in_cell(self) -> None:
        line = row([("New", 72), ("York", 93), ("120", 222)], 700)
        cells = line_cells(line)
        assert [cell.text for cell in cells] == ["New York", "120"]
        assert cells[0].x_start == 72
        assert cells[0].x_end == pytest.approx(117)
        assert cells[1].center == pytest.approx(231)

    def test_single_run_is_one_cell(self) -> None:
        assert [cell.text for cell in line_cells(make_line("Just a sentence", 72, 700))] == ["Just a sentence"]

    def test_blank_items_dropped(self) -> None:
        line = row([("Name", 72), ("  ", 200), ("Qty", 300)], 700)
        assert [cell.text for cell in line_cells(line)] == ["Name", "Qty"]


@pytest.mark.unit
class TestDetectTableRegions:
    """Test region detection and column alignment."""

    def test_right_aligned_numbers(self) -> None:
        (region,) = detect_table_regions(grid(PRICE_ROWS))
        assert (region.start, region.end) == (0, 3)
        assert region.anchors == [72, 264]
        assert region.rows == [["Item", "Amount"], ["Tea", "12.50"], ["Cake", "9.75"]]
        assert region.alignments == ["left", "right"]

    def test_centered_column(self) -> None:
        rows = [
            [("Label", 72), ("A", 197)],
            [("Second", 72), ("Total", 185)],
            [("Third", 72), ("Sum", 191)],
        ]
        (region,) = detect_table_regions(grid(rows))
        assert region.alignments == ["left", "center"]

    def test_region_bounds_skip_prose(self) -> None:
        lines = [make_line("Prices are listed below", 72, 720)]
        lines += grid(PRICE_ROWS)
        lines.append(make_line("All prices include tax", 72, 640))
        (region,) = detect_table_regions(lines)
        assert (region.start, region.end) == (1, 4)

    def test_to_blocks_marks_header(self) -> None:
        (region,) = detect_table_regions(grid(PRICE_ROWS))
        blocks = region.to_blocks(table_index=3)
        assert [block.is_header for block in blocks] == [True, False, False]
        assert {block.table_index for block in blocks} == {3}
        assert blocks[1].cells == ["Tea", "12.50"]
        assert blocks[1].alignments == ["left", "right"]

    def test_single_row_is_not_a_table(self) -> None:
        assert detect_table_regions(grid(PRICE_ROWS[:1])) == []

    def test_min_rows_option(self) -> None:
        assert detect_table_regions(grid(PRICE_ROWS), StructureOptions(table_min_rows=4)) == []

    def test_key_value_form_rejected(self) -> None:
        rows = [
            [("Name:", 72), ("Alice", 200)],
            [("Email:", 72), ("alice@example.com", 200)],
            [("Phone:", 72), ("555-0100", 200)],
        ]
        assert detect_table_regions(grid(rows)) == []

    def test_column_change_breaks_run(self) -> None:
        lines = grid(PRICE_ROWS[:2]) + grid(PRICE_ROWS[2:], top=668, column=1)
        assert [(r.start, r.end) for r in detect_table_regions(lines)] == [(0, 2)]

    def test_approximate_lines_ignored(self) -> None:
        lines = grid(PRICE_ROWS)
        for line in lines:
            line.items[:] = [replace(item, approximate=True) for item in line.items]
        assert detect_table_regions(lines) == []

    def test_long_cells_are_prose(self) -> None:
        long_text = "word " * 15
        rows = [[(long_text, 72), ("x", 560)] for _ in range(3)]
        assert detect_table_regions(grid(rows)) == []

    def test_empty(self) -> None:
        assert detect_table_regions([]) == []
