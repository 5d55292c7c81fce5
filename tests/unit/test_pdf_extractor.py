"""Unit tests for positioned text extraction from content streams."""

import pytest
from utils import FakeBackend

from pdf_inspector.exceptions import InvalidStructureError
from pdf_inspector.parsers._pdf_backend import FontInfo
from pdf_inspector.parsers.pdf import PdfTextExtractor, multiply, translate

HELVETICA = FontInfo("F1", base_font="Helvetica", subtype="Type1", encoding="WinAnsiEncoding")
COURIER_BOLD = FontInfo("F2", base_font="Courier-Bold", subtype="Type1", encoding="WinAnsiEncoding")


def extract(*pages, **kwargs):
    backend = FakeBackend(pages, fonts={"F1": HELVETICA, "F2": COURIER_BOLD})
    return PdfTextExtractor(backend, **kwargs).extract()


@pytest.mark.unit
class TestMatrices:
    """Test affine matrix helpers."""

    def test_translate_then_scale(self) -> None:
        m = multiply(translate(10, 20), (2, 0, 0, 2, 0, 0))
        assert m == (2, 0, 0, 2, 20, 40)


@pytest.mark.unit
class TestContentStreamWalker:
    """Test graphics and text state bookkeeping."""

    def test_td_positions_item(self) -> None:
        result = extract(b"BT /F1 12 Tf 72 700 Td (Hello) Tj ET")
        (item,) = result.items
        assert item.text == "Hello"
        assert (item.x, item.y) == (72, 700)
        assert item.font_size == pytest.approx(12)
        assert item.width == pytest.approx(30)
        assert item.page_number == 1
        assert item.base_font == "Helvetica"

    def test_tj_array_inserts_space_for_large_kerning(self) -> None:
        result = extract(b"BT /F1 12 Tf 0 0 Td [(Hello) -300 (World) -50 (!)] TJ ET")
        assert result.items[0].text == "Hello World!"

    def test_text_matrix_scales_font_size(self) -> None:
        result = extract(b"BT /F1 1 Tf 10 0 0 10 100 500 Tm (A) Tj ET")
        (item,) = result.items
        assert item.font_size == pytest.approx(10)
        assert (item.x, item.y) == (100, 500)
        assert item.width == pytest.approx(5)

    def test_ctm_applies_to_text(self) -> None:
        result = extract(b"q 2 0 0 2 0 0 cm BT /F1 10 Tf 10 20 Td (X) Tj ET Q")
        (item,) = result.items
        assert (item.x, item.y) == (20, 40)
        assert item.font_size == pytest.approx(20)

    def test_graphics_state_is_restored(self) -> None:
        content = b"q 2 0 0 2 0 0 cm BT /F2 10 Tf 0 0 Td (in) Tj ET Q BT /F1 10 Tf 5 5 Td (out) Tj ET"
        inner, outer = extract(content).items
        assert inner.font_size == pytest.approx(20)
        assert inner.flags.is_monospace and inner.flags.is_bold
        assert outer.font_size == pytest.approx(10)
        assert (outer.x, outer.y) == (5, 5)
        assert not outer.flags.is_monospace

    def test_next_line_operators_use_leading(self) -> None:
        content = b"BT /F1 10 Tf 14 TL 72 700 Td (a) Tj T* (b) Tj (c) ' ET"
        a, b, c = extract(content).items
        assert a.y == 700
        assert b.y == pytest.approx(686)
        assert c.y == pytest.approx(672)
        assert a.x == b.x == c.x == 72

    def test_td_uppercase_sets_leading(self) -> None:
        content = b"BT /F1 10 Tf 72 700 Td 0 -20 TD (a) Tj T* (b) Tj ET"
        a, b = extract(content).items
        assert a.y == pytest.approx(680)
        assert b.y == pytest.approx(660)

    def test_consecutive_shows_advance_x(self) -> None:
        a, b = extract(b"BT /F1 10 Tf 0 0 Td (ab) Tj (cd) Tj ET").items
        assert b.x == pytest.approx(a.x_end)

    def test_char_and_word_spacing_widen_runs(self) -> None:
        (plain,) = extract(b"BT /F1 10 Tf 0 0 Td (a b) Tj ET").items
        (spaced,) = extract(b"BT /F1 10 Tf 1 Tc 2 Tw 0 0 Td (a b) Tj ET").items
        assert spaced.width == pytest.approx(plain.width + 3 * 1 + 2)

    def test_whitespace_only_runs_are_dropped(self) -> None:
        assert extract(b"BT /F1 10 Tf 0 0 Td (   ) Tj ET").items == []

    def test_unknown_font_decodes_as_latin1(self) -> None:
        (item,) = extract(b"BT /F9 10 Tf 0 0 Td (caf\\351) Tj ET").items
        assert item.text == "café"

    def test_rise_shifts_baseline(self) -> None:
        (item,) = extract(b"BT /F1 10 Tf 3 Ts 0 100 Td (x) Tj ET").items
        assert item.y == pytest.approx(103)


@pytest.mark.unit
class TestPdfTextExtractor:
    """Test page iteration, fallbacks and warnings."""

    def test_pages_in_order_with_page_numbers(self) -> None:
        result = extract(b"BT /F1 10 Tf 0 0 Td (one) Tj ET", b"BT /F1 10 Tf 0 0 Td (two) Tj ET")
        assert [(i.text, i.page_number) for i in result.items] == [("one", 1), ("two", 2)]
        assert result.page_count == 2
        assert result.warnings == []

    def test_zero_pages_raise(self) -> None:
        with pytest.raises(InvalidStructureError):
            PdfTextExtractor(FakeBackend([])).extract()

    def test_unreadable_page_is_skipped_with_warning(self) -> None:
        result = extract(b"BT /F1 10 Tf 0 0 Td (ok) Tj ET", RuntimeError("boom"), b"BT /F1 10 Tf 0 0 Td (end) Tj ET")
        assert [i.text for i in result.items] == ["ok", "end"]
        assert len(result.warnings) == 1
        assert result.warnings[0].page_number == 2
        assert "boom" in result.warnings[0].message

    def test_malformed_stream_falls_back_to_raw_scan(self) -> None:
        result = extract(b"BT /F1 12 Tf 72 700 Td (first) Tj ) (second) Tj ET")
        assert [i.text for i in result.items] == ["first", "second"]
        assert all(i.approximate for i in result.items)
        first, second = result.items
        assert first.x == 0.0
        assert first.y > second.y
        assert first.font_size == 12
        assert len(result.warnings) == 1
        assert "approximate" in result.warnings[0].message

    def test_bad_operands_fall_back_to_raw_scan(self) -> None:
        result = extract(b"BT /F1 12 Tf (x) (y) Td (text) Tj ET")
        assert [i.text for i in result.items] == ["text"]
        assert result.items[0].approximate

    def test_threaded_extraction_matches_sequential(self) -> None:
        pages = [f"BT /F1 10 Tf 0 0 Td (page {n}) Tj ET".encode() for n in range(6)]
        sequential = extract(*pages)
        threaded = extract(*pages, max_workers=4)
        assert [(i.text, i.page_number) for i in threaded.items] == [
            (i.text, i.page_number) for i in sequential.items
        ]
