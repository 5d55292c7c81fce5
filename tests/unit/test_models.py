"""Unit tests for result and value types."""

import json

import pytest
from utils import make_item

from pdf_inspector.models import DocumentMetadata, PageWarning, PdfProcessResult, PdfType, PdfTypeResult, TextLine


@pytest.mark.unit
class TestPdfTypeResult:
    """Test classification results."""

    def test_text_ratio(self) -> None:
        result = PdfTypeResult(PdfType.MIXED, 0.5, page_count=10, pages_sampled=4, pages_with_text=1)
        assert result.text_ratio == 0.25
        assert PdfTypeResult(PdfType.IMAGE_BASED, 0.0, page_count=0).text_ratio == 0.0

    @pytest.mark.parametrize(
        "pdf_type, needs_ocr",
        [(PdfType.TEXT_BASED, False), (PdfType.SCANNED, True), (PdfType.IMAGE_BASED, True), (PdfType.MIXED, True)],
    )
    def test_ocr_recommended(self, pdf_type: PdfType, needs_ocr: bool) -> None:
        assert PdfTypeResult(pdf_type, 1.0, page_count=1).ocr_recommended is needs_ocr

    def test_to_dict_is_json_serializable(self) -> None:
        result = PdfTypeResult(
            PdfType.TEXT_BASED,
            0.712345,
            page_count=3,
            title="Report",
            elapsed_ms=1.23456,
            pages_sampled=3,
            pages_with_text=3,
            text_operator_count=42,
        )
        data = json.loads(json.dumps(result.to_dict()))
        assert data["pdf_type"] == "text_based"
        assert data["confidence"] == 0.7123
        assert data["elapsed_ms"] == 1.235
        assert data["text_ratio"] == 1.0
        assert data["ocr_recommended"] is False
        assert data["title"] == "Report"
        assert data["text_operator_count"] == 42


@pytest.mark.unit
class TestPdfProcessResult:
    """Test conversion results."""

    def test_to_dict(self) -> None:
        result = PdfProcessResult(
            pdf_type=PdfType.TEXT_BASED,
            markdown="# Title\n",
            raw_text="Title",
            metadata=DocumentMetadata(title=None, page_count=2, confidence=0.7),
            warnings=[PageWarning(2, "could not read page content: boom")],
        )
        assert result.page_count == 2
        data = result.to_dict()
        assert data["markdown"] == "# Title\n"
        assert data["warnings"] == ["page 2: could not read page content: boom"]
        json.dumps(data)


@pytest.mark.unit
class TestTextLine:
    """Test line helpers."""

    def test_items_sorted_and_spaced(self) -> None:
        line = TextLine([make_item("world", 110, 700), make_item("Hello", 72, 700)], y=700, page_number=1)
        assert line.text() == "Hello world"
        assert line.x_start == 72
        assert line.x_end == pytest.approx(140)

    def test_touching_items_are_not_spaced(self) -> None:
        line = TextLine([make_item("foo", 72, 700, width=18), make_item("bar", 90, 700)], y=700, page_number=1)
        assert line.text() == "foobar"

    def test_dominant_font_size_and_style(self) -> None:
        line = TextLine(
            [make_item("x", 72, 700, 20), make_item("longer bold run", 90, 700, 10, bold=True)],
            y=700,
            page_number=1,
        )
        assert line.font_size == 10
        assert line.is_bold
        assert not line.is_italic
        assert not line.is_monospace

    def test_monospace_by_character_share(self) -> None:
        line = TextLine(
            [make_item("x", 72, 700), make_item("print(value)", 90, 700, monospace=True)],
            y=700,
            page_number=1,
        )
        assert line.is_monospace
