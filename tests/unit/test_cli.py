"""Unit tests for the detect-pdf and pdf2md command-line tools.

The library calls are patched so that argument handling, output formatting
and exit codes are tested in isolation.
"""

import json
from unittest.mock import patch

import pytest

from pdf_inspector.cli import convert, detect
from pdf_inspector.cli.output import format_detection_plain, format_error
from pdf_inspector.exceptions import PdfEncryptedError, PdfIoError, ValidationError
from pdf_inspector.models import DocumentMetadata, PageWarning, PdfProcessResult, PdfType, PdfTypeResult

TEXT_RESULT = PdfTypeResult(
    PdfType.TEXT_BASED, 0.7, page_count=3, title="Report", elapsed_ms=1.5, pages_sampled=3, pages_with_text=3
)


def process_result(pdf_type=PdfType.TEXT_BASED, markdown="# Title\n", raw_text="Title", warnings=()):
    return PdfProcessResult(
        pdf_type=pdf_type,
        markdown=markdown,
        raw_text=raw_text,
        metadata=DocumentMetadata(title=None, page_count=2, confidence=0.7),
        warnings=list(warnings),
    )


@pytest.mark.unit
@pytest.mark.cli
class TestDetectCommand:
    """Test the detect-pdf tool."""

    def test_plain_output(self, capsys) -> None:
        with patch("pdf_inspector.cli.detect.detect_pdf_type", return_value=TEXT_RESULT) as mock_detect:
            assert detect.main(["doc.pdf", "--plain"]) == 0
        out = capsys.readouterr().out
        assert "File: doc.pdf" in out
        assert "Type: text_based" in out
        assert "Title: Report" in out
        assert "OCR recommended: no" in out
        assert mock_detect.call_args.args[0] == "doc.pdf"

    def test_json_output(self, capsys) -> None:
        with patch("pdf_inspector.cli.detect.detect_pdf_type", return_value=TEXT_RESULT):
            assert detect.main(["doc.pdf", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["file"] == "doc.pdf"
        assert data["pdf_type"] == "text_based"
        assert data["page_count"] == 3

    def test_sampling_arguments_reach_config(self) -> None:
        with patch("pdf_inspector.cli.detect.detect_pdf_type", return_value=TEXT_RESULT) as mock_detect:
            detect.main(["doc.pdf", "--plain", "--max-pages", "2", "--sample", "first"])
        config = mock_detect.call_args.args[1]
        assert config.max_pages_to_sample == 2
        assert config.sample_strategy == "first"

    def test_invalid_max_pages(self, capsys) -> None:
        assert detect.main(["doc.pdf", "--max-pages", "0"]) == 1
        assert "Error [validation]" in capsys.readouterr().err

    def test_library_error(self, capsys) -> None:
        with patch("pdf_inspector.cli.detect.detect_pdf_type", side_effect=PdfEncryptedError("doc.pdf")):
            assert detect.main(["doc.pdf"]) == 1
        assert capsys.readouterr().err.strip() == "Error [encrypted]: PDF is encrypted: doc.pdf"

    def test_library_error_as_json(self, capsys) -> None:
        with patch("pdf_inspector.cli.detect.detect_pdf_type", side_effect=PdfIoError("cannot read")):
            assert detect.main(["doc.pdf", "--json"]) == 1
        assert json.loads(capsys.readouterr().out) == {"error": "cannot read", "kind": "io"}

    def test_output_file(self, tmp_path) -> None:
        target = tmp_path / "result.txt"
        with patch("pdf_inspector.cli.detect.detect_pdf_type", return_value=TEXT_RESULT):
            assert detect.main(["doc.pdf", "-o", str(target)]) == 0
        assert "Type: text_based" in target.read_text(encoding="utf-8")


@pytest.mark.unit
@pytest.mark.cli
class TestConvertCommand:
    """Test the pdf2md tool."""

    def test_markdown_to_stdout(self, capsys) -> None:
        with patch("pdf_inspector.cli.convert.process_pdf", return_value=process_result()):
            assert convert.main(["doc.pdf", "--plain"]) == 0
        assert capsys.readouterr().out == "# Title\n"

    def test_raw_text(self, capsys) -> None:
        with patch("pdf_inspector.cli.convert.process_pdf", return_value=process_result()):
            assert convert.main(["doc.pdf", "--plain", "--raw"]) == 0
        assert capsys.readouterr().out == "Title\n"

    def test_ocr_required_exit_code(self, capsys) -> None:
        result = process_result(PdfType.IMAGE_BASED, markdown=None, raw_text=None)
        with patch("pdf_inspector.cli.convert.process_pdf", return_value=result):
            assert convert.main(["scan.pdf"]) == 2
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("OCR required: scan.pdf is image_based")

    def test_ocr_required_json(self, capsys) -> None:
        result = process_result(PdfType.SCANNED, markdown=None, raw_text=None)
        with patch("pdf_inspector.cli.convert.process_pdf", return_value=result):
            assert convert.main(["scan.pdf", "--json"]) == 2
        data = json.loads(capsys.readouterr().out)
        assert data["pdf_type"] == "scanned"
        assert data["markdown"] is None

    def test_json_includes_warnings(self, capsys) -> None:
        result = process_result(warnings=[PageWarning(2, "could not read page content: boom")])
        with patch("pdf_inspector.cli.convert.process_pdf", return_value=result):
            assert convert.main(["doc.pdf", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["warnings"] == ["page 2: could not read page content: boom"]

    def test_flags_map_to_options(self) -> None:
        with patch("pdf_inspector.cli.convert.process_pdf", return_value=process_result()) as mock_process:
            convert.main(
                ["doc.pdf", "--plain", "--no-tables", "--no-columns", "--keep-page-numbers", "--workers", "3"]
            )
        options = mock_process.call_args.args[1]
        assert options.detect_tables is False
        assert options.detect_columns is False
        assert options.remove_page_numbers is False
        assert options.detect_lists is True
        assert options.max_workers == 3

    def test_page_break_options(self) -> None:
        parser = convert.create_parser()
        assert convert.build_options(parser.parse_args(["x.pdf", "--no-page-breaks"])).page_break_marker is None
        options = convert.build_options(parser.parse_args(["x.pdf", "--page-break-marker", "***"]))
        assert options.page_break_marker == "***"

    def test_invalid_workers(self, capsys) -> None:
        assert convert.main(["doc.pdf", "--workers", "0"]) == 1
        assert "Error [validation]" in capsys.readouterr().err

    def test_missing_file(self, capsys) -> None:
        with patch("pdf_inspector.cli.convert.process_pdf", side_effect=PdfIoError("No such file: doc.pdf")):
            assert convert.main(["doc.pdf"]) == 1
        assert capsys.readouterr().err.strip() == "Error [io]: No such file: doc.pdf"


@pytest.mark.unit
@pytest.mark.cli
class TestOutputFormatting:
    """Test output helpers."""

    def test_format_error_kinds(self) -> None:
        assert format_error(ValidationError("bad"), json_mode=False) == "Error [validation]: bad"
        assert json.loads(format_error(PdfIoError("gone"), json_mode=True)) == {"error": "gone", "kind": "io"}

    def test_format_detection_plain(self) -> None:
        text = format_detection_plain("doc.pdf", TEXT_RESULT)
        assert text.splitlines()[:3] == ["File: doc.pdf", "Type: text_based", "Confidence: 0.70"]
        assert text.endswith("\n")
