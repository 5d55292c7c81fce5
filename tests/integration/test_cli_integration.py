"""End-to-end tests for the command-line tools on generated PDF files."""

import io
import json
from pathlib import Path

import pytest
from fixtures.generators.pdf_test_fixtures import create_simple_pdf, create_temp_pdf_file

from pdf_inspector.cli import convert, detect


@pytest.mark.integration
@pytest.mark.cli
class TestDetectCli:
    """Test detect-pdf on real documents."""

    def test_text_pdf(self, simple_pdf_path: Path, capsys) -> None:
        assert detect.main([str(simple_pdf_path), "--plain"]) == 0
        out = capsys.readouterr().out
        assert "Type: text_based" in out
        assert "Pages: 1" in out

    def test_image_pdf_json(self, temp_dir: Path, capsys) -> None:
        path = create_temp_pdf_file("image", temp_dir)
        assert detect.main([str(path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["file"] == str(path)
        assert data["pdf_type"] == "image_based"
        assert data["ocr_recommended"] is True

    def test_encrypted(self, temp_dir: Path, capsys) -> None:
        path = create_temp_pdf_file("encrypted", temp_dir)
        assert detect.main([str(path)]) == 1
        assert capsys.readouterr().err.startswith("Error [encrypted]")

    def test_missing_file(self, temp_dir: Path, capsys) -> None:
        assert detect.main([str(temp_dir / "nope.pdf"), "--json"]) == 1
        assert json.loads(capsys.readouterr().out)["kind"] == "io"

    def test_stdin(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(create_simple_pdf())))
        assert detect.main(["-", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["file"] == "<stdin>"
        assert data["pdf_type"] == "text_based"


@pytest.mark.integration
@pytest.mark.cli
class TestConvertCli:
    """Test pdf2md on real documents."""

    def test_markdown(self, simple_pdf_path: Path, capsys) -> None:
        assert convert.main([str(simple_pdf_path), "--plain"]) == 0
        assert capsys.readouterr().out == "# Title\n\n- item1\n- item2\n"

    def test_output_file(self, simple_pdf_path: Path, temp_dir: Path) -> None:
        target = temp_dir / "out.md"
        assert convert.main([str(simple_pdf_path), "-o", str(target)]) == 0
        assert target.read_text(encoding="utf-8") == "# Title\n\n- item1\n- item2\n"

    def test_raw(self, simple_pdf_path: Path, capsys) -> None:
        assert convert.main([str(simple_pdf_path), "--plain", "--raw"]) == 0
        assert capsys.readouterr().out == "Title\n- item1\n- item2\n"

    def test_scanned_exits_with_ocr_code(self, temp_dir: Path, capsys) -> None:
        path = create_temp_pdf_file("image", temp_dir)
        assert convert.main([str(path)]) == 2
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "OCR required" in captured.err

    def test_table_without_tables(self, temp_dir: Path, capsys) -> None:
        path = create_temp_pdf_file("table", temp_dir)
        assert convert.main([str(path), "--plain", "--no-tables"]) == 0
        assert "|" not in capsys.readouterr().out

    def test_log_file(self, simple_pdf_path: Path, temp_dir: Path, capsys) -> None:
        log_file = temp_dir / "run.log"
        assert convert.main([str(simple_pdf_path), "--plain", "--log-level", "debug", "--log-file", str(log_file)]) == 0
        assert "Logging to file" in log_file.read_text(encoding="utf-8")

    def test_garbage_file(self, temp_dir: Path, capsys) -> None:
        path = temp_dir / "broken.pdf"
        path.write_bytes(b"this is not a pdf document")
        assert convert.main([str(path)]) == 1
        assert capsys.readouterr().err.startswith("Error [parse]")
