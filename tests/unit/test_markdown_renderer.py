"""Unit tests for Markdown rendering of analyzed blocks."""

import pytest
from utils import assert_markdown_valid

from pdf_inspector.ast.nodes import (
    CodeBlock,
    Footnote,
    Header,
    ListItem,
    ListKind,
    PageBreak,
    Paragraph,
    TableRow,
)
from pdf_inspector.options.markdown import MarkdownOptions
from pdf_inspector.renderers.markdown import MarkdownRenderer, render_plain_text


def render(blocks, **options) -> str:
    markdown = MarkdownRenderer(MarkdownOptions(**options)).render(blocks)
    assert_markdown_valid(markdown)
    return markdown


@pytest.mark.unit
class TestMarkdownRenderer:
    """Test block serialization."""

    def test_header_and_list(self) -> None:
        blocks = [Header("Title", 1), ListItem("item1"), ListItem("item2")]
        assert render(blocks) == "# Title\n\n- item1\n- item2\n"

    def test_header_levels(self) -> None:
        assert render([Header("A", 3)]) == "### A\n"

    def test_invalid_header_level(self) -> None:
        with pytest.raises(ValueError):
            Header("A", 7)

    def test_paragraphs_separated_by_blank_line(self) -> None:
        assert render([Paragraph("one"), Paragraph("two")]) == "one\n\ntwo\n"

    def test_empty_paragraph_is_skipped(self) -> None:
        assert render([Paragraph("one"), Paragraph("  "), Paragraph("two")]) == "one\n\ntwo\n"

    def test_list_kinds_and_depth(self) -> None:
        blocks = [
            ListItem("first", ListKind.NUMBERED, 0, "3"),
            ListItem("nested", ListKind.BULLET, 1, "•"),
            ListItem("deeper", ListKind.LETTERED, 2, "b"),
        ]
        assert render(blocks) == "3. first\n  - nested\n    b. deeper\n"

    def test_code_block(self) -> None:
        assert render([CodeBlock(["x = 1", "y = 2"])]) == "```\nx = 1\ny = 2\n```\n"

    def test_code_fence_grows_past_backticks(self) -> None:
        markdown = render([CodeBlock(["```", "code"])])
        assert markdown == "````\n```\ncode\n````\n"

    def test_code_language(self) -> None:
        assert render([CodeBlock(["pass"], language="python")]).startswith("```python\n")

    def test_table(self) -> None:
        blocks = [
            TableRow(["Name", "Qty"], ["left", "right"], is_header=True),
            TableRow(["a|b", "3"], ["left", "right"]),
        ]
        assert render(blocks) == "| Name | Qty |\n| :--- | ---: |\n| a\\|b | 3 |\n"

    def test_table_rows_are_padded_and_truncated(self) -> None:
        blocks = [
            TableRow(["A", "B", "C"], ["left", "center", "left"], is_header=True),
            TableRow(["x"]),
            TableRow(["1", "2", "3", "4"]),
        ]
        assert render(blocks) == "| A | B | C |\n| :--- | :---: | :--- |\n| x |  |  |\n| 1 | 2 | 3 |\n"

    def test_adjacent_tables_stay_apart(self) -> None:
        blocks = [
            TableRow(["A", "B"], is_header=True, table_index=0),
            TableRow(["C", "D"], is_header=True, table_index=1),
        ]
        assert render(blocks) == "| A | B |\n| --- | --- |\n\n| C | D |\n| --- | --- |\n"

    def test_footnotes_flushed_per_page(self) -> None:
        blocks = [
            Paragraph("See note[^1]."),
            Footnote("First note.", "1"),
            PageBreak(2),
            Paragraph("Second page."),
            Footnote("Other note.", "2"),
        ]
        assert render(blocks) == (
            "See note[^1].\n\n[^1]: First note.\n\n---\n\nSecond page.\n\n[^2]: Other note.\n"
        )

    def test_page_break_marker(self) -> None:
        blocks = [Paragraph("one"), PageBreak(2), Paragraph("two")]
        assert render(blocks, page_break_marker="* * *") == "one\n\n* * *\n\ntwo\n"
        assert render(blocks, page_break_marker=None) == "one\n\ntwo\n"

    def test_no_blocks(self) -> None:
        assert render([]) == ""

    def test_renderer_is_reusable(self) -> None:
        renderer = MarkdownRenderer()
        assert renderer.render([Paragraph("a")]) == renderer.render([Paragraph("a")]) == "a\n"


@pytest.mark.unit
class TestRenderPlainText:
    """Test line-based conversion of extracted text."""

    def test_lists_and_paragraphs(self) -> None:
        text = "Intro line\n\n• first\n2) second\n"
        assert render_plain_text(text) == "Intro line\n\n- first\n2. second\n"

    def test_code_lines_are_fenced(self) -> None:
        text = "Run this:\nx = f(a);\ny = g(b);\nDone."
        assert render_plain_text(text) == "Run this:\n```\nx = f(a);\ny = g(b);\n```\nDone.\n"

    def test_blank_line_closes_code(self) -> None:
        assert render_plain_text("x = f(a);\n\nText") == "```\nx = f(a);\n```\n\nText\n"

    def test_urls(self) -> None:
        assert render_plain_text("go to https://example.com") == "go to [https://example.com](https://example.com)\n"

    def test_detection_switches(self) -> None:
        options = MarkdownOptions(detect_lists=False, detect_code=False, format_urls=False)
        text = "• first\nx = f(a);\nhttps://example.com"
        assert render_plain_text(text, options) == "• first\nx = f(a);\nhttps://example.com\n"

    def test_blank_runs_collapse(self) -> None:
        assert render_plain_text("a\n\n\n\nb") == "a\n\nb\n"

    def test_empty(self) -> None:
        assert render_plain_text("") == ""
        assert render_plain_text("\n  \n") == ""
