"""Unit tests for structural analysis of reading-order lines."""

import pytest
from utils import make_item, make_line, stack_lines

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
from pdf_inspector.models import TextLine
from pdf_inspector.options.markdown import MarkdownOptions
from pdf_inspector.parsers._pdf_structure import analyze, format_urls, is_code_like, match_list_marker


def table_line(cells, y, x0=72.0, step=100.0, page=1):
    items = [make_item(text, x0 + i * step, y, page=page) for i, text in enumerate(cells)]
    return TextLine(items, y=y, page_number=page)


@pytest.mark.unit
class TestListMarkers:
    """Test list marker recognition."""

    @pytest.mark.parametrize(
        "text, kind, marker, rest",
        [
            ("- item", ListKind.BULLET, "-", "item"),
            ("• item", ListKind.BULLET, "•", "item"),
            ("•item", ListKind.BULLET, "•", "item"),
            ("* starred", ListKind.BULLET, "*", "starred"),
            ("1. one", ListKind.NUMBERED, "1", "one"),
            ("12) twelve", ListKind.NUMBERED, "12", "twelve"),
            ("(3) three", ListKind.NUMBERED, "3", "three"),
            ("a. alpha", ListKind.LETTERED, "a", "alpha"),
            ("(b) bee", ListKind.LETTERED, "b", "bee"),
        ],
    )
    def test_markers(self, text: str, kind: ListKind, marker: str, rest: str) -> None:
        match = match_list_marker(text)
        assert match is not None
        assert (match.kind, match.marker, match.text) == (kind, marker, rest)

    @pytest.mark.parametrize("text", ["Hello", "-item", "- ", "2024 was a year", "1.5 litres"])
    def test_non_markers(self, text: str) -> None:
        assert match_list_marker(text) is None


@pytest.mark.unit
class TestCodeHeuristics:
    """Test keyword and punctuation based code detection."""

    @pytest.mark.parametrize(
        "text",
        ["x = foo(bar);", "def main():", "import os", "from pathlib import Path", "if (a) {", "}"],
    )
    def test_code(self, text: str) -> None:
        assert is_code_like(text)

    @pytest.mark.parametrize(
        "text",
        [
            "Hello world",
            "",
            "import these ideas carefully",
            "See https://example.com/a?b=c&d=(e)",
            "Prior work (Smith, 2019) and (Lee, 2020) showed this",
            "result holds for [3] and related models (see Table 2).",
        ],
    )
    def test_prose(self, text: str) -> None:
        assert not is_code_like(text)


@pytest.mark.unit
class TestFormatUrls:
    """Test bare URL linking."""

    def test_trailing_punctuation_stays_outside(self) -> None:
        assert format_urls("See https://example.com.") == "See [https://example.com](https://example.com)."

    def test_balanced_parentheses_are_kept(self) -> None:
        text = "(see https://example.com/a_(b))"
        assert format_urls(text) == "(see [https://example.com/a_(b)](https://example.com/a_(b)))"

    def test_www_gets_https_href(self) -> None:
        assert format_urls("visit www.example.org today") == "visit [www.example.org](https://www.example.org) today"

    def test_existing_links_are_untouched(self) -> None:
        text = "[https://a.com](https://a.com)"
        assert format_urls(text) == text

    def test_plain_text(self) -> None:
        assert format_urls("nothing to link") == "nothing to link"


@pytest.mark.unit
class TestStructureAnalyzer:
    """Test block classification."""

    def test_header_and_paragraph(self) -> None:
        lines = [make_line("Introduction", 72, 730, 24), *stack_lines(["First line of text", "continues here."])]
        assert analyze(lines) == [
            Header("Introduction", 1),
            Paragraph("First line of text continues here."),
        ]

    def test_adjacent_header_lines_merge(self) -> None:
        lines = [
            make_line("A Long Title", 72, 740, 24),
            make_line("Split Over Two Lines", 72, 712, 24),
            *stack_lines(["Body text starts here", "and keeps going on."], top=680),
        ]
        assert analyze(lines)[0] == Header("A Long Title Split Over Two Lines", 1)

    def test_paragraph_gap_splits(self) -> None:
        lines = stack_lines(["one", "two", "three", "four"]) + [make_line("five", 72, 600)]
        assert analyze(lines) == [Paragraph("one two three four"), Paragraph("five")]

    def test_nested_list(self) -> None:
        lines = [
            make_line("- first", 72, 700),
            make_line("- nested", 90, 686),
            make_line("- back", 72, 672),
        ]
        blocks = analyze(lines)
        assert [(b.text, b.depth) for b in blocks] == [("first", 0), ("nested", 1), ("back", 0)]
        assert all(b.kind is ListKind.BULLET for b in blocks)

    def test_numbered_and_lettered_lists(self) -> None:
        blocks = analyze(stack_lines(["1. one", "2. two", "a) alpha"]))
        assert blocks == [
            ListItem("one", ListKind.NUMBERED, 0, "1"),
            ListItem("two", ListKind.NUMBERED, 0, "2"),
            ListItem("alpha", ListKind.LETTERED, 0, "a"),
        ]

    def test_list_item_continuation(self) -> None:
        lines = [
            TextLine([make_item("•", 72, 700), make_item("a long item that", 84, 700)], y=700, page_number=1),
            make_line("wraps onto a second line", 84, 686),
        ]
        assert analyze(lines) == [ListItem("a long item that wraps onto a second line", ListKind.BULLET, 0, "•")]

    def test_monospace_code_block(self) -> None:
        lines = stack_lines(["x = 1", "print(x)"], monospace=True)
        assert analyze(lines) == [CodeBlock(["x = 1", "print(x)"])]

    def test_code_by_keyword(self) -> None:
        lines = stack_lines(["Example:", "def main() {", "return x;", "}"])
        blocks = analyze(lines)
        assert blocks[0] == Paragraph("Example:")
        assert blocks[1] == CodeBlock(["def main() {", "return x;", "}"])

    def test_cited_prose_is_a_paragraph(self) -> None:
        lines = stack_lines(
            [
                "Prior work (Smith, 2019) and (Lee, 2020) showed this",
                "result holds for [3] and related models (see Table 2).",
            ]
        )
        assert analyze(lines) == [
            Paragraph(
                "Prior work (Smith, 2019) and (Lee, 2020) showed this "
                "result holds for [3] and related models (see Table 2)."
            )
        ]

    def test_symbol_heavy_prose_needs_statement_evidence(self) -> None:
        lines = stack_lines(["where a = b and c = d give e = f", "so the bound x <= y holds for n > 2"])
        assert analyze(lines) == [
            Paragraph("where a = b and c = d give e = f so the bound x <= y holds for n > 2")
        ]

    def test_code_detection_disabled(self) -> None:
        lines = stack_lines(["x = 1", "print(x)"], monospace=True)
        blocks = analyze(lines, MarkdownOptions(detect_code=False))
        assert blocks == [Paragraph("x = 1 print(x)")]

    def test_table(self) -> None:
        lines = [
            make_line("Prices below", 72, 720),
            table_line(["Name", "Qty", "Price"], 700),
            table_line(["Apple", "3", "1.20"], 686),
            table_line(["Pear", "5", "0.80"], 672),
        ]
        blocks = analyze(lines)
        assert blocks[0] == Paragraph("Prices below")
        rows = blocks[1:]
        assert all(isinstance(row, TableRow) for row in rows)
        assert [row.cells for row in rows] == [["Name", "Qty", "Price"], ["Apple", "3", "1.20"], ["Pear", "5", "0.80"]]
        assert [row.is_header for row in rows] == [True, False, False]
        assert rows[0].alignments == ["left", "left", "left"]

    def test_key_value_form_is_not_a_table(self) -> None:
        lines = [table_line(["Name:", "Alice"], 700), table_line(["Role:", "Admin"], 686)]
        assert not any(isinstance(block, TableRow) for block in analyze(lines))

    def test_footnotes(self) -> None:
        lines = [
            make_line("This claim needs a source<sup>1</sup>.", 72, 700),
            make_line("More text follows.", 72, 686),
            make_line("1 The source is here.", 72, 100, 9),
        ]
        assert analyze(lines) == [
            Paragraph("This claim needs a source[^1]. More text follows."),
            Footnote("The source is here.", "1"),
        ]

    def test_page_numbers_removed(self) -> None:
        lines = []
        for page in (1, 2):
            lines += stack_lines([f"Text on page {page}", "with a second line"], page=page)
            lines.append(make_line(str(page), 300, 60, 10, page=page))
        blocks = analyze(lines)
        assert blocks == [
            Paragraph("Text on page 1 with a second line"),
            PageBreak(2),
            Paragraph("Text on page 2 with a second line"),
        ]

    def test_page_number_removal_disabled(self) -> None:
        lines = stack_lines(["Text", "more"]) + [make_line("1", 300, 60, 10)]
        blocks = analyze(lines, MarkdownOptions(remove_page_numbers=False, detect_footnotes=False))
        assert Paragraph("1") in blocks

    def test_urls_formatted_in_blocks(self) -> None:
        blocks = analyze([make_line("Docs at https://example.com/docs.", 72, 700)])
        assert blocks == [Paragraph("Docs at [https://example.com/docs](https://example.com/docs).")]

    def test_columns_do_not_join(self) -> None:
        left = make_line("left text", 72, 700, column=0)
        right = make_line("right text", 330, 686, column=1)
        assert analyze([left, right]) == [Paragraph("left text"), Paragraph("right text")]

    def test_threaded_matches_sequential(self) -> None:
        lines = []
        for page in range(1, 5):
            lines += stack_lines([f"Heading {page}"], font_size=24, top=740, page=page)
            lines += stack_lines(["- a", "- b", "plain body text here"], page=page)
        assert analyze(lines, MarkdownOptions(max_workers=3)) == analyze(lines)

    def test_empty(self) -> None:
        assert analyze([]) == []
