"""Test utilities for the pdf_inspector test suite.

This module provides builders for positioned text, Markdown validation
helpers and temporary directory handling shared by the tests.
"""

import re
import shutil
import tempfile
from pathlib import Path

from pdf_inspector.models import FontFlags, TextItem, TextLine

PAGE_HEIGHT = 792.0


def make_item(
    text: str,
    x: float,
    y: float,
    font_size: float = 12.0,
    *,
    width: float | None = None,
    page: int = 1,
    font: str = "F1",
    bold: bool = False,
    italic: bool = False,
    monospace: bool = False,
) -> TextItem:
    """Build a TextItem with a width estimated from the glyph count."""
    return TextItem(
        text=text,
        x=x,
        y=y,
        font_size=font_size,
        font_name=font,
        page_number=page,
        flags=FontFlags(is_bold=bold, is_italic=italic, is_monospace=monospace),
        width=width if width is not None else len(text) * font_size * 0.5,
    )


def make_line(text: str, x: float, y: float, font_size: float = 12.0, *, page: int = 1, column: int = 0, **kw):
    """Build a single-item TextLine."""
    return TextLine([make_item(text, x, y, font_size, page=page, **kw)], y=y, page_number=page, column=column)


def stack_lines(texts, x: float = 72.0, top: float = 700.0, spacing: float = 14.0, font_size: float = 12.0, **kw):
    """Build consecutive TextLines descending the page from ``top``."""
    return [make_line(text, x, top - i * spacing, font_size, **kw) for i, text in enumerate(texts)]


def assert_markdown_valid(markdown: str) -> None:
    """Assert that the generated Markdown is well-formed."""
    if markdown == "":
        return
    assert markdown.endswith("\n"), "markdown must end with a newline"
    assert not markdown.endswith("\n\n"), "markdown must end with exactly one newline"
    assert "\n\n\n" not in markdown, "markdown must not contain runs of blank lines"

    # Fences must be balanced
    fences = [line for line in markdown.split("\n") if re.match(r"^`{3,}", line)]
    assert len(fences) % 2 == 0, "unbalanced code fences"

    # Table rows in one block share a column count
    for block in markdown.split("\n\n"):
        rows = [line for line in block.split("\n") if line.startswith("| ")]
        if rows:
            counts = {len(re.split(r"(?<!\\)\|", row)) for row in rows}
            assert len(counts) == 1, f"inconsistent table columns in block: {block!r}"


def create_test_temp_dir() -> Path:
    """Create a temporary directory for test files."""
    return Path(tempfile.mkdtemp())


def cleanup_test_dir(temp_dir: Path) -> None:
    """Clean up test directory and files."""
    if temp_dir.exists():
        shutil.rmtree(temp_dir)


class FakeBackend:
    """In-memory document backend serving hand-written content streams.

    ``pages`` holds one content stream per page; an ``Exception`` instance in
    its place makes reads of that page fail.
    """

    def __init__(self, pages, fonts=None, title=None, encrypted=False, height=792.0):
        self.pages = list(pages)
        self.fonts = fonts or {}
        self.title = title
        self.encrypted = encrypted
        self.height = height
        self.reads: list[int] = []
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def is_encrypted(self) -> bool:
        return self.encrypted

    def document_title(self):
        return self.title

    def page_content_bytes(self, index: int) -> bytes:
        self.reads.append(index)
        content = self.pages[index]
        if isinstance(content, Exception):
            raise content
        return content

    def page_fonts(self, index: int):
        return dict(self.fonts)

    def page_size(self, index: int):
        return 612.0, self.height

    def close(self) -> None:
        self.closed = True
