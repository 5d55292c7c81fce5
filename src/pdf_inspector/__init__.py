"""pdf_inspector - Classify PDFs and convert text-based ones to Markdown.

A fast classifier decides whether a PDF carries extractable text or needs
OCR by sampling a few pages' content streams. Text-based documents go
through a reconstruction pipeline:

- Positioned text extraction from content streams, with per-font decoding
  (ToUnicode CMaps, UTF-16 CID fonts, single-byte encodings)
- Line grouping, column detection and reading order, superscript and
  subscript merging, drop caps and hyphenation repair
- Structural analysis into headers, lists, code blocks, tables, footnotes
  and paragraphs
- Markdown rendering

Examples
--------
Classify a document:

    >>> from pdf_inspector import detect_pdf_type
    >>> result = detect_pdf_type("report.pdf")
    >>> result.pdf_type, result.ocr_recommended
    (<PdfType.TEXT_BASED: 'text_based'>, False)

Classify and convert in one call:

    >>> from pdf_inspector import process_pdf
    >>> result = process_pdf("report.pdf")
    >>> print(result.markdown)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "pdf_inspector requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from pdf_inspector.api import (  # noqa: E402
    detect_pdf_type,
    detect_pdf_type_mem,
    extract_text,
    extract_text_mem,
    extract_text_with_positions,
    extract_text_with_positions_mem,
    process_pdf,
    process_pdf_mem,
    to_markdown,
    to_markdown_from_items,
)
from pdf_inspector.exceptions import (  # noqa: E402
    ContentStreamError,
    DependencyError,
    InvalidStructureError,
    PdfEncryptedError,
    PdfError,
    PdfInspectorError,
    PdfIoError,
    PdfParseError,
    ValidationError,
)
from pdf_inspector.models import (  # noqa: E402
    DocumentMetadata,
    FontFlags,
    PageWarning,
    PdfProcessResult,
    PdfType,
    PdfTypeResult,
    TextItem,
    TextLine,
)
from pdf_inspector.options import (  # noqa: E402
    DetectionConfig,
    LayoutOptions,
    MarkdownOptions,
    StructureOptions,
)

__all__ = [
    "__version__",
    # API
    "detect_pdf_type",
    "detect_pdf_type_mem",
    "extract_text",
    "extract_text_mem",
    "extract_text_with_positions",
    "extract_text_with_positions_mem",
    "process_pdf",
    "process_pdf_mem",
    "to_markdown",
    "to_markdown_from_items",
    # Models
    "DocumentMetadata",
    "FontFlags",
    "PageWarning",
    "PdfProcessResult",
    "PdfType",
    "PdfTypeResult",
    "TextItem",
    "TextLine",
    # Options
    "DetectionConfig",
    "LayoutOptions",
    "MarkdownOptions",
    "StructureOptions",
    # Exceptions
    "ContentStreamError",
    "DependencyError",
    "InvalidStructureError",
    "PdfEncryptedError",
    "PdfError",
    "PdfInspectorError",
    "PdfIoError",
    "PdfParseError",
    "ValidationError",
]
