#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for pdf-inspector.

This module centralizes the thresholds, magic numbers, and default
configuration values used by the classifier and the layout pipeline.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Dependencies - Required packages and version specs
3. Classification - Operator scanning and sampling defaults
4. Text Extraction - Content stream and decoding defaults
5. Layout Reconstruction - Line, column, and reading-order thresholds
6. Structure Analysis - Header, list, code, table, and footnote thresholds
7. Markdown Output - Serialization settings
8. CLI - Exit codes
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

SampleStrategy = Literal["even", "first"]
ErrorKind = Literal["io", "parse", "encrypted", "invalid_structure"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# =============================================================================
# Dependencies
# =============================================================================

PDF_MIN_PYMUPDF_VERSION = "1.26.4"
DEPS_PDF = [("fitz", f"pymupdf>={PDF_MIN_PYMUPDF_VERSION}")]

# =============================================================================
# Classification
# =============================================================================

DEFAULT_MAX_PAGES_TO_SAMPLE = 5
DEFAULT_MIN_TEXT_OPS_PER_PAGE = 3
DEFAULT_TEXT_PAGE_RATIO_THRESHOLD = 0.6
DEFAULT_SAMPLE_STRATEGY: SampleStrategy = "even"

# Operators counted by the scanner
TEXT_SHOW_OPERATORS = (b"Tj", b"TJ", b"'", b'"')
IMAGE_OPERATORS = (b"Do",)

# Share of the confidence score driven by distance from the decision boundary;
# the remainder rewards sampling a larger fraction of the document.
CLASSIFIER_BOUNDARY_WEIGHT = 0.9
CLASSIFIER_COMPLETENESS_WEIGHT = 0.1

# =============================================================================
# Text Extraction
# =============================================================================

# TJ adjustments are in thousandths of an em; anything past this reads as a word gap
TJ_SPACE_THRESHOLD = -250.0
DEFAULT_AVG_CHAR_WIDTH_RATIO = 0.5
DEFAULT_LEADING_RATIO = 1.2
DEFAULT_MAX_WORKERS = 1
REPLACEMENT_CHAR = "�"

# Encoding names mapped to Python codecs for single-byte fonts
SINGLE_BYTE_ENCODINGS = {
    "WinAnsiEncoding": "cp1252",
    "MacRomanEncoding": "mac_roman",
    "StandardEncoding": "latin-1",
    "PDFDocEncoding": "latin-1",
}
UTF16_ENCODING_MARKERS = ("UTF16", "UCS2")
IDENTITY_ENCODINGS = ("Identity-H", "Identity-V")

LIGATURES = {
    "ﬀ": "ff",
    "ﬁ": "fi",
    "ﬂ": "fl",
    "ﬃ": "ffi",
    "ﬄ": "ffl",
    "ﬅ": "st",
    "ﬆ": "st",
}

# PDF font descriptor flag bits (1-based in the PDF reference)
FONT_FLAG_FIXED_PITCH = 1 << 0
FONT_FLAG_ITALIC = 1 << 6
FONT_FLAG_FORCE_BOLD = 1 << 18

# =============================================================================
# Layout Reconstruction
# =============================================================================

DEFAULT_BASELINE_TOLERANCE_RATIO = 0.5
DEFAULT_SCRIPT_SIZE_RATIO = 0.85
DEFAULT_SCRIPT_OFFSET_RATIO = 0.15
DEFAULT_COLUMN_GAP_RATIO = 0.12
DEFAULT_EXPECTED_COLUMNS = 2
DEFAULT_MIN_LINES_PER_COLUMN = 3
DEFAULT_DROP_CAP_SIZE_RATIO = 2.5
DEFAULT_SPACE_GAP_RATIO = 0.15
DEFAULT_COLUMN_SPANNING_THRESHOLD = 0.65

# =============================================================================
# Structure Analysis
# =============================================================================

DEFAULT_HEADER_RATIOS = (1.8, 1.5, 1.3, 1.15)
DEFAULT_HEADER_MAX_LINE_LENGTH = 100
FONT_SIZE_ROUNDING = 0.1

BULLET_MARKERS = ("•", "-", "*", "○", "●", "◦", "▪", "–")
DEFAULT_LIST_INDENT_STEP = 15.0

MONOSPACE_FONT_PATTERNS = (
    "courier",
    "consolas",
    "monaco",
    "menlo",
    "fira code",
    "firacode",
    "jetbrains",
    "inconsolata",
    "source code",
    "sourcecode",
    "dejavu sans mono",
    "dejavusansmono",
    "liberation mono",
    "liberationmono",
    "mono",
    "fixed",
    "terminal",
    "typewriter",
)
CODE_LINE_PREFIXES = (
    "import ",
    "export ",
    "from ",
    "const ",
    "let ",
    "var ",
    "function ",
    "class ",
    "def ",
    "pub fn ",
    "fn ",
    "async fn ",
    "impl ",
    "return ",
    "#include ",
    "=> ",
    "-> ",
    ":: ",
    ":= ",
)
CODE_SPECIAL_CHARS = "{}[]();=<>|&$"
# Counted toward the code symbol minimum; bracket pairs also appear in cited prose
CODE_SYMBOL_CHARS = ";{}=<>"
DEFAULT_MONOSPACE_RATIO = 0.6
DEFAULT_CODE_SYMBOL_MIN = 3

DEFAULT_TABLE_X_TOLERANCE = 8.0
DEFAULT_TABLE_MIN_COLUMNS = 2
DEFAULT_TABLE_MIN_ROWS = 2
DEFAULT_TABLE_MAX_CELL_LENGTH = 60

DEFAULT_FOOTNOTE_ZONE_RATIO = 0.12
DEFAULT_PAGE_NUMBER_ZONE_RATIO = 0.08
FOOTNOTE_MARKERS = ("*", "†", "‡", "§")
DEFAULT_PARAGRAPH_GAP_RATIO = 1.8

# =============================================================================
# Markdown Output
# =============================================================================

DEFAULT_PAGE_BREAK_MARKER = "---"
DEFAULT_CODE_FENCE = "```"
LIST_INDENT = "  "

# =============================================================================
# CLI
# =============================================================================

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_OCR_REQUIRED = 2
