"""The major exported API functions for PDF inspection and conversion."""

#  Copyright (c) 2025 Tom Villani, Ph.D.
# src/pdf_inspector/api.py
from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from itertools import groupby

from pdf_inspector import detection
from pdf_inspector.exceptions import InvalidStructureError, PdfParseError, ValidationError
from pdf_inspector.models import (
    DocumentMetadata,
    PageWarning,
    PdfProcessResult,
    PdfType,
    PdfTypeResult,
    TextItem,
    TextLine,
)
from pdf_inspector.options.detection import DetectionConfig
from pdf_inspector.options.markdown import MarkdownOptions
from pdf_inspector.parsers._pdf_backend import DocumentBackend, open_backend
from pdf_inspector.parsers._pdf_layout import LayoutReconstructor
from pdf_inspector.parsers._pdf_structure import analyze
from pdf_inspector.parsers.pdf import ExtractionResult, PdfTextExtractor
from pdf_inspector.renderers.markdown import MarkdownRenderer, render_plain_text
from pdf_inspector.utils.decorators import debug_timer
from pdf_inspector.utils.inputs import PdfInput

logger = logging.getLogger(__name__)

__all__ = [
    "detect_pdf_type",
    "detect_pdf_type_mem",
    "extract_text",
    "extract_text_mem",
    "extract_text_with_positions",
    "extract_text_with_positions_mem",
    "lines_to_text",
    "process_pdf",
    "process_pdf_mem",
    "to_markdown",
    "to_markdown_from_items",
]

# Separates pages in plain-text output
_PAGE_SEPARATOR = "\n\n"


def _require_buffer(buffer: object) -> bytes:
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return bytes(buffer)
    raise ValidationError(
        f"Expected a bytes-like buffer, got {type(buffer).__name__}",
        parameter_name="buffer",
        parameter_value=type(buffer).__name__,
    )


def _reconstructor(options: MarkdownOptions) -> LayoutReconstructor:
    return LayoutReconstructor(
        layout=options.layout,
        detect_columns=options.detect_columns,
        merge_scripts=options.merge_scripts,
        merge_drop_caps=options.merge_drop_caps,
        fix_hyphenation=options.fix_hyphenation,
        max_workers=options.max_workers,
    )


def _extract(backend: DocumentBackend, options: MarkdownOptions) -> ExtractionResult:
    extractor = PdfTextExtractor(
        backend,
        avg_char_width_ratio=options.layout.avg_char_width_ratio,
        max_workers=options.max_workers,
    )
    return extractor.extract()


def lines_to_text(lines: Sequence[TextLine], space_gap_ratio: float | None = None) -> str:
    """Join reading-order lines into plain text, pages separated by a blank line.

    Parameters
    ----------
    lines : sequence of TextLine
        Lines in reading order
    space_gap_ratio : float, optional
        Gap, relative to font size, that inserts a space between items

    Returns
    -------
    str
        Plain text

    """
    ratio = space_gap_ratio if space_gap_ratio is not None else MarkdownOptions().layout.space_gap_ratio
    pages = []
    for _, page_lines in groupby(lines, key=lambda line: line.page_number):
        text = "\n".join(line.text(ratio).strip() for line in page_lines)
        pages.append(text.strip("\n"))
    return _PAGE_SEPARATOR.join(page for page in pages if page)


# =============================================================================
# Classification
# =============================================================================


def detect_pdf_type(source: PdfInput, config: DetectionConfig | None = None) -> PdfTypeResult:
    """Classify a PDF as text-based, scanned, image-based or mixed.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        PDF to classify
    config : DetectionConfig, optional
        Sampling limits and thresholds

    Returns
    -------
    PdfTypeResult
        Type, confidence, page count, title and timing

    Raises
    ------
    PdfIoError
        If the file cannot be read
    PdfParseError
        If the data is not a parseable PDF
    PdfEncryptedError
        If the document is encrypted

    Examples
    --------
        >>> result = detect_pdf_type("report.pdf")
        >>> result.pdf_type
        <PdfType.TEXT_BASED: 'text_based'>

    """
    return detection.detect_pdf_type(source, config)


def detect_pdf_type_mem(buffer: bytes, config: DetectionConfig | None = None) -> PdfTypeResult:
    """Classify a PDF held in memory. Same semantics as :func:`detect_pdf_type`."""
    return detection.detect_pdf_type(_require_buffer(buffer), config)


# =============================================================================
# Extraction
# =============================================================================


def extract_text_with_positions(source: PdfInput, options: MarkdownOptions | None = None) -> list[TextItem]:
    """Extract positioned text items from every page.

    Items come back page by page in content-stream order; no reordering is
    applied.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        PDF to read
    options : MarkdownOptions, optional
        Supplies ``layout.avg_char_width_ratio`` and ``max_workers``

    Returns
    -------
    list of TextItem
        Items with page-space coordinates (origin bottom-left)

    Raises
    ------
    PdfIoError, PdfParseError, PdfEncryptedError
        If the document cannot be opened
    InvalidStructureError
        If the document has no pages

    """
    options = options or MarkdownOptions()
    with open_backend(source) as backend:
        return _extract(backend, options).items


def extract_text_with_positions_mem(buffer: bytes, options: MarkdownOptions | None = None) -> list[TextItem]:
    """In-memory variant of :func:`extract_text_with_positions`."""
    return extract_text_with_positions(_require_buffer(buffer), options)


def extract_text(source: PdfInput, options: MarkdownOptions | None = None) -> str:
    """Extract the document's text in reading order.

    Lines are reconstructed (columns, scripts, drop caps, hyphenation, as
    enabled in ``options``) and joined with newlines; pages are separated by
    a blank line.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        PDF to read
    options : MarkdownOptions, optional
        Layout switches and thresholds

    Returns
    -------
    str
        Plain text

    """
    options = options or MarkdownOptions()
    items = extract_text_with_positions(source, options)
    lines = _reconstructor(options).reconstruct(items)
    return lines_to_text(lines, options.layout.space_gap_ratio)


def extract_text_mem(buffer: bytes, options: MarkdownOptions | None = None) -> str:
    """In-memory variant of :func:`extract_text`."""
    return extract_text(_require_buffer(buffer), options)


# =============================================================================
# Markdown
# =============================================================================


def to_markdown(text: str, options: MarkdownOptions | None = None) -> str:
    """Convert plain text to Markdown without font information.

    Parameters
    ----------
    text : str
        Plain text, for example the output of :func:`extract_text`
    options : MarkdownOptions, optional
        ``detect_lists``, ``detect_code`` and ``format_urls`` apply

    Returns
    -------
    str
        Markdown text

    """
    if not isinstance(text, str):
        raise ValidationError(
            f"text must be a string, got {type(text).__name__}",
            parameter_name="text",
            parameter_value=type(text).__name__,
        )
    return render_plain_text(text, options)


def to_markdown_from_items(items: Sequence[TextItem], options: MarkdownOptions | None = None) -> str:
    """Convert positioned text items to Markdown.

    Runs line and column reconstruction, structural analysis and rendering.

    Parameters
    ----------
    items : sequence of TextItem
        Items from :func:`extract_text_with_positions` (or built by hand)
    options : MarkdownOptions, optional
        Detection switches and thresholds

    Returns
    -------
    str
        Markdown ending in one newline, or ``""`` when there is no text

    Examples
    --------
        >>> md = to_markdown_from_items(extract_text_with_positions("simple.pdf"))
        >>> print(md)
        # Title
        <BLANKLINE>
        - item1
        - item2

    """
    options = options or MarkdownOptions()
    lines = _reconstructor(options).reconstruct(list(items))
    return _render_lines(lines, options)


def _render_lines(lines: list[TextLine], options: MarkdownOptions) -> str:
    blocks = analyze(lines, options)
    return MarkdownRenderer(options).render(blocks)


# =============================================================================
# Full pipeline
# =============================================================================


def _process_backend(
    backend: DocumentBackend,
    options: MarkdownOptions,
    config: DetectionConfig | None,
    start: float,
) -> PdfProcessResult:
    detected = detection.classify_backend(backend, config)
    metadata = DocumentMetadata(
        title=detected.title,
        page_count=detected.page_count,
        confidence=detected.confidence,
    )
    markdown: str | None = None
    raw_text: str | None = None
    warnings: list[PageWarning] = []

    if detected.pdf_type in (PdfType.TEXT_BASED, PdfType.MIXED):
        try:
            with debug_timer(logger, "Markdown conversion"):
                extraction = _extract(backend, options)
                lines = _reconstructor(options).reconstruct(extraction.items)
                markdown = _render_lines(lines, options)
                raw_text = lines_to_text(lines, options.layout.space_gap_ratio)
            warnings = extraction.warnings
        except (InvalidStructureError, PdfParseError) as e:
            if detected.pdf_type is PdfType.TEXT_BASED:
                raise
            # Mixed documents still report their type when text recovery fails
            logger.warning("Text extraction failed for mixed document: %s", e)
    else:
        logger.info("Document is %s; OCR required, skipping text extraction", detected.pdf_type.value)

    return PdfProcessResult(
        pdf_type=detected.pdf_type,
        markdown=markdown,
        raw_text=raw_text,
        metadata=metadata,
        warnings=warnings,
        processing_time_ms=(time.perf_counter() - start) * 1000,
    )


def process_pdf(
    source: PdfInput,
    options: MarkdownOptions | None = None,
    config: DetectionConfig | None = None,
) -> PdfProcessResult:
    """Classify a PDF and convert it to Markdown when it carries text.

    The classifier runs first. Text-based and mixed documents go through
    extraction, reconstruction, analysis and rendering; scanned and
    image-based documents return without Markdown so the caller can route
    them to OCR.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        PDF to process
    options : MarkdownOptions, optional
        Conversion options
    config : DetectionConfig, optional
        Classifier options

    Returns
    -------
    PdfProcessResult
        Type, Markdown (text-based or mixed only), raw text, metadata and
        per-page warnings

    Raises
    ------
    PdfIoError, PdfParseError, PdfEncryptedError
        If the document cannot be opened
    InvalidStructureError
        If a text-based document has no pages

    """
    start = time.perf_counter()
    options = options or MarkdownOptions()
    with open_backend(source) as backend:
        result = _process_backend(backend, options, config, start)
    logger.debug(
        "Processed %d pages as %s in %.1f ms", result.page_count, result.pdf_type.value, result.processing_time_ms
    )
    return result


def process_pdf_mem(
    buffer: bytes,
    options: MarkdownOptions | None = None,
    config: DetectionConfig | None = None,
) -> PdfProcessResult:
    """In-memory variant of :func:`process_pdf`."""
    return process_pdf(_require_buffer(buffer), options, config)
