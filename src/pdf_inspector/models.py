#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/models.py
"""Value types shared by the classifier and the conversion pipeline.

Positioned types (:class:`TextItem`, :class:`TextLine`) use PDF page space:
origin at the bottom-left corner, y increasing upwards, units in points.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from pdf_inspector.constants import DEFAULT_SPACE_GAP_RATIO


class PdfType(str, Enum):
    """Classification of a document by how its text is stored."""

    TEXT_BASED = "text_based"
    SCANNED = "scanned"
    IMAGE_BASED = "image_based"
    MIXED = "mixed"

    @property
    def needs_ocr(self) -> bool:
        """Whether at least part of the document requires OCR to read."""
        return self is not PdfType.TEXT_BASED


@dataclass(frozen=True)
class PdfTypeResult:
    """Outcome of :func:`pdf_inspector.detect_pdf_type`.

    Parameters
    ----------
    pdf_type : PdfType
        Detected document type
    confidence : float
        Value in ``[0, 1]``; grows with the distance of the text-page ratio
        from the decision boundary and with the sampled share of the document
    page_count : int
        Total pages reported by the backend
    title : str or None
        Document title from the Info dictionary, if any
    elapsed_ms : float
        Wall-clock time spent classifying
    pages_sampled : int
        Number of pages whose content was scanned
    pages_with_text : int
        Sampled pages that met the text-operator threshold
    text_operator_count : int
        Text-showing operators across sampled pages
    image_operator_count : int
        XObject ``Do`` operators across sampled pages

    """

    pdf_type: PdfType
    confidence: float
    page_count: int
    title: str | None = None
    elapsed_ms: float = 0.0
    pages_sampled: int = 0
    pages_with_text: int = 0
    text_operator_count: int = 0
    image_operator_count: int = 0

    @property
    def text_ratio(self) -> float:
        """Share of sampled pages that met the text-operator threshold."""
        return self.pages_with_text / self.pages_sampled if self.pages_sampled else 0.0

    @property
    def ocr_recommended(self) -> bool:
        """Whether OCR should be run to recover the full text."""
        return self.pdf_type.needs_ocr

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        data = asdict(self)
        data["pdf_type"] = self.pdf_type.value
        data["confidence"] = round(self.confidence, 4)
        data["elapsed_ms"] = round(self.elapsed_ms, 3)
        data["text_ratio"] = round(self.text_ratio, 4)
        data["ocr_recommended"] = self.ocr_recommended
        return data


@dataclass(frozen=True)
class FontFlags:
    """Style hints derived from a font's descriptor flags and base name."""

    is_bold: bool = False
    is_italic: bool = False
    is_monospace: bool = False


@dataclass(frozen=True)
class TextItem:
    """A run of text shown by one text-showing operator.

    Parameters
    ----------
    text : str
        Decoded text
    x, y : float
        Origin of the run in page space
    font_size : float
        Effective size after applying the text matrix and CTM
    font_name : str
        Resource name of the font (``F1``)
    page_number : int
        1-based page number
    flags : FontFlags
        Bold, italic and monospace hints
    width : float
        Estimated advance width of the run
    base_font : str
        Base font name (``Helvetica-Bold``), empty when unknown
    approximate : bool
        True for items recovered by the raw-byte fallback scan; their
        positions are synthetic

    """

    text: str
    x: float
    y: float
    font_size: float
    font_name: str
    page_number: int
    flags: FontFlags = field(default_factory=FontFlags)
    width: float = 0.0
    base_font: str = ""
    approximate: bool = False

    @property
    def x_end(self) -> float:
        return self.x + self.width


@dataclass(eq=False)
class TextLine:
    """Items sharing a baseline band on one page.

    ``items`` are kept sorted by x; use :meth:`add` rather than appending.
    """

    items: list[TextItem]
    y: float
    page_number: int
    column: int = 0

    def __post_init__(self) -> None:
        self.items.sort(key=lambda item: item.x)

    def add(self, item: TextItem) -> None:
        self.items.append(item)
        self.items.sort(key=lambda it: it.x)

    def text(self, space_gap_ratio: float = DEFAULT_SPACE_GAP_RATIO) -> str:
        """Concatenate items in x order, inferring spaces from horizontal gaps."""
        parts: list[str] = []
        prev: TextItem | None = None
        for item in self.items:
            if prev is not None and parts:
                gap = item.x - prev.x_end
                threshold = space_gap_ratio * min(prev.font_size, item.font_size)
                if gap > threshold and not parts[-1].endswith(" ") and not item.text.startswith(" "):
                    parts.append(" ")
            parts.append(item.text)
            prev = item
        return "".join(parts).strip()

    @property
    def x_start(self) -> float:
        return self.items[0].x if self.items else 0.0

    @property
    def x_end(self) -> float:
        return max((item.x_end for item in self.items), default=0.0)

    @property
    def width(self) -> float:
        return self.x_end - self.x_start

    @property
    def font_size(self) -> float:
        """Dominant font size, weighted by character count."""
        if not self.items:
            return 0.0
        weights: Counter[float] = Counter()
        for item in self.items:
            weights[round(item.font_size, 1)] += max(len(item.text.strip()), 1)
        return weights.most_common(1)[0][0]

    @property
    def char_count(self) -> int:
        return sum(len(item.text.strip()) for item in self.items)

    def _style_share(self, attr: str) -> float:
        total = self.char_count
        if total == 0:
            return 0.0
        styled = sum(len(item.text.strip()) for item in self.items if getattr(item.flags, attr))
        return styled / total

    @property
    def is_monospace(self) -> bool:
        return self._style_share("is_monospace") > 0.5

    @property
    def is_bold(self) -> bool:
        return self._style_share("is_bold") > 0.5

    @property
    def is_italic(self) -> bool:
        return self._style_share("is_italic") > 0.5

    @property
    def approximate(self) -> bool:
        return any(item.approximate for item in self.items)


@dataclass(frozen=True)
class PageWarning:
    """A page-level problem that was recovered from."""

    page_number: int
    message: str

    def __str__(self) -> str:
        return f"page {self.page_number}: {self.message}"


@dataclass(frozen=True)
class DocumentMetadata:
    """Document-level facts carried on :class:`PdfProcessResult`."""

    title: str | None
    page_count: int
    confidence: float


@dataclass
class PdfProcessResult:
    """Outcome of :func:`pdf_inspector.process_pdf`.

    Parameters
    ----------
    pdf_type : PdfType
        Classification of the document
    markdown : str or None
        Converted Markdown; only set for text-based and mixed documents
    raw_text : str or None
        Plain text in reading order, one line per reconstructed line
    metadata : DocumentMetadata
        Title, page count and classifier confidence
    warnings : list of PageWarning
        Page-level failures that were skipped during extraction
    processing_time_ms : float
        Total wall-clock time

    """

    pdf_type: PdfType
    markdown: str | None
    raw_text: str | None
    metadata: DocumentMetadata
    warnings: list[PageWarning] = field(default_factory=list)
    processing_time_ms: float = 0.0

    @property
    def page_count(self) -> int:
        return self.metadata.page_count

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "pdf_type": self.pdf_type.value,
            "markdown": self.markdown,
            "raw_text": self.raw_text,
            "title": self.metadata.title,
            "page_count": self.metadata.page_count,
            "confidence": round(self.metadata.confidence, 4),
            "warnings": [str(w) for w in self.warnings],
            "processing_time_ms": round(self.processing_time_ms, 3),
        }


__all__ = [
    "DocumentMetadata",
    "FontFlags",
    "PageWarning",
    "PdfProcessResult",
    "PdfType",
    "PdfTypeResult",
    "TextItem",
    "TextLine",
]
