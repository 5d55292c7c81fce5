#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/pdf.py
"""Positioned text extraction from PDF content streams.

The extractor walks every page's content stream, tracking the graphics state
(CTM, font, size, spacing, text matrices) and emits one :class:`TextItem` per
text-showing operator. Items keep content-stream order; reading order is
established later by the layout reconstructor.

Pages are independent. A page whose content cannot be read is skipped with a
warning; a page whose stream the tokenizer rejects is recovered with a raw
byte scan that produces items flagged ``approximate``.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from pdf_inspector.constants import (
    DEFAULT_AVG_CHAR_WIDTH_RATIO,
    DEFAULT_LEADING_RATIO,
    TJ_SPACE_THRESHOLD,
)
from pdf_inspector.exceptions import ContentStreamError, InvalidStructureError
from pdf_inspector.models import FontFlags, PageWarning, TextItem
from pdf_inspector.parsers._pdf_backend import DocumentBackend, FontInfo
from pdf_inspector.parsers._pdf_decoder import FontDecoderCache
from pdf_inspector.parsers._pdf_lexer import tokenize
from pdf_inspector.parsers._pdf_scanner import iter_raw_show_strings
from pdf_inspector.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

Matrix = tuple[float, float, float, float, float, float]
IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

# Synthetic line pitch for items recovered by the raw scan
_FALLBACK_LINE_PITCH = 1.2


def multiply(m1: Matrix, m2: Matrix) -> Matrix:
    """Return ``m1 × m2`` for PDF row-vector affine matrices."""
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + b1 * c2,
        a1 * b2 + b1 * d2,
        c1 * a2 + d1 * c2,
        c1 * b2 + d1 * d2,
        e1 * a2 + f1 * c2 + e2,
        e1 * b2 + f1 * d2 + f2,
    )


def translate(tx: float, ty: float) -> Matrix:
    return (1.0, 0.0, 0.0, 1.0, tx, ty)


@dataclass(frozen=True)
class GraphicsState:
    """Snapshot saved by ``q`` and restored by ``Q``."""

    ctm: Matrix = IDENTITY
    font_name: str = ""
    font_size: float = 0.0
    char_spacing: float = 0.0
    word_spacing: float = 0.0
    horizontal_scaling: float = 100.0
    leading: float = 0.0
    rise: float = 0.0


@dataclass
class PageInput:
    """Everything read from the backend for one page."""

    page_number: int
    content: bytes
    fonts: dict[str, FontInfo]
    height: float = 0.0


@dataclass
class PageExtraction:
    """Items and warnings produced for one page."""

    page_number: int
    items: list[TextItem] = field(default_factory=list)
    warnings: list[PageWarning] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """Items for a whole document, pages ascending, stream order within a page."""

    items: list[TextItem]
    warnings: list[PageWarning]
    page_count: int


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ContentStreamError(f"Expected number operand, got {value!r}")
    return float(value)


class ContentStreamWalker:
    """Interpret one page's content stream and collect text items.

    Parameters
    ----------
    page_number : int
        1-based page number stamped on every item
    fonts : dict
        Page fonts keyed by resource name
    decoders : FontDecoderCache
        Document-scoped decode strategy cache
    avg_char_width_ratio : float
        Estimated glyph advance as a fraction of font size

    """

    def __init__(
        self,
        page_number: int,
        fonts: dict[str, FontInfo],
        decoders: FontDecoderCache,
        avg_char_width_ratio: float = DEFAULT_AVG_CHAR_WIDTH_RATIO,
    ):
        self.page_number = page_number
        self.fonts = fonts
        self.decoders = decoders
        self.char_width = avg_char_width_ratio
        self.gs = GraphicsState()
        self.stack: list[GraphicsState] = []
        self.tm: Matrix = IDENTITY
        self.tlm: Matrix = IDENTITY
        self.items: list[TextItem] = []

    def walk(self, content: bytes) -> list[TextItem]:
        """Process ``content`` and return the items in stream order.

        Raises
        ------
        ContentStreamError
            If the stream cannot be tokenized or an operator has bad operands

        """
        for operands, operator in tokenize(content):
            handler = self._HANDLERS.get(operator)
            if handler is None:
                continue
            try:
                handler(self, operands)
            except (IndexError, TypeError, ValueError) as e:
                raise ContentStreamError(f"Bad operands for {operator.decode('latin-1')}: {operands!r}") from e
        return self.items

    # Graphics state -------------------------------------------------------

    def _op_q(self, operands: list[Any]) -> None:
        self.stack.append(self.gs)

    def _op_Q(self, operands: list[Any]) -> None:
        if self.stack:
            self.gs = self.stack.pop()

    def _op_cm(self, operands: list[Any]) -> None:
        m = tuple(_number(v) for v in operands[-6:])
        if len(m) == 6:
            self.gs = replace(self.gs, ctm=multiply(m, self.gs.ctm))  # type: ignore[arg-type]

    # Text state -----------------------------------------------------------

    def _op_BT(self, operands: list[Any]) -> None:
        self.tm = IDENTITY
        self.tlm = IDENTITY

    def _op_Tf(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, font_name=str(operands[-2]), font_size=_number(operands[-1]))

    def _op_Tc(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, char_spacing=_number(operands[-1]))

    def _op_Tw(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, word_spacing=_number(operands[-1]))

    def _op_Tz(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, horizontal_scaling=_number(operands[-1]))

    def _op_TL(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, leading=_number(operands[-1]))

    def _op_Ts(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, rise=_number(operands[-1]))

    # Text positioning -----------------------------------------------------

    def _move(self, tx: float, ty: float) -> None:
        self.tlm = multiply(translate(tx, ty), self.tlm)
        self.tm = self.tlm

    def _op_Td(self, operands: list[Any]) -> None:
        self._move(_number(operands[-2]), _number(operands[-1]))

    def _op_TD(self, operands: list[Any]) -> None:
        ty = _number(operands[-1])
        self.gs = replace(self.gs, leading=-ty)
        self._move(_number(operands[-2]), ty)

    def _op_Tm(self, operands: list[Any]) -> None:
        m = tuple(_number(v) for v in operands[-6:])
        if len(m) != 6:
            raise ContentStreamError(f"Tm needs 6 operands, got {len(m)}")
        self.tlm = m  # type: ignore[assignment]
        self.tm = self.tlm

    def _next_line(self) -> None:
        leading = self.gs.leading or DEFAULT_LEADING_RATIO * self.gs.font_size
        self._move(0.0, -leading)

    def _op_Tstar(self, operands: list[Any]) -> None:
        self._next_line()

    # Text showing ---------------------------------------------------------

    def _op_Tj(self, operands: list[Any]) -> None:
        self._show([operands[-1]])

    def _op_TJ(self, operands: list[Any]) -> None:
        array = operands[-1]
        if not isinstance(array, list):
            raise ContentStreamError(f"TJ expects an array, got {array!r}")
        self._show(array)

    def _op_quote(self, operands: list[Any]) -> None:
        self._next_line()
        self._show([operands[-1]])

    def _op_doublequote(self, operands: list[Any]) -> None:
        self.gs = replace(self.gs, word_spacing=_number(operands[-3]), char_spacing=_number(operands[-2]))
        self._next_line()
        self._show([operands[-1]])

    def _show(self, chunks: Sequence[Any]) -> None:
        gs = self.gs
        font = self.fonts.get(gs.font_name)
        strategy = self.decoders.strategy_for(font)
        size = gs.font_size
        th = gs.horizontal_scaling / 100.0

        start = multiply(self.tm, gs.ctm)
        render = multiply((size * th, 0.0, 0.0, size, 0.0, gs.rise), start)

        parts: list[str] = []
        advance = 0.0
        for chunk in chunks:
            if isinstance(chunk, bytes):
                text, codes = strategy.decode(chunk)
                spaces = text.count(" ")
                advance += (codes * (self.char_width * size + gs.char_spacing) + spaces * gs.word_spacing) * th
                parts.append(text)
            elif isinstance(chunk, (int, float)) and not isinstance(chunk, bool):
                if chunk < TJ_SPACE_THRESHOLD and parts and not parts[-1].endswith(" "):
                    parts.append(" ")
                advance -= chunk / 1000.0 * size * th

        self.tm = multiply(translate(advance, 0.0), self.tm)

        text = "".join(parts)
        if not text.strip():
            return
        self.items.append(
            TextItem(
                text=text,
                x=render[4],
                y=render[5],
                font_size=math.hypot(render[2], render[3]),
                font_name=gs.font_name,
                page_number=self.page_number,
                flags=font.flags if font is not None else FontFlags(),
                width=advance * math.hypot(start[0], start[1]),
                base_font=font.base_font if font is not None else "",
            )
        )

    _HANDLERS = {
        b"q": _op_q,
        b"Q": _op_Q,
        b"cm": _op_cm,
        b"BT": _op_BT,
        b"Tf": _op_Tf,
        b"Tc": _op_Tc,
        b"Tw": _op_Tw,
        b"Tz": _op_Tz,
        b"TL": _op_TL,
        b"Ts": _op_Ts,
        b"Td": _op_Td,
        b"TD": _op_TD,
        b"Tm": _op_Tm,
        b"T*": _op_Tstar,
        b"Tj": _op_Tj,
        b"TJ": _op_TJ,
        b"'": _op_quote,
        b'"': _op_doublequote,
    }


def raw_scan_items(
    page: PageInput,
    decoders: FontDecoderCache,
    avg_char_width_ratio: float = DEFAULT_AVG_CHAR_WIDTH_RATIO,
) -> list[TextItem]:
    """Recover text from a stream the tokenizer rejected.

    Every show operator becomes its own line: x is 0 and y descends from the
    top of the page by one synthetic line pitch per run.
    """
    items: list[TextItem] = []
    y = page.height or 792.0
    for font_name, size, strings in iter_raw_show_strings(page.content):
        font = page.fonts.get(font_name) if font_name else None
        text = "".join(decoders.decode(font, s)[0] for s in strings)
        if not text.strip():
            continue
        size = size or 12.0
        y -= size * _FALLBACK_LINE_PITCH
        items.append(
            TextItem(
                text=text,
                x=0.0,
                y=y,
                font_size=size,
                font_name=font_name or "",
                page_number=page.page_number,
                flags=font.flags if font is not None else FontFlags(),
                width=len(text) * avg_char_width_ratio * size,
                base_font=font.base_font if font is not None else "",
                approximate=True,
            )
        )
    return items


class PdfTextExtractor:
    """Extract positioned text items from every page of a document.

    Parameters
    ----------
    backend : DocumentBackend
        Open document
    avg_char_width_ratio : float, default 0.5
        Estimated glyph advance as a fraction of font size
    max_workers : int, default 1
        Threads used to walk content streams; backend reads always happen on
        the calling thread

    Examples
    --------
        >>> with open_backend("paper.pdf") as backend:
        ...     result = PdfTextExtractor(backend).extract()
        >>> result.items[0].text
        'Introduction'

    """

    def __init__(
        self,
        backend: DocumentBackend,
        avg_char_width_ratio: float = DEFAULT_AVG_CHAR_WIDTH_RATIO,
        max_workers: int = 1,
    ):
        self.backend = backend
        self.avg_char_width_ratio = avg_char_width_ratio
        self.max_workers = max_workers
        self.decoders = FontDecoderCache()

    def read_pages(self) -> tuple[list[PageInput], list[PageWarning]]:
        """Read content and fonts for every page; unreadable pages become warnings."""
        pages: list[PageInput] = []
        warnings: list[PageWarning] = []
        for index in range(self.backend.page_count):
            page_number = index + 1
            try:
                content = self.backend.page_content_bytes(index)
                fonts = self.backend.page_fonts(index)
                _, height = self.backend.page_size(index)
            except Exception as e:
                logger.warning("Skipping page %d: could not read page content: %s", page_number, e)
                warnings.append(PageWarning(page_number, f"could not read page content: {e}"))
                continue
            pages.append(PageInput(page_number, content, fonts, height))
        return pages, warnings

    def extract_page(self, page: PageInput) -> PageExtraction:
        """Walk one page; fall back to a raw scan on malformed streams."""
        result = PageExtraction(page.page_number)
        walker = ContentStreamWalker(page.page_number, page.fonts, self.decoders, self.avg_char_width_ratio)
        try:
            result.items = walker.walk(page.content)
        except ContentStreamError as e:
            logger.warning("Page %d: malformed content stream (%s); using raw text scan", page.page_number, e)
            result.items = raw_scan_items(page, self.decoders, self.avg_char_width_ratio)
            result.warnings.append(
                PageWarning(page.page_number, f"malformed content stream, text positions are approximate: {e}")
            )
        return result

    def extract(self) -> ExtractionResult:
        """Extract items from all pages.

        Returns
        -------
        ExtractionResult
            Items ordered by page, then by content-stream order

        Raises
        ------
        InvalidStructureError
            If the document has no pages

        """
        page_count = self.backend.page_count
        if page_count == 0:
            raise InvalidStructureError("PDF has no pages")

        with debug_timer(logger, f"Text extraction ({page_count} pages)"):
            pages, warnings = self.read_pages()
            if self.max_workers > 1 and len(pages) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    extractions = list(executor.map(self.extract_page, pages))
            else:
                extractions = [self.extract_page(page) for page in pages]

        items: list[TextItem] = []
        for extraction in extractions:
            items.extend(extraction.items)
            warnings.extend(extraction.warnings)
        warnings.sort(key=lambda w: w.page_number)
        logger.debug("Extracted %d text items using %d font decoders", len(items), len(self.decoders))
        return ExtractionResult(items=items, warnings=warnings, page_count=page_count)
