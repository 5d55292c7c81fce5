#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_backend.py
"""Document backend built on PyMuPDF.

The classifier and the extractor only need a handful of facts from the PDF
container: the page count, raw content-stream bytes per page, per-font
metadata, the title and the encryption flag. :class:`DocumentBackend`
describes that surface; :class:`PyMuPDFBackend` implements it with ``fitz``.

PyMuPDF documents are not thread-safe, so a backend instance must only be
used from the thread that opened it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pdf_inspector.constants import (
    DEPS_PDF,
    FONT_FLAG_FIXED_PITCH,
    FONT_FLAG_FORCE_BOLD,
    FONT_FLAG_ITALIC,
    MONOSPACE_FONT_PATTERNS,
)
from pdf_inspector.exceptions import PdfEncryptedError, PdfIoError, PdfParseError
from pdf_inspector.models import FontFlags
from pdf_inspector.utils.decorators import requires_dependencies
from pdf_inspector.utils.inputs import PdfInput, read_pdf_input

if TYPE_CHECKING:
    import fitz

logger = logging.getLogger(__name__)

_XREF_RE = re.compile(r"(\d+)\s+\d+\s+R")
_BOLD_NAME_RE = re.compile(r"bold|black|heavy|semibold|demi", re.IGNORECASE)
_ITALIC_NAME_RE = re.compile(r"italic|oblique", re.IGNORECASE)


def strip_subset_prefix(base_font: str) -> str:
    """Remove the ``ABCDEF+`` subset tag from an embedded font name."""
    if len(base_font) > 7 and base_font[6] == "+" and base_font[:6].isupper():
        return base_font[7:]
    return base_font


def derive_font_flags(base_font: str, descriptor_flags: int = 0) -> FontFlags:
    """Combine descriptor flag bits with font-name heuristics.

    Parameters
    ----------
    base_font : str
        Base font name, with or without subset prefix
    descriptor_flags : int, default 0
        ``/Flags`` value of the font descriptor

    Returns
    -------
    FontFlags
        Bold, italic and monospace hints

    """
    name = strip_subset_prefix(base_font)
    lowered = name.lower()
    return FontFlags(
        is_bold=bool(descriptor_flags & FONT_FLAG_FORCE_BOLD) or bool(_BOLD_NAME_RE.search(name)),
        is_italic=bool(descriptor_flags & FONT_FLAG_ITALIC) or bool(_ITALIC_NAME_RE.search(name)),
        is_monospace=bool(descriptor_flags & FONT_FLAG_FIXED_PITCH)
        or any(pattern in lowered for pattern in MONOSPACE_FONT_PATTERNS),
    )


@dataclass(frozen=True)
class FontInfo:
    """Per-font metadata needed for decoding and style detection.

    Parameters
    ----------
    resource_name : str
        Name used by ``Tf`` in the content stream (``F1``, ``helv``)
    base_font : str
        ``/BaseFont`` value with the subset prefix removed
    subtype : str
        Font subtype (``Type1``, ``TrueType``, ``Type0``)
    encoding : str
        Declared encoding name, empty when none
    descriptor_flags : int
        ``/Flags`` from the font descriptor, 0 when absent
    to_unicode : bytes or None
        Raw ToUnicode CMap program
    xref : int
        Object number, 0 for fonts not backed by an object (tests)

    """

    resource_name: str
    base_font: str = ""
    subtype: str = ""
    encoding: str = ""
    descriptor_flags: int = 0
    to_unicode: bytes | None = None
    xref: int = 0

    @property
    def flags(self) -> FontFlags:
        return derive_font_flags(self.base_font, self.descriptor_flags)

    @property
    def cache_key(self) -> tuple[int, str]:
        return (self.xref, self.resource_name if self.xref == 0 else "")


@runtime_checkable
class DocumentBackend(Protocol):
    """Facts the core consumes from a PDF container."""

    @property
    def page_count(self) -> int: ...

    def is_encrypted(self) -> bool: ...

    def document_title(self) -> str | None: ...

    def page_content_bytes(self, index: int) -> bytes: ...

    def page_fonts(self, index: int) -> dict[str, FontInfo]: ...

    def page_size(self, index: int) -> tuple[float, float]: ...

    def close(self) -> None: ...


class PyMuPDFBackend:
    """:class:`DocumentBackend` implementation over a ``fitz.Document``.

    Parameters
    ----------
    document : fitz.Document
        Open PyMuPDF document; closed by :meth:`close`
    name : str, optional
        Path or label used in log and error messages

    """

    def __init__(self, document: "fitz.Document", name: str | None = None):
        self._doc = document
        self.name = name
        self._font_cache: dict[int, FontInfo] = {}

    def __enter__(self) -> "PyMuPDFBackend":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def is_encrypted(self) -> bool:
        return bool(self._doc.needs_pass or self._doc.is_encrypted)

    def document_title(self) -> str | None:
        metadata = self._doc.metadata or {}
        title = (metadata.get("title") or "").strip()
        return title or None

    def page_content_bytes(self, index: int) -> bytes:
        return self._doc[index].read_contents()

    def page_size(self, index: int) -> tuple[float, float]:
        rect = self._doc[index].rect
        return float(rect.width), float(rect.height)

    def page_fonts(self, index: int) -> dict[str, FontInfo]:
        """Return fonts used by page ``index`` keyed by resource name."""
        fonts: dict[str, FontInfo] = {}
        for entry in self._doc[index].get_fonts(full=True):
            xref, _ext, subtype, basefont, resource_name, encoding = entry[:6]
            if not resource_name:
                continue
            info = self._font_cache.get(xref)
            if info is None or info.resource_name != resource_name:
                info = self._load_font(xref, resource_name, subtype, basefont, encoding)
                self._font_cache[xref] = info
            fonts[resource_name] = info
        return fonts

    def _load_font(self, xref: int, resource_name: str, subtype: str, basefont: str, encoding: str) -> FontInfo:
        return FontInfo(
            resource_name=resource_name,
            base_font=strip_subset_prefix(basefont or ""),
            subtype=subtype or "",
            encoding=encoding or "",
            descriptor_flags=self._descriptor_flags(xref),
            to_unicode=self._to_unicode(xref),
            xref=xref,
        )

    def _ref(self, xref: int, key: str) -> int | None:
        kind, value = self._doc.xref_get_key(xref, key)
        if kind == "xref":
            match = _XREF_RE.search(value)
            return int(match.group(1)) if match else None
        return None

    def _descriptor_flags(self, xref: int) -> int:
        if xref <= 0:
            return 0
        descriptor = self._ref(xref, "FontDescriptor")
        if descriptor is None:
            # Type0 fonts keep the descriptor on the descendant CIDFont
            descendant = self._descendant_font(xref)
            if descendant is not None:
                descriptor = self._ref(descendant, "FontDescriptor")
        if descriptor is None:
            return 0
        kind, value = self._doc.xref_get_key(descriptor, "Flags")
        return int(value) if kind == "int" else 0

    def _descendant_font(self, xref: int) -> int | None:
        kind, value = self._doc.xref_get_key(xref, "DescendantFonts")
        if kind == "xref":
            array_xref = self._ref(xref, "DescendantFonts")
            value = self._doc.xref_object(array_xref) if array_xref is not None else ""
        elif kind != "array":
            return None
        match = _XREF_RE.search(value)
        return int(match.group(1)) if match else None

    def _to_unicode(self, xref: int) -> bytes | None:
        if xref <= 0:
            return None
        stream_xref = self._ref(xref, "ToUnicode")
        if stream_xref is None:
            return None
        return self._doc.xref_stream(stream_xref)

    def close(self) -> None:
        self._doc.close()


@requires_dependencies("PDF backend", DEPS_PDF)
def open_backend(source: PdfInput) -> PyMuPDFBackend:
    """Open ``source`` with PyMuPDF.

    Parameters
    ----------
    source : PdfInput
        Path, bytes, or binary file object

    Returns
    -------
    PyMuPDFBackend
        Backend owning the open document

    Raises
    ------
    PdfIoError
        If the file cannot be read
    PdfParseError
        If PyMuPDF cannot parse the data as a PDF
    PdfEncryptedError
        If the document is encrypted

    """
    import fitz

    path, buffer = read_pdf_input(source)
    label = path if path is not None else "<memory>"
    try:
        if path is not None:
            doc = fitz.open(filename=path, filetype="pdf")
        else:
            doc = fitz.open(stream=buffer, filetype="pdf")
    except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
        raise PdfIoError(f"Could not read PDF: {e}", file_path=path, original_error=e) from e
    except Exception as e:
        raise PdfParseError(f"Failed to open PDF document: {e!r}", file_path=path, original_error=e) from e

    if not doc.is_pdf:
        doc.close()
        raise PdfParseError(f"Not a PDF document: {label}", file_path=path)

    backend = PyMuPDFBackend(doc, name=label)
    if backend.is_encrypted():
        backend.close()
        raise PdfEncryptedError(file_path=path)

    logger.debug("Opened %s (%d pages)", label, backend.page_count)
    return backend

