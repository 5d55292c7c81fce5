#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/__init__.py
"""PDF parsing: backend access, content-stream extraction, layout and structure.

The public entry points are re-exported here; the ``_pdf_*`` modules hold
the individual pipeline stages.
"""

from pdf_inspector.parsers._pdf_backend import DocumentBackend, FontInfo, PyMuPDFBackend, open_backend
from pdf_inspector.parsers._pdf_layout import LayoutReconstructor
from pdf_inspector.parsers._pdf_structure import StructureAnalyzer, analyze
from pdf_inspector.parsers.pdf import ContentStreamWalker, ExtractionResult, PdfTextExtractor

__all__ = [
    "ContentStreamWalker",
    "DocumentBackend",
    "ExtractionResult",
    "FontInfo",
    "LayoutReconstructor",
    "PdfTextExtractor",
    "PyMuPDFBackend",
    "StructureAnalyzer",
    "analyze",
    "open_backend",
]
