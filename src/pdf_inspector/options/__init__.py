#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/options/__init__.py
"""Frozen dataclass configuration for the classifier and conversion pipeline."""

from pdf_inspector.options.base import CloneFrozenMixin
from pdf_inspector.options.detection import DetectionConfig
from pdf_inspector.options.layout import LayoutOptions
from pdf_inspector.options.markdown import MarkdownOptions, StructureOptions

__all__ = [
    "CloneFrozenMixin",
    "DetectionConfig",
    "LayoutOptions",
    "MarkdownOptions",
    "StructureOptions",
]
