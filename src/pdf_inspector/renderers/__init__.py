#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/renderers/__init__.py
"""Output renderers for analyzed blocks."""

from pdf_inspector.renderers.markdown import MarkdownRenderer, render_plain_text

__all__ = ["MarkdownRenderer", "render_plain_text"]
