#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/utils/__init__.py
"""Shared helpers for input handling and dependency checks."""
