"""Utility functions for cli output."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/pdf_inspector/cli/output.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, TextIO

from pdf_inspector.exceptions import DependencyError, PdfError, PdfInspectorError, ValidationError
from pdf_inspector.models import PdfProcessResult, PdfTypeResult


def should_use_rich_output(args: argparse.Namespace, stream: TextIO | None = None) -> bool:
    """Determine if Rich output should be used based on TTY and args.

    Rich output is used for human-readable results written to a terminal,
    unless ``--plain`` is given or the output goes to a file or JSON.
    """
    if getattr(args, "json", False) or getattr(args, "output", None) or getattr(args, "plain", False):
        return False
    stream = stream or sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def write_output(text: str, output_path: str | None) -> None:
    """Write ``text`` to ``output_path``, or to stdout when no path is given."""
    if output_path:
        Path(output_path).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        if text and not text.endswith("\n"):
            sys.stdout.write("\n")


def to_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def format_error(error: PdfInspectorError, json_mode: bool) -> str:
    """Format an error as ``Error [kind]: message`` or as a JSON object."""
    if isinstance(error, PdfError):
        kind = error.kind
    elif isinstance(error, ValidationError):
        kind = "validation"
    elif isinstance(error, DependencyError):
        kind = "dependency"
    else:
        kind = "error"
    if json_mode:
        return to_json({"error": error.message, "kind": kind})
    return f"Error [{kind}]: {error.message}"


def format_detection_plain(source: str, result: PdfTypeResult) -> str:
    """Render a classification result as plain ``key: value`` lines."""
    lines = [
        f"File: {source}",
        f"Type: {result.pdf_type.value}",
        f"Confidence: {result.confidence:.2f}",
        f"Pages: {result.page_count}",
        f"Pages sampled: {result.pages_sampled} ({result.pages_with_text} with text)",
    ]
    if result.title:
        lines.append(f"Title: {result.title}")
    lines.append(f"OCR recommended: {'yes' if result.ocr_recommended else 'no'}")
    lines.append(f"Time: {result.elapsed_ms:.1f} ms")
    return "\n".join(lines) + "\n"


def render_detection_rich(source: str, result: PdfTypeResult) -> None:
    """Render a classification result using rich formatting."""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title="PDF Type Detection", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    type_style = "green" if not result.ocr_recommended else "yellow"
    table.add_row("File", source)
    table.add_row("Type", f"[{type_style}]{result.pdf_type.value}[/{type_style}]")
    table.add_row("Confidence", f"{result.confidence:.2f}")
    table.add_row("Pages", str(result.page_count))
    table.add_row("Pages sampled", f"{result.pages_sampled} ({result.pages_with_text} with text)")
    if result.title:
        table.add_row("Title", result.title)
    table.add_row("OCR recommended", "[yellow]yes[/yellow]" if result.ocr_recommended else "[green]no[/green]")
    table.add_row("Time", f"{result.elapsed_ms:.1f} ms")
    console.print(table)


def render_conversion_summary_rich(source: str, result: PdfProcessResult) -> None:
    """Print a short conversion summary with warnings to stderr."""
    from rich.console import Console

    console = Console(stderr=True)
    console.print(
        f"[cyan]{source}[/cyan]: {result.pdf_type.value}, {result.page_count} pages, "
        f"{result.processing_time_ms:.0f} ms"
    )
    for warning in result.warnings:
        console.print(f"  [yellow][!] {warning}[/yellow]")
