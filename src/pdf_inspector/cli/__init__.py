#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/cli/__init__.py
"""Command-line tools: ``detect-pdf`` and ``pdf2md``.

Both tools share logging flags and error reporting: library errors are
printed as ``Error [kind]: message`` (or a JSON object with ``--json``) and
turn into a non-zero exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pdf_inspector.cli.output import format_error
from pdf_inspector.constants import EXIT_ERROR
from pdf_inspector.exceptions import PdfInspectorError
from pdf_inspector.logging_utils import configure_logging

logger = logging.getLogger(__name__)

__all__ = ["add_common_arguments", "handle_error", "read_source", "setup_logging_level"]


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the input, output, JSON and logging arguments shared by both tools."""
    parser.add_argument("input", help="PDF file to read ('-' reads from stdin)")
    parser.add_argument("-o", "--output", help="Write the result to this file instead of stdout")
    parser.add_argument("--json", action="store_true", help="Emit the result as JSON")
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        metavar="N",
        help="Maximum number of pages sampled by the classifier (default: 5)",
    )
    parser.add_argument("--plain", action="store_true", help="Disable rich terminal formatting")

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default: WARNING)",
    )
    logging_group.add_argument("--log-file", help="Also write log output to this file")
    logging_group.add_argument(
        "--trace", action="store_true", help="Debug logging with timestamps and logger names"
    )


def setup_logging_level(parsed_args: argparse.Namespace) -> None:
    """Set up logging level based on command-line arguments.

    Parameters
    ----------
    parsed_args : argparse.Namespace
        Parsed command-line arguments

    """
    configure_logging(parsed_args.log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def read_source(parsed_args: argparse.Namespace) -> str | bytes:
    """Return the input path, or the bytes of stdin for ``-``."""
    if parsed_args.input == "-":
        return sys.stdin.buffer.read()
    return parsed_args.input


def handle_error(error: PdfInspectorError, parsed_args: argparse.Namespace) -> int:
    """Report ``error`` and return the exit code."""
    logger.debug("Command failed", exc_info=error)
    if parsed_args.json:
        sys.stdout.write(format_error(error, json_mode=True))
    else:
        print(format_error(error, json_mode=False), file=sys.stderr)
    return EXIT_ERROR
