#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/cli/detect.py
"""``detect-pdf``: classify a PDF as text-based, scanned, image-based or mixed."""

from __future__ import annotations

import argparse
import sys

from pdf_inspector.api import detect_pdf_type
from pdf_inspector.cli import add_common_arguments, handle_error, read_source, setup_logging_level
from pdf_inspector.cli.output import (
    format_detection_plain,
    render_detection_rich,
    should_use_rich_output,
    to_json,
    write_output,
)
from pdf_inspector.constants import EXIT_SUCCESS
from pdf_inspector.exceptions import PdfInspectorError
from pdf_inspector.options.detection import DetectionConfig


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="detect-pdf",
        description="Detect whether a PDF carries extractable text or needs OCR.",
    )
    add_common_arguments(parser)
    parser.add_argument(
        "--sample",
        choices=["even", "first"],
        default="even",
        help="Page sampling strategy: first, last and evenly spaced pages, or the first N (default: even)",
    )
    return parser


def main(args: list[str] | None = None) -> int:
    """Run the ``detect-pdf`` tool.

    Parameters
    ----------
    args : list of str, optional
        Command-line arguments; ``sys.argv[1:]`` when omitted

    Returns
    -------
    int
        0 on success, 1 when the document cannot be classified

    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    setup_logging_level(parsed_args)

    try:
        overrides: dict[str, object] = {"sample_strategy": parsed_args.sample}
        if parsed_args.max_pages is not None:
            overrides["max_pages_to_sample"] = parsed_args.max_pages
        config = DetectionConfig().create_updated(**overrides)
        result = detect_pdf_type(read_source(parsed_args), config)
    except PdfInspectorError as e:
        return handle_error(e, parsed_args)

    source = "<stdin>" if parsed_args.input == "-" else parsed_args.input
    if parsed_args.json:
        data = {"file": source, **result.to_dict()}
        write_output(to_json(data), parsed_args.output)
    elif should_use_rich_output(parsed_args):
        render_detection_rich(source, result)
    else:
        write_output(format_detection_plain(source, result), parsed_args.output)
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
