#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/cli/convert.py
"""``pdf2md``: convert a text-based PDF to Markdown.

Scanned and image-based documents are not converted; the tool reports the
detected type and exits with status 2 so that callers can route the file to
OCR.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pdf_inspector.api import process_pdf
from pdf_inspector.cli import add_common_arguments, handle_error, read_source, setup_logging_level
from pdf_inspector.cli.output import (
    render_conversion_summary_rich,
    should_use_rich_output,
    to_json,
    write_output,
)
from pdf_inspector.constants import EXIT_OCR_REQUIRED, EXIT_SUCCESS
from pdf_inspector.exceptions import PdfInspectorError
from pdf_inspector.options.detection import DetectionConfig
from pdf_inspector.options.markdown import MarkdownOptions

logger = logging.getLogger(__name__)

# (flag, MarkdownOptions field, help)
_DISABLE_FLAGS = (
    ("--no-headers", "detect_headers", "Do not detect headers"),
    ("--no-lists", "detect_lists", "Do not detect list items"),
    ("--no-code", "detect_code", "Do not detect code blocks"),
    ("--no-tables", "detect_tables", "Do not detect tables"),
    ("--no-footnotes", "detect_footnotes", "Do not separate footnotes"),
    ("--no-columns", "detect_columns", "Read multi-column pages top to bottom"),
    ("--keep-page-numbers", "remove_page_numbers", "Keep running page numbers"),
    ("--no-urls", "format_urls", "Leave bare URLs as plain text"),
    ("--no-hyphenation-fix", "fix_hyphenation", "Keep words hyphenated across lines"),
    ("--no-drop-caps", "merge_drop_caps", "Do not merge drop caps"),
    ("--no-scripts", "merge_scripts", "Do not merge superscripts and subscripts"),
)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf2md",
        description="Convert a text-based PDF to Markdown. Exits with 2 when the document needs OCR.",
    )
    add_common_arguments(parser)
    parser.add_argument("--raw", action="store_true", help="Output plain reading-order text instead of Markdown")

    structure = parser.add_argument_group("structure detection")
    for flag, field_name, help_text in _DISABLE_FLAGS:
        structure.add_argument(flag, dest=field_name, action="store_false", help=help_text)
    structure.add_argument(
        "--base-font-size",
        type=float,
        default=None,
        metavar="PT",
        help="Body font size used for header ratios (default: most common size)",
    )
    structure.add_argument(
        "--page-break-marker",
        default="---",
        metavar="TEXT",
        help="Line emitted between pages (default: ---)",
    )
    structure.add_argument("--no-page-breaks", action="store_true", help="Do not emit page-break lines")
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        metavar="N",
        help="Threads used for per-page processing (default: 1)",
    )
    return parser


def build_options(parsed_args: argparse.Namespace) -> MarkdownOptions:
    """Translate parsed arguments into :class:`MarkdownOptions`."""
    overrides: dict[str, object] = {
        field_name: getattr(parsed_args, field_name) for _, field_name, _ in _DISABLE_FLAGS
    }
    overrides["base_font_size"] = parsed_args.base_font_size
    overrides["page_break_marker"] = None if parsed_args.no_page_breaks else parsed_args.page_break_marker
    overrides["max_workers"] = parsed_args.workers
    return MarkdownOptions().create_updated(**overrides)


def main(args: list[str] | None = None) -> int:
    """Run the ``pdf2md`` tool.

    Parameters
    ----------
    args : list of str, optional
        Command-line arguments; ``sys.argv[1:]`` when omitted

    Returns
    -------
    int
        0 on success, 1 on error, 2 when the document needs OCR

    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    setup_logging_level(parsed_args)

    try:
        options = build_options(parsed_args)
        config = DetectionConfig()
        if parsed_args.max_pages is not None:
            config = config.create_updated(max_pages_to_sample=parsed_args.max_pages)
        result = process_pdf(read_source(parsed_args), options, config)
    except PdfInspectorError as e:
        return handle_error(e, parsed_args)

    source = "<stdin>" if parsed_args.input == "-" else parsed_args.input
    ocr_required = result.markdown is None

    if parsed_args.json:
        data = {"file": source, **result.to_dict()}
        write_output(to_json(data), parsed_args.output)
    elif ocr_required:
        print(
            f"OCR required: {source} is {result.pdf_type.value} ({result.page_count} pages); no text extracted",
            file=sys.stderr,
        )
    else:
        text = result.raw_text if parsed_args.raw else result.markdown
        write_output(text or "", parsed_args.output)
        if should_use_rich_output(parsed_args, stream=sys.stderr):
            render_conversion_summary_rich(source, result)

    if ocr_required:
        logger.info("%s needs OCR (%s)", source, result.pdf_type.value)
        return EXIT_OCR_REQUIRED
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
