#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/logging_utils.py
"""Logging setup for the ``detect-pdf`` and ``pdf2md`` tools.

Library code only creates module loggers; handlers are installed here, once
per CLI run, on the root logger. Records always go to stderr because stdout
carries the Markdown or JSON result.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

PLAIN_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s: %(message)s"
TRACE_DATE_FORMAT = "%H:%M:%S"

_installed: list[logging.Handler] = []


def _build_formatter(trace_mode: bool) -> logging.Formatter:
    if trace_mode:
        return logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    return logging.Formatter(PLAIN_FORMAT)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Install the stderr handler and an optional log file on the root logger.

    Parameters
    ----------
    log_level : int or str
        Level number or name (``"warning"``); unknown names fall back to WARNING
    log_file : str, optional
        File that receives the same records, appended to
    trace_mode : bool, default False
        Force DEBUG and prefix records with a timestamp and the logger name

    Returns
    -------
    logging.Logger
        The root logger

    """
    if trace_mode:
        level = logging.DEBUG
    elif isinstance(log_level, int):
        level = log_level
    else:
        level = getattr(logging, log_level.upper(), logging.WARNING)

    root = logging.getLogger()
    root.handlers.clear()
    # Only handlers opened here are closed; others belong to the host process
    while _installed:
        _installed.pop().close()
    root.setLevel(level)

    formatter = _build_formatter(trace_mode)
    targets: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None
    if log_file:
        try:
            targets.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as exc:
            file_error = exc
    for handler in targets:
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed.append(handler)

    if file_error is not None:
        root.warning("Cannot write log file %s: %s", log_file, file_error)
    elif log_file:
        root.info("Logging to file: %s", log_file)
    return root
