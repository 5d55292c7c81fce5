#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/utils/decorators.py
"""Utility decorators for the pdf-inspector pipeline.

This module provides the dependency guard used by every entry point that
touches the PDF backend, plus a DEBUG-level timing helper.

"""

from __future__ import annotations

import importlib
import logging
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, List, Tuple

from pdf_inspector.exceptions import DependencyError
from pdf_inspector.utils.packages import check_requirement


def requires_dependencies(component_name: str, packages: List[Tuple[str, str]]) -> Callable:
    """Import each module and check its distribution before calling the function.

    Parameters
    ----------
    component_name : str
        Name shown in the error message (e.g., "PDF backend").
    packages : list of tuple
        ``(import_name, requirement)`` pairs, e.g. ``("fitz", "pymupdf>=1.26.4")``.
        The requirement names the distribution on the package index.

    Returns
    -------
    Callable
        Decorated function that checks dependencies before execution

    Raises
    ------
    DependencyError
        If a module cannot be imported or its installed version is outside
        the requirement.

    Examples
    --------
        >>> @requires_dependencies("PDF backend", [("fitz", "pymupdf>=1.26.4")])
        ... def open_document(path):
        ...     import fitz
        ...     return fitz.open(path)

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            missing = []
            version_mismatches = []
            original_error = None

            for import_name, requirement in packages:
                status = check_requirement(requirement)
                spec = str(status.specifier)
                try:
                    importlib.import_module(import_name)
                except ImportError as e:
                    missing.append((status.name, spec))
                    if original_error is None:
                        original_error = e
                    continue
                # Modules importable without distribution metadata are accepted
                if status.installed is not None and not status.satisfied:
                    version_mismatches.append((status.name, spec, status.installed))

            if missing or version_mismatches:
                raise DependencyError(
                    component_name,
                    missing_packages=missing,
                    version_mismatches=version_mismatches,
                    original_import_error=original_error,
                ) from original_error

            return func(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Log the elapsed time of a block at DEBUG level.

    Parameters
    ----------
    logger : logging.Logger
        Logger instance to use for DEBUG messages
    operation : str
        Description of the operation being timed (e.g., "Layout reconstruction")

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.3f}s")
    else:
        yield
