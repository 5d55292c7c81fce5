"""Utilities for uniform input handling.

Every public entry point accepts a filesystem path, raw bytes, or a binary
file object. This module normalizes those into either a path string or an
in-memory buffer the backend can open.

Functions
---------
- is_path_like: Check if input is path-like (string or Path object)
- is_file_like: Check if input is a file-like object
- read_pdf_input: Normalize supported inputs into a path or bytes
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/utils/inputs.py
import os
from pathlib import Path
from typing import IO, Any, Union

from pdf_inspector.exceptions import PdfIoError, ValidationError

PathLike = Union[str, Path]
PdfInput = Union[PathLike, bytes, bytearray, memoryview, IO[bytes]]


def is_path_like(obj: Any) -> bool:
    """Check if an object is path-like (string or pathlib.Path).

    Examples
    --------
    >>> is_path_like("document.pdf")
    True
    >>> is_path_like(b"%PDF-1.7")
    False

    """
    return isinstance(obj, (str, Path))


def is_file_like(obj: Any) -> bool:
    """Check if an object is file-like (has a callable read method)."""
    return hasattr(obj, "read") and callable(obj.read)


def read_pdf_input(input_data: PdfInput) -> tuple[str | None, bytes | None]:
    """Validate an input and return ``(path, buffer)`` with exactly one set.

    Parameters
    ----------
    input_data : PdfInput
        Path, raw bytes, or binary file object

    Returns
    -------
    tuple[str | None, bytes | None]
        The filesystem path for path inputs, otherwise the document bytes

    Raises
    ------
    PdfIoError
        If the path does not exist, is not a file, or cannot be read
    ValidationError
        If the input type is not supported or a file object is opened in text mode

    """
    if is_path_like(input_data):
        path_str = os.fspath(input_data)
        if not os.path.exists(path_str):
            raise PdfIoError(f"File not found: {path_str}", file_path=path_str)
        if not os.path.isfile(path_str):
            raise PdfIoError(f"Path is not a file: {path_str}", file_path=path_str)
        if not os.access(path_str, os.R_OK):
            raise PdfIoError(f"File is not readable: {path_str}", file_path=path_str)
        return path_str, None

    if isinstance(input_data, (bytes, bytearray, memoryview)):
        return None, bytes(input_data)

    if is_file_like(input_data):
        mode = getattr(input_data, "mode", "rb")
        if isinstance(mode, str) and "b" not in mode:
            raise ValidationError(
                f"File must be opened in binary mode, got mode: {mode}",
                parameter_name="input_data",
                parameter_value=input_data,
            )
        try:
            data = input_data.read()
        except OSError as e:
            raise PdfIoError(f"Could not read input stream: {e}", original_error=e) from e
        if not isinstance(data, (bytes, bytearray)):
            raise ValidationError(
                f"File object returned {type(data).__name__}, expected bytes",
                parameter_name="input_data",
                parameter_value=input_data,
            )
        return None, bytes(data)

    raise ValidationError(
        f"Unsupported input type: {type(input_data).__name__}. Supported types: path-like, bytes, binary file-like",
        parameter_name="input_data",
        parameter_value=input_data,
    )
