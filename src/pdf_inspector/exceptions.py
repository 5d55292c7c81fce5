#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the pdf-inspector library.

This module defines the exception classes raised while classifying and
converting PDF documents. Container-level failures abort the call and surface
as a ``PdfError`` subclass; page-level failures are recovered locally and
reported as warnings on the result instead.

Exception Hierarchy
-------------------
- PdfInspectorError (base exception)

  - ValidationError (parameter/option validation)

  - PdfError (document-level failures, carries a ``kind``)
    - PdfIoError (file cannot be read)
    - PdfParseError (backend cannot parse the container)
    - PdfEncryptedError (document is encrypted)
    - InvalidStructureError (structurally invalid document)

  - ContentStreamError (malformed content stream, recovered per page)

  - DependencyError (missing/incompatible packages)

"""

from __future__ import annotations

from typing import Any


class PdfInspectorError(Exception):
    """Base exception class for all pdf-inspector errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(PdfInspectorError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class PdfError(PdfInspectorError):
    """Document-level failure while opening or reading a PDF.

    Parameters
    ----------
    message : str
        Description of the failure
    kind : str
        One of ``"io"``, ``"parse"``, ``"encrypted"``, ``"invalid_structure"``
    file_path : str, optional
        Path of the offending document when known
    original_error : Exception, optional
        The original exception that caused this error

    """

    kind: str = "parse"

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        file_path: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the error with its kind and optional path."""
        super().__init__(message, original_error=original_error)
        if kind is not None:
            self.kind = kind
        self.file_path = file_path

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-serializable description of the error."""
        return {"error": self.message, "kind": self.kind}


class PdfIoError(PdfError):
    """Exception raised when the document cannot be read from disk or stream."""

    kind = "io"


class PdfParseError(PdfError):
    """Exception raised when the backend cannot parse the PDF container."""

    kind = "parse"


class PdfEncryptedError(PdfError):
    """Exception raised for encrypted documents.

    Decryption is not supported; callers must supply an unencrypted copy.
    """

    kind = "encrypted"

    def __init__(self, file_path: str | None = None, message: str | None = None):
        """Initialize with an optional path and custom message."""
        if message is None:
            message = "PDF is encrypted"
            if file_path:
                message = f"PDF is encrypted: {file_path}"
        super().__init__(message, file_path=file_path)


class InvalidStructureError(PdfError):
    """Exception raised when the document has no usable page tree."""

    kind = "invalid_structure"


class ContentStreamError(PdfInspectorError):
    """Exception raised by the content-stream tokenizer on malformed input.

    The extractor catches this per page and falls back to a raw-byte scan.

    Parameters
    ----------
    message : str
        Description of the problem
    offset : int, optional
        Byte offset in the stream where tokenizing failed

    """

    def __init__(self, message: str, offset: int | None = None):
        """Initialize with the failing byte offset."""
        super().__init__(message)
        self.offset = offset


class DependencyError(PdfInspectorError):
    """Exception raised when required dependencies are not available.

    Parameters
    ----------
    converter_name : str
        Name of the component requiring dependencies
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        List of (package_name, required_version, installed_version) tuples
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_import_error : ImportError, optional
        The first ImportError encountered

    """

    def __init__(
        self,
        converter_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        if message is None:
            message_parts = []
            if missing_packages:
                pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
                message_parts.append(f"{converter_name} requires the following packages: {pkg_list}")
            if version_mismatches:
                details = ", ".join(
                    f"'{name}' (requires {required}, but {installed} is installed)"
                    for name, required, installed in version_mismatches
                )
                message_parts.append(f"{converter_name} has version mismatches: {details}")
            message = "\n".join(message_parts)

            all_packages = missing_packages + [(name, req) for name, req, _ in version_mismatches]
            if all_packages:
                packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in all_packages)
                message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message, original_error=original_import_error)
        self.converter_name = converter_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches


__all__ = [
    "PdfInspectorError",
    "ValidationError",
    "PdfError",
    "PdfIoError",
    "PdfParseError",
    "PdfEncryptedError",
    "InvalidStructureError",
    "ContentStreamError",
    "DependencyError",
]
