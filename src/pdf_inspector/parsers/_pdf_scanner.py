#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_scanner.py
"""Byte-level operator scanning for PDF content streams.

The scanner never builds operands or an AST; it only walks the raw bytes far
enough to skip strings, comments and inline image data, so that operator names
appearing inside text are not counted. It never raises on malformed input: a
truncated string or comment simply ends the scan.

Two consumers share the walk:

- :func:`scan_operators` counts text-showing and XObject operators for the
  classifier.
- :func:`iter_raw_show_strings` recovers the string operands of show operators
  when the full tokenizer rejects a stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple

from pdf_inspector.constants import IMAGE_OPERATORS, TEXT_SHOW_OPERATORS

WHITESPACE = frozenset(b"\x00\t\n\x0c\r ")
DELIMITERS = frozenset(b"()<>[]{}/%")
HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")

_TEXT_OPS = frozenset(TEXT_SHOW_OPERATORS)
_IMAGE_OPS = frozenset(IMAGE_OPERATORS)


class OperatorCounts(NamedTuple):
    """Number of text-showing (``Tj``, ``TJ``, ``'``, ``"``) and ``Do`` operators."""

    text_ops: int = 0
    image_ops: int = 0

    @property
    def total(self) -> int:
        return self.text_ops + self.image_ops


@dataclass(frozen=True)
class RawToken:
    """Token yielded by the lenient walk.

    ``kind`` is ``"op"`` (operator keyword or number), ``"string"`` (literal or
    hex string, value already unescaped), ``"name"`` or ``"delim"``.
    """

    kind: str
    value: bytes


def _skip_literal_string(data: bytes, start: int) -> tuple[int, bytes]:
    """Skip a ``(...)`` string starting at ``start``; return (end, unescaped bytes)."""
    n = len(data)
    i = start + 1
    depth = 1
    out = bytearray()
    while i < n:
        c = data[i]
        if c == 0x5C:  # backslash
            i += 1
            if i >= n:
                break
            esc = data[i]
            if esc in b"01234567":
                j = i
                while j < n and j < i + 3 and data[j] in b"01234567":
                    j += 1
                out.append(int(data[i:j], 8) & 0xFF)
                i = j
                continue
            if esc in (0x0D, 0x0A):
                # line continuation
                if esc == 0x0D and i + 1 < n and data[i + 1] == 0x0A:
                    i += 1
            else:
                out.append({0x6E: 0x0A, 0x72: 0x0D, 0x74: 0x09, 0x62: 0x08, 0x66: 0x0C}.get(esc, esc))
            i += 1
            continue
        if c == 0x28:
            depth += 1
        elif c == 0x29:
            depth -= 1
            if depth == 0:
                return i + 1, bytes(out)
        out.append(c)
        i += 1
    return n, bytes(out)


def _skip_hex_string(data: bytes, start: int) -> tuple[int, bytes]:
    """Skip a ``<...>`` string starting at ``start``; invalid digits are ignored."""
    end = data.find(b">", start + 1)
    if end < 0:
        end = len(data)
    digits = bytes(b for b in data[start + 1 : end] if b in HEX_DIGITS)
    if len(digits) % 2:
        digits += b"0"
    return min(end + 1, len(data)), bytes.fromhex(digits.decode("ascii"))


def _skip_inline_image(data: bytes, start: int) -> int:
    """Return the offset just past the ``EI`` that ends inline image data."""
    n = len(data)
    i = start
    while True:
        i = data.find(b"EI", i)
        if i < 0:
            return n
        before_ok = i == 0 or data[i - 1] in WHITESPACE
        after_ok = i + 2 >= n or data[i + 2] in WHITESPACE or data[i + 2] in DELIMITERS
        if before_ok and after_ok:
            return i + 2
        i += 2


def iter_raw_tokens(data: bytes) -> Iterator[RawToken]:
    """Walk ``data`` and yield operator, string, and name tokens.

    Numbers are reported as ``"op"`` tokens; callers compare against the
    operator names they care about.
    """
    n = len(data)
    i = 0
    while i < n:
        c = data[i]
        if c in WHITESPACE:
            i += 1
        elif c == 0x25:  # %
            while i < n and data[i] not in (0x0A, 0x0D):
                i += 1
        elif c == 0x28:  # (
            i, value = _skip_literal_string(data, i)
            yield RawToken("string", value)
        elif c == 0x3C:  # <
            if i + 1 < n and data[i + 1] == 0x3C:
                yield RawToken("delim", b"<<")
                i += 2
            else:
                i, value = _skip_hex_string(data, i)
                yield RawToken("string", value)
        elif c == 0x3E:  # >
            if i + 1 < n and data[i + 1] == 0x3E:
                yield RawToken("delim", b">>")
                i += 2
            else:
                i += 1
        elif c == 0x2F:  # /
            j = i + 1
            while j < n and data[j] not in WHITESPACE and data[j] not in DELIMITERS:
                j += 1
            yield RawToken("name", data[i + 1 : j])
            i = j
        elif c in DELIMITERS:
            yield RawToken("delim", bytes([c]))
            i += 1
        else:
            j = i
            while j < n and data[j] not in WHITESPACE and data[j] not in DELIMITERS:
                j += 1
            token = data[i:j]
            i = j
            if token == b"ID":
                i = _skip_inline_image(data, i + 1)
                continue
            yield RawToken("op", token)


def scan_operators(content: bytes) -> OperatorCounts:
    """Count text-showing and image operators in a content stream.

    Parameters
    ----------
    content : bytes
        Decompressed content stream

    Returns
    -------
    OperatorCounts
        Counts of ``Tj``/``TJ``/``'``/``"`` and ``Do`` operators. Operators are
        matched only as whole tokens, never inside strings or comments.

    """
    text_ops = 0
    image_ops = 0
    if not content:
        return OperatorCounts()
    for token in iter_raw_tokens(content):
        if token.kind != "op":
            continue
        if token.value in _TEXT_OPS:
            text_ops += 1
        elif token.value in _IMAGE_OPS:
            image_ops += 1
    return OperatorCounts(text_ops, image_ops)


def iter_raw_show_strings(content: bytes) -> Iterator[tuple[str | None, float, list[bytes]]]:
    """Yield ``(font_resource, font_size, strings)`` for each show operator.

    Used as a fallback when the tokenizer rejects a stream. The current font is
    tracked loosely from ``/Name size Tf`` sequences; everything else about the
    graphics state is ignored. The size is 0.0 until a ``Tf`` is seen.
    """
    font: str | None = None
    size = 0.0
    last_name: bytes | None = None
    last_number: bytes | None = None
    pending: list[bytes] = []
    for token in iter_raw_tokens(content):
        if token.kind == "string":
            pending.append(token.value)
        elif token.kind == "name":
            last_name = token.value
        elif token.kind == "op":
            if _is_number(token.value):
                last_number = token.value
            elif token.value == b"Tf" and last_name is not None:
                font = last_name.decode("latin-1")
                if last_number is not None:
                    size = abs(float(last_number))
                pending = []
            elif token.value in _TEXT_OPS:
                if pending:
                    yield font, size, pending
                pending = []
            else:
                pending = []


def _is_number(token: bytes) -> bool:
    stripped = token.lstrip(b"+-")
    return bool(stripped) and stripped.replace(b".", b"", 1).isdigit()
