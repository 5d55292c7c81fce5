#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_lexer.py
"""Content-stream tokenizer.

Turns decompressed content bytes into ``(operands, operator)`` pairs, the
same shape as ``pypdf``'s ``ContentStream.operations``. Operands are Python
values:

- numbers as ``int`` / ``float``
- literal and hex strings as ``bytes``
- names as :class:`Name`
- arrays as ``list`` and dictionaries as ``dict``
- ``true``/``false``/``null`` as ``bool`` / ``None``

Inline image data (``BI ... ID ... EI``) is skipped. Malformed input raises
:class:`~pdf_inspector.exceptions.ContentStreamError`; the extractor catches it
and falls back to a lenient raw-byte scan.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from pdf_inspector.exceptions import ContentStreamError
from pdf_inspector.parsers._pdf_scanner import DELIMITERS, HEX_DIGITS, WHITESPACE

_NUMBER_RE = re.compile(rb"^[+-]?(?:\d+\.?\d*|\.\d+)$")
_NAME_ESCAPE_RE = re.compile(rb"#([0-9A-Fa-f]{2})")
_ESCAPES = {ord("n"): 0x0A, ord("r"): 0x0D, ord("t"): 0x09, ord("b"): 0x08, ord("f"): 0x0C}
_KEYWORD_VALUES = {b"true": True, b"false": False, b"null": None}

Operation = tuple[list[Any], bytes]


class Name(str):
    """A PDF name object such as ``/F1``; compares equal to the bare string."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"/{str(self)}"


class _Lexer:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.n = len(data)

    def error(self, message: str) -> ContentStreamError:
        return ContentStreamError(f"{message} at offset {self.pos}", offset=self.pos)

    def skip_whitespace(self) -> None:
        data, n = self.data, self.n
        while self.pos < n:
            c = data[self.pos]
            if c in WHITESPACE:
                self.pos += 1
            elif c == 0x25:  # % comment
                while self.pos < n and data[self.pos] not in (0x0A, 0x0D):
                    self.pos += 1
            else:
                break

    def read_literal_string(self) -> bytes:
        data, n = self.data, self.n
        self.pos += 1
        depth = 1
        out = bytearray()
        while self.pos < n:
            c = data[self.pos]
            if c == 0x5C:
                self.pos += 1
                if self.pos >= n:
                    break
                esc = data[self.pos]
                if 0x30 <= esc <= 0x37:
                    end = self.pos
                    while end < n and end < self.pos + 3 and 0x30 <= data[end] <= 0x37:
                        end += 1
                    out.append(int(data[self.pos : end], 8) & 0xFF)
                    self.pos = end
                    continue
                if esc == 0x0D:
                    if self.pos + 1 < n and data[self.pos + 1] == 0x0A:
                        self.pos += 1
                elif esc != 0x0A:
                    out.append(_ESCAPES.get(esc, esc))
                self.pos += 1
                continue
            if c == 0x28:
                depth += 1
            elif c == 0x29:
                depth -= 1
                if depth == 0:
                    self.pos += 1
                    return bytes(out)
            out.append(c)
            self.pos += 1
        raise self.error("Unterminated literal string")

    def read_hex_string(self) -> bytes:
        end = self.data.find(b">", self.pos + 1)
        if end < 0:
            raise self.error("Unterminated hex string")
        raw = bytes(b for b in self.data[self.pos + 1 : end] if b not in WHITESPACE)
        if any(b not in HEX_DIGITS for b in raw):
            raise self.error("Invalid character in hex string")
        if len(raw) % 2:
            raw += b"0"
        self.pos = end + 1
        return bytes.fromhex(raw.decode("ascii"))

    def read_regular(self) -> bytes:
        data, n = self.data, self.n
        start = self.pos
        while self.pos < n and data[self.pos] not in WHITESPACE and data[self.pos] not in DELIMITERS:
            self.pos += 1
        return data[start : self.pos]

    def read_name(self) -> Name:
        self.pos += 1
        raw = self.read_regular()
        raw = _NAME_ESCAPE_RE.sub(lambda m: bytes([int(m.group(1), 16)]), raw)
        return Name(raw.decode("latin-1"))

    def skip_inline_image(self) -> None:
        data, n = self.data, self.n
        i = self.pos + 1
        while True:
            i = data.find(b"EI", i)
            if i < 0:
                raise self.error("Unterminated inline image")
            before_ok = data[i - 1] in WHITESPACE
            after_ok = i + 2 >= n or data[i + 2] in WHITESPACE or data[i + 2] in DELIMITERS
            if before_ok and after_ok:
                self.pos = i + 2
                return
            i += 2

    def read_object(self) -> tuple[str, Any]:
        """Read one token; return ``("value", obj)`` or ``("op", keyword)``."""
        self.skip_whitespace()
        if self.pos >= self.n:
            return "eof", None
        c = self.data[self.pos]
        if c == 0x28:
            return "value", self.read_literal_string()
        if c == 0x3C:
            if self.pos + 1 < self.n and self.data[self.pos + 1] == 0x3C:
                self.pos += 2
                return "value", self.read_dict()
            return "value", self.read_hex_string()
        if c == 0x2F:
            return "value", self.read_name()
        if c == 0x5B:
            self.pos += 1
            return "value", self.read_array()
        if c in (0x5D, 0x3E, 0x29, 0x7B, 0x7D):
            raise self.error(f"Unexpected delimiter {chr(c)!r}")
        token = self.read_regular()
        if _NUMBER_RE.match(token):
            return "value", float(token) if b"." in token else int(token)
        if token in _KEYWORD_VALUES:
            return "value", _KEYWORD_VALUES[token]
        return "op", token

    def read_array(self) -> list[Any]:
        items: list[Any] = []
        while True:
            self.skip_whitespace()
            if self.pos >= self.n:
                raise self.error("Unterminated array")
            if self.data[self.pos] == 0x5D:
                self.pos += 1
                return items
            kind, value = self.read_object()
            if kind != "value":
                raise self.error(f"Operator {value!r} inside array")
            items.append(value)

    def read_dict(self) -> dict[str, Any]:
        entries: list[Any] = []
        while True:
            self.skip_whitespace()
            if self.pos >= self.n:
                raise self.error("Unterminated dictionary")
            if self.data.startswith(b">>", self.pos):
                self.pos += 2
                break
            kind, value = self.read_object()
            if kind != "value":
                raise self.error(f"Operator {value!r} inside dictionary")
            entries.append(value)
        return {str(k): v for k, v in zip(entries[0::2], entries[1::2])}


def tokenize(content: bytes) -> Iterator[Operation]:
    """Yield ``(operands, operator)`` pairs from a content stream.

    Parameters
    ----------
    content : bytes
        Decompressed content stream

    Yields
    ------
    tuple[list, bytes]
        Operands in stream order and the operator keyword

    Raises
    ------
    ContentStreamError
        On unterminated strings, arrays or dictionaries, stray closing
        delimiters, and invalid hex strings

    """
    lexer = _Lexer(content)
    operands: list[Any] = []
    while True:
        kind, value = lexer.read_object()
        if kind == "eof":
            return
        if kind == "value":
            operands.append(value)
            continue
        if value == b"BI":
            operands = []
            continue
        if value == b"ID":
            lexer.skip_inline_image()
            operands = []
            continue
        yield operands, value
        operands = []
