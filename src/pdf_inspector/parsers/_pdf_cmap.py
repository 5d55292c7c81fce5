#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_cmap.py
"""ToUnicode CMap parsing.

Only the parts of a CMap that matter for text extraction are read:
``codespacerange`` (code byte widths), ``bfchar`` and ``bfrange`` (both the
incrementing-base and the array forms). Anything else in the program is
skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pdf_inspector.constants import IDENTITY_ENCODINGS, REPLACEMENT_CHAR
from pdf_inspector.parsers._pdf_scanner import RawToken, iter_raw_tokens

logger = logging.getLogger(__name__)


def _utf16_to_str(data: bytes) -> str:
    if len(data) == 1:
        return chr(data[0])
    if len(data) % 2:
        data = b"\x00" + data
    return data.decode("utf-16-be", errors="replace")


@dataclass(frozen=True)
class CodespaceRange:
    """Valid code range for one code width."""

    low: bytes
    high: bytes

    @property
    def width(self) -> int:
        return len(self.low)

    def matches(self, code: bytes) -> bool:
        if len(code) != self.width:
            return False
        # Each byte is compared independently, as the CMap format requires
        return all(lo <= b <= hi for b, lo, hi in zip(code, self.low, self.high))


@dataclass(frozen=True)
class BfRange:
    """A ``bfrange`` entry mapping ``start..end`` to a base string or a list."""

    start: int
    end: int
    width: int
    base: bytes = b""
    targets: tuple[str, ...] = ()

    def lookup(self, code: int) -> str | None:
        if not self.start <= code <= self.end:
            return None
        offset = code - self.start
        if self.targets:
            return self.targets[offset] if offset < len(self.targets) else None
        if len(self.base) < 2:
            return chr(self.base[0] + offset) if self.base else None
        last = int.from_bytes(self.base[-2:], "big") + offset
        if last > 0xFFFF:
            return None
        return _utf16_to_str(self.base[:-2] + last.to_bytes(2, "big"))


@dataclass
class ToUnicodeCMap:
    """Parsed ToUnicode mapping.

    Attributes
    ----------
    codespaces : list of CodespaceRange
        Declared code ranges; empty when the CMap declares none
    chars : dict
        ``bfchar`` entries keyed by source code bytes
    ranges : list of BfRange
        ``bfrange`` entries in declaration order
    min_code_width : int
        Lower bound for codes outside any codespace range; 2 for Identity fonts

    """

    codespaces: list[CodespaceRange] = field(default_factory=list)
    chars: dict[bytes, str] = field(default_factory=dict)
    ranges: list[BfRange] = field(default_factory=list)
    min_code_width: int = 1

    def __bool__(self) -> bool:
        return bool(self.chars or self.ranges)

    @property
    def default_width(self) -> int:
        """Code width used when no codespace range matches."""
        widths = [len(k) for k in self.chars] + [r.width for r in self.ranges]
        if widths and min(widths) >= 2:
            return 2
        return self.min_code_width

    def code_width(self, data: bytes, pos: int) -> int:
        """Return the byte width of the code starting at ``pos``."""
        for width in sorted({cs.width for cs in self.codespaces}):
            code = data[pos : pos + width]
            if len(code) == width and any(cs.matches(code) for cs in self.codespaces if cs.width == width):
                return width
        return self.default_width

    def lookup(self, code: bytes) -> str | None:
        if code in self.chars:
            return self.chars[code]
        value = int.from_bytes(code, "big")
        for bf_range in self.ranges:
            if bf_range.width == len(code):
                mapped = bf_range.lookup(value)
                if mapped is not None:
                    return mapped
        return None

    def decode(self, data: bytes) -> tuple[str, int]:
        """Decode ``data``; return the text and the number of codes consumed.

        Codes without a mapping decode to U+FFFD.
        """
        out: list[str] = []
        pos = 0
        codes = 0
        n = len(data)
        while pos < n:
            width = min(self.code_width(data, pos), n - pos)
            code = data[pos : pos + width]
            mapped = self.lookup(code)
            out.append(REPLACEMENT_CHAR if mapped is None else mapped)
            pos += width
            codes += 1
        return "".join(out), codes


def parse_tounicode_cmap(data: bytes, encoding: str | None = None) -> ToUnicodeCMap:
    """Parse the bytes of a ToUnicode CMap stream.

    Parameters
    ----------
    data : bytes
        Decompressed CMap program
    encoding : str, optional
        The font's /Encoding name. Identity-H and Identity-V fonts show
        2-byte codes, so shorter source codes are widened to match

    Returns
    -------
    ToUnicodeCMap
        The mapping; empty (falsy) when nothing usable was found

    """
    cmap = ToUnicodeCMap(min_code_width=2 if encoding in IDENTITY_ENCODINGS else 1)
    tokens = list(iter_raw_tokens(data))
    i = 0
    n = len(tokens)
    while i < n:
        tok = tokens[i]
        if tok.kind == "op" and tok.value == b"begincodespacerange":
            i = _parse_codespaces(tokens, i + 1, cmap)
        elif tok.kind == "op" and tok.value == b"beginbfchar":
            i = _parse_bfchar(tokens, i + 1, cmap)
        elif tok.kind == "op" and tok.value == b"beginbfrange":
            i = _parse_bfrange(tokens, i + 1, cmap)
        else:
            i += 1
    if not cmap:
        logger.debug("ToUnicode CMap contained no usable mappings")
    return cmap


def _section_end(tokens: list[RawToken], start: int, end_op: bytes) -> int:
    for j in range(start, len(tokens)):
        if tokens[j].kind == "op" and tokens[j].value == end_op:
            return j
    return len(tokens)


def _parse_codespaces(tokens: list[RawToken], start: int, cmap: ToUnicodeCMap) -> int:
    end = _section_end(tokens, start, b"endcodespacerange")
    strings = [t.value for t in tokens[start:end] if t.kind == "string"]
    for low, high in zip(strings[0::2], strings[1::2]):
        if low and len(low) == len(high):
            cmap.codespaces.append(CodespaceRange(low, high))
    return end + 1


def _parse_bfchar(tokens: list[RawToken], start: int, cmap: ToUnicodeCMap) -> int:
    end = _section_end(tokens, start, b"endbfchar")
    strings = [t.value for t in tokens[start:end] if t.kind == "string"]
    for src, dst in zip(strings[0::2], strings[1::2]):
        if src:
            cmap.chars[src.rjust(cmap.min_code_width, b"\x00")] = _utf16_to_str(dst)
    return end + 1


def _parse_bfrange(tokens: list[RawToken], start: int, cmap: ToUnicodeCMap) -> int:
    end = _section_end(tokens, start, b"endbfrange")
    i = start
    while i < end:
        if tokens[i].kind != "string" or i + 1 >= end or tokens[i + 1].kind != "string":
            i += 1
            continue
        low, high = tokens[i].value, tokens[i + 1].value
        width = max(len(low), cmap.min_code_width)
        target = tokens[i + 2] if i + 2 < end else None
        if not low or target is None:
            break
        lo_int = int.from_bytes(low, "big")
        hi_int = int.from_bytes(high, "big") if high else lo_int
        if target.kind == "string":
            cmap.ranges.append(BfRange(lo_int, hi_int, width, base=target.value))
            i += 3
        elif target.kind == "delim" and target.value == b"[":
            j = i + 3
            items: list[str] = []
            while j < end and not (tokens[j].kind == "delim" and tokens[j].value == b"]"):
                if tokens[j].kind == "string":
                    items.append(_utf16_to_str(tokens[j].value))
                j += 1
            cmap.ranges.append(BfRange(lo_int, hi_int, width, targets=tuple(items)))
            i = j + 1
        else:
            i += 3
    return end + 1
