#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_decoder.py
"""Per-font decoding of string operands into Unicode text.

A decode strategy is resolved once per font, in priority order:

1. ToUnicode CMap, when the font carries one with usable mappings.
2. UTF-16BE code units, for fonts whose declared encoding is a UTF-16
   CMap or an Identity CMap without a ToUnicode table.
3. Single bytes, using cp1252 for ``WinAnsiEncoding``, mac-roman for
   ``MacRomanEncoding`` and Latin-1 otherwise.

Codes that cannot be mapped decode to U+FFFD.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from pdf_inspector.constants import (
    IDENTITY_ENCODINGS,
    LIGATURES,
    SINGLE_BYTE_ENCODINGS,
    UTF16_ENCODING_MARKERS,
)
from pdf_inspector.parsers._pdf_backend import FontInfo
from pdf_inspector.parsers._pdf_cmap import ToUnicodeCMap, parse_tounicode_cmap

logger = logging.getLogger(__name__)

_LIGATURE_TABLE = str.maketrans(LIGATURES)
_UTF16_BOM = b"\xfe\xff"


class DecodeMethod(str, Enum):
    """Decoding approach chosen for a font."""

    CMAP = "cmap"
    UTF16BE = "utf16be"
    SINGLE_BYTE = "single_byte"


def expand_ligatures(text: str) -> str:
    """Replace presentation-form ligatures (``ﬁ``) with their letters."""
    return text.translate(_LIGATURE_TABLE)


def _decode_utf16be(data: bytes) -> tuple[str, int]:
    if len(data) % 2:
        data = data + b"\x00"
    return data.decode("utf-16-be", errors="replace"), len(data) // 2


@dataclass(frozen=True)
class DecodeStrategy:
    """Resolved decoding for one font.

    Parameters
    ----------
    method : DecodeMethod
        Which decoder applies
    cmap : ToUnicodeCMap, optional
        Parsed CMap for :attr:`DecodeMethod.CMAP`
    codec : str, default "latin-1"
        Python codec for :attr:`DecodeMethod.SINGLE_BYTE`

    """

    method: DecodeMethod
    cmap: ToUnicodeCMap | None = None
    codec: str = "latin-1"

    def decode(self, data: bytes) -> tuple[str, int]:
        """Decode ``data``; return the text and the number of character codes."""
        if not data:
            return "", 0
        if self.method is DecodeMethod.CMAP and self.cmap is not None:
            text, codes = self.cmap.decode(data)
        elif self.method is DecodeMethod.UTF16BE:
            text, codes = _decode_utf16be(data)
        elif data.startswith(_UTF16_BOM):
            text, codes = _decode_utf16be(data[2:])
        else:
            text, codes = data.decode(self.codec, errors="replace"), len(data)
        return expand_ligatures(text), codes


DEFAULT_STRATEGY = DecodeStrategy(DecodeMethod.SINGLE_BYTE)


def resolve_strategy(font: FontInfo | None) -> DecodeStrategy:
    """Choose the decode strategy for ``font``.

    Parameters
    ----------
    font : FontInfo or None
        Font metadata; ``None`` when the content stream references an
        unknown font resource

    Returns
    -------
    DecodeStrategy
        The strategy to apply to every string shown in this font

    """
    if font is None:
        return DEFAULT_STRATEGY

    if font.to_unicode:
        cmap = parse_tounicode_cmap(font.to_unicode, font.encoding)
        if cmap:
            return DecodeStrategy(DecodeMethod.CMAP, cmap=cmap)
        logger.debug("Font %s has an unusable ToUnicode CMap, falling back", font.resource_name)

    encoding = font.encoding or ""
    if any(marker in encoding.upper() for marker in UTF16_ENCODING_MARKERS) or encoding in IDENTITY_ENCODINGS:
        return DecodeStrategy(DecodeMethod.UTF16BE)

    return DecodeStrategy(DecodeMethod.SINGLE_BYTE, codec=SINGLE_BYTE_ENCODINGS.get(encoding, "latin-1"))


class FontDecoderCache:
    """Document-scoped cache of resolved strategies, keyed by font object."""

    def __init__(self) -> None:
        self._strategies: dict[tuple[int, str], DecodeStrategy] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._strategies)

    def strategy_for(self, font: FontInfo | None) -> DecodeStrategy:
        if font is None:
            return DEFAULT_STRATEGY
        key = font.cache_key
        with self._lock:
            strategy = self._strategies.get(key)
            if strategy is None:
                strategy = resolve_strategy(font)
                self._strategies[key] = strategy
                logger.debug("Font %s (%s) decodes via %s", font.resource_name, font.base_font, strategy.method.value)
        return strategy

    def decode(self, font: FontInfo | None, data: bytes) -> tuple[str, int]:
        return self.strategy_for(font).decode(data)
