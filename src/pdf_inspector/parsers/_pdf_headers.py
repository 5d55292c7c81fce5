#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_headers.py
"""Header identification by font-size ratio.

A line's level comes from the ratio of its dominant font size to the body
size: with the default ratios, 1.8x and above is H1, 1.5x H2, 1.3x H3 and
1.15x H4. Each boundary is inclusive.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from pdf_inspector.constants import FONT_SIZE_ROUNDING
from pdf_inspector.models import TextLine
from pdf_inspector.options.markdown import MarkdownOptions

logger = logging.getLogger(__name__)

__all__ = ["IdentifyHeaders"]

# Guards ratio comparisons against float noise (13.8 / 12 == 1.1499999...)
_RATIO_EPSILON = 1e-6


class IdentifyHeaders:
    """Map line font sizes to Markdown heading levels.

    Parameters
    ----------
    lines : list of TextLine
        All lines of the document, used to find the body size
    options : MarkdownOptions, optional
        Supplies ``base_font_size``, ``header_ratios`` and ``header_max_length``

    Attributes
    ----------
    body_size : float
        Font size treated as body text (ratio 1.0)
    size_histogram : Counter
        Characters per rounded font size

    """

    def __init__(self, lines: list[TextLine], options: MarkdownOptions | None = None) -> None:
        self.options = options or MarkdownOptions()

        # Step 1: Character-weighted font size distribution
        self.size_histogram = self._collect_font_statistics(lines)

        # Step 2: Body size from options or the most common size
        self.body_size = self._determine_body_size(self.size_histogram, self.options.base_font_size)

        logger.debug("Body font size %.1f from %d distinct sizes", self.body_size, len(self.size_histogram))

    @staticmethod
    def _collect_font_statistics(lines: list[TextLine]) -> Counter[float]:
        histogram: Counter[float] = Counter()
        for line in lines:
            for item in line.items:
                size = round(round(item.font_size / FONT_SIZE_ROUNDING) * FONT_SIZE_ROUNDING, 1)
                histogram[size] += len(item.text.strip())
        return histogram

    @staticmethod
    def _determine_body_size(histogram: Counter[float], base_font_size: float | None) -> float:
        if base_font_size:
            return base_font_size
        if not histogram:
            return 0.0
        # Ties go to the smaller size so that equal amounts of heading and
        # body text do not promote the body to heading size
        best = max(histogram.values())
        return min(size for size, count in histogram.items() if count == best)

    def level_for_size(self, font_size: float) -> int:
        """Return the heading level for ``font_size``, 0 for body text."""
        if self.body_size <= 0:
            return 0
        ratio = font_size / self.body_size
        for level, threshold in enumerate(self.options.header_ratios, start=1):
            if ratio + _RATIO_EPSILON >= threshold:
                return level
        return 0

    def get_header_level(self, line: TextLine, text: str | None = None) -> int:
        """Return the heading level of ``line``, or 0 if it is not a heading.

        Parameters
        ----------
        line : TextLine
            Line to classify
        text : str, optional
            Pre-computed line text

        Returns
        -------
        int
            Heading level (1 to ``len(header_ratios)``) or 0

        """
        level = self.level_for_size(line.font_size)
        if level == 0:
            return 0

        text = (text if text is not None else line.text()).strip()
        if not text or not any(ch.isalpha() for ch in text):
            return 0
        if len(text) > self.options.header_max_length:
            return 0
        # Long sentence-like lines are emphasized prose, not headings
        if len(text) > 50 and text.endswith((".", "!", "?")):
            return 0
        return level

    def get_debug_info(self) -> dict[str, Any]:
        """Return the size distribution and derived thresholds."""
        return {
            "body_size": self.body_size,
            "size_histogram": dict(sorted(self.size_histogram.items())),
            "thresholds": {
                level: round(self.body_size * ratio, 2)
                for level, ratio in enumerate(self.options.header_ratios, start=1)
            },
        }
