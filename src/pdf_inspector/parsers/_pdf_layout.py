#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/parsers/_pdf_layout.py
"""Line and reading-order reconstruction.

Turns the stream-ordered items of each page into reading-order lines:

1. Group items into lines by baseline (descending y), items sorted by x.
2. Merge superscript and subscript runs into their base line.
3. Split lines that share a baseline across a column gutter, detect
   columns and order multi-column pages column by column, with spanning
   lines such as titles kept in place.
4. Merge drop caps into the paragraph they start.
5. Rejoin words hyphenated across line breaks.
"""

from __future__ import annotations

import logging
import re
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Iterable

from pdf_inspector.constants import FONT_SIZE_ROUNDING
from pdf_inspector.models import TextItem, TextLine
from pdf_inspector.options.layout import LayoutOptions
from pdf_inspector.parsers._pdf_columns import SPANNING, detect_columns

logger = logging.getLogger(__name__)

__all__ = [
    "LayoutReconstructor",
    "body_font_size",
    "fix_hyphenation",
    "group_into_lines",
    "merge_drop_caps",
    "merge_scripts",
    "order_lines",
    "split_at_gutters",
]

_HYPHENATED_END = re.compile(r"[^\W\d_]-$")
_LEADING_WORD = re.compile(r"^(\S+)\s*")

# Scripts are short runs shifted by less than this fraction of the base size
_MAX_SCRIPT_CHARS = 12
_MAX_SCRIPT_OFFSET = 0.6

# Gap, relative to font size, that separates same-baseline items of two columns
_GUTTER_GAP_RATIO = 3.0
_MIN_FRAGMENT_WORDS = 3


def body_font_size(items: Iterable[TextItem]) -> float:
    """Return the most common font size, weighted by character count."""
    counts: Counter[float] = Counter()
    for item in items:
        size = round(item.font_size / FONT_SIZE_ROUNDING) * FONT_SIZE_ROUNDING
        counts[round(size, 1)] += len(item.text.strip())
    if not counts:
        return 0.0
    return counts.most_common(1)[0][0]


def _is_drop_cap_item(item: TextItem, body_size: float, layout: LayoutOptions) -> bool:
    text = item.text.strip()
    return (
        len(text) == 1
        and text.isupper()
        and not item.approximate
        and item.font_size >= layout.drop_cap_size_ratio * body_size
    )


def group_into_lines(
    items: list[TextItem], layout: LayoutOptions | None = None, body_size: float = 0.0
) -> list[TextLine]:
    """Group the items of one page into lines, top to bottom.

    An item joins the current line when its baseline is within
    ``baseline_tolerance_ratio`` times the smaller font size of the line's
    baseline. When ``body_size`` is given, single capital letters at least
    ``drop_cap_size_ratio`` times that size are drop caps: each gets a line of
    its own even though it shares the baseline of a lower body line.
    """
    layout = layout or LayoutOptions()
    lines: list[TextLine] = []
    current: TextLine | None = None
    current_min_size = 0.0
    for item in sorted(items, key=lambda it: -it.y):
        if body_size > 0 and _is_drop_cap_item(item, body_size, layout):
            lines.append(TextLine(items=[item], y=item.y, page_number=item.page_number))
            continue
        if current is not None and not item.approximate and not current.approximate:
            tolerance = layout.baseline_tolerance_ratio * min(item.font_size, current_min_size)
            if abs(item.y - current.y) < tolerance:
                current.add(item)
                current_min_size = min(current_min_size, item.font_size)
                continue
        current = TextLine(items=[item], y=item.y, page_number=item.page_number)
        current_min_size = item.font_size
        lines.append(current)

    for line in lines:
        # Anchor the line on the baseline of its dominant font size
        dominant = line.font_size
        anchor = next((it for it in line.items if round(it.font_size, 1) == dominant), line.items[0])
        line.y = anchor.y
    return lines


def _script_run(line: TextLine, tag: str, base_y: float) -> TextItem:
    first = line.items[0]
    return replace(
        first,
        text=f"<{tag}>{line.text()}</{tag}>",
        x=line.x_start,
        y=base_y,
        width=line.width,
    )


def merge_scripts(lines: list[TextLine], layout: LayoutOptions | None = None) -> list[TextLine]:
    """Merge small raised or lowered lines into the adjacent base line.

    A line qualifies when its dominant size is at most ``script_size_ratio``
    of a vertically adjacent line, its baseline is offset by more than
    ``script_offset_ratio`` of that line's size but by less than 0.6 of it,
    and it overlaps the base line horizontally. The merged run is wrapped in
    ``<sup>`` or ``<sub>``.
    """
    layout = layout or LayoutOptions()
    result: list[TextLine] = []
    consumed: set[int] = set()
    for idx, line in enumerate(lines):
        if idx in consumed:
            continue
        if line.approximate or line.char_count > _MAX_SCRIPT_CHARS:
            result.append(line)
            continue
        base = None
        for n_idx in (idx + 1, idx - 1):
            if not 0 <= n_idx < len(lines) or n_idx in consumed:
                continue
            neighbour = lines[n_idx]
            if neighbour.approximate or neighbour.font_size <= 0:
                continue
            size_ok = line.font_size <= layout.script_size_ratio * neighbour.font_size
            offset = line.y - neighbour.y
            offset_ok = (
                layout.script_offset_ratio * neighbour.font_size
                < abs(offset)
                < _MAX_SCRIPT_OFFSET * neighbour.font_size
            )
            overlap_ok = (
                line.x_start <= neighbour.x_end + neighbour.font_size
                and line.x_end >= neighbour.x_start - neighbour.font_size
            )
            if size_ok and offset_ok and overlap_ok:
                base = neighbour
                break
        if base is None:
            result.append(line)
            continue
        tag = "sup" if line.y > base.y else "sub"
        base.add(_script_run(line, tag, base.y))
        consumed.add(idx)
    return result


def merge_drop_caps(lines: list[TextLine], body_size: float, layout: LayoutOptions | None = None) -> list[TextLine]:
    """Prepend drop-cap letters to the paragraph-start line they belong to.

    Because lines are ordered by baseline, the drop cap (whose baseline sits a
    few lines down) usually sorts after the line it begins. The target is the
    first line on the same page that starts with a lowercase letter and is not
    preceded by another lowercase-starting line; earlier lines are searched
    first, then later ones.
    """
    layout = layout or LayoutOptions()
    if body_size <= 0:
        return lines

    def is_drop_cap(line: TextLine) -> bool:
        text = line.text()
        return (
            len(text) == 1
            and text.isupper()
            and line.font_size >= layout.drop_cap_size_ratio * body_size
        )

    def starts_lower(line: TextLine) -> bool:
        text = line.text()
        return bool(text) and text[0].islower()

    def paragraph_start(candidates: list[TextLine], idx: int) -> bool:
        return idx == 0 or not starts_lower(candidates[idx - 1])

    result = list(lines)
    for cap in [line for line in lines if is_drop_cap(line)]:
        pos = next(i for i, line in enumerate(result) if line is cap)
        same_page = [i for i, line in enumerate(result) if line.page_number == cap.page_number and line is not cap]
        before = [i for i in same_page if i < pos]
        after = [i for i in same_page if i > pos]
        target = None
        for i in before + after:
            if starts_lower(result[i]) and paragraph_start(result, i):
                target = result[i]
                break
        if target is None:
            continue
        first = target.items[0]
        target.items[0] = replace(first, text=cap.text() + first.text.lstrip())
        del result[pos]
        logger.debug("Merged drop cap %r on page %d", cap.text(), cap.page_number)
    return result


def fix_hyphenation(lines: list[TextLine]) -> list[TextLine]:
    """Rejoin words split by a trailing hyphen at a line break.

    When a line ends with a letter followed by ``-`` and the next line starts
    with a lowercase letter, the hyphen is removed and the first word of the
    next line moves up. Lines emptied by the move are dropped. Applying the
    fix twice is the same as applying it once.
    """
    result: list[TextLine] = []
    for line in lines:
        if result and line.items:
            prev = result[-1]
            prev_text = prev.text()
            next_first = line.items[0]
            next_text = next_first.text.lstrip()
            if (
                prev.page_number == line.page_number
                and _HYPHENATED_END.search(prev_text)
                and next_text[:1].islower()
            ):
                match = _LEADING_WORD.match(next_text)
                word = match.group(1) if match else next_text
                rest = next_text[match.end() :] if match else ""
                last = prev.items[-1]
                prev.items[-1] = replace(last, text=last.text.rstrip()[:-1] + word)
                if rest:
                    line.items[0] = replace(next_first, text=rest)
                else:
                    line.items.pop(0)
                if not line.items:
                    continue
        result.append(line)
    return result


def split_at_gutters(lines: list[TextLine]) -> list[TextLine]:
    """Split lines whose items straddle a column gutter.

    Items of neighbouring columns that share a baseline are grouped into one
    line. Such a line is cut wherever the gap between consecutive items
    exceeds three times the font size and both sides hold at least three
    words; table rows with short cells stay whole.
    """
    result: list[TextLine] = []
    for line in lines:
        if line.approximate or len(line.items) < 2:
            result.append(line)
            continue
        groups: list[list[TextItem]] = [[line.items[0]]]
        for prev, item in zip(line.items, line.items[1:]):
            gap = item.x - prev.x_end
            if gap > _GUTTER_GAP_RATIO * min(prev.font_size, item.font_size):
                groups.append([])
            groups[-1].append(item)
        if len(groups) > 1 and all(_word_count(group) >= _MIN_FRAGMENT_WORDS for group in groups):
            result.extend(TextLine(items=group, y=line.y, page_number=line.page_number) for group in groups)
        else:
            result.append(line)
    return result


def _word_count(items: list[TextItem]) -> int:
    return sum(len(item.text.split()) for item in items)


def order_lines(lines: list[TextLine], layout: LayoutOptions | None = None) -> list[TextLine]:
    """Return the lines of one page in reading order.

    Single-column pages keep top-to-bottom order. On multi-column pages,
    spanning lines split the page into vertical sections; each section is read
    column by column, each column top to bottom.
    """
    layout = layout or LayoutOptions()
    top_down = sorted(split_at_gutters(lines), key=lambda line: -line.y)
    columns = detect_columns(top_down, layout)
    if columns.column_count == 1:
        top_down = sorted(lines, key=lambda line: -line.y)
        for line in top_down:
            line.column = 0
        return top_down

    measurable = [line for line in top_down if not line.approximate]
    extent = max(line.x_end for line in measurable) - min(line.x_start for line in measurable)
    ordered: list[TextLine] = []
    section: list[TextLine] = []

    def flush() -> None:
        section.sort(key=lambda line: (line.column, -line.y))
        ordered.extend(section)
        section.clear()

    for line in top_down:
        line.column = columns.column_of(line, extent, layout.column_spanning_threshold)
        if line.column == SPANNING:
            flush()
            ordered.append(line)
        else:
            section.append(line)
    flush()
    return ordered


class LayoutReconstructor:
    """Turn stream-ordered items into reading-order lines for a whole document.

    Parameters
    ----------
    layout : LayoutOptions, optional
        Geometry thresholds
    detect_columns : bool, default True
        Reorder multi-column pages
    merge_scripts : bool, default True
        Merge superscript and subscript runs
    merge_drop_caps : bool, default True
        Merge drop caps into their paragraph
    fix_hyphenation : bool, default True
        Rejoin hyphenated words
    max_workers : int, default 1
        Threads used to process pages; results are re-joined in page order

    """

    def __init__(
        self,
        layout: LayoutOptions | None = None,
        detect_columns: bool = True,
        merge_scripts: bool = True,
        merge_drop_caps: bool = True,
        fix_hyphenation: bool = True,
        max_workers: int = 1,
    ):
        self.layout = layout or LayoutOptions()
        self.detect_columns = detect_columns
        self.merge_scripts = merge_scripts
        self.merge_drop_caps = merge_drop_caps
        self.fix_hyphenation = fix_hyphenation
        self.max_workers = max_workers

    def reconstruct_page(self, items: list[TextItem], body_size: float) -> list[TextLine]:
        lines = group_into_lines(items, self.layout, body_size if self.merge_drop_caps else 0.0)
        if self.merge_scripts:
            lines = merge_scripts(lines, self.layout)
        if self.detect_columns:
            lines = order_lines(lines, self.layout)
        if self.merge_drop_caps:
            lines = merge_drop_caps(lines, body_size, self.layout)
        if self.fix_hyphenation:
            lines = fix_hyphenation(lines)
        return lines

    def reconstruct(self, items: list[TextItem]) -> list[TextLine]:
        """Reconstruct lines for every page, pages ascending.

        Parameters
        ----------
        items : list of TextItem
            Items from the extractor, any page order

        Returns
        -------
        list of TextLine
            Lines in reading order

        """
        by_page: dict[int, list[TextItem]] = defaultdict(list)
        for item in items:
            by_page[item.page_number].append(item)
        body_size = body_font_size(items)
        page_numbers = sorted(by_page)

        if self.max_workers > 1 and len(page_numbers) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                pages = list(executor.map(lambda p: self.reconstruct_page(by_page[p], body_size), page_numbers))
        else:
            pages = [self.reconstruct_page(by_page[p], body_size) for p in page_numbers]

        return [line for page in pages for line in page]
