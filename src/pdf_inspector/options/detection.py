#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/options/detection.py
"""Configuration options for the text-vs-scanned classifier."""

from __future__ import annotations

from dataclasses import dataclass, field

from pdf_inspector.constants import (
    DEFAULT_MAX_PAGES_TO_SAMPLE,
    DEFAULT_MIN_TEXT_OPS_PER_PAGE,
    DEFAULT_SAMPLE_STRATEGY,
    DEFAULT_TEXT_PAGE_RATIO_THRESHOLD,
    SampleStrategy,
)
from pdf_inspector.exceptions import ValidationError
from pdf_inspector.options.base import CloneFrozenMixin, require_positive, require_ratio


@dataclass(frozen=True)
class DetectionConfig(CloneFrozenMixin):
    """Configuration for :func:`pdf_inspector.detect_pdf_type`.

    Parameters
    ----------
    max_pages_to_sample : int, default 5
        Upper bound on the number of pages whose content streams are scanned.
    min_text_ops_per_page : int, default 3
        A sampled page counts as a text page once it has at least this many
        text-showing operators.
    text_page_ratio_threshold : float, default 0.6
        Fraction of sampled text pages at or above which the document is
        classified as text-based.
    sample_strategy : {"even", "first"}, default "even"
        ``"even"`` samples the first page, the last page and evenly spaced
        pages in between; ``"first"`` samples the leading pages only.

    """

    max_pages_to_sample: int = field(
        default=DEFAULT_MAX_PAGES_TO_SAMPLE,
        metadata={"help": "Maximum number of pages to scan", "type": int, "importance": "core"},
    )
    min_text_ops_per_page: int = field(
        default=DEFAULT_MIN_TEXT_OPS_PER_PAGE,
        metadata={"help": "Text operators needed for a page to count as text", "type": int, "importance": "advanced"},
    )
    text_page_ratio_threshold: float = field(
        default=DEFAULT_TEXT_PAGE_RATIO_THRESHOLD,
        metadata={
            "help": "Fraction of text pages needed to call the document text-based",
            "type": float,
            "importance": "advanced",
        },
    )
    sample_strategy: SampleStrategy = field(
        default=DEFAULT_SAMPLE_STRATEGY,
        metadata={"help": "Page sampling strategy", "choices": ["even", "first"], "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate sampling bounds and the ratio threshold.

        Raises
        ------
        ValidationError
            If any field value is outside its valid range.

        """
        require_positive("max_pages_to_sample", self.max_pages_to_sample)
        if self.min_text_ops_per_page < 0:
            raise ValidationError(
                f"min_text_ops_per_page must be non-negative, got {self.min_text_ops_per_page}",
                parameter_name="min_text_ops_per_page",
                parameter_value=self.min_text_ops_per_page,
            )
        require_ratio("text_page_ratio_threshold", self.text_page_ratio_threshold, inclusive_zero=False)
        if self.sample_strategy not in ("even", "first"):
            raise ValidationError(
                f"sample_strategy must be 'even' or 'first', got {self.sample_strategy!r}",
                parameter_name="sample_strategy",
                parameter_value=self.sample_strategy,
            )
