#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/pdf_inspector/detection.py
"""Fast text-based vs. scanned classification.

The classifier never builds positioned text. It samples a bounded number of
pages, counts text-showing and image-drawing operators in their content
streams with the byte-level scanner, and derives a document type and a
confidence score from the share of pages that carry real text.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace

from pdf_inspector.constants import CLASSIFIER_BOUNDARY_WEIGHT, CLASSIFIER_COMPLETENESS_WEIGHT
from pdf_inspector.models import PdfType, PdfTypeResult
from pdf_inspector.options.detection import DetectionConfig
from pdf_inspector.parsers._pdf_backend import DocumentBackend, open_backend
from pdf_inspector.parsers._pdf_scanner import OperatorCounts, scan_operators
from pdf_inspector.utils.inputs import PdfInput

logger = logging.getLogger(__name__)

__all__ = ["classify_backend", "compute_confidence", "detect_pdf_type", "select_sample_pages"]


def select_sample_pages(page_count: int, max_pages: int, strategy: str = "even") -> list[int]:
    """Choose the zero-based page indices to scan.

    Parameters
    ----------
    page_count : int
        Pages in the document
    max_pages : int
        Upper bound on the number of sampled pages
    strategy : {"even", "first"}, default "even"
        ``"even"`` takes the first and last page plus evenly spaced pages in
        between; ``"first"`` takes the leading pages

    Returns
    -------
    list of int
        Sorted, distinct page indices

    Examples
    --------
        >>> select_sample_pages(100, 5)
        [0, 25, 50, 74, 99]
        >>> select_sample_pages(3, 5)
        [0, 1, 2]

    """
    count = min(max_pages, page_count)
    if count <= 0:
        return []
    if count >= page_count or strategy == "first":
        return list(range(count))
    if count == 1:
        return [0]

    last = page_count - 1
    indices = {0, last}
    interior = count - 2
    for i in range(1, interior + 1):
        indices.add(round(i * last / (interior + 1)))
    return sorted(indices)


def compute_confidence(
    pdf_type: PdfType, text_ratio: float, threshold: float, pages_sampled: int, page_count: int
) -> float:
    """Score how far the sample lies from the decision boundary.

    The boundary term is ``|text_ratio - threshold|`` normalized by the largest
    possible distance on that side and weighted by 0.9. Documents with no text
    pages at all sit at the full distance. Sample completeness
    (``pages_sampled / page_count``) adds up to 0.1.
    """
    if pages_sampled <= 0 or page_count <= 0:
        return 0.0
    if pdf_type in (PdfType.SCANNED, PdfType.IMAGE_BASED):
        distance = 1.0
    else:
        span = max(threshold, 1.0 - threshold)
        distance = abs(text_ratio - threshold) / span if span > 0 else 1.0
    completeness = min(pages_sampled / page_count, 1.0)
    confidence = CLASSIFIER_BOUNDARY_WEIGHT * min(distance, 1.0) + CLASSIFIER_COMPLETENESS_WEIGHT * completeness
    return max(0.0, min(confidence, 1.0))


def _scan_page(backend: DocumentBackend, index: int) -> OperatorCounts:
    try:
        content = backend.page_content_bytes(index)
    except Exception as e:
        # Unreadable pages count as empty; classification never fails per page
        logger.debug("Could not read content of page %d: %s", index + 1, e)
        return OperatorCounts(0, 0)
    return scan_operators(content)


def classify_backend(backend: DocumentBackend, config: DetectionConfig | None = None) -> PdfTypeResult:
    """Classify an already-open document.

    Parameters
    ----------
    backend : DocumentBackend
        Open, decrypted document
    config : DetectionConfig, optional
        Sampling limits and thresholds

    Returns
    -------
    PdfTypeResult
        Detected type, confidence and sampling statistics

    """
    config = config or DetectionConfig()
    start = time.perf_counter()
    page_count = backend.page_count
    title = backend.document_title()

    indices = select_sample_pages(page_count, config.max_pages_to_sample, config.sample_strategy)
    pages_with_text = 0
    text_ops = 0
    image_ops = 0
    for index in indices:
        counts = _scan_page(backend, index)
        text_ops += counts.text_ops
        image_ops += counts.image_ops
        if counts.text_ops >= config.min_text_ops_per_page:
            pages_with_text += 1

    sampled = len(indices)
    threshold = config.text_page_ratio_threshold
    if sampled == 0:
        pdf_type = PdfType.IMAGE_BASED
        text_ratio = 0.0
    else:
        text_ratio = pages_with_text / sampled
        if text_ratio >= threshold:
            pdf_type = PdfType.TEXT_BASED
        elif text_ratio == 0 and image_ops > 0:
            pdf_type = PdfType.IMAGE_BASED
        elif text_ratio == 0 and text_ops == 0:
            pdf_type = PdfType.SCANNED
        else:
            pdf_type = PdfType.MIXED

    confidence = compute_confidence(pdf_type, text_ratio, threshold, sampled, page_count)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.debug(
        "Sampled %d/%d pages: %d with text, %d text ops, %d image ops -> %s (%.2f)",
        sampled,
        page_count,
        pages_with_text,
        text_ops,
        image_ops,
        pdf_type.value,
        confidence,
    )
    return PdfTypeResult(
        pdf_type=pdf_type,
        confidence=confidence,
        page_count=page_count,
        title=title,
        elapsed_ms=elapsed_ms,
        pages_sampled=sampled,
        pages_with_text=pages_with_text,
        text_operator_count=text_ops,
        image_operator_count=image_ops,
    )


def detect_pdf_type(source: PdfInput, config: DetectionConfig | None = None) -> PdfTypeResult:
    """Classify a PDF as text-based, scanned, image-based or mixed.

    Parameters
    ----------
    source : str, Path, bytes or binary file object
        PDF to classify
    config : DetectionConfig, optional
        Sampling limits and thresholds

    Returns
    -------
    PdfTypeResult
        Detected type and confidence; ``elapsed_ms`` includes opening the file

    Raises
    ------
    PdfIoError
        If the file cannot be read
    PdfParseError
        If the data is not a parseable PDF
    PdfEncryptedError
        If the document is encrypted; no pages are sampled

    """
    start = time.perf_counter()
    with open_backend(source) as backend:
        result = classify_backend(backend, config)
    return replace(result, elapsed_ms=(time.perf_counter() - start) * 1000)
