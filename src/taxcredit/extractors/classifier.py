"""Decide which extractor handles a PDF.

Classification is a single deterministic pass over the first pages:

1. Any inspected page mentioning the tax-amount return title wins
2. Otherwise a registry certificate title on the first page
3. Otherwise the document is treated as a withholding ledger
"""

import logging
from collections.abc import Sequence
from typing import Any

from taxcredit.config import get_extraction_config, get_layout_config
from taxcredit.extractors.layout import Word, page_words
from taxcredit.extractors.schemas import DocumentKind
from taxcredit.utils.text import strip_spaces

logger = logging.getLogger(__name__)

TAX_RETURN_MARKER = "세액신고서"
REGISTRY_MARKERS = (
    "등기사항전부증명서",
    "등기사항일부증명서",
    "등기부등본",
    "법인등기",
)


def classify_pages(
    page_word_lists: Sequence[Sequence[Word]], max_pages: int = 3
) -> DocumentKind:
    """Classify a document from the words of its first pages.

    Args:
        page_word_lists: Words per page, first page first
        max_pages: Number of leading pages to inspect

    Returns:
        DocumentKind: The detected document kind
    """
    texts = [
        strip_spaces("".join(word.text for word in words))
        for words in page_word_lists[:max_pages]
    ]

    if any(TAX_RETURN_MARKER in text for text in texts):
        return DocumentKind.TAX_RETURN
    if texts and any(marker in texts[0] for marker in REGISTRY_MARKERS):
        return DocumentKind.REGISTRY
    return DocumentKind.WITHHOLDING


def classify_document(pdf: Any) -> DocumentKind:
    """Classify an open pdfplumber document.

    Args:
        pdf: An open ``pdfplumber.PDF``

    Returns:
        DocumentKind: The detected document kind
    """
    layout = get_layout_config()
    max_pages = get_extraction_config().classifier_pages
    page_word_lists = [
        page_words(page, index, layout.word_y_tolerance, layout.word_x_gap)
        for index, page in enumerate(pdf.pages[:max_pages])
    ]
    kind = classify_pages(page_word_lists, max_pages)
    logger.debug(f"Classified document as {kind.value}")
    return kind
