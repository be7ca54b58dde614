"""Tests for document kind classification."""

import pytest
from conftest import words_from_text

from taxcredit.extractors.classifier import classify_pages
from taxcredit.extractors.schemas import DocumentKind


@pytest.mark.unit
class TestClassifyPages:
    """Classification precedence over the first pages."""

    def test_tax_return_title_on_any_inspected_page(self) -> None:
        pages = [
            words_from_text("표지"),
            words_from_text("목록"),
            words_from_text("법인세 과세표준 및 세액 신고서"),
        ]

        assert classify_pages(pages) == DocumentKind.TAX_RETURN

    def test_tax_return_wins_over_registry(self) -> None:
        pages = [words_from_text("등기사항전부증명서 법인세 과세표준 및 세액신고서")]

        assert classify_pages(pages) == DocumentKind.TAX_RETURN

    def test_registry_title_on_first_page(self) -> None:
        pages = [words_from_text("등기사항 전부 증명서 (말소사항 포함)")]

        assert classify_pages(pages) == DocumentKind.REGISTRY

    def test_registry_title_on_later_page_is_ignored(self) -> None:
        pages = [words_from_text("근로소득 원천징수부"), words_from_text("법인등기")]

        assert classify_pages(pages) == DocumentKind.WITHHOLDING

    def test_pages_beyond_limit_are_not_inspected(self) -> None:
        pages = [words_from_text("표지") for _ in range(3)]
        pages.append(words_from_text("세액신고서"))

        assert classify_pages(pages, max_pages=3) == DocumentKind.WITHHOLDING

    def test_empty_document_defaults_to_withholding(self) -> None:
        assert classify_pages([]) == DocumentKind.WITHHOLDING
