"""Tests for the corporate tax return extractor."""

import pytest
from conftest import words_from_text

from taxcredit.config import ExtractionConfig, LayoutConfig
from taxcredit.extractors.schemas import TaxCreditItem
from taxcredit.extractors.tax_return_extractor import (
    TaxReturnExtractor,
    decode_share_tail,
    find_labeled_value,
    find_min_tax_target,
    parse_shareholders,
    parse_tax_credits,
)

SHAREHOLDING_PAGE = (
    "주식등변동상황명세서 1 개인 홍길동 800101-1****** KR 1,600 40 00 "
    "2 개인 김영희 850505-2****** KR 400 10 01 3"
)


@pytest.fixture
def extractor() -> TaxReturnExtractor:
    return TaxReturnExtractor(ExtractionConfig(), LayoutConfig())


@pytest.mark.unit
class TestFindLabeledValue:
    """Label-anchored amount lookup."""

    def test_negative_tax_base(self) -> None:
        text = "법인세 과세표준 및 세액신고서 과세표준 △72,142,319 산출세액 0"

        assert find_labeled_value(text, "과세표준") == -72_142_319

    def test_letter_spaced_label(self) -> None:
        assert find_labeled_value("과 세 표 준 1,500,000", "과세표준") == 1_500_000

    def test_bracketed_note_and_code(self) -> None:
        text = "산출세액 (법인세율) 12 3,400,000"

        assert find_labeled_value(text, "산출세액") == 3_400_000

    def test_code_before_value(self) -> None:
        assert find_labeled_value("가감계 21 800,000", "가감계", required_code="21") == 800_000
        assert find_labeled_value("가감계 22 800,000", "가감계", required_code="21") == 0

    def test_nth_value(self) -> None:
        text = "산출세액 4,000,000 5,000,000"

        assert find_labeled_value(text, "산출세액", nth=1) == 5_000_000

    def test_missing_label_is_zero(self) -> None:
        assert find_labeled_value("차감세액 없음", "과세표준") == 0


@pytest.mark.unit
def test_min_tax_target_next_to_code() -> None:
    text = "최저한세 적용대상 공제감면세액 17 3,000,000 차감세액 18 12,000,000"

    assert find_min_tax_target(text) == 3_000_000


@pytest.mark.unit
def test_parse_tax_credits_stops_at_footer_and_dedupes() -> None:
    text = (
        "고용을 증대시킨 기업에 대한 세액공제 18F 15,400,000 "
        "중소기업 사회보험료 14Q 3,200,000 전자신고 184 9,000 "
        "1A1 합계 18F 99,000,000"
    )
    existing = [TaxCreditItem(code="14Q", name="사회보험료", amount=3_200_000)]

    items = parse_tax_credits(text, min_amount=10_000, existing=existing)

    assert [(item.code, item.amount) for item in items] == [("18F", 15_400_000)]
    assert items[0].name == "고용을 증대시킨 기업에 대한 세액공제"


@pytest.mark.unit
class TestShareholders:
    """Share-change statement rows."""

    def test_decode_share_tail_with_separator(self) -> None:
        assert decode_share_tail("1,60040") == (1600, 40.0)

    def test_decode_share_tail_without_separator(self) -> None:
        assert decode_share_tail("40010") == (400, 10.0)
        assert decode_share_tail("100100") == (100, 100.0)

    def test_parse_rows(self) -> None:
        holders = parse_shareholders(SHAREHOLDING_PAGE, year=2023)

        assert [(h.name, h.shares, h.ratio, h.relation_code) for h in holders] == [
            ("홍길동", 1600, 40.0, "00"),
            ("김영희", 400, 10.0, "01"),
        ]
        assert holders[0].resident_id == "800101-*******"
        assert holders[1].relation_name == "배우자"
        assert all(h.year == 2023 for h in holders)

    def test_unrelated_party_is_skipped(self) -> None:
        text = "1 개인 이몽룡 700101-1****** KR 500 20 09 2"

        assert parse_shareholders(text) == []


@pytest.mark.unit
def test_extract_from_pages_bundle(extractor: TaxReturnExtractor) -> None:
    pages = [
        words_from_text(
            "법인세 과세표준 및 세액신고서 사업연도 2023 "
            "과세표준 100,000,000 산출세액 10,000,000"
        ),
        words_from_text(SHAREHOLDING_PAGE),
        words_from_text(
            "세액조정계산서 최저한세 적용대상 공제감면세액 17 3,000,000 "
            "차감세액 18 12,000,000"
        ),
        words_from_text(
            "세액공제조정명세서 고용을 증대시킨 기업에 대한 세액공제 "
            "18F 15,400,000 1A1 합계 15,400,000"
        ),
    ]

    record = extractor.extract_from_pages(pages, "return_2022.pdf")

    assert record.year == 2023
    assert record.tax_base == 100_000_000
    assert record.calculated_tax == 10_000_000
    assert record.min_tax_target == 3_000_000
    assert record.deducted_tax == 12_000_000
    # No minimum tax statement: 7% of the tax base
    assert record.min_tax == 7_000_000
    assert record.min_tax_adjustment == 5_000_000
    assert [(c.code, c.amount) for c in record.tax_credits] == [("18F", 15_400_000)]
    assert [h.name for h in record.shareholders] == ["홍길동", "김영희"]
    assert all(h.year == 2023 for h in record.shareholders)


@pytest.mark.unit
def test_negative_tax_base_skips_min_tax_fallback(
    extractor: TaxReturnExtractor,
) -> None:
    pages = [
        words_from_text("법인세 과세표준 및 세액신고서 과세표준 △72,142,319 산출세액 0")
    ]

    record = extractor.extract_from_pages(pages, "return_2023.pdf")

    assert record.year == 2023
    assert record.tax_base == -72_142_319
    assert record.min_tax == 0
