"""Tests for the headcount helpers shared by the credit engines."""

import pytest

from conftest import employee_year, staff
from taxcredit.credits.common import (
    AnnualCohortStat,
    annual_stats,
    floor2,
    floor_krw,
    recognize_increase,
)
from taxcredit.extractors.schemas import ExclusionReason


def stat(year: int, overall: float, youth: float = 0.0) -> AnnualCohortStat:
    return AnnualCohortStat(
        year=year,
        youth_months=int(youth * 12),
        normal_months=int((overall - youth) * 12),
        overall_count=overall,
        youth_count=youth,
        normal_count=overall - youth,
    )


class TestRounding:
    """Truncation helpers."""

    @pytest.mark.unit
    def test_floor2_truncates(self) -> None:
        assert floor2(2.999) == 2.99
        assert floor2(35 / 12) == 2.91

    @pytest.mark.unit
    def test_floor2_survives_float_noise(self) -> None:
        assert floor2(0.29) == 0.29

    @pytest.mark.unit
    def test_floor_krw(self) -> None:
        assert floor_krw(19_250_000.0000001) == 19_250_000
        assert floor_krw(1234.99) == 1234


class TestAnnualStats:
    """Aggregating employee-years into yearly headcounts."""

    @pytest.mark.unit
    def test_counts_are_truncated_separately(self) -> None:
        records = [
            *staff(2023, 2, prefix="청년", youth_months=12, normal_months=0),
            employee_year(2023, "단기청년", youth_months=11, normal_months=0),
            *staff(2023, 7),
            employee_year(2023, "단기", youth_months=0, normal_months=1),
        ]

        [result] = annual_stats(records)

        assert result.youth_months == 35
        assert result.normal_months == 85
        assert result.youth_count == 2.91
        assert result.normal_count == 7.08
        assert result.overall_count == 10.0

    @pytest.mark.unit
    def test_excluded_records_do_not_count(self) -> None:
        records = [
            *staff(2022, 3),
            employee_year(
                2022, "대표", exclusion_reason=ExclusionReason.EXECUTIVE
            ),
        ]

        [result] = annual_stats(records)

        assert result.overall_count == 3.0

    @pytest.mark.unit
    def test_years_are_sorted(self) -> None:
        records = [*staff(2023, 1), *staff(2021, 1), *staff(2022, 1)]

        assert [s.year for s in annual_stats(records)] == [2021, 2022, 2023]

    @pytest.mark.unit
    def test_salary_sums(self) -> None:
        records = list(staff(2023, 2, monthly_pay=1_000_000))

        [result] = annual_stats(records)

        assert result.normal_salary == 24_000_000
        assert result.si_normal_salary == 24_000_000
        assert result.si_youth_salary == 0


class TestRecognizeIncrease:
    """Splitting headcount growth into youth and other increases."""

    @pytest.mark.unit
    def test_no_previous_year(self) -> None:
        assert recognize_increase(stat(2022, 12.5), None).total_increase == 0

    @pytest.mark.unit
    def test_gap_year_is_not_a_baseline(self) -> None:
        result = recognize_increase(stat(2022, 12.0), stat(2020, 10.0))

        assert result.diff_overall == 0.0
        assert result.total_increase == 0

    @pytest.mark.unit
    def test_youth_capped_by_overall_increase(self) -> None:
        result = recognize_increase(stat(2023, 11.0, youth=5.0), stat(2022, 10.0))

        assert result.youth_increase == 1.0
        assert result.other_increase == 0.0

    @pytest.mark.unit
    def test_remainder_is_other_increase(self) -> None:
        result = recognize_increase(
            stat(2023, 13.0, youth=3.0), stat(2022, 10.0, youth=2.0)
        )

        assert result.youth_increase == 1.0
        assert result.other_increase == 2.0
        assert result.total_increase == 3.0

    @pytest.mark.unit
    def test_youth_decline_is_all_other(self) -> None:
        result = recognize_increase(
            stat(2023, 12.0, youth=1.0), stat(2022, 10.0, youth=2.0)
        )

        assert result.youth_increase == 0.0
        assert result.other_increase == 2.0

    @pytest.mark.unit
    def test_decrease(self) -> None:
        result = recognize_increase(stat(2023, 9.0), stat(2022, 10.0))

        assert result.diff_overall == -1.0
        assert result.total_increase == 0
