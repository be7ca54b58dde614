"""Tests for the employment increase and integrated employment credits."""

import pytest

from conftest import employee_year, staff
from taxcredit.config import CreditConfig
from taxcredit.credits.employment_increase import (
    calculate_employment_increase_credit,
    calculate_integrated_employment_credit,
)
from taxcredit.extractors.schemas import EmployeeRecord, ExclusionReason

SMALL_NON_CAPITAL = CreditConfig(size="small", region="non-capital")
SMALL_CAPITAL = CreditConfig(size="small", region="capital")


def half_year(year: int) -> EmployeeRecord:
    return employee_year(year, "반기근무", "900505-1******", normal_months=6)


def growing_company() -> list[EmployeeRecord]:
    """10.00 heads in 2020 and 2021, 12.50 from 2022 on."""
    return [
        *staff(2020, 10),
        *staff(2021, 10),
        *staff(2022, 12),
        half_year(2022),
    ]


class TestEmploymentIncreaseCredit:
    """First-year credit and the two carried payments."""

    @pytest.mark.unit
    def test_first_year_credit(self) -> None:
        result = calculate_employment_increase_credit(
            growing_company(), SMALL_NON_CAPITAL
        )

        assert [row.year for row in result.rows] == [2022]
        row = result.rows[0]
        assert row.diff_overall == 2.5
        assert row.other_increase == 2.5
        assert row.credit_1st == 19_250_000
        assert result.credit_for(2021) == 0

    @pytest.mark.unit
    def test_credit_carried_into_second_year(self) -> None:
        records = [*growing_company(), *staff(2023, 12), half_year(2023)]

        result = calculate_employment_increase_credit(records, SMALL_NON_CAPITAL)

        row_2023 = result.rows[-1]
        assert row_2023.year == 2023
        assert row_2023.credit_1st == 0
        assert row_2023.credit_2nd == 19_250_000
        assert result.credit_for(2023) == 19_250_000

    @pytest.mark.unit
    def test_credit_carried_into_third_year(self) -> None:
        records = [
            *growing_company(),
            *staff(2023, 12),
            half_year(2023),
            *staff(2024, 13),
        ]

        result = calculate_employment_increase_credit(records, SMALL_NON_CAPITAL)

        row_2024 = result.rows[-1]
        assert row_2024.year == 2024
        assert row_2024.credit_1st == 3_850_000
        assert row_2024.credit_2nd == 0
        assert row_2024.credit_3rd == 19_250_000
        assert row_2024.total_credit == 23_100_000

    @pytest.mark.unit
    def test_headcount_drop_stops_carried_credit(self) -> None:
        records = [
            *growing_company(),
            *staff(2023, 12),
            half_year(2023),
            *staff(2024, 12),
        ]

        result = calculate_employment_increase_credit(records, SMALL_NON_CAPITAL)

        assert result.credit_for(2023) == 19_250_000
        assert result.credit_for(2024) == 0
        assert 2024 not in [row.year for row in result.rows]

    @pytest.mark.unit
    def test_gap_year_generates_nothing(self) -> None:
        records = [*staff(2020, 10), *staff(2022, 15)]

        result = calculate_employment_increase_credit(records, SMALL_NON_CAPITAL)

        assert result.rows == []
        assert result.generated == {}

    @pytest.mark.unit
    def test_youth_increase_uses_youth_rate(self) -> None:
        youth = {"youth_months": 12, "normal_months": 0}
        records = [
            *staff(2022, 8),
            *staff(2022, 2, prefix="청년", **youth),
            *staff(2023, 8),
            *staff(2023, 5, prefix="청년", **youth),
        ]

        result = calculate_employment_increase_credit(records, SMALL_CAPITAL)

        [row] = result.rows
        assert row.youth_increase == 3.0
        assert row.other_increase == 0.0
        assert row.credit_1st == 3 * 1100 * 10_000
        assert "youth 3.0 x 1100" in row.details

    @pytest.mark.unit
    def test_excluded_records_are_ignored(self) -> None:
        records = [
            *staff(2022, 10),
            *staff(2023, 10),
            employee_year(2023, "대표", exclusion_reason=ExclusionReason.EXECUTIVE),
        ]

        result = calculate_employment_increase_credit(records, SMALL_NON_CAPITAL)

        assert result.rows == []

    @pytest.mark.unit
    def test_large_company_keeps_increase_row_without_credit(self) -> None:
        records = [*staff(2022, 10), *staff(2023, 11)]

        result = calculate_employment_increase_credit(
            records, CreditConfig(size="large")
        )

        [row] = result.rows
        assert row.diff_overall == 1.0
        assert row.total_credit == 0

    @pytest.mark.unit
    def test_uses_settings_when_no_config(self) -> None:
        records = [*staff(2022, 10), *staff(2023, 11)]

        result = calculate_employment_increase_credit(records)

        assert result.rows[0].other_rate == 770


class TestIntegratedEmploymentCredit:
    """Integrated employment credit rows from 2023."""

    @pytest.mark.unit
    def test_rows_start_in_2023(self) -> None:
        records = [*staff(2021, 8), *staff(2022, 10), *staff(2023, 12)]

        result = calculate_integrated_employment_credit(records, SMALL_CAPITAL)

        [row] = result.rows
        assert row.year == 2023
        assert row.credit_1st == 17_000_000
        assert row.credit_2nd == 17_000_000
        assert 2022 in result.generated

    @pytest.mark.unit
    def test_earlier_years_serve_as_baseline(self) -> None:
        records = [*staff(2022, 10), *staff(2023, 12)]

        result = calculate_integrated_employment_credit(records, SMALL_NON_CAPITAL)

        assert result.credit_for(2023) == 17_000_000
