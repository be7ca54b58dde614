"""Merge the per-year results of the credit engines into one table."""

from dataclasses import dataclass, field

import polars as pl

from taxcredit.credits.employment_increase import EmploymentCreditResult
from taxcredit.credits.income_increase import IncomeIncreaseResult
from taxcredit.credits.rates import INTEGRATED_EMPLOYMENT_FIRST_YEAR
from taxcredit.credits.social_insurance import SocialInsuranceResult

SUMMARY_YEARS = 5

CATEGORIES = (
    "employment_increase",
    "integrated_employment",
    "social_insurance",
    "income_increase",
)


@dataclass(frozen=True)
class SummaryRow:
    year: int
    employment_increase: int = 0
    integrated_employment: int = 0
    social_insurance: int = 0
    income_increase: int = 0

    @property
    def total(self) -> int:
        return sum(getattr(self, category) for category in CATEGORIES)


@dataclass
class TaxCreditSummary:
    rows: list[SummaryRow] = field(default_factory=list)

    @property
    def years(self) -> list[int]:
        return [row.year for row in self.rows]

    @property
    def grand_total(self) -> int:
        return sum(row.total for row in self.rows)

    def category_total(self, category: str) -> int:
        return sum(getattr(row, category) for row in self.rows)


def aggregate_tax_credit_summary(
    employment: EmploymentCreditResult | None = None,
    social_insurance: SocialInsuranceResult | None = None,
    income_increase: IncomeIncreaseResult | None = None,
    max_years: int = SUMMARY_YEARS,
) -> TaxCreditSummary:
    """Per-year credit amounts of the latest ``max_years`` years.

    The employment credit is reported as the integrated employment credit
    from 2023 onward. Years or categories without a result count as zero.

    Args:
        employment: Employment increase engine result
        social_insurance: Social insurance engine result
        income_increase: Income increase engine result
        max_years: Number of most recent years to keep

    Returns:
        TaxCreditSummary: Rows in ascending year order
    """
    amounts: dict[int, dict[str, int]] = {}

    if employment is not None:
        for row in employment.rows:
            category = (
                "integrated_employment"
                if row.year >= INTEGRATED_EMPLOYMENT_FIRST_YEAR
                else "employment_increase"
            )
            amounts.setdefault(row.year, {})[category] = row.total_credit
    if social_insurance is not None:
        for row in social_insurance.rows:
            amounts.setdefault(row.year, {})["social_insurance"] = row.total_credit
    if income_increase is not None:
        for row in income_increase.rows:
            amounts.setdefault(row.year, {})["income_increase"] = row.tax_credit

    latest = sorted(amounts, reverse=True)[:max_years]
    return TaxCreditSummary(
        rows=[SummaryRow(year=year, **amounts[year]) for year in sorted(latest)]
    )


def summary_to_frame(summary: TaxCreditSummary) -> pl.DataFrame:
    """Summary as a polars table with a ``total`` column."""
    schema = {"year": pl.Int64, **{c: pl.Int64 for c in CATEGORIES}, "total": pl.Int64}
    return pl.DataFrame(
        [
            {
                "year": row.year,
                **{category: getattr(row, category) for category in CATEGORIES},
                "total": row.total,
            }
            for row in summary.rows
        ],
        schema=schema,
    )
