"""Income increase credit (근로소득 증대 세액공제).

For a target year T the cohort is the set of regular employees of T who
stayed clear of resignations and high salaries over T-4..T. The average wage
of that cohort is followed across the five years and the wage excess over a
trend line earns a credit. Three methods compete for the excess:

* general: T's growth beats the mean growth of the three prior years and
  the excess is measured against T-1 grown by that mean;
* special (계산특례): last year's growth was negative or below a share of
  the trend, so T and T-1 are averaged and measured against T-2 grown by
  the mean of the two years before;
* SME (중소기업 특례): small companies whose growth beats a yearly fixed
  rate, without shrinking headcount, measure against T-1 grown by that rate.

General and special are mutually exclusive; the largest excess wins.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from taxcredit.config import CreditConfig, get_credit_config
from taxcredit.credits.common import floor2, included_records
from taxcredit.credits.rates import (
    INCOME_INCREASE_ACTUAL_WAGES_FROM,
    INCOME_INCREASE_LOOKBACK_YEARS,
    INCOME_INCREASE_RATES,
    INCOME_INCREASE_SALARY_LIMIT,
    INCOME_INCREASE_SME_DEFAULT_RATE,
    INCOME_INCREASE_SME_RATES,
    INCOME_INCREASE_SPECIAL_TREND_SHARE,
)
from taxcredit.extractors.schemas import EmployeeRecord
from taxcredit.utils.text import id_prefix

logger = logging.getLogger(__name__)

REASON_NOT_EMPLOYED = "not employed at year end"
REASON_NO_ID = "no resident ID"
REASON_RESIGNED = "resigned within lookback"
REASON_HIGH_SALARY = "salary above limit within lookback"

METHOD_GENERAL = "general"
METHOD_SPECIAL = "special"
METHOD_SME = "sme"


@dataclass(frozen=True)
class CohortExclusion:
    year: int
    name: str
    resident_id: str
    reason: str
    retire_date: date | None = None


@dataclass(frozen=True)
class CohortYearStat:
    """Average wages of the target-year cohort in one lookback year."""

    year: int
    avg_wage: float
    avg_wage_excl_new_hires: float
    fte: float
    total_wages: int
    count: int


@dataclass
class IncomeIncreaseRow:
    year: int
    avg_wage_t: float
    avg_wage_t_1: float
    rate_t: float | None
    prior_rates: list[float | None]
    avg_prev_rate: float
    employee_count_pre: float
    employee_count_curr: float
    excess_amount: float
    tax_credit: int
    method: str | None = None
    method_excess: dict[str, float] = field(default_factory=dict)
    sme_fixed_rate: float = INCOME_INCREASE_SME_DEFAULT_RATE
    cohort: list[EmployeeRecord] = field(default_factory=list)
    excluded: list[CohortExclusion] = field(default_factory=list)
    history: dict[int, CohortYearStat] = field(default_factory=dict)

    @property
    def is_eligible(self) -> bool:
        return self.tax_credit > 0


@dataclass
class IncomeIncreaseResult:
    rows: list[IncomeIncreaseRow] = field(default_factory=list)
    skipped_years: list[int] = field(default_factory=list)

    def credit_for(self, year: int) -> int:
        for row in self.rows:
            if row.year == year:
                return row.tax_credit
        return 0


def is_same_employee(a: EmployeeRecord, b: EmployeeRecord) -> bool:
    """Exact name and equal resident ID prefix, both IDs required."""
    if not a.name or a.name != b.name:
        return False
    if not a.resident_id or not b.resident_id:
        return False
    if a.resident_id == b.resident_id:
        return True
    return id_prefix(a.resident_id) is not None and id_prefix(
        a.resident_id
    ) == id_prefix(b.resident_id)


def is_employed_at_year_end(record: EmployeeRecord, year: int) -> bool:
    year_end = date(year, 12, 31)
    if record.hire_date is not None and record.hire_date > year_end:
        return False
    return record.retire_date is None or record.retire_date >= year_end


def growth_rate(current_excl: float, previous: float) -> float | None:
    """Year-over-year growth, None without a positive base."""
    if previous <= 0:
        return None
    return (current_excl - previous) / previous


def annualised_salary(record: EmployeeRecord) -> float:
    if record.total_months <= 0:
        return 0.0
    return record.total_salary * 12 / record.total_months


def average_wage(
    records: list[EmployeeRecord], annualise: bool = False
) -> tuple[float, float]:
    """(average wage, FTE) of a group of employee-years.

    With ``annualise`` each salary is scaled to twelve months before
    summing; the divisor stays the group's FTE.
    """
    fte = floor2(sum(record.total_months for record in records) / 12)
    if not records or fte <= 0:
        return 0.0, fte
    if annualise:
        return sum(annualised_salary(record) for record in records) / fte, fte
    return sum(record.total_salary for record in records) / fte, fte


def sme_fixed_rate(year: int) -> float:
    return INCOME_INCREASE_SME_RATES.get(year, INCOME_INCREASE_SME_DEFAULT_RATE)


def as_percent(rate: float | None, digits: int) -> float:
    """Rate as a rounded percentage; a missing rate counts as 0 %."""
    return round((rate or 0.0) * 100, digits)


def needs_special_provision(rate_t_1: float | None, avg_prev_rate: float) -> bool:
    """Last year's growth was negative or fell short of the trend share."""
    if rate_t_1 is None:
        return False
    if rate_t_1 < 0:
        return True
    return (
        avg_prev_rate > 0
        and rate_t_1 < INCOME_INCREASE_SPECIAL_TREND_SHARE * avg_prev_rate
    )


class IncomeIncreaseCalculator:
    """Evaluate each target year against its five-year window."""

    def __init__(self, records: Iterable[EmployeeRecord], config: CreditConfig):
        self.config = config
        self.by_year: dict[int, list[EmployeeRecord]] = {}
        for record in included_records(records):
            self.by_year.setdefault(record.year, []).append(record)  # type: ignore[arg-type]

    def window(self, target_year: int) -> list[int]:
        return list(
            range(target_year - INCOME_INCREASE_LOOKBACK_YEARS, target_year + 1)
        )

    def has_full_lookback(self, target_year: int) -> bool:
        return all(year in self.by_year for year in self.window(target_year))

    def matching(self, year: int, person: EmployeeRecord) -> list[EmployeeRecord]:
        return [r for r in self.by_year.get(year, []) if is_same_employee(r, person)]

    def exclusion_for(
        self, employee: EmployeeRecord, target_year: int
    ) -> CohortExclusion | None:
        """Why ``employee`` is left out of the cohort of ``target_year``."""

        def excluded(reason: str, retire_date: date | None = None) -> CohortExclusion:
            return CohortExclusion(
                target_year, employee.name, employee.resident_id, reason, retire_date
            )

        if not is_employed_at_year_end(employee, target_year):
            return excluded(REASON_NOT_EMPLOYED, employee.retire_date)
        if not employee.resident_id:
            return excluded(REASON_NO_ID)

        years = sorted(self.window(target_year), reverse=True)
        for year in years:
            for record in self.matching(year, employee):
                if record.retire_date is not None and record.retire_date.year == year:
                    return excluded(REASON_RESIGNED, record.retire_date)
        for year in years:
            salary = sum(r.total_salary for r in self.matching(year, employee))
            if salary > INCOME_INCREASE_SALARY_LIMIT:
                return excluded(REASON_HIGH_SALARY)
        return None

    def cohort_stats(
        self, cohort: list[EmployeeRecord], year: int
    ) -> CohortYearStat:
        members = [r for person in cohort for r in self.matching(year, person)]
        year_start = date(year, 1, 1)
        veterans = [
            r for r in members if r.hire_date is not None and r.hire_date < year_start
        ]
        annualise = year < INCOME_INCREASE_ACTUAL_WAGES_FROM
        avg_wage, fte = average_wage(members, annualise)
        avg_wage_excl, _ = average_wage(veterans, annualise)
        return CohortYearStat(
            year=year,
            avg_wage=avg_wage,
            avg_wage_excl_new_hires=avg_wage_excl,
            fte=fte,
            total_wages=sum(r.total_salary for r in members),
            count=len(members),
        )

    def evaluate(self, target_year: int) -> IncomeIncreaseRow:
        cohort: list[EmployeeRecord] = []
        excluded: list[CohortExclusion] = []
        for employee in self.by_year[target_year]:
            exclusion = self.exclusion_for(employee, target_year)
            if exclusion is None:
                cohort.append(employee)
            else:
                excluded.append(exclusion)

        history = {
            year: self.cohort_stats(cohort, year) for year in self.window(target_year)
        }

        def rate_of(year: int) -> float | None:
            return growth_rate(
                history[year].avg_wage_excl_new_hires, history[year - 1].avg_wage
            )

        rate_t = rate_of(target_year)
        prior_rates = [rate_of(target_year - offset) for offset in (1, 2, 3)]
        available = [rate for rate in prior_rates if rate is not None]
        avg_prev_rate = sum(available) / len(available) if available else 0.0

        wage_t = history[target_year].avg_wage
        wage_t_1 = history[target_year - 1].avg_wage
        wage_t_2 = history[target_year - 2].avg_wage
        count_pre = history[target_year - 1].fte
        count_curr = history[target_year].fte
        rate_t_1, rate_t_2, rate_t_3 = prior_rates

        method_excess: dict[str, float] = {}
        if wage_t_2 > 0 and needs_special_provision(rate_t_1, avg_prev_rate):
            special_prev_rate = ((rate_t_2 or 0.0) + (rate_t_3 or 0.0)) / 2
            diff = (wage_t + wage_t_1) / 2 - wage_t_2 * (1 + special_prev_rate)
            method_excess[METHOD_SPECIAL] = max(diff, 0.0) * count_pre
        elif rate_t is not None and rate_t > avg_prev_rate >= 0:
            diff = wage_t - wage_t_1 * (1 + avg_prev_rate)
            if diff > 0:
                method_excess[METHOD_GENERAL] = diff * count_pre

        fixed_rate = sme_fixed_rate(target_year)
        if (
            self.config.size == "small"
            and as_percent(rate_t, 2) > as_percent(fixed_rate, 1)
            and count_curr >= count_pre
            and as_percent(rate_t_1, 2) >= 0
        ):
            diff = wage_t - wage_t_1 * (1 + fixed_rate)
            if diff > 0:
                method_excess[METHOD_SME] = diff * count_pre

        method = None
        excess = 0.0
        if method_excess:
            method = max(method_excess, key=lambda name: method_excess[name])
            excess = method_excess[method]
            logger.debug(
                f"Income increase {target_year}: {method} method, "
                f"excess {excess:,.0f} KRW"
            )
        credit = (
            math.floor(excess * INCOME_INCREASE_RATES[self.config.size])
            if excess > 0
            else 0
        )

        return IncomeIncreaseRow(
            year=target_year,
            avg_wage_t=wage_t,
            avg_wage_t_1=wage_t_1,
            rate_t=rate_t,
            prior_rates=prior_rates,
            avg_prev_rate=avg_prev_rate,
            employee_count_pre=count_pre,
            employee_count_curr=count_curr,
            excess_amount=excess,
            tax_credit=credit,
            method=method,
            method_excess=method_excess,
            sme_fixed_rate=fixed_rate,
            cohort=cohort,
            excluded=excluded,
            history=history,
        )

    def calculate(self) -> IncomeIncreaseResult:
        result = IncomeIncreaseResult()
        for year in sorted(self.by_year):
            if not self.has_full_lookback(year):
                result.skipped_years.append(year)
                continue
            result.rows.append(self.evaluate(year))
        return result


def calculate_income_increase_credit(
    records: Iterable[EmployeeRecord], config: CreditConfig | None = None
) -> IncomeIncreaseResult:
    """Income increase credit for every year with a full five-year window.

    Args:
        records: Analyzed employee-years; excluded records are ignored
        config: Company profile; ``size`` selects the credit rate and
            whether the SME provision applies

    Returns:
        IncomeIncreaseResult: One row per evaluated year, with the cohort and
        the excluded employees for review
    """
    config = config or get_credit_config()
    result = IncomeIncreaseCalculator(records, config).calculate()
    if result.skipped_years:
        logger.debug(
            f"Income increase: no full lookback for {result.skipped_years}"
        )
    logger.info(
        f"Income increase credit: {len(result.rows)} years evaluated, "
        f"total {sum(row.tax_credit for row in result.rows):,} KRW"
    )
    return result
