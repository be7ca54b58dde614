"""Employment increase credit (고용증대 세액공제) and its successor, the
integrated employment credit (통합고용 세액공제).

A headcount increase over the previous year generates a credit of a fixed
amount per additional head, higher for youth. The credit generated in year Y
is paid again in Y+1 and Y+2 as long as the overall headcount stays at or
above its level in Y.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from taxcredit.config import CreditConfig, get_credit_config
from taxcredit.credits.common import (
    AnnualCohortStat,
    IncreaseRecognition,
    annual_stats,
    floor_krw,
    recognize_increase,
    round2,
)
from taxcredit.credits.rates import (
    INTEGRATED_EMPLOYMENT_FIRST_YEAR,
    KRW_UNIT,
    employment_increase_rates,
    integrated_employment_rates,
)
from taxcredit.extractors.schemas import EmployeeRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedCredit:
    """First-year credit generated by the increase of one year."""

    year: int
    amount: int
    required_overall_count: float
    base_overall_count: float
    increase: IncreaseRecognition


@dataclass(frozen=True)
class EmploymentCreditRow:
    """Credit receivable in one year: first-year plus carried payments."""

    year: int
    diff_overall: float
    youth_increase: float
    other_increase: float
    credit_1st: int
    credit_2nd: int
    credit_3rd: int
    youth_rate: int
    other_rate: int

    @property
    def total_credit(self) -> int:
        return self.credit_1st + self.credit_2nd + self.credit_3rd

    @property
    def details(self) -> str:
        return (
            f"youth {self.youth_increase} x {self.youth_rate} + "
            f"other {self.other_increase} x {self.other_rate} (10,000 KRW)"
        )


@dataclass
class EmploymentCreditResult:
    annual_stats: list[AnnualCohortStat]
    rows: list[EmploymentCreditRow] = field(default_factory=list)
    generated: dict[int, GeneratedCredit] = field(default_factory=dict)

    def credit_for(self, year: int) -> int:
        """Total receivable credit of a year, 0 when no row exists."""
        for row in self.rows:
            if row.year == year:
                return row.total_credit
        return 0


def cumulative_credits(
    stats: list[AnnualCohortStat], youth_rate: int, other_rate: int
) -> EmploymentCreditResult:
    """Generate first-year credits and carry them into the next two years.

    Args:
        stats: Annual headcounts, oldest first
        youth_rate: Credit per additional youth head (10,000 KRW)
        other_rate: Credit per additional other head (10,000 KRW)

    Returns:
        EmploymentCreditResult: Receivable credit rows, oldest first
    """
    generated: dict[int, GeneratedCredit] = {}
    previous: AnnualCohortStat | None = None
    for stat in stats:
        increase = recognize_increase(stat, previous)
        if previous is not None and previous.year == stat.year - 1:
            amount = floor_krw(
                (
                    increase.youth_increase * youth_rate
                    + increase.other_increase * other_rate
                )
                * KRW_UNIT
            )
            generated[stat.year] = GeneratedCredit(
                year=stat.year,
                amount=amount,
                required_overall_count=stat.overall_count,
                base_overall_count=previous.overall_count,
                increase=increase,
            )
        previous = stat

    rows = []
    for stat in stats:
        first = generated.get(stat.year)
        carried = []
        for offset in (1, 2):
            origin = generated.get(stat.year - offset)
            if origin and stat.overall_count >= origin.required_overall_count:
                carried.append(origin.amount)
            else:
                carried.append(0)

        credit_1st = first.amount if first else 0
        diff_overall = (
            round2(stat.overall_count - first.base_overall_count) if first else 0.0
        )
        if credit_1st + sum(carried) <= 0 and diff_overall <= 0:
            continue
        rows.append(
            EmploymentCreditRow(
                year=stat.year,
                diff_overall=diff_overall,
                youth_increase=first.increase.youth_increase if first else 0.0,
                other_increase=first.increase.other_increase if first else 0.0,
                credit_1st=credit_1st,
                credit_2nd=carried[0],
                credit_3rd=carried[1],
                youth_rate=youth_rate,
                other_rate=other_rate,
            )
        )

    return EmploymentCreditResult(annual_stats=stats, rows=rows, generated=generated)


def calculate_employment_increase_credit(
    records: Iterable[EmployeeRecord], config: CreditConfig | None = None
) -> EmploymentCreditResult:
    """Employment increase credit over all years in ``records``.

    Args:
        records: Analyzed employee-years; excluded records are ignored
        config: Company profile (defaults to the application settings)

    Returns:
        EmploymentCreditResult: Annual headcounts and receivable credits
    """
    config = config or get_credit_config()
    youth_rate, other_rate = employment_increase_rates(config.size, config.region)
    result = cumulative_credits(annual_stats(records), youth_rate, other_rate)
    logger.info(
        f"Employment increase credit: {len(result.rows)} years, "
        f"total {sum(row.total_credit for row in result.rows):,} KRW"
    )
    return result


def calculate_integrated_employment_credit(
    records: Iterable[EmployeeRecord], config: CreditConfig | None = None
) -> EmploymentCreditResult:
    """Integrated employment credit, reported from 2023 onward.

    Earlier years still serve as baselines for the 2023 increase.
    """
    config = config or get_credit_config()
    youth_rate, other_rate = integrated_employment_rates(config.size)
    result = cumulative_credits(annual_stats(records), youth_rate, other_rate)
    result.rows = [
        row for row in result.rows if row.year >= INTEGRATED_EMPLOYMENT_FIRST_YEAR
    ]
    return result
