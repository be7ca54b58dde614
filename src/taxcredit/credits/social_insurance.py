"""Social insurance credit for additional employees (사회보험료 세액공제).

The employer's social insurance burden for the increase in headcount is
credited: fully for youth, and at 50 % (75 % for new-growth services) for
other employees. The credit generated in one year is paid again in the next
year if the overall headcount does not fall.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from taxcredit.config import CreditConfig, get_credit_config
from taxcredit.credits.common import (
    AnnualCohortStat,
    annual_stats,
    recognize_increase,
    round2,
)
from taxcredit.credits.rates import (
    SOCIAL_INSURANCE_NEW_GROWTH_FACTOR,
    SOCIAL_INSURANCE_NORMAL_FACTOR,
    social_insurance_rate,
)
from taxcredit.extractors.schemas import EmployeeRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocialInsuranceRow:
    year: int
    youth_increase: float
    other_increase: float
    youth_burden: float
    normal_burden: float
    youth_credit: int
    normal_credit: int
    support_2nd_year: int
    insurance_rate: float

    @property
    def generated_credit(self) -> int:
        """Credit generated by this year's increase."""
        return self.youth_credit + self.normal_credit

    @property
    def total_credit(self) -> int:
        """Credit receivable in this year, including the carried support."""
        return self.generated_credit + self.support_2nd_year


@dataclass
class SocialInsuranceResult:
    annual_stats: list[AnnualCohortStat]
    rows: list[SocialInsuranceRow] = field(default_factory=list)
    factor: float = SOCIAL_INSURANCE_NORMAL_FACTOR

    def credit_for(self, year: int) -> int:
        for row in self.rows:
            if row.year == year:
                return row.total_credit
        return 0


def per_head_burden(si_salary: int, head_count: float, rate: float) -> float:
    """Employer insurance burden per full-time head, 0 without heads."""
    if head_count <= 0:
        return 0.0
    return si_salary / head_count * rate


def calculate_social_insurance_credit(
    records: Iterable[EmployeeRecord], config: CreditConfig | None = None
) -> SocialInsuranceResult:
    """Social insurance credit over all years in ``records``.

    Args:
        records: Analyzed employee-years; excluded records are ignored
        config: Company profile; ``is_new_growth`` selects the normal factor

    Returns:
        SocialInsuranceResult: Annual headcounts and receivable credits
    """
    config = config or get_credit_config()
    factor = (
        SOCIAL_INSURANCE_NEW_GROWTH_FACTOR
        if config.is_new_growth
        else SOCIAL_INSURANCE_NORMAL_FACTOR
    )
    stats = annual_stats(records)

    rows: list[SocialInsuranceRow] = []
    generated: dict[int, int] = {}
    previous: AnnualCohortStat | None = None
    for stat in stats:
        rate = social_insurance_rate(stat.year).total
        youth_burden = per_head_burden(stat.si_youth_salary, stat.youth_count, rate)
        normal_burden = per_head_burden(
            stat.si_normal_salary, round2(stat.overall_count - stat.youth_count), rate
        )

        increase = recognize_increase(stat, previous)
        youth_credit = math.floor(increase.youth_increase * youth_burden)
        normal_credit = math.floor(increase.other_increase * normal_burden * factor)
        generated[stat.year] = youth_credit + normal_credit

        support = 0
        if (
            previous is not None
            and previous.year == stat.year - 1
            and stat.overall_count >= previous.overall_count
        ):
            support = generated.get(previous.year, 0)

        row = SocialInsuranceRow(
            year=stat.year,
            youth_increase=increase.youth_increase,
            other_increase=increase.other_increase,
            youth_burden=youth_burden,
            normal_burden=normal_burden,
            youth_credit=youth_credit,
            normal_credit=normal_credit,
            support_2nd_year=support,
            insurance_rate=rate,
        )
        if row.generated_credit > 0 or support > 0:
            rows.append(row)
        previous = stat

    logger.info(
        f"Social insurance credit: {len(rows)} years, "
        f"total {sum(row.total_credit for row in rows):,} KRW"
    )
    return SocialInsuranceResult(annual_stats=stats, rows=rows, factor=factor)
