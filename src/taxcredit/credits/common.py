"""Shared building blocks of the credit engines.

Headcounts are expressed as full-time equivalents: employed month-ends
divided by twelve and truncated to two decimals. The overall, youth and
normal counts are each truncated on their own, so the overall count need not
equal the sum of the other two.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from taxcredit.extractors.schemas import EmployeeRecord


def floor2(value: float) -> float:
    """Truncate to two decimals: ``floor2(2.999) == 2.99``.

    The product is rounded to nine places first so binary float noise such
    as ``0.29 * 100 == 28.999999999999996`` does not lose a hundredth.
    """
    return math.floor(round(value * 100, 9)) / 100


def round2(value: float) -> float:
    return round(value, 2)


def floor_krw(value: float) -> int:
    """Truncate a won amount, ignoring float noise below a millionth."""
    return math.floor(round(value, 6))


def included_records(records: Iterable[EmployeeRecord]) -> list[EmployeeRecord]:
    """Records that count toward credits (no exclusion reason, known year)."""
    return [r for r in records if not r.is_excluded and r.year is not None]


@dataclass(frozen=True)
class AnnualCohortStat:
    """Headcounts and pay sums of one fiscal year."""

    year: int
    youth_months: int
    normal_months: int
    overall_count: float
    youth_count: float
    normal_count: float
    youth_salary: int = 0
    normal_salary: int = 0
    si_total_salary: int = 0
    si_youth_salary: int = 0
    si_normal_salary: int = 0

    @property
    def total_months(self) -> int:
        return self.youth_months + self.normal_months


def annual_stats(records: Iterable[EmployeeRecord]) -> list[AnnualCohortStat]:
    """Aggregate employee-years into per-year headcounts, oldest year first."""
    sums: dict[int, dict[str, int]] = {}
    for record in included_records(records):
        bucket = sums.setdefault(
            record.year,  # type: ignore[arg-type]
            {
                "youth_months": 0,
                "normal_months": 0,
                "youth_salary": 0,
                "normal_salary": 0,
                "si_total_salary": 0,
                "si_youth_salary": 0,
                "si_normal_salary": 0,
            },
        )
        for key in bucket:
            bucket[key] += getattr(record, key)

    stats = []
    for year in sorted(sums):
        bucket = sums[year]
        youth, normal = bucket["youth_months"], bucket["normal_months"]
        stats.append(
            AnnualCohortStat(
                year=year,
                overall_count=floor2((youth + normal) / 12),
                youth_count=floor2(youth / 12),
                normal_count=floor2(normal / 12),
                **bucket,
            )
        )
    return stats


@dataclass(frozen=True)
class IncreaseRecognition:
    """Headcount increase of a year over the preceding year."""

    diff_overall: float = 0.0
    diff_youth: float = 0.0
    youth_increase: float = 0.0
    other_increase: float = 0.0

    @property
    def total_increase(self) -> float:
        return round2(self.youth_increase + self.other_increase)


def recognize_increase(
    current: AnnualCohortStat, previous: AnnualCohortStat | None
) -> IncreaseRecognition:
    """Split the overall increase into youth and other increases.

    Only an immediately preceding calendar year counts as a baseline. Youth
    increase is recognised up to the overall increase; the remainder is
    the other increase.
    """
    if previous is None or previous.year != current.year - 1:
        return IncreaseRecognition()

    diff_overall = round2(current.overall_count - previous.overall_count)
    diff_youth = round2(current.youth_count - previous.youth_count)
    if diff_overall <= 0:
        return IncreaseRecognition(diff_overall=diff_overall, diff_youth=diff_youth)

    youth_increase = max(0.0, min(diff_overall, diff_youth))
    return IncreaseRecognition(
        diff_overall=diff_overall,
        diff_youth=diff_youth,
        youth_increase=youth_increase,
        other_increase=round2(diff_overall - youth_increase),
    )


def stats_by_year(stats: Sequence[AnnualCohortStat]) -> dict[int, AnnualCohortStat]:
    return {stat.year: stat for stat in stats}
