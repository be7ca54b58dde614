"""Statutory rates used by the credit engines.

Per-head credit amounts are in units of 10,000 KRW, as printed in the
statute tables.
"""

from dataclasses import dataclass

from taxcredit.config import CompanySize, Region

KRW_UNIT = 10_000

# (youth rate, other rate) per head
EMPLOYMENT_INCREASE_RATES: dict[tuple[CompanySize, Region], tuple[int, int]] = {
    ("small", "capital"): (1100, 700),
    ("small", "non-capital"): (1200, 770),
    ("middle", "capital"): (800, 450),
    ("middle", "non-capital"): (800, 450),
    ("large", "capital"): (0, 0),
    ("large", "non-capital"): (0, 0),
}

INTEGRATED_EMPLOYMENT_RATES: dict[CompanySize, tuple[int, int]] = {
    "small": (1450, 850),
    "middle": (800, 450),
    "large": (400, 0),
}
INTEGRATED_EMPLOYMENT_FIRST_YEAR = 2023


@dataclass(frozen=True)
class SocialInsuranceRate:
    """Employer share of each social insurance, as a fraction of pay."""

    pension: float
    health: float
    care: float
    unemployment: float
    stabilization: float
    accident: float
    total: float


SOCIAL_INSURANCE_RATES: dict[int, SocialInsuranceRate] = {
    2019: SocialInsuranceRate(0.045, 0.0323, 0.00274873, 0.0065, 0.0025, 0.0075, 0.09654873),
    2020: SocialInsuranceRate(0.045, 0.03335, 0.0034185, 0.008, 0.0025, 0.0073, 0.0995685),
    2021: SocialInsuranceRate(0.045, 0.0343, 0.0039515, 0.008, 0.0025, 0.007, 0.1007515),
    2022: SocialInsuranceRate(0.045, 0.03495, 0.0042885, 0.0085, 0.0025, 0.007, 0.1022385),
    2023: SocialInsuranceRate(0.045, 0.03545, 0.004541, 0.009, 0.0025, 0.007, 0.103491),
    2024: SocialInsuranceRate(0.045, 0.03545, 0.004591, 0.009, 0.0025, 0.0066, 0.103141),
}
LATEST_SOCIAL_INSURANCE_YEAR = max(SOCIAL_INSURANCE_RATES)

SOCIAL_INSURANCE_NORMAL_FACTOR = 0.5
SOCIAL_INSURANCE_NEW_GROWTH_FACTOR = 0.75

INCOME_INCREASE_RATES: dict[CompanySize, float] = {
    "small": 0.20,
    "middle": 0.10,
    "large": 0.05,
}
INCOME_INCREASE_LOOKBACK_YEARS = 4
INCOME_INCREASE_SALARY_LIMIT = 70_000_000

# 중소기업 특례 fixed wage growth rate by target year
INCOME_INCREASE_SME_RATES: dict[int, float] = {
    2020: 0.038,
    2021: 0.038,
    2022: 0.030,
    2023: 0.032,
    2024: 0.032,
}
INCOME_INCREASE_SME_DEFAULT_RATE = 0.03
# Wages are annualised per employee for years before this one
INCOME_INCREASE_ACTUAL_WAGES_FROM = 2023
# 계산특례 applies when last year's growth fell below this share of the trend
INCOME_INCREASE_SPECIAL_TREND_SHARE = 0.3


def social_insurance_rate(year: int) -> SocialInsuranceRate:
    """Rate table entry for a year; unknown years use the latest table."""
    return SOCIAL_INSURANCE_RATES.get(
        year, SOCIAL_INSURANCE_RATES[LATEST_SOCIAL_INSURANCE_YEAR]
    )


def employment_increase_rates(size: CompanySize, region: Region) -> tuple[int, int]:
    return EMPLOYMENT_INCREASE_RATES[(size, region)]


def integrated_employment_rates(size: CompanySize) -> tuple[int, int]:
    return INTEGRATED_EMPLOYMENT_RATES[size]
