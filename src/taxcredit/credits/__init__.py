"""Multi-year tax credit engines over analyzed employee-years."""

from taxcredit.credits.common import (
    AnnualCohortStat,
    IncreaseRecognition,
    annual_stats,
    floor2,
    recognize_increase,
)
from taxcredit.credits.employment_increase import (
    EmploymentCreditResult,
    EmploymentCreditRow,
    calculate_employment_increase_credit,
    calculate_integrated_employment_credit,
)
from taxcredit.credits.income_increase import (
    IncomeIncreaseResult,
    IncomeIncreaseRow,
    calculate_income_increase_credit,
)
from taxcredit.credits.social_insurance import (
    SocialInsuranceResult,
    SocialInsuranceRow,
    calculate_social_insurance_credit,
)
from taxcredit.credits.summary import (
    SummaryRow,
    TaxCreditSummary,
    aggregate_tax_credit_summary,
    summary_to_frame,
)

__all__ = [
    "AnnualCohortStat",
    "EmploymentCreditResult",
    "EmploymentCreditRow",
    "IncomeIncreaseResult",
    "IncomeIncreaseRow",
    "IncreaseRecognition",
    "SocialInsuranceResult",
    "SocialInsuranceRow",
    "SummaryRow",
    "TaxCreditSummary",
    "aggregate_tax_credit_summary",
    "annual_stats",
    "calculate_employment_increase_credit",
    "calculate_income_increase_credit",
    "calculate_integrated_employment_credit",
    "calculate_social_insurance_credit",
    "floor2",
    "recognize_increase",
    "summary_to_frame",
]
