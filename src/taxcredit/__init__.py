"""taxcredit: employment tax-credit reconciliation from Korean corporate filings.

This package turns positioned text from PDF documents into normalized records:
- Payroll withholding ledgers (근로소득 원천징수부) into per-employee monthly pay
- Corporate registries (법인 등기사항증명서) into executive tenure histories
- Corporate tax returns (법인세 신고서) into tax bases, credits and shareholders

The normalized records then feed multi-year calculators for the employment
increase, social insurance and income increase tax credits.
"""

__version__ = "0.1.0"
