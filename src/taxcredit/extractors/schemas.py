"""Pydantic schemas for records extracted from withholding, registry and tax documents.

The data model balances structure with flexibility:
- Each document kind has its own record type carrying a ``kind`` tag, so a
  parsed document is a closed tagged union (``ExtractedDocument``)
- Employee records hold the raw monthly pay as extracted plus the derived
  employment classification added later by the status analyzer
- Executive start/end dates are computed from the tenure history instead of
  being stored, so appending an event can never leave them stale
"""

import datetime as dt
from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, computed_field, field_validator

MONTHS = range(1, 13)


class DocumentKind(str, Enum):
    """The three document kinds the classifier can choose from."""

    WITHHOLDING = "withholding"
    REGISTRY = "registry"
    TAX_RETURN = "tax_return"


class ExclusionReason(str, Enum):
    """Why an employee-year is left out of the credit calculations."""

    NONE = "none"
    EXECUTIVE = "executive"
    SHAREHOLDER = "shareholder"
    OTHER = "other"


class HistoryEventType(str, Enum):
    """Executive tenure events recorded in a corporate registry."""

    ASSUME = "assume"
    REASSUME = "reassume"
    RESIGN = "resign"
    RETIRE = "retire"
    EXPIRE = "expire"
    DISMISS = "dismiss"

    @property
    def is_terminal(self) -> bool:
        """Whether the event ends a tenure."""
        return self in TERMINAL_EVENTS


TERMINAL_EVENTS = frozenset(
    {
        HistoryEventType.RESIGN,
        HistoryEventType.RETIRE,
        HistoryEventType.EXPIRE,
        HistoryEventType.DISMISS,
    }
)


def _empty_months() -> dict[int, int]:
    return {month: 0 for month in MONTHS}


class EmployeeRecord(BaseModel):
    """One employee in one fiscal year, as read from a withholding ledger.

    The classification fields default to zero and are filled in by
    ``taxcredit.analysis.employee_status``; ``exclusion_reason`` is set by the
    exclusion resolver and may be overridden by the user afterwards.
    """

    year: int | None = Field(None, description="Fiscal year of the ledger")
    name: str = Field(..., description="Employee name (성명)")
    resident_id: str = Field("", description="Resident ID, possibly masked")
    hire_date: date | None = Field(None, description="Hire date (입사일)")
    retire_date: date | None = Field(None, description="Retire date (퇴사일)")
    monthly_salary: dict[int, int] = Field(default_factory=_empty_months)
    monthly_bonus: dict[int, int] = Field(default_factory=_empty_months)

    # Derived classification
    youth_months: int = Field(0, description="Employed month-ends in youth band")
    normal_months: int = Field(0, description="Employed month-ends in normal band")
    youth_salary: int = Field(0, description="Pay earned in youth-band months")
    normal_salary: int = Field(0, description="Pay earned in normal-band months")
    si_total_salary: int = Field(0, description="Pay counted for social insurance")
    si_youth_salary: int = Field(0, description="Youth-band social insurance pay")
    si_normal_salary: int = Field(0, description="Normal-band social insurance pay")
    is_youth: bool = Field(False, description="Youth band at fiscal year end")
    age_at_year_end: int | None = Field(None, description="Age on Dec 31")

    exclusion_reason: ExclusionReason = Field(default=ExclusionReason.NONE)
    exclusion_overridden: bool = Field(
        False, description="Reason was set by the user and must not be recomputed"
    )
    source_file: str | None = Field(None, description="Ledger the record came from")

    @field_validator("monthly_salary", "monthly_bonus", mode="before")
    @classmethod
    def fill_months(cls, v: Any) -> dict[int, int]:
        """Ensure all twelve month slots are present."""
        months = _empty_months()
        if v:
            for key, amount in dict(v).items():
                month = int(key)
                if month in months:
                    months[month] = int(amount or 0)
        return months

    @computed_field  # type: ignore[prop-decorator]
    @property
    def salary_total(self) -> int:
        """Sum of the monthly salary column (급여계)."""
        return sum(self.monthly_salary.values())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def bonus_total(self) -> int:
        """Sum of the monthly bonus column (상여계)."""
        return sum(self.monthly_bonus.values())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_salary(self) -> int:
        """Total pay for the year (총급여액)."""
        return self.salary_total + self.bonus_total

    @property
    def total_months(self) -> int:
        return self.youth_months + self.normal_months

    @property
    def is_excluded(self) -> bool:
        return self.exclusion_reason != ExclusionReason.NONE


class HistoryEvent(BaseModel):
    """One dated tenure event of an executive."""

    date: dt.date
    event_type: HistoryEventType


class ExecutiveRecord(BaseModel):
    """An executive listed in the registry, with tenure history."""

    name: str
    resident_id: str = ""
    position: str = ""
    history: list[HistoryEvent] = Field(default_factory=list)

    def sorted_history(self) -> list[HistoryEvent]:
        return sorted(self.history, key=lambda event: event.date)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def start_date(self) -> date | None:
        """Date of the first tenure event."""
        history = self.sorted_history()
        return history[0].date if history else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def end_date(self) -> date | None:
        """Date of the last event, only when that event ends the tenure."""
        history = self.sorted_history()
        if history and history[-1].event_type.is_terminal:
            return history[-1].date
        return None

    def overlaps(self, start: date, end: date) -> bool:
        """Whether the tenure intersects the closed range [start, end].

        An executive without history is treated as serving throughout.
        """
        if self.start_date is not None and self.start_date > end:
            return False
        if self.end_date is not None and self.end_date < start:
            return False
        return True


class ShareholderRecord(BaseModel):
    """A related-party shareholder from the share-change statement."""

    name: str
    resident_id: str = Field("", description="Masked resident ID")
    relation_code: str = Field(..., pattern=r"^0[0-8]$")
    relation_name: str = ""
    shares: int = Field(0, ge=0)
    ratio: float = Field(0.0, description="Share ratio in percent")
    year: int | None = None


class TaxCreditItem(BaseModel):
    """One line of the tax-credit adjustment statement."""

    code: str = Field(..., min_length=3, max_length=3)
    name: str
    amount: int


class WithholdingLedger(BaseModel):
    """Parsed payroll withholding ledger (근로소득 원천징수부)."""

    kind: Literal[DocumentKind.WITHHOLDING] = DocumentKind.WITHHOLDING
    source_file: str = ""
    year: int | None = None
    employees: list[EmployeeRecord] = Field(default_factory=list)


class RegistryRecord(BaseModel):
    """Parsed corporate registry (법인 등기사항증명서)."""

    kind: Literal[DocumentKind.REGISTRY] = DocumentKind.REGISTRY
    source_file: str = ""
    company_name: str = ""
    address: str = ""
    is_capital_area: bool = False
    executives: list[ExecutiveRecord] = Field(default_factory=list)


class TaxReturnRecord(BaseModel):
    """Parsed corporate tax return bundle (법인세 과세표준 및 세액신고서 외)."""

    kind: Literal[DocumentKind.TAX_RETURN] = DocumentKind.TAX_RETURN
    source_file: str = ""
    year: int | None = None
    tax_base: int = Field(0, description="과세표준")
    calculated_tax: int = Field(0, description="산출세액")
    min_tax_target: int = Field(0, description="최저한세 적용대상 공제감면세액")
    deducted_tax: int = Field(0, description="차감세액")
    total_adjustment: int = Field(0, description="가감계")
    min_tax: int = Field(0, description="최저한세")
    tax_credits: list[TaxCreditItem] = Field(default_factory=list)
    shareholders: list[ShareholderRecord] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def min_tax_adjustment(self) -> int:
        """Headroom above the minimum tax (차감세액 - 최저한세)."""
        return self.deducted_tax - self.min_tax


ExtractedDocument = Annotated[
    WithholdingLedger | RegistryRecord | TaxReturnRecord,
    Field(discriminator="kind"),
]
