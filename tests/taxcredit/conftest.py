"""Shared pytest fixtures for taxcredit tests.

Documents are simulated with synthetic positioned words, so the extractors
can be exercised without binary PDF fixtures.
"""

from collections.abc import Generator, Iterable
from datetime import date

import pytest

from taxcredit.config import clear_settings_cache
from taxcredit.extractors.layout import Word
from taxcredit.extractors.schemas import EmployeeRecord


def make_word(
    text: str, x0: float, top: float, width: float = 10.0, page: int = 0
) -> Word:
    """Create a word with a fixed height of 10."""
    return Word(text=text, x0=x0, x1=x0 + width, top=top, bottom=top + 10, page=page)


def words_from_text(text: str, top: float = 100.0, page: int = 0) -> list[Word]:
    """Lay out whitespace-separated words left to right on one baseline."""
    return [
        make_word(token, x0=index * 50.0, top=top, width=40.0, page=page)
        for index, token in enumerate(text.split())
    ]


def employee_year(
    year: int,
    name: str,
    resident_id: str = "",
    *,
    youth_months: int = 0,
    normal_months: int = 12,
    monthly_pay: int = 0,
    hire_date: date | None = date(2015, 1, 1),
    retire_date: date | None = None,
    **fields: object,
) -> EmployeeRecord:
    """An already classified employee-year, as produced by the analyzer."""
    salary = monthly_pay * 12
    youth_share = salary if youth_months and not normal_months else 0
    return EmployeeRecord(
        year=year,
        name=name,
        resident_id=resident_id,
        hire_date=hire_date,
        retire_date=retire_date,
        monthly_salary={month: monthly_pay for month in range(1, 13)},
        youth_months=youth_months,
        normal_months=normal_months,
        youth_salary=youth_share,
        normal_salary=salary - youth_share,
        si_youth_salary=youth_share,
        si_normal_salary=salary - youth_share,
        si_total_salary=salary,
        **fields,
    )


def staff(
    year: int, count: int, prefix: str = "직원", **kwargs: object
) -> Iterable[EmployeeRecord]:
    """``count`` identical full-year employees with distinct names and IDs."""
    for index in range(count):
        yield employee_year(
            year, f"{prefix}{index}", f"{800101 + index}-1******", **kwargs
        )


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from cached settings and TAXCREDIT_ variables."""
    monkeypatch.delenv("TAXCREDIT_CREDIT__SIZE", raising=False)
    monkeypatch.delenv("TAXCREDIT_CREDIT__REGION", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
