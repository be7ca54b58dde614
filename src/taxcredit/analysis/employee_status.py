"""Month-by-month employment and youth classification of employee-years.

For every month of the fiscal year the analyzer decides whether the employee
was on the payroll at month end and whether they were in the youth band
(age 29 or younger) on that day. The counts and pay sums per band feed the
credit engines.
"""

import calendar
import logging
from collections.abc import Iterable
from datetime import date

from taxcredit.extractors.schemas import MONTHS, EmployeeRecord

logger = logging.getLogger(__name__)

YOUTH_MAX_AGE = 29
# Heuristic pivot when the century digit is missing or masked
CENTURY_PIVOT_YY = 30

_GENDER_DIGIT_CENTURY = {
    "1": 1900,
    "2": 1900,
    "5": 1900,
    "6": 1900,
    "3": 2000,
    "4": 2000,
    "7": 2000,
    "8": 2000,
}


def birth_date_from_id(resident_id: str | None) -> date | None:
    """Birth date encoded in a resident ID.

    The first six digits are YYMMDD. The century comes from the first digit
    after the hyphen when it is present and unmasked; otherwise two-digit
    years below 30 are read as 2000s.

    Args:
        resident_id: Resident ID such as ``900101-1******``

    Returns:
        date | None: Birth date, or None when the ID has no valid date
    """
    if not resident_id:
        return None
    front, _, back = resident_id.strip().partition("-")
    if not back and len(front) > 6:
        front, back = front[:6], front[6:]
    if len(front) < 6 or not front[:6].isdigit():
        return None

    yy, mm, dd = int(front[:2]), int(front[2:4]), int(front[4:6])
    century = _GENDER_DIGIT_CENTURY.get(back[:1])
    if century is None:
        century = 2000 if yy < CENTURY_PIVOT_YY else 1900
    try:
        return date(century + yy, mm, dd)
    except ValueError:
        logger.debug(f"Invalid birth date in resident ID prefix {front[:6]}")
        return None


def age_on(birth: date, day: date) -> int:
    """Age in completed years on ``day``."""
    age = day.year - birth.year
    if (day.month, day.day) < (birth.month, birth.day):
        age -= 1
    return age


def month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def is_employed_at(record: EmployeeRecord, day: date) -> bool:
    """Whether the employee was on the payroll at the end of ``day``."""
    if record.hire_date is None or record.hire_date > day:
        return False
    return record.retire_date is None or record.retire_date >= day


def analyze_employee(record: EmployeeRecord) -> EmployeeRecord:
    """Derive the youth/normal classification of one employee-year.

    Args:
        record: Employee record as extracted

    Returns:
        EmployeeRecord: A copy with months, pay sums and age fields filled in
    """
    if record.year is None:
        logger.warning(f"{record.name}: fiscal year unknown, classification skipped")
        return record.model_copy()

    year = record.year
    birth = birth_date_from_id(record.resident_id)
    resign_month = (
        record.retire_date.month
        if record.retire_date is not None and record.retire_date.year == year
        else None
    )

    youth_months = normal_months = 0
    youth_salary = normal_salary = 0
    si_youth_salary = si_normal_salary = 0

    for month in MONTHS:
        day = month_end(year, month)
        is_youth = birth is not None and age_on(birth, day) <= YOUTH_MAX_AGE

        if is_employed_at(record, day):
            if is_youth:
                youth_months += 1
            else:
                normal_months += 1

        pay = record.monthly_salary[month] + record.monthly_bonus[month]
        if pay <= 0:
            continue
        if is_youth:
            youth_salary += pay
        else:
            normal_salary += pay
        if month == resign_month:
            continue
        if is_youth:
            si_youth_salary += pay
        else:
            si_normal_salary += pay

    age_at_year_end = age_on(birth, date(year, 12, 31)) if birth else None

    return record.model_copy(
        update={
            "youth_months": youth_months,
            "normal_months": normal_months,
            "youth_salary": youth_salary,
            "normal_salary": normal_salary,
            "si_youth_salary": si_youth_salary,
            "si_normal_salary": si_normal_salary,
            "si_total_salary": si_youth_salary + si_normal_salary,
            "age_at_year_end": age_at_year_end,
            "is_youth": age_at_year_end is not None
            and age_at_year_end <= YOUTH_MAX_AGE,
        }
    )


def analyze_employees(records: Iterable[EmployeeRecord]) -> list[EmployeeRecord]:
    """Classify every employee-year record."""
    analyzed = [analyze_employee(record) for record in records]
    logger.debug(f"Analyzed {len(analyzed)} employee-year records")
    return analyzed
