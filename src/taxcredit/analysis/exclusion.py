"""Exclude executives and related-party shareholders from the employee counts.

An employee-year is matched against registry executives first and the
shareholder list of the same fiscal year second. People match on their
normalized name, plus their resident ID prefix when both sides have one.
A missing ID does not prevent a match, so a namesake can be excluded by
mistake; the user can override any decision afterwards.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from taxcredit.extractors.schemas import (
    EmployeeRecord,
    ExclusionReason,
    ExecutiveRecord,
    ShareholderRecord,
)
from taxcredit.utils.text import id_prefix

logger = logging.getLogger(__name__)

_PARENTHESIZED = re.compile(r"\([^)]*\)")
_DIGITS_AND_SPACES = re.compile(r"[\d\s]+")
VALID_RESIDENT_ID = re.compile(r"^\d{6,7}-[\d*]{6,7}$")
REPLACEMENT_DIGITS = ("0", "9", "8", "7", "6", "5", "4", "3", "2", "1")


def normalize_name(name: str) -> str:
    """Strip parenthesized notes, digits and whitespace from a name."""
    return _DIGITS_AND_SPACES.sub("", _PARENTHESIZED.sub("", name or ""))


def is_same_person(
    name_a: str, id_a: str | None, name_b: str, id_b: str | None
) -> bool:
    """Name match, confirmed by resident ID prefix when both IDs exist."""
    if normalize_name(name_a) != normalize_name(name_b) or not normalize_name(name_a):
        return False
    prefix_a, prefix_b = id_prefix(id_a), id_prefix(id_b)
    if prefix_a and prefix_b:
        return prefix_a == prefix_b
    return True


def exclusion_reason_for(
    employee: EmployeeRecord,
    executives: Sequence[ExecutiveRecord],
    shareholders: Sequence[ShareholderRecord],
) -> ExclusionReason:
    """Decide the exclusion reason of one employee-year."""
    if employee.year is not None:
        year_start, year_end = date(employee.year, 1, 1), date(employee.year, 12, 31)
        for executive in executives:
            if is_same_person(
                employee.name, employee.resident_id, executive.name, executive.resident_id
            ) and executive.overlaps(year_start, year_end):
                return ExclusionReason.EXECUTIVE

    for shareholder in shareholders:
        if shareholder.year != employee.year:
            continue
        if is_same_person(
            employee.name, employee.resident_id, shareholder.name, shareholder.resident_id
        ):
            return ExclusionReason.SHAREHOLDER

    return ExclusionReason.NONE


def resolve_exclusions(
    employees: Iterable[EmployeeRecord],
    executives: Sequence[ExecutiveRecord],
    shareholders: Sequence[ShareholderRecord],
) -> list[EmployeeRecord]:
    """Annotate employee-years with their exclusion reason.

    Records whose reason was set by the user keep it.

    Args:
        employees: Analyzed employee-year records
        executives: Executives from all registries
        shareholders: Shareholders from all tax returns, tagged with their year

    Returns:
        list[EmployeeRecord]: Copies with ``exclusion_reason`` set
    """
    resolved = []
    for employee in employees:
        if employee.exclusion_overridden:
            resolved.append(employee.model_copy())
            continue
        reason = exclusion_reason_for(employee, executives, shareholders)
        if reason is not ExclusionReason.NONE:
            logger.info(f"Excluding {employee.name} ({employee.year}): {reason.value}")
        resolved.append(employee.model_copy(update={"exclusion_reason": reason}))
    return resolved


def override_exclusion(
    records: Iterable[EmployeeRecord],
    name: str,
    year: int,
    reason: ExclusionReason,
    resident_id: str | None = None,
) -> list[EmployeeRecord]:
    """Apply a user decision to the matching employee-year records.

    Args:
        records: Employee-year records
        name: Employee name
        year: Fiscal year to change
        reason: Exclusion reason chosen by the user
        resident_id: Optional resident ID to disambiguate namesakes

    Returns:
        list[EmployeeRecord]: Records with the override applied
    """
    updated = []
    changed = 0
    for record in records:
        if record.year == year and is_same_person(
            record.name, record.resident_id, name, resident_id
        ):
            record = record.model_copy(
                update={"exclusion_reason": reason, "exclusion_overridden": True}
            )
            changed += 1
        updated.append(record)
    if changed == 0:
        logger.warning(f"No employee-year matched override for {name} ({year})")
    return updated


@dataclass(frozen=True)
class IdReplacement:
    """A masked resident ID rewritten to tell two people apart."""

    name: str
    original_id: str
    new_id: str


def disambiguate_masked_ids(
    records: Sequence[EmployeeRecord],
) -> tuple[list[EmployeeRecord], list[IdReplacement]]:
    """Give distinct people who share a masked ID prefix distinct IDs.

    Masked IDs such as ``900101-1******`` cannot tell two people born on the
    same day apart. When two or more names share a prefix, the masked tail of
    each person is replaced by a repeated digit (``0``, then ``9``, ``8`` and
    so on) for all of that person's years.

    Args:
        records: Employee-year records of all years

    Returns:
        tuple: Updated records and the replacements made
    """
    groups: dict[str, list[str]] = {}
    for record in records:
        resident_id = record.resident_id.strip()
        if not VALID_RESIDENT_ID.match(resident_id) or "*" not in resident_id:
            continue
        names = groups.setdefault(resident_id.split("-")[0], [])
        if record.name not in names:
            names.append(record.name)

    new_ids: dict[tuple[str, str], str] = {}
    replacements: list[IdReplacement] = []
    for front, names in groups.items():
        if len(names) < 2:
            continue
        logger.info(f"Masked ID prefix {front} shared by {len(names)} people")
        for name, digit in zip(names, REPLACEMENT_DIGITS):
            new_ids[(front, name)] = digit

    updated = []
    for record in records:
        resident_id = record.resident_id.strip()
        front, _, back = resident_id.partition("-")
        digit = new_ids.get((front, record.name))
        if digit is None or "*" not in back:
            updated.append(record)
            continue
        new_id = f"{front}-{digit * len(back)}"
        replacement = IdReplacement(record.name, resident_id, new_id)
        if replacement not in replacements:
            replacements.append(replacement)
        updated.append(record.model_copy(update={"resident_id": new_id}))
    return updated, replacements


def missing_id_records(records: Iterable[EmployeeRecord]) -> list[tuple[int | None, str]]:
    """(year, name) of employee-years without a well-formed resident ID."""
    return [
        (record.year, record.name or "(이름없음)")
        for record in records
        if not VALID_RESIDENT_ID.match(record.resident_id.strip())
    ]
