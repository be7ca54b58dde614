"""Output tables handed to spreadsheet generation and storage.

All tables are polars DataFrames with a fixed schema, so an empty input
still produces a frame with the expected columns.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from pathlib import Path

import polars as pl

from taxcredit.analysis import IdReplacement
from taxcredit.extractors.registry_extractor import merge_executives
from taxcredit.extractors.schemas import (
    EmployeeRecord,
    RegistryRecord,
    ShareholderRecord,
    TaxReturnRecord,
)

logger = logging.getLogger(__name__)

MONTHS = range(1, 13)

EMPLOYEE_SCHEMA = {
    "year": pl.Int64,
    "name": pl.String,
    "id": pl.String,
    "hireDate": pl.Date,
    "retireDate": pl.Date,
    "totalSalary": pl.Int64,
    "isYouth": pl.Boolean,
    "youthMonths": pl.Int64,
    "normalMonths": pl.Int64,
    "exclusionReason": pl.String,
    "isWorking": pl.Boolean,
    "salaryTotal": pl.Int64,
    "bonusTotal": pl.Int64,
    **{f"salaryMonth{month}": pl.Int64 for month in MONTHS},
    **{f"bonusMonth{month}": pl.Int64 for month in MONTHS},
}

TAX_CREDIT_SCHEMA = {
    "year": pl.Int64,
    "source_file": pl.String,
    "code": pl.String,
    "name": pl.String,
    "amount": pl.Int64,
}

EXECUTIVE_SCHEMA = {
    "companyName": pl.String,
    "address": pl.String,
    "isCapitalArea": pl.Boolean,
    "position": pl.String,
    "name": pl.String,
    "id": pl.String,
    "startDate": pl.Date,
    "endDate": pl.Date,
}

MISSING_ID_SCHEMA = {"year": pl.Int64, "name": pl.String}

ID_CHANGE_SCHEMA = {"name": pl.String, "originalId": pl.String, "newId": pl.String}


def is_working_in_year(record: EmployeeRecord) -> bool:
    """False when the ledger lists someone hired after or gone before its year."""
    if record.year is None:
        return True
    if record.hire_date is not None and record.hire_date.year > record.year:
        return False
    if record.retire_date is not None and record.retire_date.year < record.year:
        return False
    return True


def employee_rows_frame(records: Iterable[EmployeeRecord]) -> pl.DataFrame:
    """Employee-year rows with the spreadsheet column names.

    Besides the contract fields each row carries the salary and bonus per
    month, their totals, and ``isWorking`` to split a year's sheet into
    working and non-working employees.
    """
    rows = [
        {
            "year": record.year,
            "name": record.name,
            "id": record.resident_id,
            "hireDate": record.hire_date,
            "retireDate": record.retire_date,
            "totalSalary": record.total_salary,
            "isYouth": record.is_youth,
            "youthMonths": record.youth_months,
            "normalMonths": record.normal_months,
            "exclusionReason": record.exclusion_reason.value,
            "isWorking": is_working_in_year(record),
            "salaryTotal": record.salary_total,
            "bonusTotal": record.bonus_total,
            **{
                f"salaryMonth{month}": record.monthly_salary.get(month, 0)
                for month in MONTHS
            },
            **{
                f"bonusMonth{month}": record.monthly_bonus.get(month, 0)
                for month in MONTHS
            },
        }
        for record in records
    ]
    return pl.DataFrame(rows, schema=EMPLOYEE_SCHEMA)


def tax_credit_rows_frame(tax_returns: Iterable[TaxReturnRecord]) -> pl.DataFrame:
    """One row per tax-credit line of every tax return."""
    rows = [
        {
            "year": tax_return.year,
            "source_file": tax_return.source_file,
            "code": item.code,
            "name": item.name,
            "amount": item.amount,
        }
        for tax_return in tax_returns
        for item in tax_return.tax_credits
    ]
    return pl.DataFrame(rows, schema=TAX_CREDIT_SCHEMA)


def shareholders_by_year(
    shareholders: Iterable[ShareholderRecord], years: Iterable[int] = ()
) -> dict[int, list[ShareholderRecord]]:
    """Shareholder lists per year, forward-filled over years without data.

    A year without shareholders of its own inherits the list of the most
    recent earlier year that has one. Years before the first list stay empty.

    Args:
        shareholders: Shareholders tagged with their fiscal year
        years: Additional years to include, such as every tax-return year

    Returns:
        dict[int, list[ShareholderRecord]]: Lists keyed by ascending year
    """
    own: dict[int, list[ShareholderRecord]] = {}
    for holder in shareholders:
        if holder.year is not None:
            own.setdefault(holder.year, []).append(holder)

    all_years = set(own) | set(years)
    if not all_years:
        return {}

    filled: dict[int, list[ShareholderRecord]] = {}
    carried: list[ShareholderRecord] = []
    for year in range(min(all_years), max(all_years) + 1):
        if year in own:
            carried = own[year]
        filled[year] = list(carried)
    return filled


def shareholder_ratio_matrix(
    shareholders: Iterable[ShareholderRecord], years: Iterable[int] = ()
) -> pl.DataFrame:
    """Share ratio per shareholder (rows) and year (columns).

    Args:
        shareholders: Shareholders tagged with their fiscal year
        years: Additional years to show, forward-filled when lacking data

    Returns:
        pl.DataFrame: ``name``, ``id``, ``relation`` and one ratio column per year
    """
    filled = shareholders_by_year(shareholders, years)

    people: dict[tuple[str, str], str] = {}
    for holders in filled.values():
        for holder in holders:
            people.setdefault((holder.name, holder.resident_id), holder.relation_name)

    year_columns = [str(year) for year in filled]
    rows = []
    for (name, resident_id), relation in people.items():
        row: dict[str, object] = {"name": name, "id": resident_id, "relation": relation}
        for year, holders in filled.items():
            row[str(year)] = next(
                (
                    h.ratio
                    for h in holders
                    if h.name == name and h.resident_id == resident_id
                ),
                None,
            )
        rows.append(row)

    schema = {
        "name": pl.String,
        "id": pl.String,
        "relation": pl.String,
        **{column: pl.Float64 for column in year_columns},
    }
    return pl.DataFrame(rows, schema=schema)


def executive_rows_frame(
    registries: Sequence[RegistryRecord], years: Iterable[int] = ()
) -> pl.DataFrame:
    """Merged executives of all registries, with the company header.

    Company name, address and region come from the first registry naming
    the company. With ``years`` only executives whose tenure overlaps
    January 1 of the first year to December 31 of the last are listed.

    Args:
        registries: Parsed corporate registries
        years: Ledger years bounding the tenure filter

    Returns:
        pl.DataFrame: One row per executive, in merge order
    """
    if not registries:
        return pl.DataFrame([], schema=EXECUTIVE_SCHEMA)
    company = next((r for r in registries if r.company_name), registries[0])

    executives = merge_executives(registries)
    year_list = sorted(years)
    if year_list:
        start, end = date(year_list[0], 1, 1), date(year_list[-1], 12, 31)
        executives = [e for e in executives if e.overlaps(start, end)]

    rows = [
        {
            "companyName": company.company_name,
            "address": company.address,
            "isCapitalArea": company.is_capital_area,
            "position": executive.position,
            "name": executive.name,
            "id": executive.resident_id,
            "startDate": executive.start_date,
            "endDate": executive.end_date,
        }
        for executive in executives
    ]
    return pl.DataFrame(rows, schema=EXECUTIVE_SCHEMA)


def missing_id_frame(missing: Iterable[tuple[int | None, str]]) -> pl.DataFrame:
    """Employee-years whose resident ID is absent or malformed."""
    rows = [{"year": year, "name": name} for year, name in missing]
    return pl.DataFrame(rows, schema=MISSING_ID_SCHEMA)


def id_change_frame(replacements: Iterable[IdReplacement]) -> pl.DataFrame:
    """Masked resident IDs rewritten to tell people apart."""
    rows = [
        {
            "name": replacement.name,
            "originalId": replacement.original_id,
            "newId": replacement.new_id,
        }
        for replacement in replacements
    ]
    return pl.DataFrame(rows, schema=ID_CHANGE_SCHEMA)


def save_frames(frames: dict[str, pl.DataFrame], output_dir: Path) -> list[Path]:
    """Write non-empty frames as ``<name>.parquet`` under ``output_dir``.

    Args:
        frames: Tables keyed by file stem
        output_dir: Destination directory, created when missing

    Returns:
        list[Path]: Paths of the files written
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for table_name, df in frames.items():
        if len(df) == 0:
            logger.debug(f"Skipping empty table {table_name}")
            continue
        output_path = output_dir / f"{table_name}.parquet"
        df.write_parquet(output_path)
        logger.info(f"Saved {table_name} ({len(df)} rows) to {output_path}")
        written.append(output_path)
    return written


def output_frames(
    records: Sequence[EmployeeRecord],
    tax_returns: Sequence[TaxReturnRecord],
    shareholders: Sequence[ShareholderRecord],
    registries: Sequence[RegistryRecord] = (),
    missing_ids: Sequence[tuple[int | None, str]] = (),
    id_changes: Sequence[IdReplacement] = (),
) -> dict[str, pl.DataFrame]:
    """The output tables, keyed by file stem."""
    return_years = [r.year for r in tax_returns if r.year is not None]
    ledger_years = {r.year for r in records if r.year is not None}
    return {
        "employees": employee_rows_frame(records),
        "tax_credits": tax_credit_rows_frame(tax_returns),
        "shareholder_ratios": shareholder_ratio_matrix(shareholders, return_years),
        "executives": executive_rows_frame(registries, ledger_years),
        "missing_ids": missing_id_frame(missing_ids),
        "id_changes": id_change_frame(id_changes),
    }
