"""End-to-end processing: PDFs to employee-years to credit results.

Documents are independent of each other. A file that cannot be opened or
parsed is logged and recorded as a failure; the rest of the batch goes on.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pdfplumber

from taxcredit.analysis import (
    IdReplacement,
    analyze_employees,
    disambiguate_masked_ids,
    missing_id_records,
    resolve_exclusions,
)
from taxcredit.config import CreditConfig, Region, get_credit_config, get_raw_data_path
from taxcredit.credits import (
    EmploymentCreditResult,
    IncomeIncreaseResult,
    SocialInsuranceResult,
    TaxCreditSummary,
    aggregate_tax_credit_summary,
    calculate_employment_increase_credit,
    calculate_income_increase_credit,
    calculate_integrated_employment_credit,
    calculate_social_insurance_credit,
)
from taxcredit.errors import DocumentReadError
from taxcredit.extractors import (
    DocumentKind,
    EmployeeRecord,
    ExtractedDocument,
    RegistryExtractor,
    RegistryRecord,
    ShareholderRecord,
    TaxReturnExtractor,
    TaxReturnRecord,
    WithholdingExtractor,
    WithholdingLedger,
    classify_document,
    merge_executives,
)
from taxcredit.logging import document_context

logger = logging.getLogger(__name__)


def open_document(path: str | Path) -> Any:
    """Open a PDF with pdfplumber.

    Raises:
        DocumentReadError: If the file is missing or is not a readable PDF
    """
    try:
        return pdfplumber.open(path)
    except Exception as e:
        raise DocumentReadError(str(path), str(e)) from e


def discover_documents(paths: Sequence[str | Path] | None = None) -> list[Path]:
    """Explicit paths, or every PDF in the configured raw data directory."""
    if paths:
        return [Path(path) for path in paths]
    raw_dir = get_raw_data_path()
    found = sorted(raw_dir.glob("*.pdf"))
    logger.info(f"📁 Found {len(found)} PDFs in {raw_dir}")
    return found


def extract_document(path: str | Path) -> ExtractedDocument:
    """Classify one PDF and run the matching extractor.

    Args:
        path: PDF file path

    Returns:
        ExtractedDocument: The parsed record of the detected kind

    Raises:
        DocumentReadError: If the file cannot be opened
    """
    source = Path(path)
    with open_document(source) as pdf:
        kind = classify_document(pdf)
        match kind:
            case DocumentKind.WITHHOLDING:
                return WithholdingExtractor().extract_from_pdf(pdf, source.name)
            case DocumentKind.REGISTRY:
                return RegistryExtractor().extract_from_pdf(pdf, source.name)
            case DocumentKind.TAX_RETURN:
                return TaxReturnExtractor().extract_from_pdf(pdf, source.name)


@dataclass
class BatchResult:
    """Documents parsed from a batch, and the files that failed."""

    documents: list[ExtractedDocument] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def processed_count(self) -> int:
        return len(self.documents)

    @property
    def ledgers(self) -> list[WithholdingLedger]:
        return [d for d in self.documents if isinstance(d, WithholdingLedger)]

    @property
    def registries(self) -> list[RegistryRecord]:
        return [d for d in self.documents if isinstance(d, RegistryRecord)]

    @property
    def tax_returns(self) -> list[TaxReturnRecord]:
        return [d for d in self.documents if isinstance(d, TaxReturnRecord)]

    @property
    def shareholders(self) -> list[ShareholderRecord]:
        """Shareholders of every tax return, tagged with the return's year."""
        return [
            holder.model_copy(update={"year": holder.year or tax_return.year})
            for tax_return in self.tax_returns
            for holder in tax_return.shareholders
        ]


def extract_batch(paths: Iterable[str | Path]) -> BatchResult:
    """Extract every document, skipping files that fail.

    Args:
        paths: PDF file paths

    Returns:
        BatchResult: Parsed documents and per-file failure messages
    """
    result = BatchResult()
    for path in paths:
        with document_context(path):
            try:
                result.documents.append(extract_document(path))
            except Exception as e:
                logger.error(f"❌ Failed to process {path}: {e}")
                result.failures[str(path)] = str(e)

    logger.info(
        f"Processed {result.processed_count} documents "
        f"({len(result.failures)} failed)"
    )
    return result


@dataclass
class EmployeeYears:
    """Analyzed employee-years plus the ID problems found on the way."""

    records: list[EmployeeRecord] = field(default_factory=list)
    missing_ids: list[tuple[int | None, str]] = field(default_factory=list)
    id_changes: list[IdReplacement] = field(default_factory=list)


def analyze_batch(batch: BatchResult) -> EmployeeYears:
    """Analyze all ledgers of a batch and resolve exclusions.

    Employee-years without a valid resident ID and masked IDs rewritten to
    tell people apart are kept for the review tables.

    Args:
        batch: Extraction result holding ledgers, registries and tax returns

    Returns:
        EmployeeYears: Records ordered by year, with the ID findings
    """
    employees = [e for ledger in batch.ledgers for e in ledger.employees]
    analyzed = analyze_employees(employees)
    missing_ids = missing_id_records(analyzed)
    for year, name in missing_ids:
        logger.warning(f"⚠️  {name} ({year}) has no valid resident ID")
    analyzed, replacements = disambiguate_masked_ids(analyzed)
    for replacement in replacements:
        logger.info(
            f"Resident ID of {replacement.name} rewritten: "
            f"{replacement.original_id} -> {replacement.new_id}"
        )

    resolved = resolve_exclusions(
        analyzed, merge_executives(batch.registries), batch.shareholders
    )
    return EmployeeYears(
        records=sorted(resolved, key=lambda record: record.year or 0),
        missing_ids=missing_ids,
        id_changes=replacements,
    )


def build_employee_years(batch: BatchResult) -> list[EmployeeRecord]:
    """Analyzed employee-years of all ledgers, with exclusions resolved."""
    return analyze_batch(batch).records


def region_from_registries(registries: Sequence[RegistryRecord]) -> Region | None:
    """Head-office region of the company, from the first registry with an address."""
    for registry in registries:
        if registry.address:
            return "capital" if registry.is_capital_area else "non-capital"
    return None


@dataclass
class CreditResults:
    employment: EmploymentCreditResult
    integrated_employment: EmploymentCreditResult
    social_insurance: SocialInsuranceResult
    income_increase: IncomeIncreaseResult
    summary: TaxCreditSummary


def run_credit_engines(
    records: Sequence[EmployeeRecord], config: CreditConfig | None = None
) -> CreditResults:
    """Run every credit engine over the same employee-years.

    Args:
        records: Analyzed employee-years with exclusions resolved
        config: Company profile (defaults to the application settings)

    Returns:
        CreditResults: Per-engine results and the merged summary
    """
    config = config or get_credit_config()
    logger.info(
        f"Calculating credits for {config.size} company ({config.region}), "
        f"{len(records)} employee-years"
    )
    employment = calculate_employment_increase_credit(records, config)
    social_insurance = calculate_social_insurance_credit(records, config)
    income_increase = calculate_income_increase_credit(records, config)
    return CreditResults(
        employment=employment,
        integrated_employment=calculate_integrated_employment_credit(records, config),
        social_insurance=social_insurance,
        income_increase=income_increase,
        summary=aggregate_tax_credit_summary(
            employment, social_insurance, income_increase
        ),
    )
