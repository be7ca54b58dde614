"""Document extractors for withholding ledgers, registries and tax returns."""

from .classifier import classify_document, classify_pages
from .registry_extractor import RegistryExtractor, merge_executives
from .schemas import (
    DocumentKind,
    EmployeeRecord,
    ExclusionReason,
    ExecutiveRecord,
    ExtractedDocument,
    RegistryRecord,
    ShareholderRecord,
    TaxReturnRecord,
    WithholdingLedger,
)
from .tax_return_extractor import TaxReturnExtractor
from .withholding_extractor import WithholdingExtractor

__all__ = [
    "DocumentKind",
    "EmployeeRecord",
    "ExclusionReason",
    "ExecutiveRecord",
    "ExtractedDocument",
    "RegistryExtractor",
    "RegistryRecord",
    "ShareholderRecord",
    "TaxReturnExtractor",
    "TaxReturnRecord",
    "WithholdingExtractor",
    "WithholdingLedger",
    "classify_document",
    "classify_pages",
    "merge_executives",
]
