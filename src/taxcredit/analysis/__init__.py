"""Employee classification and exclusion resolution."""

from .employee_status import (
    age_on,
    analyze_employee,
    analyze_employees,
    birth_date_from_id,
)
from .exclusion import (
    IdReplacement,
    disambiguate_masked_ids,
    missing_id_records,
    normalize_name,
    override_exclusion,
    resolve_exclusions,
)

__all__ = [
    "IdReplacement",
    "age_on",
    "analyze_employee",
    "analyze_employees",
    "birth_date_from_id",
    "disambiguate_masked_ids",
    "missing_id_records",
    "normalize_name",
    "override_exclusion",
    "resolve_exclusions",
]
