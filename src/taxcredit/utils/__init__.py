"""Shared utilities for taxcredit."""

from .text import (
    collapse_spaces,
    id_prefix,
    normalize_date,
    parse_amount,
    spaced_pattern,
    strip_spaces,
    year_from_filename,
)

__all__ = [
    "collapse_spaces",
    "id_prefix",
    "normalize_date",
    "parse_amount",
    "spaced_pattern",
    "strip_spaces",
    "year_from_filename",
]
