"""Text helpers for Korean statutory forms.

PDF text from these forms is letter-spaced and mixes full-width markers with
plain digits, so most lookups go through whitespace-insensitive patterns.
"""

import re
from datetime import date
from pathlib import Path

_WHITESPACE = re.compile(r"\s+")
_DATE_PATTERNS = (
    re.compile(r"(\d{4})\s*[./\-년]\s*(\d{1,2})\s*[./\-월]\s*(\d{1,2})"),
    re.compile(r"(\d{4})(\d{2})(\d{2})"),
)
_FILENAME_YEAR = re.compile(r"_(\d{4})\.pdf$", re.IGNORECASE)
_ANY_YEAR = re.compile(r"(\d{4})")
_ID_DIGITS = re.compile(r"\d")


def strip_spaces(text: str) -> str:
    """Remove every whitespace character."""
    return _WHITESPACE.sub("", text)


def collapse_spaces(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def spaced_pattern(label: str) -> str:
    """Regex source matching ``label`` with optional whitespace between characters."""
    return r"\s*".join(re.escape(char) for char in strip_spaces(label))


def normalize_date(text: str | None) -> date | None:
    """Parse ``YYYY.MM.DD``, ``YYYY-MM-DD``, ``YYYY년 MM월 DD일`` or ``YYYYMMDD``.

    Args:
        text: Raw date text, possibly with surrounding noise

    Returns:
        date | None: Parsed date, or None if nothing valid was found
    """
    if not text or text.strip() in ("", "-"):
        return None
    for pattern in _DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return None


def parse_amount(text: str) -> int | None:
    """Parse a digits-only amount, ignoring thousands separators."""
    cleaned = text.replace(",", "").strip()
    if cleaned.isdigit():
        return int(cleaned)
    return None


def year_from_filename(filename: str | Path) -> int | None:
    """Fiscal year from a file name.

    ``payroll_2023.pdf`` style suffixes win; otherwise the first 4-digit run.
    """
    name = Path(filename).name
    match = _FILENAME_YEAR.search(name) or _ANY_YEAR.search(name)
    return int(match.group(1)) if match else None


def id_prefix(resident_id: str | None) -> str | None:
    """First six digits of a resident ID, or None when fewer are present."""
    if not resident_id:
        return None
    digits = "".join(_ID_DIGITS.findall(resident_id.split("-")[0]))
    return digits[:6] if len(digits) >= 6 else None
