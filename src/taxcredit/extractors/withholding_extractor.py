"""Payroll withholding ledger extractor (근로소득 원천징수부).

A ledger PDF holds one block of pages per employee. The first page of each
block (the cover page) carries the personal details and a month-by-month
pay table:

- Name, resident ID, hire and retire dates are read with label-anchored,
  spacing-tolerant patterns over the page text
- Month rows are located from month labels in the left margin
- The salary and bonus columns are located from their header labels and
  the circled column numbers 16 and 17
- Each cell is the numeric word nearest to the (column, row) intersection
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from taxcredit.config import (
    ExtractionConfig,
    LayoutConfig,
    get_extraction_config,
    get_layout_config,
)
from taxcredit.extractors.layout import Word, page_words
from taxcredit.extractors.schemas import MONTHS, EmployeeRecord, WithholdingLedger
from taxcredit.utils.text import (
    normalize_date,
    parse_amount,
    strip_spaces,
    year_from_filename,
)

logger = logging.getLogger(__name__)

COVER_PAGE_LABELS = ("입사일", "퇴사일")
COVER_PAGE_TITLE = "근로소득지급명세"

NAME_PATTERNS = (
    re.compile(r"⑤\s*성\s*명\s+([^\s⑥]+)"),
    re.compile(r"성\s*명\s+([^\s⑥]+)"),
)
RESIDENT_ID_PATTERNS = (
    re.compile(r"⑥\s*주\s*민\s*등\s*록\s*번\s*호\s+(\d{6}-[\d*]{6,7})"),
    re.compile(r"주\s*민\s*등\s*록\s*번\s*호\s+(\d{6}-[\d*]{6,7})"),
)
HIRE_DATE_PATTERNS = (
    re.compile(r"⑦\s*입\s*사\s*일\s+([^\s⑧]+)"),
    re.compile(r"입\s*사\s*일\s+([^\s⑧퇴]+)"),
)
RETIRE_DATE_PATTERNS = (
    re.compile(r"퇴\s*사\s*일\s+([^\s⑨국]+)"),
    re.compile(r"⑧\s*퇴\s*사\s*일\s+([^\s⑨]+)"),
)

MONTH_WITH_SUFFIX = re.compile(r"^(\d{1,2})월$")
MONTH_ZERO_PADDED = re.compile(r"^(0[1-9]|1[0-2])$")
MONTH_PLAIN = re.compile(r"^\d{1,2}$")

SPLIT_MARKER_MAX_DX = 15.0
LABEL_NEAR_MAX_DY = 10.0
LABEL_NEAR_MAX_DX = 100.0


@dataclass(frozen=True)
class ColumnSpec:
    """How to recognise one pay column on the cover page."""

    label: str
    marker: str
    marker_glyph: str


SALARY_COLUMN = ColumnSpec(label="급여", marker="16", marker_glyph="⑯")
BONUS_COLUMN = ColumnSpec(label="상여", marker="17", marker_glyph="⑰")


def _first_match(patterns: Sequence[re.Pattern[str]], text: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def is_cover_page(words: Sequence[Word]) -> bool:
    """Whether a page starts a new employee block."""
    text = strip_spaces("".join(word.text for word in words))
    return any(label in text for label in COVER_PAGE_LABELS) or (
        COVER_PAGE_TITLE in text
    )


def find_month_rows(
    words: Sequence[Word], max_x: float = 100.0
) -> dict[int, float]:
    """Map month number to the vertical position of its row.

    Only words starting left of ``max_x`` are considered. When a month label
    appears more than once, the topmost occurrence is kept.
    """
    candidates: list[tuple[float, int]] = []
    for word in words:
        if word.x0 >= max_x:
            continue
        text = word.text.strip()
        month: int | None = None
        if match := MONTH_WITH_SUFFIX.match(text):
            month = int(match.group(1))
        elif MONTH_ZERO_PADDED.match(text) or MONTH_PLAIN.match(text):
            month = int(text)
        if month is not None and month in MONTHS:
            candidates.append((word.top, month))

    rows: dict[int, float] = {}
    for top, month in sorted(candidates):
        rows.setdefault(month, top)
    return rows


def _is_label_word(word: Word, label: str) -> bool:
    text = strip_spaces(word.text)
    return label in text and "구간" not in text and "인정" not in text and len(text) <= 6


def _is_marker(words: Sequence[Word], index: int, spec: ColumnSpec) -> bool:
    text = words[index].text.strip()
    if text in (spec.marker, spec.marker_glyph, f"({spec.marker})"):
        return True
    if text == spec.marker[0] and index + 1 < len(words):
        following = words[index + 1]
        return (
            following.text.strip() == spec.marker[1]
            and abs(following.x0 - words[index].x0) < SPLIT_MARKER_MAX_DX
        )
    return False


def find_column_x(words: Sequence[Word], spec: ColumnSpec) -> float | None:
    """Locate the x position of a pay column.

    Preference order: a column marker with the header label just to its
    right, then the header label itself, then any lone column marker.
    """
    labels = [word for word in words if _is_label_word(word, spec.label)]
    lone_marker_x: float | None = None

    for index, word in enumerate(words):
        if not _is_marker(words, index, spec):
            continue
        near_label = any(
            abs(label.top - word.top) < LABEL_NEAR_MAX_DY
            and 0 < label.x0 - word.x0 < LABEL_NEAR_MAX_DX
            for label in labels
        )
        if near_label:
            return word.x0
        if lone_marker_x is None:
            lone_marker_x = word.x0

    if labels:
        return labels[0].x0
    return lone_marker_x


def read_cell(
    words: Sequence[Word],
    x: float,
    y: float,
    x_tolerance: float = 40.0,
    y_tolerance: float = 5.0,
) -> int:
    """Numeric value of the first word near (x, y), or 0."""
    for word in words:
        if abs(word.x0 - x) < x_tolerance and abs(word.top - y) < y_tolerance:
            amount = parse_amount(word.text)
            if amount is not None:
                return amount
    return 0


class WithholdingExtractor:
    """Extract employee pay records from withholding ledgers."""

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        layout: LayoutConfig | None = None,
    ):
        """Initialize the withholding extractor.

        Args:
            config: Extraction settings (defaults to the application settings)
            layout: Word assembly tolerances (defaults to the application settings)
        """
        self.config = config or get_extraction_config()
        self.layout = layout or get_layout_config()

    def extract_from_pdf(self, pdf: Any, source_file: str | Path) -> WithholdingLedger:
        """Extract every employee from an open pdfplumber document.

        Args:
            pdf: An open ``pdfplumber.PDF``
            source_file: File name, used for the fiscal year

        Returns:
            WithholdingLedger: The employees found, in page order
        """
        pages = pdf.pages
        if self.config.max_pages is not None:
            pages = pages[: self.config.max_pages]
        page_word_lists = [
            page_words(
                page, index, self.layout.word_y_tolerance, self.layout.word_x_gap
            )
            for index, page in enumerate(pages)
        ]
        return self.extract_from_pages(page_word_lists, source_file)

    def extract_from_pages(
        self, page_word_lists: Sequence[Sequence[Word]], source_file: str | Path
    ) -> WithholdingLedger:
        """Extract employees from pre-assembled page words.

        Args:
            page_word_lists: Words per page
            source_file: File name, used for the fiscal year

        Returns:
            WithholdingLedger: The employees found, in page order
        """
        source = str(source_file)
        year = year_from_filename(source)
        logger.info(f"Extracting withholding ledger {Path(source).name} (year {year})")

        employees: list[EmployeeRecord] = []
        for page_number, words in enumerate(page_word_lists, start=1):
            if not is_cover_page(words):
                continue
            employee = self.extract_employee(words, year, source)
            if employee is None:
                logger.warning(f"Page {page_number}: cover page without a name, skipped")
                continue
            employees.append(employee)

        logger.info(f"✅ Extracted {len(employees)} employees from {Path(source).name}")
        return WithholdingLedger(source_file=source, year=year, employees=employees)

    def extract_employee(
        self, words: Sequence[Word], year: int | None, source_file: str = ""
    ) -> EmployeeRecord | None:
        """Read one cover page into an employee record.

        Args:
            words: Words of the cover page
            year: Fiscal year of the ledger, if known
            source_file: Ledger file name

        Returns:
            EmployeeRecord | None: None when no name is found on the page
        """
        text = " ".join(word.text for word in words)

        name = _first_match(NAME_PATTERNS, text)
        if not name:
            return None

        hire_date = normalize_date(_first_match(HIRE_DATE_PATTERNS, text))
        retire_date = normalize_date(_first_match(RETIRE_DATE_PATTERNS, text))
        if retire_date and year and retire_date > date(year, 12, 31):
            logger.debug(f"{name}: retire date {retire_date} after fiscal year, ignored")
            retire_date = None

        monthly_salary, monthly_bonus = self._read_pay_table(words)

        return EmployeeRecord(
            year=year,
            name=name,
            resident_id=_first_match(RESIDENT_ID_PATTERNS, text) or "",
            hire_date=hire_date,
            retire_date=retire_date,
            monthly_salary=monthly_salary,
            monthly_bonus=monthly_bonus,
            source_file=source_file or None,
        )

    def _read_pay_table(
        self, words: Sequence[Word]
    ) -> tuple[dict[int, int], dict[int, int]]:
        salary = {month: 0 for month in MONTHS}
        bonus = {month: 0 for month in MONTHS}

        rows = find_month_rows(words, self.config.month_column_max_x)
        salary_x = find_column_x(words, SALARY_COLUMN)
        bonus_x = find_column_x(words, BONUS_COLUMN)
        if salary_x is None and bonus_x is None:
            logger.warning("Salary and bonus columns not found on cover page")
            return salary, bonus

        for month, y in rows.items():
            if salary_x is not None:
                salary[month] = read_cell(
                    words,
                    salary_x,
                    y,
                    self.config.value_x_tolerance,
                    self.config.value_y_tolerance,
                )
            if bonus_x is not None:
                bonus[month] = read_cell(
                    words,
                    bonus_x,
                    y,
                    self.config.value_x_tolerance,
                    self.config.value_y_tolerance,
                )
        return salary, bonus
