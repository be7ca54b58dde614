"""Corporate tax return extractor (법인세 신고서 묶음).

A tax return PDF bundles several statutory forms. Each page is checked
against every form marker, since one page can carry more than one:

- 법인세과세표준및세액신고서: tax base and calculated tax
- 세액조정계산서: minimum-tax target, deducted tax, total adjustment
- 최저한세조정계산서: minimum tax
- 세액공제조정명세서 (and the two pages after it): tax-credit items by code
- 주식등변동상황명세서: related-party shareholders

Values are found by label: the label may be letter-spaced in the PDF, and the
amount may be preceded by a bracketed note or a line-item code.
"""

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from taxcredit.config import (
    ExtractionConfig,
    LayoutConfig,
    get_extraction_config,
    get_layout_config,
)
from taxcredit.extractors.codes import (
    RELATION_CODES,
    TAX_CREDIT_CODES,
    TAX_CREDIT_FOOTER_CODE,
)
from taxcredit.extractors.layout import Word, group_lines, page_words
from taxcredit.extractors.schemas import (
    ShareholderRecord,
    TaxCreditItem,
    TaxReturnRecord,
)
from taxcredit.utils.text import spaced_pattern, strip_spaces, year_from_filename

logger = logging.getLogger(__name__)

REPORT_MARKER = "법인세과세표준및세액신고서"
ADJUSTMENT_MARKER = "세액조정계산서"
MIN_TAX_MARKER = "최저한세조정계산서"
CREDIT_STATEMENT_MARKER = "세액공제조정명세서"
SHAREHOLDING_MARKER = "주식등변동상황명세서"

# Pages after the credit statement title that still belong to it
CREDIT_STATEMENT_EXTRA_PAGES = 2
MIN_TAX_RATE_FALLBACK = 0.07

_SIGN = r"[△\-−]"
BRACKETED_CODE_VALUE = re.compile(
    rf"^\s*[\(\[][^\)\]]*[\)\]]\s*(\d{{1,3}}(?![\d,]))?\s*:?\s*({_SIGN}?)\s*([\d,]+)"
)
CODE_VALUE = re.compile(rf"^\s*(\d{{1,3}})\s+({_SIGN}?)\s*([\d,]+)")
BARE_VALUE = re.compile(rf"^\s*()({_SIGN}?)\s*([\d,]+)")
VALUE_PATTERNS = (BRACKETED_CODE_VALUE, CODE_VALUE, BARE_VALUE)

FISCAL_YEAR_LABEL = re.compile(r"사업연도(\d{4})")
FISCAL_YEAR_SPACED = re.compile(r"사\s*업\s*연\s*도\s*(\d{4})")
MIN_TAX_TARGET_NEAR_CODE = re.compile(
    spaced_pattern("최저한세적용대상")
    + rf"[\s\S]{{0,20}}?(?:17|\(17\))\s*({_SIGN}?[\d,]+)"
)

MIN_TAX_TARGET_LABELS = (
    "최저한세적용대상공제감면세액17",
    "최저한세적용대상공제감면세액",
    "최저한세적용대상17",
    "최저한세적용대상",
)
DEDUCTED_TAX_LABELS = ("차감세액18", "차감세액")
MIN_TAX_LABELS = ("산출세액20", "산출세액")

SHAREHOLDER_ROW = re.compile(r"(개\s*인|법\s*인)")
SHAREHOLDER_ID = re.compile(r"(\d[\s\d]{5,10}-\s*[\d\s*]{7,14})")
SHAREHOLDER_TAIL = re.compile(r"^([\d,.]+)(\d{2})")
TRAILING_ROW_NUMBER = re.compile(r"\s+\d+\s*$")
TRAILING_NUMBER = re.compile(r"[\d,]+$")

CREDIT_ITEM = re.compile(
    "(" + "|".join(re.escape(code) for code in TAX_CREDIT_CODES) + r")([\d,]+)"
)


def _signed(sign: str, digits: str) -> int | None:
    cleaned = digits.replace(",", "")
    if not cleaned:
        return None
    value = int(cleaned)
    return -value if sign else value


def find_labeled_value(
    text: str, label: str, nth: int = 0, required_code: str | None = None
) -> int:
    """Find the amount written after a label.

    Every occurrence of the label is tried in turn. After an occurrence the
    amounts are read one by one with three patterns, in order: a bracketed
    note with an optional line-item code, a bare line-item code, and a plain
    value. A leading ``△``, ``-`` or ``−`` makes the amount negative.

    Args:
        text: Page text with words joined by spaces
        label: Label text; whitespace between its characters is optional
        nth: Zero-based index of the amount to return after the label
        required_code: Line-item code that must precede every amount read

    Returns:
        int: The first non-zero amount found, or 0 when none is found
    """
    for label_match in re.finditer(spaced_pattern(label), text):
        rest = text[label_match.end() :]
        value = 0
        found = True
        for index in range(nth + 1):
            match = None
            for pattern in VALUE_PATTERNS:
                match = pattern.match(rest)
                if match:
                    break
            if match is None:
                found = False
                break
            code, sign, digits = match.groups()
            if required_code is not None and code != required_code:
                found = False
                break
            if index == nth:
                parsed = _signed(sign, digits)
                if parsed is None:
                    found = False
                    break
                value = parsed
            rest = rest[match.end() :]
        if found and value != 0:
            logger.debug(f"Found {label}: {value}")
            return value
    return 0


def find_first_labeled_value(
    text: str, labels: Sequence[str], nth: int = 0, required_code: str | None = None
) -> int:
    """Try label spellings in order while the result is still zero."""
    for label in labels:
        value = find_labeled_value(text, label, nth, required_code)
        if value != 0:
            return value
    return 0


def find_value_by_code(
    words: Sequence[Word], label: str, code: str, line_tolerance: float = 10.0
) -> int:
    """Find an amount on the line holding both a label and a line-item code.

    The last non-amount word containing ``code`` marks the code column; the
    first integer word to its right is returned.
    """
    compact_label = strip_spaces(label)
    for line in group_lines(words, line_tolerance):
        if compact_label not in strip_spaces("".join(w.text for w in line.words)):
            continue
        code_index = -1
        for index, word in enumerate(line.words):
            if code in word.text and "," not in word.text:
                code_index = index
        if code_index == -1:
            continue
        for word in line.words[code_index + 1 :]:
            cleaned = word.text.strip().replace(",", "")
            if re.fullmatch(r"-?\d+", cleaned):
                return int(cleaned)
    return 0


def find_min_tax_target(text: str) -> int:
    """Minimum-tax target amount, printed next to line-item code 17."""
    match = MIN_TAX_TARGET_NEAR_CODE.search(text)
    if match:
        raw = match.group(1)
        sign = raw[0] if raw[0] in "△-−" else ""
        value = _signed(sign, raw.lstrip("△-−"))
        if value:
            return value
    return find_first_labeled_value(text, MIN_TAX_TARGET_LABELS)


def parse_tax_credits(
    text: str, min_amount: int = 10000, existing: Sequence[TaxCreditItem] = ()
) -> list[TaxCreditItem]:
    """Read tax-credit lines from the credit statement.

    Whitespace is removed, everything after the footer code is dropped, and
    each known code followed by digits is an item. Small amounts are noise
    from adjacent columns and are discarded.

    Args:
        text: Raw page text
        min_amount: Smallest amount accepted as a credit
        existing: Items already collected from earlier pages

    Returns:
        list[TaxCreditItem]: New items not already present in ``existing``
    """
    compact = strip_spaces(text).split(TAX_CREDIT_FOOTER_CODE)[0]
    seen = {(item.code, item.amount) for item in existing}
    items = []
    for match in CREDIT_ITEM.finditer(compact):
        code, digits = match.groups()
        amount = _signed("", digits)
        if amount is None or amount < min_amount:
            continue
        if (code, amount) in seen:
            continue
        seen.add((code, amount))
        items.append(TaxCreditItem(code=code, name=TAX_CREDIT_CODES[code], amount=amount))
        logger.debug(f"Tax credit {code} ({TAX_CREDIT_CODES[code]}): {amount:,}")
    return items


def decode_share_tail(numeric: str) -> tuple[int, float]:
    """Split the closing share count and ratio printed back to back.

    With a thousands separator the share count ends three digits after the
    last comma. Without one, the ratio is taken to be the last three digits
    when the text ends in ``100`` and the last two otherwise.

    Returns:
        tuple[int, float]: (shares, ratio in percent)
    """
    last_comma = numeric.rfind(",")
    if last_comma != -1 and last_comma + 4 <= len(numeric):
        split_at = last_comma + 4
        shares_text, ratio_text = numeric[:split_at], numeric[split_at:]
    else:
        ratio_len = 3 if numeric.endswith("100") else 2
        shares_text, ratio_text = numeric[:-ratio_len], numeric[-ratio_len:]

    shares = 0
    if match := TRAILING_NUMBER.search(shares_text):
        shares = _signed("", match.group(0)) or 0
    try:
        ratio = float(ratio_text)
    except ValueError:
        ratio = 0.0
    return shares, ratio


def parse_shareholders(text: str, year: int | None = None) -> list[ShareholderRecord]:
    """Read related-party shareholders from the share-change statement.

    Rows start at an individual/corporation marker. Within a row the name
    sits between the marker and the resident ID, and the numeric tail after
    the ID ends with the closing share count, ratio and relation code.

    Args:
        text: Page text with words joined by spaces
        year: Fiscal year of the return

    Returns:
        list[ShareholderRecord]: Holders with a known relation code and shares
    """
    markers = list(SHAREHOLDER_ROW.finditer(text))
    shareholders = []
    for position, marker in enumerate(markers):
        end = markers[position + 1].start() if position + 1 < len(markers) else len(text)
        chunk = TRAILING_ROW_NUMBER.sub("", text[marker.start() : end])

        id_match = SHAREHOLDER_ID.search(chunk)
        if not id_match:
            continue
        raw_id = id_match.group(1)
        marker_end = len(marker.group(1))
        if id_match.start() < marker_end:
            continue

        name = re.sub(r"[\s\d]+", "", chunk[marker_end : id_match.start()])
        tail = re.sub(r"\s", "", chunk[id_match.end() :])
        tail = tail.replace("대한민국", "").replace("KR", "")
        tail_match = SHAREHOLDER_TAIL.match(tail)
        if not tail_match:
            continue

        numeric, relation_code = tail_match.groups()
        if relation_code not in RELATION_CODES:
            continue
        shares, ratio = decode_share_tail(numeric)
        if shares <= 0:
            continue

        clean_id = strip_spaces(raw_id)
        shareholders.append(
            ShareholderRecord(
                name=name,
                resident_id=f"{clean_id[:6]}-*******",
                relation_code=relation_code,
                relation_name=RELATION_CODES[relation_code],
                shares=shares,
                ratio=ratio,
                year=year,
            )
        )
        logger.debug(
            f"Shareholder {name} ({RELATION_CODES[relation_code]}): "
            f"{shares:,} shares, {ratio}%"
        )
    return shareholders


@dataclass
class _ReturnState:
    """Values accumulated while walking the pages of one return."""

    year: int | None
    tax_base: int = 0
    calculated_tax: int = 0
    min_tax_target: int = 0
    deducted_tax: int = 0
    total_adjustment: int = 0
    min_tax: int = 0
    credit_start_page: int | None = None
    tax_credits: list[TaxCreditItem] = field(default_factory=list)
    shareholders: list[ShareholderRecord] = field(default_factory=list)


class TaxReturnExtractor:
    """Extract tax amounts, credits and shareholders from a tax return."""

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        layout: LayoutConfig | None = None,
    ):
        self.config = config or get_extraction_config()
        self.layout = layout or get_layout_config()

    def extract_from_pdf(self, pdf: Any, source_file: str | Path) -> TaxReturnRecord:
        """Extract a tax return record from an open pdfplumber document.

        Args:
            pdf: An open ``pdfplumber.PDF``
            source_file: File name, used for the fiscal year

        Returns:
            TaxReturnRecord: Amounts, credits and shareholders of the return
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
    ) -> TaxReturnRecord:
        """Extract a tax return record from pre-assembled page words.

        Args:
            page_word_lists: Words per page, in page order
            source_file: File name, used for the fiscal year

        Returns:
            TaxReturnRecord: Amounts, credits and shareholders of the return
        """
        source = str(source_file)
        state = _ReturnState(year=year_from_filename(source))
        logger.info(f"Extracting tax return {Path(source).name}")

        for page_index, words in enumerate(page_word_lists):
            self._process_page(state, page_index, words)

        if state.min_tax == 0 and state.tax_base > 0:
            state.min_tax = math.floor(state.tax_base * MIN_TAX_RATE_FALLBACK)
            logger.info(
                f"Minimum tax not found, using {MIN_TAX_RATE_FALLBACK:.0%} of tax base: "
                f"{state.min_tax:,}"
            )

        record = TaxReturnRecord(
            source_file=source,
            year=state.year,
            tax_base=state.tax_base,
            calculated_tax=state.calculated_tax,
            min_tax_target=state.min_tax_target,
            deducted_tax=state.deducted_tax,
            total_adjustment=state.total_adjustment,
            min_tax=state.min_tax,
            tax_credits=state.tax_credits,
            shareholders=[
                shareholder.model_copy(update={"year": state.year})
                for shareholder in state.shareholders
            ],
        )
        logger.info(
            f"✅ Tax return {record.year}: tax base {record.tax_base:,}, "
            f"{len(record.tax_credits)} credits, {len(record.shareholders)} shareholders"
        )
        return record

    def _process_page(
        self, state: _ReturnState, page_index: int, words: Sequence[Word]
    ) -> None:
        text = " ".join(word.text for word in words)
        compact = strip_spaces(text)
        is_report = REPORT_MARKER in compact
        is_min_tax = MIN_TAX_MARKER in compact

        if is_report:
            year_match = FISCAL_YEAR_LABEL.search(compact) or FISCAL_YEAR_SPACED.search(
                text
            )
            if year_match:
                state.year = int(year_match.group(1))
            state.tax_base = find_labeled_value(text, "과세표준")
            state.calculated_tax = find_labeled_value(text, "산출세액")

        if ADJUSTMENT_MARKER in compact:
            if state.calculated_tax == 0:
                state.calculated_tax = find_value_by_code(
                    words, "산출세액", "12", self.layout.line_y_tolerance
                )
            if state.min_tax_target == 0:
                state.min_tax_target = find_min_tax_target(text)
            state.deducted_tax = find_first_labeled_value(text, DEDUCTED_TAX_LABELS)
            if state.total_adjustment == 0:
                state.total_adjustment = find_labeled_value(
                    text, "가감계", required_code="21"
                )

        if is_min_tax:
            state.min_tax = find_first_labeled_value(text, MIN_TAX_LABELS, nth=1)

        if CREDIT_STATEMENT_MARKER in compact and state.credit_start_page is None:
            state.credit_start_page = page_index
        in_credit_range = (
            state.credit_start_page is not None
            and page_index <= state.credit_start_page + CREDIT_STATEMENT_EXTRA_PAGES
        )
        if in_credit_range and not is_min_tax and not is_report:
            state.tax_credits.extend(
                parse_tax_credits(
                    "".join(word.text for word in words),
                    self.config.min_tax_credit_amount,
                    state.tax_credits,
                )
            )

        if SHAREHOLDING_MARKER in compact:
            shareholders = parse_shareholders(text, state.year)
            if shareholders:
                state.shareholders = shareholders
