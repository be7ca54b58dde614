"""Corporate registry extractor (법인 등기사항증명서).

The registry is read as one stream of lines across all pages and parsed by a
small state machine:

- ``SCANNING_HEADER``: looking for the company name and section headers
- ``PARSING_ADDRESS``: inside the head office section, where change records
  replace the address (the latest record wins)
- ``PARSING_EXECUTIVES``: inside the executive section, where a
  ``{position} {name} {masked id}`` line opens a record and dated event lines
  append tenure history to it
"""

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

from taxcredit.config import LayoutConfig, get_layout_config
from taxcredit.extractors.layout import Line, group_lines, page_words
from taxcredit.extractors.schemas import (
    ExecutiveRecord,
    HistoryEvent,
    HistoryEventType,
    RegistryRecord,
)
from taxcredit.utils.text import collapse_spaces, id_prefix, strip_spaces

logger = logging.getLogger(__name__)

CAPITAL_AREA_PLACES = ("서울", "경기", "인천")

_DATE = r"\d{4}\s*[.년]\s*\d{1,2}\s*[.월]\s*\d{1,2}\s*일?"

COMPANY_NAME_LABEL = re.compile(r"^\s*상\s*호\s*(.*)$")
COMPANY_NAME_ANNOTATION = re.compile(rf"\s*(?:{_DATE}|변경|등기|경정).*$")
HEAD_OFFICE_LABEL = re.compile(r"^\s*본\s*점\s*(.*)$")
ADDRESS_CHANGE = re.compile(rf"({_DATE})\s*(이전|변경|경정)\s+(.+?)\s+({_DATE})")
ADDRESS_TRAILING_DATES = re.compile(rf"\s*{_DATE}.*$")

EXECUTIVE_LINE = re.compile(
    r"(사내이사|사외이사|기타비상무이사|공동대표이사|대표이사|감사|이사)"
    r"\s+([가-힣]+)\s+(\d{6}-[\d*]{7})"
)
HISTORY_EVENT = re.compile(
    r"(\d{4})\s*년\s*(\d{1,2})\s*월\s*(\d{1,2})\s*일\s*(취임|중임|사임|퇴임|만료|해임)"
)
EVENT_TYPES = {
    "취임": HistoryEventType.ASSUME,
    "중임": HistoryEventType.REASSUME,
    "사임": HistoryEventType.RESIGN,
    "퇴임": HistoryEventType.RETIRE,
    "만료": HistoryEventType.EXPIRE,
    "해임": HistoryEventType.DISMISS,
}

EXECUTIVE_SECTION = "임원에관한사항"
SECTION_HEADERS = (
    "공고방법",
    "1주의금액",
    "발행할주식의총수",
    "발행주식의총수",
    "자본금의액",
    "목적",
    "기타사항",
    "지점",
    "지배인",
    "전환사채",
    "신주인수권",
    "종류주식",
    "회사성립연월일",
    "등기기록의개설사유",
)


class RegistryParseState(Enum):
    SCANNING_HEADER = "scanning_header"
    PARSING_ADDRESS = "parsing_address"
    PARSING_EXECUTIVES = "parsing_executives"


def is_capital_area(address: str) -> bool:
    """Whether an address lies in the capital region."""
    return any(place in address for place in CAPITAL_AREA_PLACES)


def _is_section_header(compact: str) -> bool:
    return any(compact.startswith(header) for header in SECTION_HEADERS)


def parse_history_events(text: str) -> list[HistoryEvent]:
    """All dated tenure events found in a line of text."""
    events = []
    for match in HISTORY_EVENT.finditer(text):
        year, month, day, label = match.groups()
        try:
            event_date = date(int(year), int(month), int(day))
        except ValueError:
            logger.debug(f"Invalid event date in registry line: {match.group(0)}")
            continue
        events.append(HistoryEvent(date=event_date, event_type=EVENT_TYPES[label]))
    return events


class RegistryExtractor:
    """Extract company profile and executive tenures from a registry."""

    def __init__(self, layout: LayoutConfig | None = None):
        self.layout = layout or get_layout_config()

    def extract_from_pdf(self, pdf: Any, source_file: str | Path) -> RegistryRecord:
        """Extract a registry record from an open pdfplumber document.

        Args:
            pdf: An open ``pdfplumber.PDF``
            source_file: Registry file name

        Returns:
            RegistryRecord: Parsed company profile and executives
        """
        lines: list[Line] = []
        for index, page in enumerate(pdf.pages):
            words = page_words(
                page, index, self.layout.word_y_tolerance, self.layout.word_x_gap
            )
            lines.extend(group_lines(words, self.layout.line_y_tolerance))
        return self.extract_from_lines([line.text for line in lines], source_file)

    def extract_from_lines(
        self, lines: Iterable[str], source_file: str | Path = ""
    ) -> RegistryRecord:
        """Run the registry state machine over line texts.

        Args:
            lines: Line texts of all pages, in reading order
            source_file: Registry file name

        Returns:
            RegistryRecord: Parsed company profile and executives
        """
        state = RegistryParseState.SCANNING_HEADER
        company_name = ""
        address = ""
        executives: list[ExecutiveRecord] = []
        current: ExecutiveRecord | None = None

        def flush() -> None:
            nonlocal current
            if current is not None:
                executives.append(current)
                current = None

        for raw_line in lines:
            line = collapse_spaces(raw_line)
            if not line:
                continue
            compact = strip_spaces(line)

            if EXECUTIVE_SECTION in compact:
                flush()
                state = RegistryParseState.PARSING_EXECUTIVES
                continue

            if not company_name and (match := COMPANY_NAME_LABEL.match(line)):
                company_name = COMPANY_NAME_ANNOTATION.sub("", match.group(1)).strip()
                logger.debug(f"Company name: {company_name}")
                continue

            if match := HEAD_OFFICE_LABEL.match(line):
                flush()
                state = RegistryParseState.PARSING_ADDRESS
                initial = ADDRESS_TRAILING_DATES.sub("", match.group(1)).strip()
                if initial and not address:
                    address = initial
                change = ADDRESS_CHANGE.search(line)
                if change:
                    address = change.group(3).strip()
                continue

            if _is_section_header(compact):
                flush()
                state = RegistryParseState.SCANNING_HEADER
                continue

            if state is RegistryParseState.PARSING_ADDRESS:
                change = ADDRESS_CHANGE.search(line)
                if change:
                    address = change.group(3).strip()
                    logger.debug(f"Head office changed to: {address}")

            elif state is RegistryParseState.PARSING_EXECUTIVES:
                if match := EXECUTIVE_LINE.search(line):
                    flush()
                    current = ExecutiveRecord(
                        position=match.group(1),
                        name=match.group(2),
                        resident_id=match.group(3),
                    )
                    current.history.extend(parse_history_events(line[match.end() :]))
                elif current is not None:
                    current.history.extend(parse_history_events(line))

        flush()

        for executive in executives:
            executive.history = executive.sorted_history()

        record = RegistryRecord(
            source_file=str(source_file),
            company_name=company_name,
            address=address,
            is_capital_area=is_capital_area(address),
            executives=executives,
        )
        logger.info(
            f"✅ Registry {record.company_name or '(unnamed)'}: "
            f"{len(executives)} executives, "
            f"{'capital' if record.is_capital_area else 'non-capital'} area"
        )
        return record


def merge_executives(registries: Sequence[RegistryRecord]) -> list[ExecutiveRecord]:
    """Merge executives appearing in several registry documents.

    The same person is identified by name and resident ID prefix. Histories
    are combined and deduplicated by (date, event type); an unmasked resident
    ID replaces a masked one, and the position of the later document wins.

    Args:
        registries: Parsed registries, in upload order

    Returns:
        list[ExecutiveRecord]: One record per distinct executive
    """
    merged: dict[tuple[str, str], ExecutiveRecord] = {}
    for registry in registries:
        for executive in registry.executives:
            key = (executive.name, id_prefix(executive.resident_id) or "")
            existing = merged.get(key)
            if existing is None:
                merged[key] = executive.model_copy(
                    update={"history": list(executive.history)}
                )
                continue
            existing.history.extend(executive.history)
            if "*" in existing.resident_id and "*" not in executive.resident_id:
                existing.resident_id = executive.resident_id
            existing.position = executive.position

    for executive in merged.values():
        seen: set[tuple[date, HistoryEventType]] = set()
        unique = []
        for event in executive.sorted_history():
            event_key = (event.date, event.event_type)
            if event_key not in seen:
                seen.add(event_key)
                unique.append(event)
        executive.history = unique
    return list(merged.values())
