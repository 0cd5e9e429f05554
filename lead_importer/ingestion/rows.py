"""Turn a raw table into persisted lead records."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..config import ImporterConfig
from ..models import NOT_FOUND, ColumnMapping, FieldKind, ImportResult, LeadRecord, RawTable
from ..normalize import clean_address, format_phone_number, normalize_text
from ..storage import ProspectingStorage
from .columns import resolve_column_mapping

LOGGER = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "Import failed: the file is empty or has no data rows"


@dataclass
class _Tally:
    imported: int = 0
    duplicates: int = 0
    errors: int = 0

    def summary(self) -> str:
        parts = [f"{self.imported} leads added"]
        if self.duplicates:
            parts.append(f"{self.duplicates} duplicates skipped")
        parts.append(f"{self.errors} errors")
        return "Import complete: " + ", ".join(parts)

    def result(self) -> ImportResult:
        return ImportResult(
            imported_leads=self.imported,
            error_leads=self.errors,
            duplicate_leads=self.duplicates,
            message=self.summary(),
        )


def empty_file_result() -> ImportResult:
    return ImportResult(imported_leads=0, error_leads=0, message=EMPTY_FILE_MESSAGE)


def row_is_empty(row: Sequence[object]) -> bool:
    return all(cell is None or not str(cell).strip() for cell in row)


def _cell(row: Sequence[object], index: int) -> str:
    if index == NOT_FOUND or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value).strip()


def split_city_state(value: str, separators: str) -> Tuple[str, str]:
    """Split ``"São Paulo - SP"`` into ``("São Paulo", "SP")``.

    The first separator found wins; without one the whole value is the city.
    """

    if not value or not separators:
        return value, ""
    pattern = "[" + re.escape(separators) + "]"
    parts = re.split(pattern, value, maxsplit=1)
    if len(parts) < 2:
        return value.strip(), ""
    return parts[0].strip(), parts[1].strip()


def build_lead(
    row: Sequence[object],
    mapping: ColumnMapping,
    search_id: int,
    config: ImporterConfig,
    *,
    default_type: Optional[str] = None,
) -> LeadRecord:
    """Extract and normalise the mapped cells of one row."""

    table = config.mojibake_table
    name = normalize_text(_cell(row, mapping.get(FieldKind.NAME)), table)
    email = normalize_text(_cell(row, mapping.get(FieldKind.EMAIL)), table)
    phone = format_phone_number(
        _cell(row, mapping.get(FieldKind.PHONE)),
        country_code=config.country_code,
        min_digits=config.min_phone_digits,
    )
    address = clean_address(_cell(row, mapping.get(FieldKind.ADDRESS)), table)

    if mapping.combined_city_state:
        combined = normalize_text(_cell(row, mapping.get(FieldKind.CITY)), table)
        city, state = split_city_state(combined, config.city_state_separators)
    else:
        city = normalize_text(_cell(row, mapping.get(FieldKind.CITY)), table)
        state = normalize_text(_cell(row, mapping.get(FieldKind.STATE)), table)

    site = normalize_text(_cell(row, mapping.get(FieldKind.WEBSITE)), table)
    lead_type = normalize_text(_cell(row, mapping.get(FieldKind.TYPE)), table) or default_type

    return LeadRecord(
        search_id=search_id,
        name=name or None,
        email=email or None,
        phone=phone or None,
        address=address or None,
        city=city or None,
        state=state or None,
        site=site or None,
        type=lead_type or None,
    )


def process_table(
    table: RawTable,
    search_id: int,
    storage: ProspectingStorage,
    config: Optional[ImporterConfig] = None,
    *,
    default_type: Optional[str] = None,
) -> ImportResult:
    """Resolve columns from the header row and persist every usable row.

    A failing row never aborts the import: rows without a name, email or
    phone and rows the storage rejects are counted as errors, duplicates of
    an already stored phone are counted separately, and blank rows are
    skipped without being counted.
    """

    config = config or ImporterConfig()
    if len(table) < 2:
        return empty_file_result()

    headers = [str(cell) if cell is not None else "" for cell in table[0]]
    mapping = resolve_column_mapping(headers, config)
    LOGGER.debug("Column mapping for search %s: %s", search_id, mapping.describe(headers))

    tally = _Tally()
    for line_number, row in enumerate(table[1:], start=2):
        if not row or row_is_empty(row):
            continue

        lead = build_lead(row, mapping, search_id, config, default_type=default_type)
        if not lead.has_identity():
            LOGGER.debug("Line %s rejected: no name, email or phone", line_number)
            tally.errors += 1
            continue

        try:
            if config.deduplicate and lead.phone:
                if storage.get_lead_by_search_and_phone(search_id, lead.phone) is not None:
                    LOGGER.debug("Line %s skipped: phone %s already imported", line_number, lead.phone)
                    tally.duplicates += 1
                    continue
            storage.create_prospecting_result(lead)
        except Exception:
            LOGGER.exception("Failed to store line %s for search %s", line_number, search_id)
            tally.errors += 1
            continue
        tally.imported += 1

    result = tally.result()
    LOGGER.info(
        "Search %s: %s imported, %s duplicates, %s errors",
        search_id,
        result.imported_leads,
        result.duplicate_leads,
        result.error_leads,
    )
    return result


__all__ = [
    "EMPTY_FILE_MESSAGE",
    "build_lead",
    "empty_file_result",
    "process_table",
    "row_is_empty",
    "split_city_state",
]
