"""Lead import engine: format dispatch for CSV and spreadsheet uploads."""
from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Optional, Union

from ..config import ImporterConfig
from ..models import ImportResult
from ..storage import ProspectingStorage
from .readers import Buffer, SpreadsheetReadError, decode_content, read_csv_table, read_excel_table
from .rows import empty_file_result, process_table

LOGGER = logging.getLogger(__name__)

FORMAT_CSV = "csv"
FORMAT_SPREADSHEET = "spreadsheet"

_CSV_SUFFIXES = {".csv"}
_SPREADSHEET_SUFFIXES = {".xlsx", ".xlsm"}
# BIFF workbooks need an engine outside the openpyxl stack.
_LEGACY_SPREADSHEET_SUFFIXES = {".xls"}
_CSV_MIME_MARKERS = ("csv",)
_SPREADSHEET_MIME_MARKERS = ("excel", "spreadsheet")


class UnsupportedFileTypeError(ValueError):
    """Raised when an upload is neither CSV nor a recognised spreadsheet."""


def detect_format(filename: Optional[str], content_type: Optional[str] = None) -> str:
    """Return :data:`FORMAT_CSV` or :data:`FORMAT_SPREADSHEET` for an upload."""

    mime = (content_type or "").lower()
    suffix = PurePath(filename).suffix.lower() if filename else ""

    if suffix in _LEGACY_SPREADSHEET_SUFFIXES:
        raise UnsupportedFileTypeError("Legacy .xls workbooks are not supported. Save the file as .xlsx and upload it again")
    if any(marker in mime for marker in _CSV_MIME_MARKERS) or suffix in _CSV_SUFFIXES:
        return FORMAT_CSV
    if any(marker in mime for marker in _SPREADSHEET_MIME_MARKERS) or suffix in _SPREADSHEET_SUFFIXES:
        return FORMAT_SPREADSHEET
    raise UnsupportedFileTypeError(
        f"Unsupported file format '{suffix or content_type or filename}'. Use CSV or Excel (.xlsx)"
    )


def import_csv_content(
    content: Buffer,
    search_id: int,
    storage: ProspectingStorage,
    config: Optional[ImporterConfig] = None,
) -> ImportResult:
    """Import delimited text, detecting the separator from the first data line."""

    text = decode_content(content)
    if len(text.splitlines()) < 2:
        LOGGER.warning("CSV upload for search %s has no data rows", search_id)
        return empty_file_result()
    return process_table(read_csv_table(text), search_id, storage, config)


def import_excel_content(
    content: Union[bytes, bytearray],
    search_id: int,
    storage: ProspectingStorage,
    config: Optional[ImporterConfig] = None,
    *,
    engine: Optional[str] = "openpyxl",
) -> ImportResult:
    """Import the first worksheet of a spreadsheet."""

    config = config or ImporterConfig()
    if not content:
        return empty_file_result()
    table = read_excel_table(content, engine=engine)
    if len(table) < 2:
        LOGGER.warning("Spreadsheet upload for search %s has no data rows", search_id)
        return empty_file_result()
    return process_table(table, search_id, storage, config, default_type=config.spreadsheet_lead_type)


def import_prospecting_file(
    filename: Optional[str],
    content: Buffer,
    search_id: int,
    storage: ProspectingStorage,
    *,
    content_type: Optional[str] = None,
    config: Optional[ImporterConfig] = None,
) -> ImportResult:
    """Import an uploaded file into the leads of ``search_id``.

    The filename and MIME type only select the reader. Unsupported formats
    raise :class:`UnsupportedFileTypeError` before anything is parsed.
    """

    file_format = detect_format(filename, content_type)
    LOGGER.info("Importing %s upload %r into search %s", file_format, filename, search_id)

    if file_format == FORMAT_CSV:
        return import_csv_content(content, search_id, storage, config)

    if isinstance(content, str):
        raise UnsupportedFileTypeError("Spreadsheet uploads must be provided as bytes")
    return import_excel_content(content, search_id, storage, config)


__all__ = [
    "FORMAT_CSV",
    "FORMAT_SPREADSHEET",
    "SpreadsheetReadError",
    "UnsupportedFileTypeError",
    "detect_format",
    "import_csv_content",
    "import_excel_content",
    "import_prospecting_file",
]
