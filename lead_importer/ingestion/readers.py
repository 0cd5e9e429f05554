"""Readers turning uploaded CSV and spreadsheet buffers into raw tables."""
from __future__ import annotations

import io
import logging
import warnings
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd

from ..models import RawTable
from .separator import detect_separator

LOGGER = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, str]
PathLike = Union[str, Path]


class SpreadsheetReadError(ValueError):
    """Raised when a spreadsheet buffer cannot be parsed."""


def decode_content(content: Buffer) -> str:
    """Decode an uploaded text buffer, preferring UTF-8.

    Windows exports that are not valid UTF-8 are decoded as cp1252; bytes
    that still fail become replacement characters, which the text normaliser
    cleans up later.
    """

    if isinstance(content, str):
        return content.lstrip("\ufeff")
    raw = bytes(content)
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        LOGGER.warning("Upload is not valid UTF-8; decoding as cp1252")
        return raw.decode("cp1252", errors="replace")


def read_csv_table(content: Buffer, *, separator: Optional[str] = None) -> RawTable:
    """Split delimited text into rows of stripped cells.

    Quoted fields are honoured. Short rows are padded with empty cells and
    cells beyond the header width are dropped.
    """

    text = decode_content(content)
    separator = separator or detect_separator(text)
    try:
        with warnings.catch_warnings():
            # Over-long rows are truncated to the header width with a ParserWarning.
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            frame = pd.read_csv(
                io.StringIO(text),
                sep=separator,
                header=None,
                dtype=str,
                keep_default_na=False,
                engine="python",
                on_bad_lines=_keep_bad_line,
            )
    except pd.errors.EmptyDataError:
        return []
    return _frame_to_table(frame)


def _keep_bad_line(fields: List[str]) -> List[str]:
    return fields


def cell_to_text(value: Any) -> str:
    """Render a spreadsheet cell the way a user would have typed it."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return str(value)
    if pd.isna(value):
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # Phone columns are frequently stored as numbers.
        return str(int(value))
    return str(value).strip()


def read_excel_table(
    content: Union[bytes, bytearray, PathLike],
    *,
    sheet_name: Union[str, int] = 0,
    engine: Optional[str] = "openpyxl",
) -> RawTable:
    """Read one worksheet into a matrix of text cells, header row included."""

    source = io.BytesIO(bytes(content)) if isinstance(content, (bytes, bytearray)) else Path(content)
    try:
        frame = pd.read_excel(source, sheet_name=sheet_name, header=None, dtype=object, engine=engine)
    except Exception as exc:
        # Includes the ImportError pandas raises when the engine is missing.
        raise SpreadsheetReadError(f"Unable to read spreadsheet: {exc}") from exc

    rows = _frame_to_table(frame)
    LOGGER.debug("Read %s spreadsheet rows from sheet %r", len(rows), sheet_name)
    return rows


def _frame_to_table(frame: pd.DataFrame) -> RawTable:
    return [[cell_to_text(value) for value in values] for values in frame.itertuples(index=False, name=None)]


__all__ = [
    "SpreadsheetReadError",
    "cell_to_text",
    "decode_content",
    "read_csv_table",
    "read_excel_table",
]
