"""Export utilities for imported lead records."""
from __future__ import annotations

from pathlib import Path
from typing import MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import LeadRecord

PathLike = Union[str, Path]

LEAD_COLUMNS = ["id", "searchId", "name", "email", "phone", "address", "cidade", "estado", "site", "type"]


def leads_to_dataframe(leads: Sequence[LeadRecord]) -> pd.DataFrame:
    """Convert lead records into a :class:`pandas.DataFrame` with stable columns."""

    return pd.DataFrame([lead.as_row() for lead in leads], columns=LEAD_COLUMNS)


def export_leads(
    leads: Sequence[LeadRecord],
    path: PathLike,
    *,
    sheet_name: str = "Leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write lead records to a CSV or Excel file."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(leads_to_dataframe(leads), output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix == ".csv":
        exporter_kwargs.setdefault("encoding", "utf-8")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xlsx", ".xlsm"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["LEAD_COLUMNS", "export_leads", "leads_to_dataframe"]
