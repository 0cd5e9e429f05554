"""Data models shared by the lead import engine, storage, and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

RawTable = List[List[str]]
"""Rows of raw text cells; the first row holds the headers."""

NOT_FOUND = -1


class FieldKind(str, Enum):
    """Semantic lead attributes that spreadsheet columns are mapped onto."""

    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    CITY = "city"
    STATE = "state"
    WEBSITE = "website"
    TYPE = "type"


IDENTIFYING_FIELDS = (FieldKind.NAME, FieldKind.EMAIL, FieldKind.PHONE)


# --- Column Resolution ---

@dataclass
class ColumnMapping:
    """Column index assigned to each :class:`FieldKind` for one import."""

    indices: Dict[FieldKind, int] = field(default_factory=dict)
    forced: bool = False

    def get(self, kind: FieldKind) -> int:
        return self.indices.get(kind, NOT_FOUND)

    def is_mapped(self, kind: FieldKind) -> bool:
        return self.get(kind) != NOT_FOUND

    @property
    def combined_city_state(self) -> bool:
        """True when city and state were resolved to the same column."""

        city = self.get(FieldKind.CITY)
        return city != NOT_FOUND and city == self.get(FieldKind.STATE)

    def describe(self, headers: List[str]) -> Dict[str, str]:
        """Return a readable ``kind -> header`` view for logs."""

        view: Dict[str, str] = {}
        for kind in FieldKind:
            index = self.get(kind)
            if index == NOT_FOUND or index >= len(headers):
                view[kind.value] = "unavailable"
            else:
                view[kind.value] = headers[index]
        return view


# --- Import Output ---

@dataclass(slots=True)
class LeadRecord:
    """A lead produced by an import, bound to its prospecting search."""

    search_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    site: Optional[str] = None
    type: Optional[str] = None
    id: Optional[int] = None

    def has_identity(self) -> bool:
        return bool(self.name or self.email or self.phone)

    def as_row(self) -> Dict[str, Any]:
        """Return the record keyed by the prospecting-result column names."""

        return {
            "id": self.id,
            "searchId": self.search_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "cidade": self.city,
            "estado": self.state,
            "site": self.site,
            "type": self.type,
        }


@dataclass(frozen=True)
class ImportResult:
    """Aggregate outcome of one import; relayed as-is to the HTTP client."""

    imported_leads: int
    error_leads: int
    message: str
    duplicate_leads: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "importedLeads": self.imported_leads,
            "errorLeads": self.error_leads,
            "duplicateLeads": self.duplicate_leads,
            "message": self.message,
        }


# --- Prospecting Searches ---

SEARCH_STATUS_PROCESSING = "processing"
SEARCH_STATUS_COMPLETED = "completed"
SEARCH_STATUS_FAILED = "failed"


@dataclass
class ProspectingSearch:
    """A batch of leads created by one upload."""

    user_id: int
    segment: str
    city: Optional[str] = None
    filters: Optional[str] = None
    status: str = SEARCH_STATUS_PROCESSING
    leads_found: int = 0
    dispatches_pending: int = 0
    id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = [
    "ColumnMapping",
    "FieldKind",
    "IDENTIFYING_FIELDS",
    "ImportResult",
    "LeadRecord",
    "NOT_FOUND",
    "ProspectingSearch",
    "RawTable",
    "SEARCH_STATUS_COMPLETED",
    "SEARCH_STATUS_FAILED",
    "SEARCH_STATUS_PROCESSING",
]
