"""Storage collaborators used by the import engine and orchestrator."""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .models import LeadRecord, ProspectingSearch

LOGGER = logging.getLogger(__name__)


class SearchNotFoundError(LookupError):
    """Raised when a prospecting search id is unknown to the storage."""


class ProspectingStorage(Protocol):
    """Interface the import engine writes leads through."""

    def create_prospecting_result(self, lead: LeadRecord) -> LeadRecord:  # pragma: no cover - protocol
        """Persist one lead and return the stored copy."""

    def get_lead_by_search_and_phone(self, search_id: int, phone: str) -> Optional[LeadRecord]:  # pragma: no cover - protocol
        """Return a lead of ``search_id`` with the given phone, if any."""


class SearchStorage(ProspectingStorage, Protocol):
    """Storage that also tracks the searches leads belong to."""

    def create_prospecting_search(self, search: ProspectingSearch) -> ProspectingSearch:  # pragma: no cover - protocol
        ...

    def get_prospecting_search(self, search_id: int) -> Optional[ProspectingSearch]:  # pragma: no cover - protocol
        ...

    def update_prospecting_search(self, search_id: int, **changes: Any) -> ProspectingSearch:  # pragma: no cover - protocol
        ...


class InMemoryStorage:
    """Thread-safe storage keeping searches and leads in dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._searches: Dict[int, ProspectingSearch] = {}
        self._results: Dict[int, LeadRecord] = {}
        # (search id, phone) -> id of the first lead stored with that phone.
        self._phone_index: Dict[Tuple[int, str], int] = {}
        self._search_ids = itertools.count(1)
        self._result_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------
    def create_prospecting_search(self, search: ProspectingSearch) -> ProspectingSearch:
        """Store ``search`` under its own id, or the next free one when unset."""

        with self._lock:
            search_id = search.id
            if search_id is None:
                search_id = next(self._search_ids)
                while search_id in self._searches:
                    search_id = next(self._search_ids)
            elif search_id in self._searches:
                raise ValueError(f"Prospecting search {search_id} already exists")
            stored = replace(search, id=search_id)
            self._searches[stored.id] = stored
        LOGGER.debug("Created prospecting search %s for user %s", stored.id, stored.user_id)
        return stored

    def get_prospecting_search(self, search_id: int) -> Optional[ProspectingSearch]:
        with self._lock:
            return self._searches.get(search_id)

    def update_prospecting_search(self, search_id: int, **changes: Any) -> ProspectingSearch:
        with self._lock:
            current = self._searches.get(search_id)
            if current is None:
                raise SearchNotFoundError(f"Prospecting search {search_id} does not exist")
            updated = replace(current, **changes)
            self._searches[search_id] = updated
        return updated

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def create_prospecting_result(self, lead: LeadRecord) -> LeadRecord:
        with self._lock:
            stored = replace(lead, id=next(self._result_ids))
            self._results[stored.id] = stored
            if stored.phone:
                self._phone_index.setdefault((stored.search_id, stored.phone), stored.id)
        return stored

    def get_lead_by_search_and_phone(self, search_id: int, phone: str) -> Optional[LeadRecord]:
        with self._lock:
            result_id = self._phone_index.get((search_id, phone))
            return None if result_id is None else self._results[result_id]

    def get_results_by_search(self, search_id: int) -> List[LeadRecord]:
        with self._lock:
            return [lead for lead in self._results.values() if lead.search_id == search_id]


__all__ = ["InMemoryStorage", "ProspectingStorage", "SearchNotFoundError", "SearchStorage"]
