"""Import orchestrator that tracks the prospecting search around an upload."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..config import ImporterConfig
from ..ingestion import Buffer, import_prospecting_file
from ..models import (
    SEARCH_STATUS_COMPLETED,
    SEARCH_STATUS_FAILED,
    ImportResult,
    ProspectingSearch,
)
from ..storage import SearchNotFoundError, SearchStorage

LOGGER = logging.getLogger(__name__)


class ImportOrchestrator:
    """Creates searches, runs imports into them and records the outcome."""

    def __init__(self, storage: SearchStorage, config: Optional[ImporterConfig] = None) -> None:
        self._storage = storage
        self._config = config or ImporterConfig()

    @property
    def config(self) -> ImporterConfig:
        return self._config

    def start_search(
        self,
        user_id: int,
        segment: str,
        *,
        city: Optional[str] = None,
        filters: Optional[str] = None,
        search_id: Optional[int] = None,
    ) -> ProspectingSearch:
        if not segment or not segment.strip():
            raise ValueError("A segment is required to start a prospecting search")
        search = ProspectingSearch(user_id=user_id, segment=segment.strip(), city=city, filters=filters, id=search_id)
        return self._storage.create_prospecting_search(search)

    def import_into_search(
        self,
        search_id: int,
        filename: Optional[str],
        content: Buffer,
        *,
        content_type: Optional[str] = None,
    ) -> ImportResult:
        """Run an import for an existing search and update its counters.

        The search is marked failed when nothing was imported or when the
        import raises; the exception is re-raised for the caller to report.
        """

        if self._storage.get_prospecting_search(search_id) is None:
            raise SearchNotFoundError(f"Prospecting search {search_id} does not exist")

        try:
            result = import_prospecting_file(
                filename,
                content,
                search_id,
                self._storage,
                content_type=content_type,
                config=self._config,
            )
        except Exception:
            LOGGER.exception("Import of %r into search %s failed", filename, search_id)
            self._storage.update_prospecting_search(search_id, status=SEARCH_STATUS_FAILED)
            raise

        self._storage.update_prospecting_search(
            search_id,
            leads_found=result.imported_leads,
            dispatches_pending=result.imported_leads,
            status=SEARCH_STATUS_COMPLETED if result.imported_leads > 0 else SEARCH_STATUS_FAILED,
        )
        return result

    def import_upload(
        self,
        user_id: int,
        segment: str,
        filename: Optional[str],
        content: Buffer,
        *,
        content_type: Optional[str] = None,
        city: Optional[str] = None,
        filters: Optional[str] = None,
    ) -> Tuple[ProspectingSearch, ImportResult]:
        """Create a search for an upload and import the file into it."""

        search = self.start_search(user_id, segment, city=city, filters=filters)
        result = self.import_into_search(search.id, filename, content, content_type=content_type)
        updated = self._storage.get_prospecting_search(search.id) or search
        return updated, result


__all__ = ["ImportOrchestrator"]
