"""Lead import engine for prospecting CSV and spreadsheet uploads."""

from . import models  # noqa: F401
from .config import ConfigurationError, ImporterConfig, load_importer_config
from .ingestion import (
    SpreadsheetReadError,
    UnsupportedFileTypeError,
    import_csv_content,
    import_excel_content,
    import_prospecting_file,
)
from .models import ColumnMapping, FieldKind, ImportResult, LeadRecord, ProspectingSearch
from .orchestrator import ImportOrchestrator
from .storage import InMemoryStorage, ProspectingStorage, SearchNotFoundError

__all__ = [
    "ColumnMapping",
    "ConfigurationError",
    "FieldKind",
    "ImportOrchestrator",
    "ImportResult",
    "ImporterConfig",
    "InMemoryStorage",
    "LeadRecord",
    "ProspectingSearch",
    "ProspectingStorage",
    "SearchNotFoundError",
    "SpreadsheetReadError",
    "UnsupportedFileTypeError",
    "import_csv_content",
    "import_excel_content",
    "import_prospecting_file",
    "load_importer_config",
]
