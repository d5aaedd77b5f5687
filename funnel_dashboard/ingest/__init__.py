"""Spreadsheet ingestion."""

from .locks import DashboardLocks
from .pipeline import ImportResult, RowWarning, import_from_external_source, map_export
from .sheets import SheetFetcher, build_export_url

__all__ = [
    "DashboardLocks",
    "ImportResult",
    "RowWarning",
    "SheetFetcher",
    "build_export_url",
    "import_from_external_source",
    "map_export",
]
