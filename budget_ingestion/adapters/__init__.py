"""Source adapters for budget files (file I/O only)."""

from budget_ingestion.adapters.base import SourceAdapter, SourceContent, SourceProbe
from budget_ingestion.adapters.csv_adapter import CsvSourceAdapter
from budget_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceContent",
    "SourceProbe",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
]
