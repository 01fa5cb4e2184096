"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.load() returns the whole source in the shape the pipeline
    accepts: delimited text, or rows of cell strings.
    SourceAdapter.probe() returns a quick snapshot: row count, columns, sample rows.

Architecture: budget_ingestion/adapters. File I/O only; everything after
load() is pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence, runtime_checkable

# Text for delimited sources, rows of strings for spreadsheets
SourceContent = str | list[list[str]]


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading budget source files."""

    def load(self, source_path: Path, options: dict[str, Any]) -> SourceContent:
        """Read the whole source. Budgets are small; no streaming."""
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[Sequence[str], ...]  # First 5 data rows; do not mutate
    encoding: str | None = None
    detected_delimiter: str | None = None
