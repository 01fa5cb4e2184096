"""
XLSX source adapter for budget templates exported from spreadsheets.

Supports flexible layout:
  - sheet by index (0-based) or name
  - header row by index or auto-detect (scans first N rows for budget column names)
  - skip_rows before header
  - normalizes cell values to strings (strip, blank->empty string)

Auto-detect looks for a row containing at least 2 known budget headers in
either language (level/nivel, id, name/nombre, quantity/cantidad, ...), so
title rows above the header are skipped.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

import openpyxl

from budget_ingestion.adapters.base import SourceProbe
from budget_ingestion.domain.normalizer import HEADER_MAP, slugify

_MAX_ROWS = 100_000


def _cell_text(value: Any) -> str:
    """Cell value as pipeline text. Whole floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(Decimal(repr(value)))
    return str(value).strip()


def _row_values(row: Any) -> list[str]:
    return [_cell_text(cell.value if hasattr(cell, "value") else cell) for cell in row]


def _header_score(values: list[str]) -> int:
    return len({HEADER_MAP[s] for s in (slugify(v) for v in values) if s in HEADER_MAP})


def _detect_header_row(rows: list[list[str]], max_search: int = 15, min_keywords: int = 2) -> int:
    """Return 0-based index of the first row that looks like a budget header."""
    for i, values in enumerate(rows[:max_search]):
        if _header_score(values) >= min_keywords:
            return i
    return 0


def _trim(values: list[str]) -> list[str]:
    """Drop trailing empty cells."""
    end = len(values)
    while end and values[end - 1] == "":
        end -= 1
    return values[:end]


class XlsxSourceAdapter:
    """
    Read .xlsx files as rows of strings, header first.

    source_options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: number of rows to skip at top of sheet before header/data. Default: 0.
      header_row: 0-based row index (within the sheet after skip_rows) to use as
        header. Takes precedence over auto-detection when given.
      auto_detect_header: if true (default), scan first 15 rows for the header row.
    """

    def load(self, source_path: Path, options: dict[str, Any]) -> list[list[str]]:
        rows = self._read_rows(source_path, options, max_row=_MAX_ROWS)
        if not rows:
            return []
        hi = self._header_index(rows, options)
        return [_trim(values) for values in rows[hi:]]

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        rows = self._read_rows(source_path, options, max_row=500)
        if not rows:
            return SourceProbe(row_count=0, columns=(), sample_rows=(), encoding=None, detected_delimiter=None)

        hi = self._header_index(rows, options)
        header = _trim(rows[hi])
        data = [_trim(values) for values in rows[hi + 1 :] if any(values)]
        return SourceProbe(
            row_count=len(data),
            columns=tuple(header),
            sample_rows=tuple(tuple(values) for values in data[:5]),
            encoding=None,
            detected_delimiter=None,
        )

    def _read_rows(self, source_path: Path, options: dict[str, Any], max_row: int) -> list[list[str]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb, options)
            skip_rows = int(options.get("skip_rows", 0))
            return [
                _row_values(row)
                for row in sheet.iter_rows(min_row=1 + skip_rows, max_row=max_row)
            ]
        finally:
            wb.close()

    def _header_index(self, rows: list[list[str]], options: dict[str, Any]) -> int:
        header_row_idx = options.get("header_row")
        auto_detect = options.get("auto_detect_header", True)
        if header_row_idx is not None:
            return int(header_row_idx)
        if auto_detect:
            return _detect_header_row(rows)
        return 0

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]
