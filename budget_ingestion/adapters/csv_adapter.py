"""
CSV source adapter.

Reads the file as text and leaves delimiter detection and header mapping
to the row normalizer. Configurable: encoding, skip_rows. Handles BOM via
utf-8-sig when encoding is utf-8.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any

from budget_ingestion.adapters.base import SourceProbe
from budget_ingestion.domain.normalizer import detect_delimiter, is_content_row

_SAMPLE_SIZE = 5


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


class CsvSourceAdapter:
    """Read delimited text files (comma, semicolon, tab or pipe separated)."""

    def load(self, source_path: Path, options: dict[str, Any]) -> str:
        encoding = _get_encoding(options)
        skip_rows = int(options.get("skip_rows", 0))

        with source_path.open("r", encoding=encoding, newline="") as f:
            for _ in range(skip_rows):
                next(f, None)
            return f.read()

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        text = self.load(source_path, options)
        delimiter = options.get("delimiter") or detect_delimiter(text)

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
        rows = [row for row in reader if is_content_row(row)]
        if not rows:
            return SourceProbe(
                row_count=0,
                columns=(),
                sample_rows=(),
                encoding=encoding,
                detected_delimiter=delimiter,
            )

        header, data = rows[0], rows[1:]
        return SourceProbe(
            row_count=len(data),
            columns=tuple(h.strip() for h in header),
            sample_rows=tuple(tuple(r) for r in data[:_SAMPLE_SIZE]),
            encoding=encoding,
            detected_delimiter=delimiter,
        )
