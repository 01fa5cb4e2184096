"""
Row normalizer -- raw text or pre-split rows to canonical RawRows.

Strips a byte-order mark, detects the field delimiter, maps the bilingual
header onto the canonical field set and drops blank rows. Pure: text in,
NormalizedRows out. No file access; adapters own I/O.

Failure modes (returned, never raised):
    - No header line or zero data rows -> exactly one fatal parse error.
    - Text the csv reader rejects (e.g. an oversized field) -> one fatal
      parse error naming the reader failure.
    - Header lacking level, id or name -> one fatal structure error.
"""

from __future__ import annotations

import csv
import io
import re
import unicodedata
from typing import Iterable, Sequence

from budget_ingestion.domain.errors import parse_error, structure_error
from budget_ingestion.domain.types import (
    CANONICAL_FIELDS,
    REQUIRED_FIELDS,
    HeaderLanguage,
    NormalizedRows,
    RawRow,
)

BOM = "\ufeff"
DELIMITER_CANDIDATES = (",", ";", "\t", "|")

ENGLISH_HEADERS = (
    "level",
    "id",
    "name",
    "description",
    "unit",
    "tax_percentage",
    "quantity",
    "unit_price",
)
SPANISH_HEADERS = (
    "nivel",
    "id",
    "nombre",
    "descripcion",
    "ud",
    "%iva",
    "cantidad",
    "pvp",
)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def slugify(text: str) -> str:
    """Lower-case, strip diacritics and drop every non-alphanumeric character."""
    decomposed = unicodedata.normalize("NFD", (text or "").lower())
    without_marks = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _NON_ALNUM_RE.sub("", without_marks)


def _vocabulary(headers: Sequence[str]) -> dict[str, str]:
    return {slugify(h): canonical for h, canonical in zip(headers, CANONICAL_FIELDS)}


_ENGLISH_SLUGS = _vocabulary(ENGLISH_HEADERS)
_SPANISH_SLUGS = _vocabulary(SPANISH_HEADERS)

# Spellings seen in older templates
_ALIAS_SLUGS = {
    "ivapercentage": "tax_percentage",
    "iva": "tax_percentage",
    "unidad": "unit",
    "precio": "unit_price",
}

HEADER_MAP: dict[str, str] = {**_ALIAS_SLUGS, **_SPANISH_SLUGS, **_ENGLISH_SLUGS}


def strip_bom(text: str) -> str:
    if text and text.startswith(BOM):
        return text[len(BOM):]
    return text


def detect_delimiter(text: str, candidates: Sequence[str] = DELIMITER_CANDIDATES) -> str:
    """
    Pick the candidate occurring most often in the first line.

    Comma wins on a tie or when no candidate occurs.
    """
    first_line = (text or "").splitlines()[0] if text else ""
    counts = {c: first_line.count(c) for c in candidates}
    best = max(counts.values(), default=0)
    if best == 0:
        return ","
    winners = [c for c in candidates if counts[c] == best]
    if len(winners) > 1:
        return ","
    return winners[0]


def is_content_row(fields: Iterable[str | None]) -> bool:
    """A row carries content if at least one field is non-empty."""
    return any(f is not None and str(f).strip() for f in fields)


def map_header(header: Sequence[str]) -> tuple[tuple[str | None, ...], HeaderLanguage]:
    """
    Canonical field name for every header position, plus the detected language.

    Unknown columns map to None. When a canonical field appears twice, the
    first column wins.
    """
    columns: list[str | None] = []
    seen: set[str] = set()
    english_hits = spanish_hits = 0
    for cell in header:
        slug = slugify(cell)
        canonical = HEADER_MAP.get(slug)
        if slug in _ENGLISH_SLUGS and slug not in _SPANISH_SLUGS:
            english_hits += 1
        elif slug in _SPANISH_SLUGS and slug not in _ENGLISH_SLUGS:
            spanish_hits += 1
        if canonical is None or canonical in seen:
            columns.append(None)
            continue
        seen.add(canonical)
        columns.append(canonical)
    language = HeaderLanguage.SPANISH if spanish_hits > english_hits else HeaderLanguage.ENGLISH
    return tuple(columns), language


def normalize_text(text: str) -> NormalizedRows:
    """Normalize delimited text (CSV, semicolon, tab or pipe separated)."""
    text = strip_bom(text or "")
    delimiter = detect_delimiter(text)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    numbered: list[tuple[int, list[str]]] = []
    try:
        for fields in reader:
            numbered.append((reader.line_num, fields))
    except csv.Error as e:
        return NormalizedRows(
            delimiter=delimiter,
            errors=(parse_error(f"The file could not be read as delimited text (line {reader.line_num}: {e})"),),
        )
    return _normalize(numbered, delimiter)


def normalize_rows(rows: Sequence[Sequence[str | None]], delimiter: str = ",") -> NormalizedRows:
    """Normalize already-split rows; row ``i`` is reported as line ``i + 1``."""
    numbered = [
        (i, ["" if v is None else str(v) for v in fields])
        for i, fields in enumerate(rows, start=1)
    ]
    if numbered and numbered[0][1]:
        numbered[0][1][0] = strip_bom(numbered[0][1][0])
    return _normalize(numbered, delimiter)


def _normalize(numbered: list[tuple[int, list[str]]], delimiter: str) -> NormalizedRows:
    content = [(line, fields) for line, fields in numbered if is_content_row(fields)]
    if len(content) < 2:
        return NormalizedRows(delimiter=delimiter, errors=(parse_error(),))

    header_line, header_fields = content[0]
    header = tuple(h.strip() for h in header_fields)
    columns, language = map_header(header)

    missing = [name for name in REQUIRED_FIELDS if name not in columns]
    if missing:
        return NormalizedRows(
            header=header,
            columns=columns,
            delimiter=delimiter,
            language=language,
            errors=(
                structure_error(
                    f"Header is missing required columns: {', '.join(missing)}",
                    line=header_line,
                    original_row=header,
                    details={"missing_columns": missing},
                ),
            ),
        )

    raw_rows: list[RawRow] = []
    for line, fields in content[1:]:
        values: dict[str, str] = {}
        for position, canonical in enumerate(columns):
            if canonical is None:
                continue
            values[canonical] = fields[position].strip() if position < len(fields) else ""
        raw_rows.append(RawRow(line=line, values=values, original_row=tuple(fields)))

    return NormalizedRows(
        rows=tuple(raw_rows),
        header=header,
        columns=columns,
        delimiter=delimiter,
        language=language,
    )
