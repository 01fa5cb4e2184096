"""
Template export -- flat rows back to the import template format.

Level names per language are presentation metadata and live here, not in
the engines. Numeric columns carry the raw texts of each item so an
exported budget re-imports to the same rows.
"""

from __future__ import annotations

import csv
import io
from typing import Sequence

from budget_kernel.domain.budget import Level, LineRow

TEMPLATE_HEADERS: dict[str, tuple[str, ...]] = {
    "english": ("level", "id", "name", "description", "unit", "tax_percentage", "quantity", "unit_price"),
    "spanish": ("nivel", "id", "nombre", "descripcion", "ud", "%iva", "cantidad", "pvp"),
}

LEVEL_NAMES: dict[str, dict[Level, str]] = {
    "english": {
        Level.CHAPTER: "Chapter",
        Level.SUBCHAPTER: "Subchapter",
        Level.SECTION: "Section",
        Level.ITEM: "Item",
    },
    "spanish": {
        Level.CHAPTER: "Capítulo",
        Level.SUBCHAPTER: "Subcapítulo",
        Level.SECTION: "Apartado",
        Level.ITEM: "Partida",
    },
}


def _template_row(row: LineRow, level_names: dict[Level, str]) -> list[str]:
    pricing = row.pricing
    if pricing is None:
        return [level_names[row.level], row.id, row.name, row.description, "", "", "", ""]
    return [
        level_names[row.level],
        row.id,
        row.name,
        row.description,
        pricing.unit,
        pricing.tax_percentage_text,
        pricing.quantity_text,
        pricing.unit_price_text,
    ]


def export_price_structure_csv(
    rows: Sequence[LineRow],
    language: str = "spanish",
    delimiter: str = ",",
) -> str:
    """
    Render rows as template CSV text, header first, in input order.

    Raises:
        ValueError: if ``language`` is neither ``"english"`` nor ``"spanish"``.
    """
    if language not in TEMPLATE_HEADERS:
        raise ValueError(f"Unsupported template language: {language!r}")
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS[language])
    level_names = LEVEL_NAMES[language]
    for row in rows:
        writer.writerow(_template_row(row, level_names))
    return buffer.getvalue()
