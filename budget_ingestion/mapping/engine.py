"""
Mapping engine: pure transformation from RawRow to typed LineRow.

Resolves the node id and the bilingual level name, and attaches unparsed
ItemPricing to item rows. Numeric texts are carried verbatim; parsing them
is the structural validator's job. ZERO I/O.
"""

from __future__ import annotations

from typing import Iterable

from budget_kernel.domain.budget import MAX_DEPTH, ItemPricing, Level, LineRow
from budget_kernel.domain.dtos import Severity, ValidationError
from budget_kernel.domain.options import CalculationLimits
from budget_kernel.domain.values import NodeId

from budget_ingestion.domain.errors import field_error, id_format_error, structure_error
from budget_ingestion.domain.normalizer import slugify
from budget_ingestion.domain.types import MappedRows, NormalizedRows, RawRow

# Level names keyed by slug, Spanish and English
LEVEL_MAP: dict[str, Level] = {
    "capitulo": Level.CHAPTER,
    "subcapitulo": Level.SUBCHAPTER,
    "apartado": Level.SECTION,
    "partida": Level.ITEM,
    "chapter": Level.CHAPTER,
    "subchapter": Level.SUBCHAPTER,
    "section": Level.SECTION,
    "item": Level.ITEM,
}


def resolve_level(text: str) -> Level | None:
    """Level named by ``text`` (any casing or accents), or None."""
    return LEVEL_MAP.get(slugify(text))


def map_row(raw: RawRow) -> tuple[LineRow | None, list[ValidationError]]:
    """
    Type a single raw row.

    Returns ``(None, errors)`` when the row cannot be placed in the
    hierarchy (missing or malformed id, or nested too deep). Unknown
    levels and missing names are reported but the row is kept, with the
    level inferred from the id depth.
    """
    errors: list[ValidationError] = []
    line, echo = raw.line, raw.original_row

    id_text = raw.get("id")
    if not id_text:
        return None, [field_error("id", "is required", line, echo)]
    node_id = NodeId.try_parse(id_text)
    if node_id is None:
        return None, [id_format_error(line, echo, value=id_text)]
    if node_id.depth > MAX_DEPTH:
        return None, [
            structure_error(
                f"Id {node_id} is nested {node_id.depth} levels deep; at most {MAX_DEPTH} are allowed",
                line=line,
                original_row=echo,
                severity=Severity.ERROR,
                details={"id": str(node_id), "depth": node_id.depth},
            )
        ]

    level_text = raw.get("level")
    level = resolve_level(level_text)
    if level is None:
        if level_text:
            errors.append(
                field_error("level", f'has an unknown value "{level_text}"', line, echo, {"value": level_text})
            )
        else:
            errors.append(field_error("level", "is required", line, echo))
        level = Level.for_depth(node_id.depth)

    name = raw.get("name")
    if not name:
        errors.append(field_error("name", "is required", line, echo))

    pricing = None
    if level is Level.ITEM:
        pricing = ItemPricing(
            unit=raw.get("unit"),
            quantity_text=raw.get("quantity"),
            unit_price_text=raw.get("unit_price"),
            tax_percentage_text=raw.get("tax_percentage"),
        )

    row = LineRow(
        node_id=node_id,
        level=level,
        name=name,
        description=raw.get("description"),
        pricing=pricing,
        line=line,
        original_row=echo,
    )
    return row, errors


def map_rows(
    normalized: NormalizedRows | Iterable[RawRow],
    limits: CalculationLimits | None = None,
) -> MappedRows:
    """
    Type every raw row, in input order.

    Kept rows that raised an error-severity problem (unknown level, missing
    name) are listed in ``untrusted`` by their index in ``rows``. A fatal
    normalizer result passes straight through. More item rows than
    ``limits.max_items`` is a fatal structure error with no rows.
    """
    limits = limits or CalculationLimits()
    if isinstance(normalized, NormalizedRows):
        if normalized.is_fatal:
            return MappedRows(errors=normalized.errors)
        raw_rows: Iterable[RawRow] = normalized.rows
    else:
        raw_rows = normalized

    rows: list[LineRow] = []
    errors: list[ValidationError] = []
    untrusted: list[int] = []
    for raw in raw_rows:
        row, row_errors = map_row(raw)
        errors.extend(row_errors)
        if row is None:
            continue
        if any(e.severity is Severity.ERROR for e in row_errors):
            untrusted.append(len(rows))
        rows.append(row)

    item_count = sum(1 for row in rows if row.is_item)
    if item_count > limits.max_items:
        return MappedRows(
            errors=(
                structure_error(
                    f"Budget has {item_count} items; at most {limits.max_items} are allowed",
                    details={"item_count": item_count, "max_items": limits.max_items},
                ),
            )
        )

    return MappedRows(rows=tuple(rows), errors=tuple(errors), untrusted=tuple(untrusted))
