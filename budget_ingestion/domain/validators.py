"""
Structural validator for typed budget rows.

Checks run in a fixed order, and within a check errors follow row input
order. The order is part of the observable contract:

    1. duplicate ids
    2. missing ancestors
    3. id/level agreement
    4. numeric fields (item rows)
    5. sibling sequence

Rows are never mutated. The validator returns new rows whose ItemPricing
carries parsed values (``parsed=True``) and whose ``trusted`` flag is
cleared when an error-severity problem refers to them: an extra duplicate
occurrence, an absent ancestor, a level mismatch, an invalid numeric
field, or a mapping error passed in through ``untrusted``. Distrusted
items have their quantity and unit price zeroed so downstream sums treat
them as 0.00.

Architecture: budget_ingestion/domain. ZERO I/O. Imports only from
budget_kernel.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Sequence

from budget_kernel.domain.budget import ItemPricing, Level, LineRow
from budget_kernel.domain.dtos import ValidationError
from budget_kernel.domain.hierarchy import required_ancestors
from budget_kernel.domain.options import CalculationLimits, CalculationOptions
from budget_kernel.domain.values import ZERO, NodeId, parse_decimal, round_amount
from budget_kernel.logging_config import get_logger

from budget_ingestion.domain.errors import (
    duplicate_id_error,
    level_mismatch_error,
    missing_ancestor_error,
    number_format_error,
    range_error,
    sequence_error,
)
from budget_ingestion.domain.types import ValidatedRows

logger = get_logger("ingestion.validators")

# (row index, error) pairs; the index drives trust marking
Finding = tuple[int, ValidationError]


# -----------------------------------------------------------------------------
# Individual checks
# -----------------------------------------------------------------------------


def _duplicate_findings(rows: Sequence[LineRow]) -> list[Finding]:
    first_seen: dict[NodeId, LineRow] = {}
    findings: list[Finding] = []
    for i, row in enumerate(rows):
        first = first_seen.get(row.node_id)
        if first is None:
            first_seen[row.node_id] = row
            continue
        findings.append(
            (i, duplicate_id_error(row.id, row.line, row.original_row, first_line=first.line))
        )
    return findings


def _missing_ancestor_findings(rows: Sequence[LineRow]) -> list[Finding]:
    present = {row.node_id for row in rows}
    reported: set[str] = set()
    findings: list[Finding] = []
    for i, row in enumerate(rows):
        for ancestor_id, level in required_ancestors(row.node_id):
            if ancestor_id in reported or NodeId.parse(ancestor_id) in present:
                continue
            reported.add(ancestor_id)
            findings.append(
                (i, missing_ancestor_error(row.id, ancestor_id, level, row.line, row.original_row))
            )
    return findings


def _orphan_indices(rows: Sequence[LineRow]) -> set[int]:
    """Every row with at least one absent ancestor, reported or not."""
    present = {row.node_id for row in rows}
    return {
        i
        for i, row in enumerate(rows)
        if any(NodeId.parse(ancestor_id) not in present for ancestor_id, _ in required_ancestors(row.node_id))
    }


def _level_findings(rows: Sequence[LineRow]) -> list[Finding]:
    findings: list[Finding] = []
    for i, row in enumerate(rows):
        implied = row.implied_level
        if implied is not row.level:
            findings.append(
                (i, level_mismatch_error(row.id, row.level, implied, row.line, row.original_row))
            )
    return findings


def _sequence_findings(rows: Sequence[LineRow]) -> list[Finding]:
    # First row index per sequence number within each (parent, level) group
    groups: dict[tuple[NodeId | None, Level], dict[int, int]] = defaultdict(dict)
    for i, row in enumerate(rows):
        groups[(row.node_id.parent, row.level)].setdefault(row.node_id.sequence, i)

    findings: list[Finding] = []
    for (parent, level), by_sequence in groups.items():
        prefix = parent.parts if parent is not None else ()
        expected = 1
        for sequence in sorted(by_sequence):
            if sequence != expected:
                i = by_sequence[sequence]
                row = rows[i]
                findings.append(
                    (
                        i,
                        sequence_error(
                            str(parent) if parent is not None else "",
                            level,
                            str(NodeId(prefix + (expected,))),
                            row.id,
                            row.line,
                            row.original_row,
                        ),
                    )
                )
            expected = sequence + 1
    findings.sort(key=lambda finding: finding[0])
    return findings


def _parse_field(
    field: str,
    text: str,
    row: LineRow,
    maximum: Decimal,
    allow_negative: bool,
) -> tuple[Decimal | None, list[ValidationError]]:
    """Parse one numeric text. Empty means zero; invalid values come back as None."""
    text = (text or "").strip()
    if not text:
        return ZERO, []
    value = parse_decimal(text)
    if value is None:
        return None, [number_format_error(field, text, row.line, row.original_row)]
    # Bounds are checked before rounding; quantize fails past the context precision
    minimum = -maximum if allow_negative else 0
    if value < minimum or value > maximum:
        return None, [range_error(field, minimum, maximum, row.line, row.original_row, value=text)]
    return round_amount(value), []


def parse_pricing(
    row: LineRow,
    options: CalculationOptions,
    limits: CalculationLimits,
) -> tuple[ItemPricing, list[ValidationError]]:
    """
    Parse an item's quantity, unit price and tax percentage.

    Tax percentage must always lie in 0..max_tax_percentage. Negative
    quantity and unit price are range errors only when
    ``options.validate_negative`` is set. An amount above
    ``limits.max_amount`` is reported against the ``amount`` field.
    """
    pricing = row.pricing
    assert pricing is not None
    allow_negative = not options.validate_negative

    quantity, errors = _parse_field(
        "quantity", pricing.quantity_text, row, limits.max_quantity, allow_negative
    )
    unit_price, price_errors = _parse_field(
        "unit_price", pricing.unit_price_text, row, limits.max_unit_price, allow_negative
    )
    tax, tax_errors = _parse_field(
        "tax_percentage", pricing.tax_percentage_text, row, limits.max_tax_percentage, False
    )
    errors += price_errors + tax_errors

    if quantity is not None and unit_price is not None:
        amount = round_amount(quantity * unit_price)
        if amount > limits.max_amount:
            errors.append(
                range_error("amount", 0, limits.max_amount, row.line, row.original_row, value=str(amount))
            )

    parsed = replace(pricing, quantity=quantity, unit_price=unit_price, tax_percentage=tax, parsed=True)
    return parsed, errors


def _distrust(row: LineRow) -> LineRow:
    if row.pricing is None:
        return replace(row, trusted=False, amount=ZERO)
    tax = row.pricing.tax_percentage if row.pricing.tax_percentage is not None else ZERO
    pricing = replace(row.pricing, quantity=ZERO, unit_price=ZERO, tax_percentage=tax)
    return replace(row, pricing=pricing, trusted=False, amount=ZERO)


# -----------------------------------------------------------------------------
# Public checks (errors only)
# -----------------------------------------------------------------------------


def check_duplicate_ids(rows: Sequence[LineRow]) -> list[ValidationError]:
    """One duplicate error per extra occurrence of an id."""
    return [error for _, error in _duplicate_findings(rows)]


def check_missing_ancestors(rows: Sequence[LineRow]) -> list[ValidationError]:
    """One hierarchy error per absent ancestor, at the first row requiring it."""
    return [error for _, error in _missing_ancestor_findings(rows)]


def check_level_agreement(rows: Sequence[LineRow]) -> list[ValidationError]:
    return [error for _, error in _level_findings(rows)]


def check_sequences(rows: Sequence[LineRow]) -> list[ValidationError]:
    """One warning per contiguous gap in each (parent, level) sibling group."""
    return [error for _, error in _sequence_findings(rows)]


# -----------------------------------------------------------------------------
# Full pass
# -----------------------------------------------------------------------------


def validate_structure(
    rows: Sequence[LineRow],
    options: CalculationOptions | None = None,
    limits: CalculationLimits | None = None,
    untrusted: Iterable[int] = (),
) -> ValidatedRows:
    """
    Run every structural check and return new rows plus ordered errors.

    Trust is recomputed from scratch, so already validated rows can be
    passed through again after an edit. ``untrusted`` holds indices of rows
    an earlier stage already found in error (see ``MappedRows.untrusted``).
    """
    options = options or CalculationOptions()
    limits = limits or CalculationLimits()
    rows = [replace(row, trusted=True) if not row.trusted else row for row in rows]

    distrusted: set[int] = set(untrusted)
    errors: list[ValidationError] = []

    for i, error in _duplicate_findings(rows):
        distrusted.add(i)
        errors.append(error)

    errors.extend(error for _, error in _missing_ancestor_findings(rows))
    distrusted |= _orphan_indices(rows)

    for i, error in _level_findings(rows):
        distrusted.add(i)
        errors.append(error)

    parsed_rows: list[LineRow] = []
    for i, row in enumerate(rows):
        if row.pricing is None:
            parsed_rows.append(row)
            continue
        pricing, numeric_errors = parse_pricing(row, options, limits)
        if numeric_errors:
            distrusted.add(i)
            errors.extend(numeric_errors)
        parsed_rows.append(replace(row, pricing=pricing))

    errors.extend(error for _, error in _sequence_findings(rows))

    result_rows = tuple(
        _distrust(row) if i in distrusted else row for i, row in enumerate(parsed_rows)
    )

    logger.info(
        "structural_validation_completed",
        extra={
            "row_count": len(result_rows),
            "error_count": len(errors),
            "untrusted_count": len(distrusted),
        },
    )
    return ValidatedRows(rows=result_rows, errors=tuple(errors))
