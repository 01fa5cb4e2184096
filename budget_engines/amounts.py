"""
Amount Engine -- item amounts and bottom-up container propagation.

Pure functions with no I/O. Recalculation is always whole-tree: every
container amount is rebuilt from its item descendants on every call, so a
changed item can never leave a stale ancestor behind.

Usage:
    from budget_engines.amounts import calculate_amounts

    amounted = calculate_amounts(validated.rows)
    chapter = amounted.by_id()["1"]
    print(chapter.amount)  # Decimal('300.00')

Invariants enforced:
    - Item amount = round_half_up(quantity x unit_price, 2); negative
      inputs give 0.00, never a negative amount.
    - Container amount = sum of item-level descendant amounts, rounded
      once after summation.
    - Idempotent: calculate_amounts(calculate_amounts(r).rows) == calculate_amounts(r).

Failure modes:
    - UnparsedPricingError: an item row never went through structural
      validation (``pricing.parsed`` is False). This is pipeline misuse,
      not bad data.
    - UnknownItemError: update_item named an id with no item row.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Sequence

from budget_kernel.domain.budget import LineRow
from budget_kernel.domain.values import ZERO, NodeId, round_amount
from budget_kernel.exceptions import UnknownItemError, UnparsedPricingError
from budget_kernel.logging_config import get_logger

from budget_engines.tracer import traced_engine

logger = get_logger("engines.amounts")


@dataclass(frozen=True)
class AmountedRows:
    """Row set with every amount computed."""

    rows: tuple[LineRow, ...] = ()

    @property
    def items(self) -> tuple[LineRow, ...]:
        return tuple(row for row in self.rows if row.is_item)

    @property
    def total(self) -> Decimal:
        """Sum of all item amounts."""
        return round_amount(sum((row.amount for row in self.items), ZERO))

    def by_id(self) -> dict[str, LineRow]:
        """First row per id."""
        result: dict[str, LineRow] = {}
        for row in self.rows:
            result.setdefault(row.id, row)
        return result


def item_amount(quantity: Decimal | None, unit_price: Decimal | None) -> Decimal:
    """quantity x unit_price rounded half-up to 2 places; missing or negative -> 0.00."""
    q = quantity if quantity is not None else ZERO
    p = unit_price if unit_price is not None else ZERO
    if q < 0 or p < 0:
        return ZERO
    return round_amount(q * p)


def _require_parsed(row: LineRow) -> None:
    if row.pricing is not None and not row.pricing.parsed:
        raise UnparsedPricingError(row.id, row.line)


def container_amount(rows: Sequence[LineRow], container_id: str | NodeId) -> Decimal:
    """Sum of the stored amounts of every item descendant of ``container_id``."""
    target = container_id if isinstance(container_id, NodeId) else NodeId.try_parse(container_id)
    if target is None:
        return ZERO
    total = sum(
        (row.amount for row in rows if row.is_item and row.node_id.is_descendant_of(target)),
        ZERO,
    )
    return round_amount(total)


@traced_engine("amounts", "1.0", fingerprint_fields=("rows",))
def calculate_amounts(rows: Sequence[LineRow]) -> AmountedRows:
    """
    Compute every amount in the row set.

    Item amounts come from parsed pricing (a parsed value of None counts
    as zero). Containers receive the rounded sum of their item
    descendants. Input rows are not modified.

    Raises:
        UnparsedPricingError: if an item row has unparsed pricing.
    """
    logger.info("amount_calculation_started", extra={"row_count": len(rows)})

    items_done: list[LineRow] = []
    sums: dict[NodeId, Decimal] = defaultdict(lambda: ZERO)
    for row in rows:
        if not row.is_item:
            items_done.append(row)
            continue
        _require_parsed(row)
        assert row.pricing is not None
        amount = item_amount(row.pricing.quantity, row.pricing.unit_price)
        for ancestor in row.node_id.ancestors():
            sums[ancestor] += amount
        items_done.append(replace(row, amount=amount) if row.amount != amount else row)

    result: list[LineRow] = []
    for row in items_done:
        if row.is_item:
            result.append(row)
            continue
        amount = round_amount(sums.get(row.node_id, ZERO))
        result.append(replace(row, amount=amount) if row.amount != amount else row)

    amounted = AmountedRows(rows=tuple(result))
    logger.info(
        "amount_calculation_completed",
        extra={
            "row_count": len(result),
            "item_count": len(amounted.items),
            "total": str(amounted.total),
        },
    )
    return amounted


def update_item(
    rows: Sequence[LineRow],
    item_id: str,
    quantity: Decimal | None = None,
    unit_price: Decimal | None = None,
) -> AmountedRows:
    """
    Replace one item's quantity and/or unit price, then recompute the whole tree.

    The raw texts are rewritten to match the new values. Every row sharing
    ``item_id`` at item level is updated.

    Raises:
        UnknownItemError: if no item row has ``item_id``.
    """
    found = False
    updated: list[LineRow] = []
    for row in rows:
        if row.is_item and row.id == item_id:
            found = True
            pricing = row.pricing
            assert pricing is not None
            if quantity is not None:
                pricing = replace(pricing, quantity=round_amount(quantity), quantity_text=str(quantity))
            if unit_price is not None:
                pricing = replace(pricing, unit_price=round_amount(unit_price), unit_price_text=str(unit_price))
            row = replace(row, pricing=pricing)
        updated.append(row)
    if not found:
        raise UnknownItemError(item_id)

    logger.info(
        "item_updated",
        extra={
            "item_id": item_id,
            "quantity": str(quantity) if quantity is not None else None,
            "unit_price": str(unit_price) if unit_price is not None else None,
        },
    )
    return calculate_amounts(updated)
