"""
Metrics & consistency diagnostics over amounted rows.

Read-only: nothing here changes rows or produces ValidationErrors. The
inconsistency lists are diagnostics a caller may display; they never block
downstream use.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from budget_kernel.domain.budget import Level, LineRow
from budget_kernel.domain.options import PriceBuckets
from budget_kernel.domain.values import AMOUNT_TOLERANCE, ZERO, amounts_differ, round_amount

from budget_engines.amounts import container_amount, item_amount
from budget_engines.tracer import traced_engine

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class BudgetStats:
    chapter_count: int
    subchapter_count: int
    section_count: int
    item_count: int
    max_depth: int
    total_amount: Decimal
    average_item_amount: Decimal
    zero_amount_item_count: int

    @property
    def row_count(self) -> int:
        return self.chapter_count + self.subchapter_count + self.section_count + self.item_count


@dataclass(frozen=True)
class ContainerInconsistency:
    container_id: str
    stored_amount: Decimal
    recomputed_amount: Decimal

    @property
    def difference(self) -> Decimal:
        return abs(self.stored_amount - self.recomputed_amount)


class ItemIssue(str, Enum):
    AMOUNT_MISMATCH = "amount_mismatch"
    NEGATIVE_QUANTITY = "negative_quantity"
    NEGATIVE_UNIT_PRICE = "negative_unit_price"


@dataclass(frozen=True)
class ItemInconsistency:
    item_id: str
    issue: ItemIssue
    expected: str
    actual: str


class PriceBucket(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    PREMIUM = "premium"


@traced_engine("metrics", "1.0", fingerprint_fields=("rows",))
def compute_stats(rows: Sequence[LineRow]) -> BudgetStats:
    """Counts per level, depth, total and average item amount, zero-amount items."""
    counts = {level: 0 for level in Level}
    for row in rows:
        counts[row.level] += 1
    items = [row for row in rows if row.is_item]
    total = round_amount(sum((row.amount for row in items), ZERO))
    average = round_amount(total / len(items)) if items else ZERO
    return BudgetStats(
        chapter_count=counts[Level.CHAPTER],
        subchapter_count=counts[Level.SUBCHAPTER],
        section_count=counts[Level.SECTION],
        item_count=counts[Level.ITEM],
        max_depth=max((row.depth for row in rows), default=0),
        total_amount=total,
        average_item_amount=average,
        zero_amount_item_count=sum(1 for row in items if row.amount == ZERO),
    )


def find_container_inconsistencies(
    rows: Sequence[LineRow],
    tolerance: Decimal = AMOUNT_TOLERANCE,
) -> list[ContainerInconsistency]:
    """Containers whose stored amount differs from the recomputed sum by more than ``tolerance``."""
    issues: list[ContainerInconsistency] = []
    for row in rows:
        if row.is_item:
            continue
        recomputed = container_amount(rows, row.node_id)
        if amounts_differ(row.amount, recomputed, tolerance):
            issues.append(ContainerInconsistency(row.id, row.amount, recomputed))
    return issues


def find_item_inconsistencies(rows: Sequence[LineRow]) -> list[ItemInconsistency]:
    """Items whose stored amount is not quantity x unit price, or with negative inputs."""
    issues: list[ItemInconsistency] = []
    for row in rows:
        if not row.is_item or row.pricing is None:
            continue
        quantity, unit_price = row.pricing.quantity, row.pricing.unit_price
        expected = item_amount(quantity, unit_price)
        if expected != row.amount:
            issues.append(ItemInconsistency(row.id, ItemIssue.AMOUNT_MISMATCH, str(expected), str(row.amount)))
        if quantity is not None and quantity < 0:
            issues.append(ItemInconsistency(row.id, ItemIssue.NEGATIVE_QUANTITY, ">= 0", str(quantity)))
        if unit_price is not None and unit_price < 0:
            issues.append(ItemInconsistency(row.id, ItemIssue.NEGATIVE_UNIT_PRICE, ">= 0", str(unit_price)))
    return issues


def percentage_of_total(rows: Sequence[LineRow], item_id: str) -> Decimal:
    """Share of the budget total taken by one item, in percent (0 when unknown or total is zero)."""
    items = [row for row in rows if row.is_item]
    target = next((row for row in items if row.id == item_id), None)
    total = sum((row.amount for row in items), ZERO)
    if target is None or total <= 0:
        return ZERO
    return round_amount(target.amount / total * _HUNDRED)


def price_bucket(amount: Decimal, buckets: PriceBuckets | None = None) -> PriceBucket:
    buckets = buckets or PriceBuckets()
    if amount <= buckets.low:
        return PriceBucket.LOW
    if amount <= buckets.medium:
        return PriceBucket.MEDIUM
    if amount <= buckets.high:
        return PriceBucket.HIGH
    return PriceBucket.PREMIUM


def group_by_price_bucket(
    rows: Sequence[LineRow],
    buckets: PriceBuckets | None = None,
) -> dict[PriceBucket, tuple[LineRow, ...]]:
    """Items per price bucket by amount; every bucket is present, possibly empty."""
    grouped: dict[PriceBucket, list[LineRow]] = {bucket: [] for bucket in PriceBucket}
    for row in rows:
        if row.is_item:
            grouped[price_bucket(row.amount, buckets)].append(row)
    return {bucket: tuple(items) for bucket, items in grouped.items()}
