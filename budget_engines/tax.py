"""
Tax Engine -- tax grouping, totals and fiscal adjustments.

Pure functions with no I/O. Rates and percentages are provided as
parameters; nothing here reads configuration.

Usage:
    from budget_engines.tax import compute_totals

    totals = compute_totals(amounted.rows)
    for group in totals.groups:
        print(group.percentage, group.base, group.tax_amount)
    print(totals.total)

Invariants enforced:
    - One TaxGroup per distinct normalized tax percentage among item rows.
    - tax_amount = round_half_up(base x percentage / 100, 2).
    - total = base + sum(tax_amount); groups ascend by percentage.
    - An empty item set gives zero totals, never an error.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from budget_kernel.domain.budget import LineRow
from budget_kernel.domain.values import ZERO, round_amount
from budget_kernel.logging_config import get_logger

from budget_engines.tracer import traced_engine

logger = get_logger("engines.tax")

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class TaxGroup:
    """Items sharing one tax percentage."""

    percentage: Decimal
    base: Decimal
    tax_amount: Decimal

    @property
    def total(self) -> Decimal:
        return self.base + self.tax_amount


@dataclass(frozen=True)
class Totals:
    """
    Tax-grouped totals of a budget.

    Derived and read-only: recomputed in full on every call, holds no
    identity of its own.
    """

    base: Decimal = ZERO
    groups: tuple[TaxGroup, ...] = ()
    total: Decimal = ZERO

    @classmethod
    def empty(cls) -> Totals:
        return cls()

    @property
    def tax_total(self) -> Decimal:
        return sum((g.tax_amount for g in self.groups), ZERO)

    @property
    def is_empty(self) -> bool:
        return not self.groups and self.base == ZERO


def _item_percentage(row: LineRow) -> Decimal:
    pricing = row.pricing
    if pricing is None or pricing.tax_percentage is None:
        return ZERO
    return round_amount(pricing.tax_percentage)


def tax_for(base: Decimal, percentage: Decimal) -> Decimal:
    """round_half_up(base x percentage / 100, 2)."""
    return round_amount(base * percentage / _HUNDRED)


@traced_engine("tax", "1.0", fingerprint_fields=("rows",))
def compute_totals(rows: Sequence[LineRow]) -> Totals:
    """Group item rows by tax percentage and compute the grand total."""
    bases: dict[Decimal, Decimal] = defaultdict(lambda: ZERO)
    for row in rows:
        if row.is_item:
            bases[_item_percentage(row)] += row.amount

    if not bases:
        logger.debug("tax_totals_no_items", extra={})
        return Totals.empty()

    groups = tuple(
        TaxGroup(percentage=pct, base=round_amount(base), tax_amount=tax_for(base, pct))
        for pct, base in sorted(bases.items())
    )
    base = round_amount(sum((g.base for g in groups), ZERO))
    totals = Totals(base=base, groups=groups, total=base + sum((g.tax_amount for g in groups), ZERO))

    logger.info(
        "tax_totals_calculated",
        extra={
            "base": str(totals.base),
            "tax_total": str(totals.tax_total),
            "total": str(totals.total),
            "group_count": len(groups),
        },
    )
    return totals


# -----------------------------------------------------------------------------
# Fiscal adjustments
# -----------------------------------------------------------------------------


def calculate_equivalence_surcharge(
    rows: Sequence[LineRow],
    surcharge_rates: Mapping[Decimal, Decimal],
) -> dict[Decimal, Decimal]:
    """
    Equivalence surcharge per tax percentage.

    Item amounts are treated as gross of both tax and surcharge:
    ``base = amount / (1 + tax% + surcharge%)`` and
    ``surcharge = base x surcharge%``. Unrounded surcharges accumulate per
    tax percentage and are rounded once per group. Tax percentages with no
    surcharge rate (or a zero rate) are omitted.

    Args:
        rows: Amounted rows.
        surcharge_rates: Tax percentage -> surcharge percentage
            (e.g. ``{Decimal("21"): Decimal("5.2")}``).
    """
    rates = {round_amount(Decimal(k)): Decimal(v) for k, v in surcharge_rates.items()}
    accumulated: dict[Decimal, Decimal] = {}
    for row in rows:
        if not row.is_item:
            continue
        pct = _item_percentage(row)
        rate = rates.get(pct, ZERO)
        if rate <= 0:
            continue
        divisor = 1 + pct / _HUNDRED + rate / _HUNDRED
        surcharge = row.amount / divisor * rate / _HUNDRED
        accumulated[pct] = accumulated.get(pct, ZERO) + surcharge
    return {pct: round_amount(value) for pct, value in sorted(accumulated.items())}


def total_surcharge(surcharges: Mapping[Decimal, Decimal]) -> Decimal:
    return round_amount(sum(surcharges.values(), ZERO))


def calculate_withholding(base: Decimal, percentage: Decimal) -> Decimal:
    """Income-tax withholding on a taxable base (positive amount to retain)."""
    if percentage == 0 or base == 0:
        return ZERO
    return round_amount(base * percentage / _HUNDRED)


def total_after_withholding(total: Decimal, withholding: Decimal) -> Decimal:
    """Amount payable once the withholding is retained."""
    return round_amount(total - withholding)
