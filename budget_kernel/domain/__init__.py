"""
Pure domain layer.

Data transfer objects and domain logic with NO dependencies on:
- Database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from budget_kernel.domain.budget import (
    MAX_DEPTH,
    HierarchicalNode,
    ItemPricing,
    Level,
    LineRow,
)
from budget_kernel.domain.dtos import ErrorCode, Severity, ValidationError
from budget_kernel.domain.options import (
    CalculationLimits,
    CalculationOptions,
    DisplayLabels,
    PriceBuckets,
)
from budget_kernel.domain.values import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_TOLERANCE,
    ZERO,
    NodeId,
    amounts_differ,
    parse_decimal,
    round_amount,
    to_amount,
)

__all__ = [
    "AMOUNT_DECIMAL_PLACES",
    "AMOUNT_TOLERANCE",
    "MAX_DEPTH",
    "ZERO",
    "CalculationLimits",
    "CalculationOptions",
    "DisplayLabels",
    "ErrorCode",
    "HierarchicalNode",
    "ItemPricing",
    "Level",
    "LineRow",
    "NodeId",
    "PriceBuckets",
    "Severity",
    "ValidationError",
    "amounts_differ",
    "parse_decimal",
    "round_amount",
    "to_amount",
]
