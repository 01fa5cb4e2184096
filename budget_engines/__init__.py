"""
Module: budget_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines. This is the canonical import surface for
    budget_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel (and sibling engine modules).
    MUST NOT import budget_config, budget_ingestion or budget_services.

Invariants enforced:
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.
    - Whole-tree recompute: container amounts are rebuilt on every call.

Audit relevance:
    Engine invocations are traced via the ``@traced_engine`` decorator
    (see ``budget_engines.tracer``), emitting BUDGET_ENGINE_TRACE log
    records with engine name, version, input fingerprint, and duration.

Usage:
    from budget_engines import calculate_amounts, compute_totals, format_totals
"""

from budget_engines.amounts import (
    AmountedRows,
    calculate_amounts,
    container_amount,
    item_amount,
    update_item,
)
from budget_engines.export import LEVEL_NAMES, TEMPLATE_HEADERS, export_price_structure_csv
from budget_engines.formatting import (
    DisplayLine,
    TotalsDisplay,
    format_amount,
    format_number,
    format_percentage,
    format_totals,
)
from budget_engines.metrics import (
    BudgetStats,
    ContainerInconsistency,
    ItemInconsistency,
    ItemIssue,
    PriceBucket,
    compute_stats,
    find_container_inconsistencies,
    find_item_inconsistencies,
    group_by_price_bucket,
    percentage_of_total,
    price_bucket,
)
from budget_engines.tax import (
    TaxGroup,
    Totals,
    calculate_equivalence_surcharge,
    calculate_withholding,
    compute_totals,
    tax_for,
    total_after_withholding,
    total_surcharge,
)
from budget_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Amounts
    "AmountedRows",
    "calculate_amounts",
    "container_amount",
    "item_amount",
    "update_item",
    # Tax
    "TaxGroup",
    "Totals",
    "calculate_equivalence_surcharge",
    "calculate_withholding",
    "compute_totals",
    "tax_for",
    "total_after_withholding",
    "total_surcharge",
    # Formatting
    "DisplayLine",
    "TotalsDisplay",
    "format_amount",
    "format_number",
    "format_percentage",
    "format_totals",
    # Metrics
    "BudgetStats",
    "ContainerInconsistency",
    "ItemInconsistency",
    "ItemIssue",
    "PriceBucket",
    "compute_stats",
    "find_container_inconsistencies",
    "find_item_inconsistencies",
    "group_by_price_bucket",
    "percentage_of_total",
    "price_bucket",
    # Export
    "LEVEL_NAMES",
    "TEMPLATE_HEADERS",
    "export_price_structure_csv",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
