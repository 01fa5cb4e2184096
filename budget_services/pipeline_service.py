"""
Budget pipeline: normalize -> map -> validate -> amounts -> totals.

The function-level boundary offered to collaborators. One call takes one
complete source (raw text or already-split rows) and returns one complete
result: calculated rows, the ordered error list and the totals. Nothing is
kept between calls; concurrent invocations need no coordination.

Uses structured logging (LogContext, get_logger("services.pipeline")).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Sequence
from uuid import uuid4

from budget_kernel.domain.budget import HierarchicalNode, LineRow
from budget_kernel.domain.dtos import Severity, ValidationError
from budget_kernel.domain.hierarchy import build_tree
from budget_kernel.domain.options import CalculationLimits, CalculationOptions, PriceBuckets
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.utils.hashing import hash_rows

from budget_engines.amounts import calculate_amounts
from budget_engines.metrics import (
    BudgetStats,
    ContainerInconsistency,
    ItemInconsistency,
    PriceBucket,
    compute_stats,
    find_container_inconsistencies,
    find_item_inconsistencies,
    group_by_price_bucket,
)
from budget_engines.tax import Totals, compute_totals
from budget_ingestion.domain.errors import has_blocking_errors
from budget_ingestion.domain.normalizer import normalize_rows, normalize_text
from budget_ingestion.domain.validators import validate_structure
from budget_ingestion.mapping.engine import map_rows

logger = get_logger("services.pipeline")

Source = str | Sequence[Sequence[str | None]]


@dataclass(frozen=True)
class PipelineResult:
    """Calculated rows, every error in deterministic order, and totals."""

    rows: tuple[LineRow, ...] = ()
    errors: tuple[ValidationError, ...] = ()
    totals: Totals = field(default_factory=Totals.empty)

    @property
    def is_fatal(self) -> bool:
        return any(e.severity is Severity.FATAL for e in self.errors)

    @property
    def warnings(self) -> tuple[ValidationError, ...]:
        return tuple(e for e in self.errors if e.severity is Severity.WARNING)


@dataclass(frozen=True)
class ConsistencyReport:
    """Diagnostics over a result's stored amounts; never blocks saving."""

    containers: tuple[ContainerInconsistency, ...] = ()
    items: tuple[ItemInconsistency, ...] = ()

    @property
    def is_consistent(self) -> bool:
        return not self.containers and not self.items


def is_saveable(errors: Iterable[ValidationError], block_on_warnings: bool = False) -> bool:
    """
    Caller policy for persisting a budget.

    Fatal and error severities always block. Warnings block only when
    ``block_on_warnings`` is set.
    """
    return not has_blocking_errors(errors, block_on_warnings)


def fingerprint_input(source: Source, options: CalculationOptions | None = None) -> str:
    """SHA-256 cache key over the full source and the option record."""
    options = options or CalculationOptions()
    if not isinstance(source, str):
        source = [["" if v is None else str(v) for v in row] for row in source]
    return hash_rows(source, options=asdict(options))


class BudgetPipeline:
    """
    Stateless orchestrator over the ingestion and engine stages.

    ``limits`` and ``price_buckets`` apply to every run; ``options`` may be
    given per run.
    """

    def __init__(
        self,
        options: CalculationOptions | None = None,
        limits: CalculationLimits | None = None,
        price_buckets: PriceBuckets | None = None,
    ):
        self._options = options or CalculationOptions()
        self._limits = limits or CalculationLimits()
        self._price_buckets = price_buckets or PriceBuckets()

    @property
    def options(self) -> CalculationOptions:
        return self._options

    @property
    def limits(self) -> CalculationLimits:
        return self._limits

    @property
    def price_buckets(self) -> PriceBuckets:
        return self._price_buckets

    def run(
        self,
        source: Source,
        options: CalculationOptions | None = None,
        source_name: str | None = None,
        correlation_id: str | None = None,
    ) -> PipelineResult:
        """
        Process one budget.

        A fatal problem (empty input, unusable header, item limit) returns
        no rows, exactly that error, and empty totals. Otherwise every row
        that could be typed is returned with its computed amount, alongside
        the complete ordered error list and best-effort totals.
        """
        options = options or self._options
        with LogContext.bind(
            correlation_id=correlation_id or str(uuid4()),
            source_name=source_name,
            stage="pipeline",
        ):
            logger.info(
                "budget_pipeline_started",
                extra={"source_kind": "text" if isinstance(source, str) else "rows"},
            )

            with LogContext.bind(stage="normalize"):
                if isinstance(source, str):
                    normalized = normalize_text(source)
                else:
                    normalized = normalize_rows(source)
            if normalized.is_fatal:
                return self._fatal(normalized.errors)

            with LogContext.bind(stage="map"):
                mapped = map_rows(normalized, self._limits)
            if mapped.is_fatal:
                return self._fatal(mapped.errors)

            with LogContext.bind(stage="validate"):
                validated = validate_structure(mapped.rows, options, self._limits, mapped.untrusted)

            with LogContext.bind(stage="calculate"):
                amounted = calculate_amounts(validated.rows)
                totals = compute_totals(amounted.rows)

            errors = mapped.errors + validated.errors
            result = PipelineResult(rows=amounted.rows, errors=errors, totals=totals)
            logger.info(
                "budget_pipeline_completed",
                extra={
                    "row_count": len(result.rows),
                    "error_count": len(errors),
                    "warning_count": len(result.warnings),
                    "delimiter": normalized.delimiter,
                    "header_language": normalized.language,
                    "total": str(totals.total),
                },
            )
            return result

    def _fatal(self, errors: tuple[ValidationError, ...]) -> PipelineResult:
        logger.warning(
            "budget_pipeline_halted",
            extra={"error_code": errors[0].code, "error_message": errors[0].message},
        )
        return PipelineResult(errors=errors[:1])

    def build_tree(self, result: PipelineResult) -> tuple[HierarchicalNode, ...]:
        """Fresh tree over the result rows; never cached, never mutated."""
        return build_tree(result.rows)

    def stats(self, result: PipelineResult) -> BudgetStats:
        return compute_stats(result.rows)

    def inconsistencies(self, result: PipelineResult) -> ConsistencyReport:
        """Containers off by more than ``limits.amount_tolerance`` and mismatched items."""
        return ConsistencyReport(
            containers=tuple(find_container_inconsistencies(result.rows, self._limits.amount_tolerance)),
            items=tuple(find_item_inconsistencies(result.rows)),
        )

    def price_groups(self, result: PipelineResult) -> dict[PriceBucket, tuple[LineRow, ...]]:
        return group_by_price_bucket(result.rows, self._price_buckets)

    def is_saveable(self, result: PipelineResult, block_on_warnings: bool = False) -> bool:
        return is_saveable(result.errors, block_on_warnings)

    def fingerprint(self, source: Source, options: CalculationOptions | None = None) -> str:
        return fingerprint_input(source, options or self._options)


def result_to_dict(result: PipelineResult) -> dict[str, Any]:
    """Plain-dict view of a pipeline result for JSON output."""
    return {
        "rows": [
            {
                "id": row.id,
                "level": row.level.value,
                "name": row.name,
                "description": row.description,
                "unit": row.pricing.unit if row.pricing else None,
                "quantity": str(row.pricing.quantity) if row.pricing and row.pricing.quantity is not None else None,
                "unit_price": (
                    str(row.pricing.unit_price) if row.pricing and row.pricing.unit_price is not None else None
                ),
                "tax_percentage": (
                    str(row.pricing.tax_percentage)
                    if row.pricing and row.pricing.tax_percentage is not None
                    else None
                ),
                "amount": str(row.amount),
                "line": row.line,
                "trusted": row.trusted,
            }
            for row in result.rows
        ],
        "errors": [error.to_dict() for error in result.errors],
        "totals": {
            "base": str(result.totals.base),
            "groups": [
                {
                    "percentage": str(group.percentage),
                    "base": str(group.base),
                    "tax_amount": str(group.tax_amount),
                }
                for group in result.totals.groups
            ],
            "tax_total": str(result.totals.tax_total),
            "total": str(result.totals.total),
        },
    }
