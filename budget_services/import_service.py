"""
Import service: file -> source adapter -> budget pipeline.

Collaborator-side helper. Picks a source adapter by file suffix, reads the
file and hands its content to BudgetPipeline. The pipeline itself never
touches the file system.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from budget_kernel.domain.options import CalculationOptions
from budget_kernel.exceptions import UnsupportedSourceFormatError
from budget_kernel.logging_config import LogContext, get_logger

from budget_ingestion.adapters.base import SourceAdapter, SourceProbe
from budget_ingestion.adapters.csv_adapter import CsvSourceAdapter
from budget_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter
from budget_services.pipeline_service import BudgetPipeline, PipelineResult

logger = get_logger("services.import")


def _default_adapters() -> dict[str, SourceAdapter]:
    csv_adapter = CsvSourceAdapter()
    return {
        ".csv": csv_adapter,
        ".txt": csv_adapter,
        ".tsv": csv_adapter,
        ".xlsx": XlsxSourceAdapter(),
    }


class BudgetImportService:
    """Reads budget files and runs them through the pipeline."""

    def __init__(
        self,
        pipeline: BudgetPipeline | None = None,
        adapters: dict[str, SourceAdapter] | None = None,
    ):
        self._pipeline = pipeline or BudgetPipeline()
        self._adapters = adapters if adapters is not None else _default_adapters()

    @property
    def supported_suffixes(self) -> tuple[str, ...]:
        return tuple(sorted(self._adapters))

    def adapter_for(self, source_path: Path) -> SourceAdapter:
        """
        Raises:
            UnsupportedSourceFormatError: if no adapter handles the suffix.
        """
        suffix = source_path.suffix.lower()
        adapter = self._adapters.get(suffix)
        if adapter is None:
            raise UnsupportedSourceFormatError(suffix or source_path.name, self.supported_suffixes)
        return adapter

    def probe_file(self, source_path: Path, source_options: dict[str, Any] | None = None) -> SourceProbe:
        """Preview source file: row count, columns, sample data."""
        return self.adapter_for(source_path).probe(source_path, source_options or {})

    def import_file(
        self,
        source_path: Path,
        options: CalculationOptions | None = None,
        source_options: dict[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> PipelineResult:
        """
        Read ``source_path`` and process it as one budget.

        Raises:
            UnsupportedSourceFormatError: if the suffix has no adapter.
            FileNotFoundError: if the file does not exist.
        """
        source_path = Path(source_path)
        adapter = self.adapter_for(source_path)
        with LogContext.bind(source_name=source_path.name, stage="import"):
            logger.info(
                "budget_file_import_started",
                extra={"suffix": source_path.suffix.lower(), "adapter": type(adapter).__name__},
            )
            content = adapter.load(source_path, source_options or {})
            result = self._pipeline.run(
                content,
                options=options,
                source_name=source_path.name,
                correlation_id=correlation_id,
            )
            logger.info(
                "budget_file_import_completed",
                extra={"row_count": len(result.rows), "error_count": len(result.errors)},
            )
        return result
