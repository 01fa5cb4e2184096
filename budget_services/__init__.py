"""
budget_services -- Orchestration over ingestion and engines.

BudgetPipeline is the function-level boundary offered to collaborators;
BudgetImportService adds file reading on top of it. Services may import
every lower layer; nothing below imports services.
"""

from budget_services.import_service import BudgetImportService
from budget_services.pipeline_service import (
    BudgetPipeline,
    ConsistencyReport,
    PipelineResult,
    fingerprint_input,
    is_saveable,
    result_to_dict,
)

__all__ = [
    "BudgetImportService",
    "BudgetPipeline",
    "ConsistencyReport",
    "PipelineResult",
    "fingerprint_input",
    "is_saveable",
    "result_to_dict",
]
