"""
budget_ingestion.domain -- Pure types, error taxonomy, normalizer and validator.

ZERO I/O. Imports only from budget_kernel/.
"""

from budget_ingestion.domain.types import (
    CANONICAL_FIELDS,
    REQUIRED_FIELDS,
    HeaderLanguage,
    MappedRows,
    NormalizedRows,
    RawRow,
    ValidatedRows,
)

__all__ = [
    "CANONICAL_FIELDS",
    "REQUIRED_FIELDS",
    "HeaderLanguage",
    "MappedRows",
    "NormalizedRows",
    "RawRow",
    "ValidatedRows",
]
