"""
Data Transfer Objects for the budget pipeline.

Pure, immutable records passed between the ingestion, engine and service
layers. No I/O, no behavior beyond derived properties.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Closed taxonomy of validation problem kinds."""

    PARSE = "parse"  # Input cannot be read at all
    STRUCTURE = "structure"  # Header or id/level shape is wrong
    VALIDATION = "validation"  # A single field is invalid
    HIERARCHY = "hierarchy"  # Missing ancestor / broken link
    DUPLICATE = "duplicate"  # Id collision
    SEQUENCE = "sequence"  # Sibling numbering gap
    RANGE = "range"  # Numeric value out of bounds


class Severity(str, Enum):
    """How a validation problem affects processing."""

    FATAL = "fatal"  # Processing halts, no partial result
    ERROR = "error"  # Row kept for display, its numbers are distrusted
    WARNING = "warning"  # Suspicious but usable

    @property
    def is_blocking(self) -> bool:
        return self is not Severity.WARNING


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation problem.

    Contract:
        Carries a closed-taxonomy code, a severity, a human-readable
        message, and optional location (line, field), the offending
        original row, and a details dict.

    Guarantees:
        - Immutable (frozen dataclass)
        - code and severity are always present

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
        - Never persisted; the caller owns disposal.
    """

    code: ErrorCode
    severity: Severity
    message: str
    line: int | None = None
    field: str | None = None
    original_row: tuple[str, ...] | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view for JSON output."""
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.line,
            "field": self.field,
            "original_row": list(self.original_row) if self.original_row is not None else None,
            "details": self.details,
        }
