"""
Error taxonomy -- the only way ingestion code reports a problem.

Every constructor returns a fully populated ValidationError with a
deterministic English message. Construction never fails and has no side
effects. Callers filter and count by ``code`` and ``severity``, never by
message text.

Severity defaults follow the taxonomy:

    parse        fatal    input unreadable (empty file, no data rows)
    structure    fatal    unusable header, item limit exceeded
                 error    row shape wrong (level/depth mismatch, too deep)
    validation   error    single field invalid
    hierarchy    error    missing ancestor
    duplicate    error    id collision
    sequence     warning  sibling numbering gap
    range        error    numeric value out of bounds
"""

from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import Any, Iterable, Sequence

from budget_kernel.domain.budget import Level
from budget_kernel.domain.dtos import ErrorCode, Severity, ValidationError

RowEcho = Sequence[str] | None

DEFAULT_PARSE_MESSAGE = (
    "The file is empty or has no valid structure: it must include a header "
    "row and at least one data row"
)


def _echo(original_row: RowEcho) -> tuple[str, ...] | None:
    return tuple(original_row) if original_row is not None else None


# -----------------------------------------------------------------------------
# Constructors
# -----------------------------------------------------------------------------


def field_error(
    field: str,
    message: str,
    line: int | None = None,
    original_row: RowEcho = None,
    details: dict[str, Any] | None = None,
) -> ValidationError:
    """A single field is invalid. The message is prefixed with the field name."""
    return ValidationError(
        code=ErrorCode.VALIDATION,
        severity=Severity.ERROR,
        message=f"{field} {message}",
        line=line,
        field=field,
        original_row=_echo(original_row),
        details=details,
    )


def parse_error(message: str = DEFAULT_PARSE_MESSAGE) -> ValidationError:
    return ValidationError(code=ErrorCode.PARSE, severity=Severity.FATAL, message=message)


def structure_error(
    message: str,
    line: int | None = None,
    original_row: RowEcho = None,
    severity: Severity = Severity.FATAL,
    details: dict[str, Any] | None = None,
) -> ValidationError:
    return ValidationError(
        code=ErrorCode.STRUCTURE,
        severity=severity,
        message=message,
        line=line,
        original_row=_echo(original_row),
        details=details,
    )


def hierarchy_error(
    message: str,
    line: int | None = None,
    original_row: RowEcho = None,
    details: dict[str, Any] | None = None,
) -> ValidationError:
    return ValidationError(
        code=ErrorCode.HIERARCHY,
        severity=Severity.ERROR,
        message=message,
        line=line,
        original_row=_echo(original_row),
        details=details,
    )


def missing_ancestor_error(
    row_id: str,
    ancestor_id: str,
    ancestor_level: Level,
    line: int | None = None,
    original_row: RowEcho = None,
) -> ValidationError:
    """Hierarchy error naming the absent ancestor and its level."""
    return hierarchy_error(
        f"Missing {ancestor_level.value} {ancestor_id} required by {row_id}",
        line=line,
        original_row=original_row,
        details={
            "row_id": row_id,
            "missing_id": ancestor_id,
            "missing_level": ancestor_level.value,
        },
    )


def duplicate_id_error(
    node_id: str,
    line: int | None = None,
    original_row: RowEcho = None,
    first_line: int | None = None,
) -> ValidationError:
    where = f"line {first_line}" if first_line is not None else "another line"
    return ValidationError(
        code=ErrorCode.DUPLICATE,
        severity=Severity.ERROR,
        message=f"Duplicate id: {node_id} (also appears on {where})",
        line=line,
        field="id",
        original_row=_echo(original_row),
        details={"id": node_id, "first_line": first_line},
    )


def sequence_error(
    parent_id: str,
    level: Level,
    expected_id: str,
    found_id: str,
    line: int | None = None,
    original_row: RowEcho = None,
) -> ValidationError:
    """Warning for a gap in sibling numbering (``expected_id`` is the first missing id)."""
    scope = f"under {parent_id}" if parent_id else "at top level"
    return ValidationError(
        code=ErrorCode.SEQUENCE,
        severity=Severity.WARNING,
        message=f"Sequence gap {scope}: expected {level.value} {expected_id}, found {found_id}",
        line=line,
        field="id",
        original_row=_echo(original_row),
        details={
            "parent_id": parent_id,
            "level": level.value,
            "expected_id": expected_id,
            "found_id": found_id,
        },
    )


def number_format_error(
    field: str,
    value: str,
    line: int | None = None,
    original_row: RowEcho = None,
) -> ValidationError:
    return field_error(
        field,
        f'must be a valid number (found: "{value}")',
        line=line,
        original_row=original_row,
        details={"value": value},
    )


def range_error(
    field: str,
    minimum: Decimal | int | None,
    maximum: Decimal | int | None,
    line: int | None = None,
    original_row: RowEcho = None,
    value: str | None = None,
) -> ValidationError:
    if minimum is not None and maximum is not None:
        bound = f"must be between {minimum} and {maximum}"
    elif minimum is not None:
        bound = f"must be greater than or equal to {minimum}"
    elif maximum is not None:
        bound = f"must be less than or equal to {maximum}"
    else:
        bound = "is out of range"
    if value is not None:
        bound = f'{bound} (found: "{value}")'
    return ValidationError(
        code=ErrorCode.RANGE,
        severity=Severity.ERROR,
        message=f"{field} {bound}",
        line=line,
        field=field,
        original_row=_echo(original_row),
        details={
            "minimum": str(minimum) if minimum is not None else None,
            "maximum": str(maximum) if maximum is not None else None,
            "value": value,
        },
    )


def id_format_error(
    line: int | None = None,
    original_row: RowEcho = None,
    value: str | None = None,
) -> ValidationError:
    return field_error(
        "id",
        "has an invalid format (must be positive integers separated by dots)",
        line=line,
        original_row=original_row,
        details={"value": value},
    )


def level_mismatch_error(
    node_id: str,
    declared: Level,
    implied: Level | None,
    line: int | None = None,
    original_row: RowEcho = None,
) -> ValidationError:
    implied_text = implied.value if implied is not None else "none"
    return structure_error(
        f"Level {declared.value} does not match id {node_id} (depth implies {implied_text})",
        line=line,
        original_row=original_row,
        severity=Severity.ERROR,
        details={
            "id": node_id,
            "declared_level": declared.value,
            "implied_level": implied.value if implied is not None else None,
        },
    )


# -----------------------------------------------------------------------------
# Utilities
# -----------------------------------------------------------------------------


def filter_by_severity(errors: Iterable[ValidationError], severity: Severity) -> list[ValidationError]:
    return [e for e in errors if e.severity is severity]


def has_fatal_errors(errors: Iterable[ValidationError]) -> bool:
    return any(e.severity is Severity.FATAL for e in errors)


def has_blocking_errors(errors: Iterable[ValidationError], block_on_warnings: bool = False) -> bool:
    """True when any error should stop the caller from saving the budget."""
    if block_on_warnings:
        return any(True for _ in errors)
    return any(e.severity.is_blocking for e in errors)


def count_by_code(errors: Iterable[ValidationError]) -> dict[str, int]:
    return dict(Counter(e.code.value for e in errors))


def count_by_severity(errors: Iterable[ValidationError]) -> dict[str, int]:
    return dict(Counter(e.severity.value for e in errors))


def format_for_display(errors: Iterable[ValidationError]) -> list[str]:
    """
    One display line per error.

    Errors that echo their source row are prefixed with the quoted row
    (``"1","chapter","Demolition" <- message``); otherwise errors with a
    line number get ``Line N: message``.
    """
    lines: list[str] = []
    for error in errors:
        message = error.message
        if error.original_row:
            quoted = ",".join(f'"{value}"' for value in error.original_row)
            message = f"{quoted} ← {message}"
        elif error.line is not None:
            message = f"Line {error.line}: {message}"
        lines.append(message)
    return lines
