"""
budget_ingestion.domain.types -- Pure frozen dataclasses for the ingestion stages.

ZERO I/O. Imports only from budget_kernel/domain/.

Stage chain:
    NormalizedRows  (normalizer)  ->  MappedRows  (mapping engine)
    ->  ValidatedRows  (structural validator)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from budget_kernel.domain.budget import LineRow
from budget_kernel.domain.dtos import Severity, ValidationError

# Canonical field set, in template column order
CANONICAL_FIELDS = (
    "level",
    "id",
    "name",
    "description",
    "unit",
    "tax_percentage",
    "quantity",
    "unit_price",
)

REQUIRED_FIELDS = ("level", "id", "name")


class HeaderLanguage(str, Enum):
    """Which header vocabulary the source used."""

    ENGLISH = "english"
    SPANISH = "spanish"


# =============================================================================
# Normalizer output
# =============================================================================


@dataclass(frozen=True)
class RawRow:
    """One content-bearing source row keyed by canonical field name."""

    line: int  # 1-based; the header is line 1 for text sources
    values: dict[str, str]
    original_row: tuple[str, ...] = ()

    def get(self, name: str) -> str:
        return self.values.get(name, "")


@dataclass(frozen=True)
class NormalizedRows:
    """Normalizer result: raw rows ready for typed mapping, or one fatal error."""

    rows: tuple[RawRow, ...] = ()
    header: tuple[str, ...] = ()
    columns: tuple[str | None, ...] = ()  # canonical name per header position
    delimiter: str = ","
    language: HeaderLanguage = HeaderLanguage.ENGLISH
    errors: tuple[ValidationError, ...] = ()

    @property
    def is_fatal(self) -> bool:
        return any(e.severity is Severity.FATAL for e in self.errors)


# =============================================================================
# Mapping engine output
# =============================================================================


@dataclass(frozen=True)
class MappedRows:
    """Typed LineRows plus the problems found while typing them."""

    rows: tuple[LineRow, ...] = ()
    errors: tuple[ValidationError, ...] = ()
    # Indices into rows whose mapping errors make their numbers untrustworthy
    untrusted: tuple[int, ...] = ()

    @property
    def is_fatal(self) -> bool:
        return any(e.severity is Severity.FATAL for e in self.errors)


# =============================================================================
# Structural validator output
# =============================================================================


@dataclass(frozen=True)
class ValidatedRows:
    """Rows with parsed pricing and trust flags, plus ordered structural errors."""

    rows: tuple[LineRow, ...] = ()
    errors: tuple[ValidationError, ...] = field(default=())

    @property
    def untrusted_ids(self) -> tuple[str, ...]:
        return tuple(row.id for row in self.rows if not row.trusted)
