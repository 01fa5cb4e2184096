"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value types for budget computations: the
    integer-sequence NodeId and the Decimal helpers used for every amount,
    quantity, unit price and tax percentage.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module. No outward dependencies.

Invariants enforced:
    - Node ids are tuples of positive integers; ancestry is decided on the
      integer tuple, never on string prefixes (``1.10`` is not under ``1.1``).
    - All monetary values are Decimal, never float.
    - Rounding is half-away-from-zero at an explicit number of places;
      ``round_amount`` is the only sanctioned rounding function.

Failure modes:
    - ``NodeId.parse`` raises ValueError on malformed text;
      ``NodeId.try_parse`` returns None instead.
    - ``parse_decimal`` returns None for non-numeric or non-finite text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# Monetary precision and the comparison tolerance derived from it
AMOUNT_DECIMAL_PLACES = 2
AMOUNT_TOLERANCE = Decimal("0.01")
ZERO = Decimal("0.00")

_ID_SEGMENT_RE = re.compile(r"^[0-9]+$")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


@dataclass(frozen=True, slots=True)
class NodeId:
    """
    Hierarchical node identifier.

    Contract:
        Wraps the parsed segments of a dot-separated id (``"1.2.3"`` ->
        ``(1, 2, 3)``). Every segment is a positive integer.

    Guarantees:
        - Immutable and hashable (usable as dict key)
        - ``str(node_id)`` is the canonical text (no leading zeros)
        - Ordering follows the integer tuple (``1.2`` < ``1.10``)

    Non-goals:
        - Does NOT know which rows exist; presence checks live in the
          hierarchy codec and the structural validator.
    """

    parts: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValueError("NodeId requires at least one segment")
        for part in self.parts:
            if not isinstance(part, int) or part < 1:
                raise ValueError(f"NodeId segments must be positive integers, got {self.parts!r}")

    @classmethod
    def parse(cls, text: str) -> NodeId:
        """
        Parse dot-separated text into a NodeId.

        Raises:
            ValueError: If text is empty, has empty or non-digit segments,
                or contains a zero segment.
        """
        s = (text or "").strip()
        if not s:
            raise ValueError("Empty node id")
        segments = s.split(".")
        parts: list[int] = []
        for segment in segments:
            if not _ID_SEGMENT_RE.match(segment):
                raise ValueError(f"Invalid node id segment {segment!r} in {text!r}")
            parts.append(int(segment))
        return cls(tuple(parts))

    @classmethod
    def try_parse(cls, text: str) -> NodeId | None:
        """Parse text, returning None instead of raising."""
        try:
            return cls.parse(text)
        except ValueError:
            return None

    @property
    def depth(self) -> int:
        return len(self.parts)

    @property
    def sequence(self) -> int:
        """Depth-relative sequence number (the last segment)."""
        return self.parts[-1]

    @property
    def parent(self) -> NodeId | None:
        """Parent id, or None for a root."""
        if len(self.parts) == 1:
            return None
        return NodeId(self.parts[:-1])

    def ancestors(self) -> tuple[NodeId, ...]:
        """All ancestors from the root down, excluding self."""
        return tuple(NodeId(self.parts[:i]) for i in range(1, len(self.parts)))

    def is_direct_child_of(self, other: NodeId) -> bool:
        return len(self.parts) == len(other.parts) + 1 and self.parts[: len(other.parts)] == other.parts

    def is_descendant_of(self, other: NodeId) -> bool:
        return len(self.parts) > len(other.parts) and self.parts[: len(other.parts)] == other.parts

    def __lt__(self, other: NodeId) -> bool:
        if not isinstance(other, NodeId):
            return NotImplemented
        return self.parts < other.parts

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f"NodeId({str(self)!r})"


# ---------------------------------------------------------------------------
# Decimal helpers
# ---------------------------------------------------------------------------


def round_amount(value: Decimal, decimal_places: int = AMOUNT_DECIMAL_PLACES) -> Decimal:
    """
    Round a value half-away-from-zero to ``decimal_places``.

    This is the ONLY sanctioned rounding function for budget values.
    """
    return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def normalize_number_text(text: str) -> str:
    """
    Normalize locale-formatted number text to canonical ``[-]digits[.digits]``.

    Either ``.`` or ``,`` is accepted as the decimal separator. When both
    appear, the rightmost one is the decimal separator and the other is a
    thousands separator (``1.234,56`` and ``1,234.56`` both give ``1234.56``).
    Internal spaces are removed.
    """
    s = (text or "").strip().replace(" ", "").replace("\u00a0", "")
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    return s.replace(",", ".")


def parse_decimal(text: str | Decimal | int | None) -> Decimal | None:
    """
    Parse number text into a finite Decimal.

    Returns:
        The Decimal value, or None when the text is not a plain finite
        number (``NaN``, ``Infinity``, exponents and stray characters are
        rejected).
    """
    if text is None:
        return None
    if isinstance(text, Decimal):
        return text if text.is_finite() else None
    if isinstance(text, int):
        return Decimal(text)
    s = normalize_number_text(str(text))
    if not _DECIMAL_RE.match(s):
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def to_amount(value: Decimal | None) -> Decimal:
    """Coerce a possibly-missing value to a 2-place Decimal (None -> 0.00)."""
    if value is None:
        return ZERO
    return round_amount(value)


def amounts_differ(a: Decimal, b: Decimal, tolerance: Decimal = AMOUNT_TOLERANCE) -> bool:
    """True when two amounts differ by more than the tolerance."""
    return abs(a - b) > tolerance
