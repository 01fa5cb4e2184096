"""
Budget -- Row and tree value objects for the four-level cost breakdown.

Responsibility:
    Defines the ranked Level enum, the item-only pricing payload, the
    LineRow record and the HierarchicalNode tree wrapper.

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.

Invariants enforced:
    - A LineRow carries ItemPricing if and only if its level is ITEM.
    - All monetary fields use Decimal -- NEVER float.
    - Rows and nodes are frozen; updates produce new objects.

Failure modes:
    - Constructing a LineRow that breaks the pricing/level pairing raises
      ValueError (programming-contract violation, not bad user data).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from budget_kernel.domain.values import ZERO, NodeId

MAX_DEPTH = 4


class Level(str, Enum):
    """The four fixed ranks of the budget hierarchy."""

    CHAPTER = "chapter"
    SUBCHAPTER = "subchapter"
    SECTION = "section"
    ITEM = "item"

    @property
    def depth(self) -> int:
        return _LEVEL_DEPTHS[self]

    @property
    def is_container(self) -> bool:
        return self is not Level.ITEM

    @classmethod
    def for_depth(cls, depth: int) -> Level | None:
        """Level implied by an id depth, or None outside 1..4."""
        return _DEPTH_LEVELS.get(depth)


_LEVEL_DEPTHS = {
    Level.CHAPTER: 1,
    Level.SUBCHAPTER: 2,
    Level.SECTION: 3,
    Level.ITEM: 4,
}
_DEPTH_LEVELS = {depth: level for level, depth in _LEVEL_DEPTHS.items()}


@dataclass(frozen=True)
class ItemPricing:
    """
    Item-only pricing payload.

    Raw texts are kept exactly as read so errors can echo them. Parsed
    values are filled in by structural validation; ``parsed`` records that
    this happened. A parsed value of None means the text was malformed.
    """

    unit: str = ""
    quantity_text: str = ""
    unit_price_text: str = ""
    tax_percentage_text: str = ""
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    tax_percentage: Decimal | None = None
    parsed: bool = False


@dataclass(frozen=True)
class LineRow:
    """A single budget row: chapter, subchapter, section or item."""

    node_id: NodeId
    level: Level
    name: str
    description: str = ""
    pricing: ItemPricing | None = None
    amount: Decimal = ZERO
    line: int | None = None  # 1-based line in the source
    original_row: tuple[str, ...] = ()
    trusted: bool = True

    def __post_init__(self) -> None:
        if self.level is Level.ITEM and self.pricing is None:
            raise ValueError(f"Item row {self.node_id} requires pricing")
        if self.level is not Level.ITEM and self.pricing is not None:
            raise ValueError(f"{self.level.value} row {self.node_id} cannot carry pricing")

    @property
    def id(self) -> str:
        return str(self.node_id)

    @property
    def depth(self) -> int:
        return self.node_id.depth

    @property
    def is_item(self) -> bool:
        return self.level is Level.ITEM

    @property
    def implied_level(self) -> Level | None:
        return Level.for_depth(self.node_id.depth)


@dataclass(frozen=True)
class HierarchicalNode:
    """A LineRow plus its ordered children. Built fresh, never mutated."""

    row: LineRow
    children: tuple[HierarchicalNode, ...] = field(default=())

    @property
    def id(self) -> str:
        return self.row.id

    def walk(self):
        """Pre-order iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()
