"""
Hierarchy codec -- identifier relationships and flat/tree conversion.

Responsibility:
    Pure functions over node identifiers and row sets: depth, parent,
    direct-child and descendant tests, required ancestors, and conversion
    between the flat row list and the HierarchicalNode tree.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O, no shared state.

Invariants enforced:
    - Relationships are computed on NodeId integer tuples, so ``1.10`` is
      never treated as a descendant of ``1.1``.
    - build_tree keeps input order for siblings (no implicit sorting).
    - flatten is a pre-order traversal (parent precedes descendants).

Failure modes:
    - None. Malformed identifiers answer False / empty rather than raising;
      callers combine these functions with the structural validator to
      decide what is erroneous versus merely absent.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Sequence

from budget_kernel.domain.budget import HierarchicalNode, Level, LineRow
from budget_kernel.domain.values import NodeId

IdLike = str | NodeId


def _coerce(node_id: IdLike) -> NodeId | None:
    if isinstance(node_id, NodeId):
        return node_id
    return NodeId.try_parse(node_id)


def depth(node_id: IdLike) -> int:
    """Number of dot-separated segments (0 for empty text)."""
    if isinstance(node_id, NodeId):
        return node_id.depth
    s = (node_id or "").strip()
    return len(s.split(".")) if s else 0


def parent_id(node_id: IdLike) -> str:
    """All segments but the last, joined by dots; empty for depth-1 ids."""
    if isinstance(node_id, NodeId):
        parent = node_id.parent
        return str(parent) if parent is not None else ""
    segments = (node_id or "").strip().split(".")
    return ".".join(segments[:-1])


def is_direct_child(parent: IdLike, candidate: IdLike) -> bool:
    p, c = _coerce(parent), _coerce(candidate)
    if p is None or c is None:
        return False
    return c.is_direct_child_of(p)


def is_descendant(ancestor: IdLike, candidate: IdLike) -> bool:
    a, c = _coerce(ancestor), _coerce(candidate)
    if a is None or c is None:
        return False
    return c.is_descendant_of(a)


def ancestor_ids(node_id: IdLike) -> tuple[NodeId, ...]:
    """Ancestors from the root down; empty for roots and malformed ids."""
    n = _coerce(node_id)
    return n.ancestors() if n is not None else ()


def required_ancestors(node_id: IdLike) -> list[tuple[str, Level]]:
    """
    (id, level) pairs that must exist above ``node_id``.

    Ordered chapter, then subchapter, then section. For an item id
    ``3.2.1.1`` this is ``[("3", CHAPTER), ("3.2", SUBCHAPTER),
    ("3.2.1", SECTION)]``.
    """
    result: list[tuple[str, Level]] = []
    for ancestor in ancestor_ids(node_id):
        level = Level.for_depth(ancestor.depth)
        if level is not None:
            result.append((str(ancestor), level))
    return result


def build_tree(rows: Sequence[LineRow]) -> tuple[HierarchicalNode, ...]:
    """
    Construct the forest of HierarchicalNodes from a flat row list.

    Each row becomes a node attached to the first row carrying its parent
    id; rows whose parent is absent become roots. Siblings keep input order.
    """
    first_index: dict[NodeId, int] = {}
    for i, row in enumerate(rows):
        first_index.setdefault(row.node_id, i)

    children: dict[int, list[int]] = defaultdict(list)
    roots: list[int] = []
    for i, row in enumerate(rows):
        parent = row.node_id.parent
        if parent is not None and parent in first_index:
            children[first_index[parent]].append(i)
        else:
            roots.append(i)

    def make(i: int) -> HierarchicalNode:
        return HierarchicalNode(row=rows[i], children=tuple(make(c) for c in children[i]))

    return tuple(make(i) for i in roots)


def flatten(tree: Iterable[HierarchicalNode]) -> tuple[LineRow, ...]:
    """Pre-order traversal back to a flat row sequence."""
    return tuple(node.row for root in tree for node in root.walk())


def item_hierarchy(rows: Sequence[LineRow], node_id: IdLike) -> tuple[LineRow, ...]:
    """Existing ancestor rows of ``node_id`` (root first) followed by the row itself."""
    target = _coerce(node_id)
    if target is None:
        return ()
    by_id: dict[NodeId, LineRow] = {}
    for row in rows:
        by_id.setdefault(row.node_id, row)
    chain = [by_id[a] for a in target.ancestors() if a in by_id]
    if target in by_id:
        chain.append(by_id[target])
    return tuple(chain)
