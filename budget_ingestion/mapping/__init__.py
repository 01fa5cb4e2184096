"""Typed row mapping (pure, no I/O)."""

from budget_ingestion.mapping.engine import LEVEL_MAP, map_row, map_rows, resolve_level

__all__ = [
    "LEVEL_MAP",
    "map_row",
    "map_rows",
    "resolve_level",
]
