"""
Deterministic hashing utilities.

Hashing in the budget kernel must be deterministic and reproducible: a host
that caches pipeline results keys them by the hash of the full input row set.
"""

import hashlib
import json
from decimal import Decimal
from enum import Enum
from typing import Any, Sequence


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Decimal):
        # Normalize so 1.50 and 1.5 hash identically
        return str(obj.normalize())
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (tuple, frozenset, set)):
        return list(obj)
    if isinstance(obj, bytes):
        return obj.hex()

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Produces a deterministic JSON representation:
    - Keys are sorted alphabetically
    - No whitespace
    - Consistent handling of Decimal and Enum values

    Args:
        data: Data to canonicalize.

    Returns:
        Canonical JSON string.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """
    Compute SHA-256 hash of a payload.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_rows(rows: Sequence[Sequence[str]] | str, options: dict | None = None) -> str:
    """
    Compute SHA-256 hash of a complete input row set plus its options.

    Accepts raw text or already-split rows. Row order is significant.
    """
    if isinstance(rows, str):
        source: Any = rows
    else:
        source = [list(row) for row in rows]
    return hash_payload({"source": source, "options": options or {}})
