"""
Configuration Loader (``budget_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into typed, frozen
records. The single public entry point for runtime config is
``budget_config.get_engine_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass.
* Monetary limits are parsed from strings into Decimal, never float.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown option keys or out-of-domain values  -> ``InvalidOptionError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from budget_config.schema import EngineConfig
from budget_kernel.domain.options import (
    CalculationLimits,
    CalculationOptions,
    DisplayLabels,
    PriceBuckets,
)
from budget_kernel.exceptions import InvalidOptionError, PresetNotFoundError

_OPTION_KEYS = frozenset(CalculationOptions.__dataclass_fields__)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal_option(name: str, value: Any) -> Decimal:
    """Parse a Decimal option from YAML (string or int; floats are refused)."""
    if isinstance(value, float):
        raise InvalidOptionError(name, value, "quote decimal values in YAML to avoid float rounding")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidOptionError(name, value, "not a decimal number") from e


def parse_options(data: dict[str, Any]) -> CalculationOptions:
    """Parse CalculationOptions from a dict, rejecting unknown keys."""
    unknown = sorted(set(data) - _OPTION_KEYS)
    if unknown:
        raise InvalidOptionError(unknown[0], data[unknown[0]], "unknown option")
    kwargs = dict(data)
    if "currency_symbol" in kwargs and kwargs["currency_symbol"] is None:
        kwargs["currency_symbol"] = ""
    if "thousands_separator" in kwargs and kwargs["thousands_separator"] is None:
        kwargs["thousands_separator"] = ""
    return CalculationOptions(**kwargs)


def parse_limits(data: dict[str, Any]) -> CalculationLimits:
    """Parse CalculationLimits from a dict; missing keys keep defaults."""
    defaults = CalculationLimits()
    return CalculationLimits(
        max_quantity=parse_decimal_option("max_quantity", data.get("max_quantity", defaults.max_quantity)),
        max_unit_price=parse_decimal_option("max_unit_price", data.get("max_unit_price", defaults.max_unit_price)),
        max_amount=parse_decimal_option("max_amount", data.get("max_amount", defaults.max_amount)),
        max_tax_percentage=parse_decimal_option(
            "max_tax_percentage", data.get("max_tax_percentage", defaults.max_tax_percentage)
        ),
        max_items=int(data.get("max_items", defaults.max_items)),
        amount_tolerance=parse_decimal_option(
            "amount_tolerance", data.get("amount_tolerance", defaults.amount_tolerance)
        ),
    )


def parse_price_buckets(data: dict[str, Any]) -> PriceBuckets:
    """Parse PriceBuckets from a dict."""
    defaults = PriceBuckets()
    return PriceBuckets(
        low=parse_decimal_option("price_buckets.low", data.get("low", defaults.low)),
        medium=parse_decimal_option("price_buckets.medium", data.get("medium", defaults.medium)),
        high=parse_decimal_option("price_buckets.high", data.get("high", defaults.high)),
    )


def parse_labels(data: dict[str, Any]) -> DisplayLabels:
    """Parse DisplayLabels from a dict."""
    defaults = DisplayLabels()
    return DisplayLabels(
        base=str(data.get("base", defaults.base)),
        tax=str(data.get("tax", defaults.tax)),
        total=str(data.get("total", defaults.total)),
    )


def parse_engine_config(data: dict[str, Any], preset: str | None = None) -> EngineConfig:
    """
    Parse a full EngineConfig from a dict.

    ``preset`` selects the active options; when None the file's
    ``default_preset`` (or ``standard``) is used.

    Raises:
        PresetNotFoundError: if the selected preset is not defined.
        InvalidOptionError: if any option value is invalid.
    """
    presets = tuple(
        (str(name), parse_options(values or {}))
        for name, values in (data.get("presets") or {}).items()
    )
    if not presets:
        presets = (("standard", CalculationOptions()),)

    selected = preset or data.get("default_preset") or "standard"
    by_name = dict(presets)
    if selected not in by_name:
        raise PresetNotFoundError(selected, tuple(name for name, _ in presets))

    policy = data.get("policy") or {}
    return EngineConfig(
        options=by_name[selected],
        limits=parse_limits(data.get("limits") or {}),
        price_buckets=parse_price_buckets(data.get("price_buckets") or {}),
        labels=parse_labels(data.get("labels") or {}),
        block_on_warnings=bool(policy.get("block_on_warnings", False)),
        preset_name=selected,
        presets=presets,
        version=int(data.get("version", 1)),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
