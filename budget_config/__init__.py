"""
budget_config -- single public entrypoint for budget engine configuration.

Responsibility:
    Provides the ONLY way to obtain engine configuration at runtime through
    ``get_engine_config()``. Returns a frozen ``EngineConfig`` holding the
    selected calculation options plus limits, price buckets, labels and the
    save policy. YAML loading is internal tooling and never exposed to
    engines.

Architecture position:
    Configuration -- sits above ``budget_kernel`` and below
    ``budget_services``. Neither the kernel nor ``budget_engines`` may
    import from ``budget_config``; services hand the frozen option records
    down explicitly.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_engine_config()``.
    - Deterministic: the same YAML always produces the same checksum.
    - Overrides are validated: unknown option names are rejected.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``PresetNotFoundError`` -- the requested preset is not defined.
    - ``InvalidOptionError`` -- an option or override is invalid.

Audit relevance:
    Every successful ``get_engine_config()`` call emits a
    ``BUDGET_CONFIG_TRACE`` log entry with the preset, version and checksum.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from budget_config.loader import load_yaml_file, parse_engine_config
from budget_config.schema import EngineConfig
from budget_kernel.domain.options import CalculationOptions
from budget_kernel.exceptions import InvalidOptionError

_logger = logging.getLogger("budget_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

__all__ = [
    "EngineConfig",
    "get_engine_config",
    "resolve_options",
]


def get_engine_config(
    preset: str | None = None,
    config_path: Path | None = None,
) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Args:
        preset: Name of the calculation preset to activate. Defaults to
            the file's ``default_preset``.
        config_path: Override path to the YAML file. Defaults to
            budget_config/defaults.yaml.

    Returns:
        EngineConfig -- the sole runtime configuration artifact.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        PresetNotFoundError: If ``preset`` is not defined.
        InvalidOptionError: If any configured value is invalid.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    data = load_yaml_file(path)
    config = parse_engine_config(data, preset=preset)

    _logger.info(
        "BUDGET_CONFIG_TRACE",
        extra={
            "trace_type": "BUDGET_CONFIG_TRACE",
            "config_path": str(path),
            "config_version": config.version,
            "checksum": config.checksum,
            "preset": config.preset_name,
            "preset_count": len(config.presets),
            "block_on_warnings": config.block_on_warnings,
        },
    )
    return config


def resolve_options(
    base: CalculationOptions,
    overrides: dict[str, Any] | None = None,
) -> CalculationOptions:
    """Apply caller overrides to a base options record.

    Raises:
        InvalidOptionError: If an override names an unknown option or the
            resulting record is invalid.
    """
    if not overrides:
        return base
    known = CalculationOptions.__dataclass_fields__
    for name, value in overrides.items():
        if name not in known:
            raise InvalidOptionError(name, value, "unknown option")
    return replace(base, **overrides)
