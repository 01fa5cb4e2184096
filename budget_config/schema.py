"""
Engine configuration schema.

YAML is parsed by the loader into an EngineConfig: the frozen runtime
artifact holding every named preset plus the limits, price buckets, labels
and save policy shared by all presets.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from budget_kernel.domain.options import (
    CalculationLimits,
    CalculationOptions,
    DisplayLabels,
    PriceBuckets,
)
from budget_kernel.exceptions import PresetNotFoundError


@dataclass(frozen=True)
class EngineConfig:
    """Compiled engine configuration."""

    options: CalculationOptions
    limits: CalculationLimits = field(default_factory=CalculationLimits)
    price_buckets: PriceBuckets = field(default_factory=PriceBuckets)
    labels: DisplayLabels = field(default_factory=DisplayLabels)
    block_on_warnings: bool = False
    preset_name: str = "standard"
    presets: tuple[tuple[str, CalculationOptions], ...] = ()
    version: int = 1
    checksum: str = ""

    @property
    def preset_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.presets)

    def preset(self, name: str) -> CalculationOptions:
        """Options record for a named preset."""
        for preset_name, options in self.presets:
            if preset_name == name:
                return options
        raise PresetNotFoundError(name, self.preset_names)
