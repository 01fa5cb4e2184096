"""
Options -- runtime parameter records consumed by validators and engines.

Engines never read configuration; callers pass these frozen records in.
budget_config builds them from YAML, and callers may also construct them
directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from budget_kernel.exceptions import InvalidOptionError

_DECIMAL_SEPARATORS = (".", ",")
_SYMBOL_POSITIONS = ("before", "after")


@dataclass(frozen=True)
class CalculationOptions:
    """
    Caller-facing calculation and presentation options.

    ``decimals``, ``currency_symbol``, the separators and
    ``symbol_position`` only affect formatting; amounts are always computed
    at 2 places. ``validate_negative`` controls whether negative numeric
    input is reported as a range error.
    """

    decimals: int = 2
    currency_symbol: str = ""
    decimal_separator: str = "."
    thousands_separator: str = ""
    symbol_position: str = "after"
    validate_negative: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise InvalidOptionError("decimals", self.decimals, "must be an integer")
        if not 0 <= self.decimals <= 8:
            raise InvalidOptionError("decimals", self.decimals, "must be between 0 and 8")
        if self.decimal_separator not in _DECIMAL_SEPARATORS:
            raise InvalidOptionError("decimal_separator", self.decimal_separator, "must be '.' or ','")
        if self.thousands_separator == self.decimal_separator:
            raise InvalidOptionError(
                "thousands_separator", self.thousands_separator, "must differ from decimal_separator"
            )
        if self.symbol_position not in _SYMBOL_POSITIONS:
            raise InvalidOptionError("symbol_position", self.symbol_position, "must be 'before' or 'after'")
        if not isinstance(self.validate_negative, bool):
            raise InvalidOptionError("validate_negative", self.validate_negative, "must be a boolean")


@dataclass(frozen=True)
class CalculationLimits:
    """Upper bounds applied by structural validation."""

    max_quantity: Decimal = Decimal("999999.99")
    max_unit_price: Decimal = Decimal("999999.99")
    max_amount: Decimal = Decimal("999999999.99")
    max_tax_percentage: Decimal = Decimal("100")
    max_items: int = 10000
    amount_tolerance: Decimal = Decimal("0.01")

    def __post_init__(self) -> None:
        for name in ("max_quantity", "max_unit_price", "max_amount", "max_tax_percentage", "amount_tolerance"):
            value = getattr(self, name)
            if not isinstance(value, Decimal) or value < 0:
                raise InvalidOptionError(name, value, "must be a non-negative Decimal")
        if self.max_items < 1:
            raise InvalidOptionError("max_items", self.max_items, "must be at least 1")


@dataclass(frozen=True)
class PriceBuckets:
    """Inclusive upper bounds of the low / medium / high buckets; above is premium."""

    low: Decimal = Decimal("100")
    medium: Decimal = Decimal("500")
    high: Decimal = Decimal("1000")

    def __post_init__(self) -> None:
        if not (self.low <= self.medium <= self.high):
            raise InvalidOptionError(
                "price_buckets", (self.low, self.medium, self.high), "thresholds must be ascending"
            )


@dataclass(frozen=True)
class DisplayLabels:
    """Labels used by the totals formatter. ``tax`` may use ``{percentage}``."""

    base: str = "Base"
    tax: str = "{percentage}% tax"
    total: str = "Total"
