"""
Presentation formatting for amounts and totals.

A pure presentation step: formatted strings never feed back into numeric
computation. Decimal places, currency symbol, separators and symbol
position come from CalculationOptions; labels from DisplayLabels.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from budget_kernel.domain.options import CalculationOptions, DisplayLabels
from budget_kernel.domain.values import round_amount

from budget_engines.tax import Totals


@dataclass(frozen=True)
class DisplayLine:
    """One formatted line of a totals block."""

    label: str
    value: str
    amount: Decimal
    percentage: Decimal | None = None


@dataclass(frozen=True)
class TotalsDisplay:
    base: DisplayLine
    taxes: tuple[DisplayLine, ...]
    total: DisplayLine

    def lines(self) -> tuple[DisplayLine, ...]:
        return (self.base, *self.taxes, self.total)


def _group_thousands(digits: str, separator: str) -> str:
    if not separator or len(digits) <= 3:
        return digits
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i : i + 3] for i in range(head, len(digits), 3)]
    return separator.join(groups)


def format_number(value: Decimal, options: CalculationOptions | None = None) -> str:
    """Value rounded to ``options.decimals`` with the configured separators, no symbol."""
    options = options or CalculationOptions()
    rounded = round_amount(value, options.decimals)
    sign = "-" if rounded < 0 else ""
    integer, _, fraction = f"{abs(rounded):f}".partition(".")
    text = _group_thousands(integer, options.thousands_separator)
    if fraction:
        text = f"{text}{options.decimal_separator}{fraction}"
    return sign + text


def format_amount(value: Decimal, options: CalculationOptions | None = None) -> str:
    """
    Display text for a monetary value.

    ``format_amount(Decimal("1234.5"), spanish)`` gives ``"1.234,50 €"``
    with the spanish_standard preset.
    """
    options = options or CalculationOptions()
    text = format_number(value, options)
    symbol = options.currency_symbol
    if not symbol:
        return text
    if options.symbol_position == "before":
        if text.startswith("-"):
            return f"-{symbol}{text[1:]}"
        return f"{symbol}{text}"
    return f"{text} {symbol}"


def format_percentage(percentage: Decimal, options: CalculationOptions | None = None) -> str:
    """Percentage without trailing zeros (``21.00`` -> ``21``, ``10.50`` -> ``10,5``)."""
    options = options or CalculationOptions()
    text = f"{percentage.normalize():f}"
    return text.replace(".", options.decimal_separator)


def format_totals(
    totals: Totals,
    options: CalculationOptions | None = None,
    labels: DisplayLabels | None = None,
) -> TotalsDisplay:
    """Labelled, formatted view of a Totals value."""
    options = options or CalculationOptions()
    labels = labels or DisplayLabels()
    taxes = tuple(
        DisplayLine(
            label=labels.tax.format(percentage=format_percentage(group.percentage, options)),
            value=format_amount(group.tax_amount, options),
            amount=group.tax_amount,
            percentage=group.percentage,
        )
        for group in totals.groups
    )
    return TotalsDisplay(
        base=DisplayLine(label=labels.base, value=format_amount(totals.base, options), amount=totals.base),
        taxes=taxes,
        total=DisplayLine(label=labels.total, value=format_amount(totals.total, options), amount=totals.total),
    )
