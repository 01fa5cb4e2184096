"""Tests for presentation formatting (budget_engines/formatting.py)."""

from decimal import Decimal

import pytest

from budget_engines.formatting import format_amount, format_number, format_percentage, format_totals
from budget_engines.tax import TaxGroup, Totals
from budget_kernel.domain.options import CalculationOptions, DisplayLabels

SPANISH = CalculationOptions(currency_symbol="€", decimal_separator=",", thousands_separator=".")
PREFIX = CalculationOptions(currency_symbol="€", thousands_separator=",", symbol_position="before")


class TestFormatNumber:
    @pytest.mark.parametrize(
        ("value", "options", "expected"),
        [
            (Decimal("1234.5"), CalculationOptions(), "1234.50"),
            (Decimal("1234.5"), SPANISH, "1.234,50"),
            (Decimal("1234567.891"), PREFIX, "1,234,567.89"),
            (Decimal("999"), SPANISH, "999,00"),
            (Decimal("0.125"), CalculationOptions(), "0.13"),
            (Decimal("-1234.5"), SPANISH, "-1.234,50"),
            (Decimal("12.34567"), CalculationOptions(decimals=4), "12.3457"),
            (Decimal("12.5"), CalculationOptions(decimals=0), "13"),
        ],
    )
    def test_format_number(self, value, options, expected):
        assert format_number(value, options) == expected


class TestFormatAmount:
    def test_symbol_after(self):
        assert format_amount(Decimal("1234.5"), SPANISH) == "1.234,50 €"

    def test_symbol_before(self):
        assert format_amount(Decimal("1234.5"), PREFIX) == "€1,234.50"

    def test_negative_symbol_before(self):
        assert format_amount(Decimal("-5"), PREFIX) == "-€5.00"

    def test_no_symbol(self):
        assert format_amount(Decimal("7")) == "7.00"


class TestFormatPercentage:
    def test_trailing_zeros_dropped(self):
        assert format_percentage(Decimal("21.00")) == "21"
        assert format_percentage(Decimal("10.50"), SPANISH) == "10,5"
        assert format_percentage(Decimal("0.00")) == "0"


class TestFormatTotals:
    def test_lines(self):
        totals = Totals(
            base=Decimal("1400.00"),
            groups=(
                TaxGroup(Decimal("10.00"), Decimal("250.00"), Decimal("25.00")),
                TaxGroup(Decimal("21.00"), Decimal("1150.00"), Decimal("241.50")),
            ),
            total=Decimal("1666.50"),
        )
        display = format_totals(totals, SPANISH, DisplayLabels(base="Base imponible", tax="IVA {percentage}%"))
        lines = display.lines()
        assert [line.label for line in lines] == ["Base imponible", "IVA 10%", "IVA 21%", "Total"]
        assert [line.value for line in lines] == ["1.400,00 €", "25,00 €", "241,50 €", "1.666,50 €"]
        assert lines[1].percentage == Decimal("10.00")
        assert lines[-1].amount == Decimal("1666.50")

    def test_empty_totals(self):
        display = format_totals(Totals.empty())
        assert display.taxes == ()
        assert [line.value for line in display.lines()] == ["0.00", "0.00"]
