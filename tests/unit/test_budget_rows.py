"""
Unit tests for the row value objects and option records.

Verifies:
- Level ranks and depth mapping
- Pricing is carried by item rows only
- Option records reject out-of-domain values with InvalidOptionError
"""

from decimal import Decimal

import pytest

from budget_kernel.domain.budget import ItemPricing, Level, LineRow
from budget_kernel.domain.dtos import ErrorCode, Severity, ValidationError
from budget_kernel.domain.options import (
    CalculationLimits,
    CalculationOptions,
    PriceBuckets,
)
from budget_kernel.domain.values import NodeId
from budget_kernel.exceptions import BudgetKernelError, ConfigurationError, InvalidOptionError


class TestLevel:
    def test_depths(self):
        assert [level.depth for level in Level] == [1, 2, 3, 4]

    def test_for_depth(self):
        assert Level.for_depth(3) is Level.SECTION
        assert Level.for_depth(0) is None
        assert Level.for_depth(5) is None

    def test_only_item_is_not_container(self):
        assert [level for level in Level if not level.is_container] == [Level.ITEM]


class TestLineRow:
    def test_item_requires_pricing(self):
        with pytest.raises(ValueError):
            LineRow(node_id=NodeId.parse("1.1.1.1"), level=Level.ITEM, name="x")

    def test_container_rejects_pricing(self):
        with pytest.raises(ValueError):
            LineRow(node_id=NodeId.parse("1"), level=Level.CHAPTER, name="x", pricing=ItemPricing())

    def test_derived_properties(self):
        row = LineRow(node_id=NodeId.parse("2.1"), level=Level.SECTION, name="Mismatched")
        assert row.id == "2.1"
        assert row.depth == 2
        assert row.implied_level is Level.SUBCHAPTER
        assert not row.is_item
        assert row.trusted


class TestValidationError:
    def test_to_dict(self):
        error = ValidationError(
            code=ErrorCode.RANGE,
            severity=Severity.ERROR,
            message="quantity must be between 0 and 10",
            line=3,
            field="quantity",
            original_row=("item", "1.1.1.1"),
        )
        assert error.to_dict() == {
            "code": "range",
            "severity": "error",
            "message": "quantity must be between 0 and 10",
            "line": 3,
            "field": "quantity",
            "original_row": ["item", "1.1.1.1"],
            "details": None,
        }

    def test_only_warning_is_non_blocking(self):
        assert Severity.FATAL.is_blocking
        assert Severity.ERROR.is_blocking
        assert not Severity.WARNING.is_blocking


class TestCalculationOptions:
    def test_defaults(self):
        options = CalculationOptions()
        assert options.decimals == 2
        assert options.decimal_separator == "."
        assert options.validate_negative is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"decimals": -1},
            {"decimals": 9},
            {"decimals": True},
            {"decimal_separator": ";"},
            {"decimal_separator": ",", "thousands_separator": ","},
            {"symbol_position": "middle"},
            {"validate_negative": "yes"},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(InvalidOptionError) as exc_info:
            CalculationOptions(**kwargs)
        assert exc_info.value.code == "INVALID_OPTION"
        assert isinstance(exc_info.value, ConfigurationError)
        assert isinstance(exc_info.value, BudgetKernelError)


class TestLimitsAndBuckets:
    def test_limits_reject_negative(self):
        with pytest.raises(InvalidOptionError):
            CalculationLimits(max_quantity=Decimal("-1"))

    def test_limits_reject_zero_items(self):
        with pytest.raises(InvalidOptionError):
            CalculationLimits(max_items=0)

    def test_buckets_must_ascend(self):
        with pytest.raises(InvalidOptionError):
            PriceBuckets(low=Decimal("600"), medium=Decimal("500"), high=Decimal("1000"))
