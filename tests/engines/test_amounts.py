"""
Tests for the amount engine (budget_engines/amounts.py).

Verifies:
- Item amount = quantity x unit price, rounded half-up
- Containers sum their item descendants (integer-tuple ancestry)
- Idempotence and input immutability
- Pipeline misuse raises typed exceptions
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from budget_engines.amounts import calculate_amounts, container_amount, item_amount, update_item
from budget_kernel.domain.values import ZERO
from budget_kernel.exceptions import UnknownItemError, UnparsedPricingError

from tests.conftest import make_container, make_item


class TestItemAmount:
    def test_product_rounded_half_up(self):
        assert item_amount(Decimal("3"), Decimal("0.335")) == Decimal("1.01")

    def test_missing_counts_as_zero(self):
        assert item_amount(None, Decimal("10")) == ZERO
        assert item_amount(Decimal("2"), None) == ZERO

    def test_negative_gives_zero(self):
        assert item_amount(Decimal("-2"), Decimal("10")) == ZERO
        assert item_amount(Decimal("2"), Decimal("-10")) == ZERO


class TestCalculateAmounts:
    def test_items_and_containers(self, sample_rows):
        result = calculate_amounts(sample_rows).by_id()
        assert result["1.1.1.1"].amount == Decimal("1000.00")
        assert result["1.1.1.2"].amount == Decimal("250.00")
        assert result["1.1.1"].amount == Decimal("1250.00")
        assert result["1.1"].amount == Decimal("1250.00")
        assert result["1"].amount == Decimal("1250.00")
        assert result["2"].amount == Decimal("150.00")

    def test_total(self, sample_rows):
        assert calculate_amounts(sample_rows).total == Decimal("1400.00")

    def test_prefix_siblings_not_summed(self):
        rows = [
            make_container("1"),
            make_container("1.1"),
            make_container("1.10"),
            make_container("1.10.1"),
            make_item("1.10.1.1", "1", "99"),
        ]
        result = calculate_amounts(rows).by_id()
        assert result["1.1"].amount == ZERO
        assert result["1.10"].amount == Decimal("99.00")
        assert result["1"].amount == Decimal("99.00")

    def test_stale_container_amounts_rebuilt(self):
        rows = [make_container("1", amount=Decimal("12345")), make_item("1.1.1.1", "2", "5")]
        assert calculate_amounts(rows).by_id()["1"].amount == Decimal("10.00")

    def test_idempotent(self, sample_rows):
        once = calculate_amounts(sample_rows)
        assert calculate_amounts(once.rows) == once

    def test_input_not_mutated(self, sample_rows):
        snapshot = list(sample_rows)
        calculate_amounts(sample_rows)
        assert sample_rows == snapshot
        assert all(row.amount == ZERO for row in sample_rows)

    def test_row_order_preserved(self, sample_rows):
        assert [row.id for row in calculate_amounts(sample_rows).rows] == [row.id for row in sample_rows]

    def test_unparsed_pricing_raises(self):
        rows = [make_item("1.1.1.1", parsed=False, line=5)]
        with pytest.raises(UnparsedPricingError) as exc_info:
            calculate_amounts(rows)
        assert exc_info.value.row_id == "1.1.1.1"
        assert exc_info.value.line == 5

    def test_empty(self):
        result = calculate_amounts([])
        assert result.rows == ()
        assert result.total == ZERO

    def test_emits_engine_trace(self, sample_rows, captured_logs):
        calculate_amounts(sample_rows)
        traces = [r for r in captured_logs() if r["message"] == "BUDGET_ENGINE_TRACE"]
        assert traces[0]["engine_name"] == "amounts"
        assert len(traces[0]["input_fingerprint"]) == 16


class TestContainerAmount:
    def test_sums_descendant_items(self, sample_rows):
        amounted = calculate_amounts(sample_rows).rows
        assert container_amount(amounted, "1.1") == Decimal("1250.00")
        assert container_amount(amounted, "9") == ZERO
        assert container_amount(amounted, "bad") == ZERO


class TestUpdateItem:
    def test_recomputes_ancestors(self, sample_rows):
        amounted = calculate_amounts(sample_rows)
        updated = update_item(amounted.rows, "1.1.1.2", quantity=Decimal("10")).by_id()
        assert updated["1.1.1.2"].amount == Decimal("25.00")
        assert updated["1"].amount == Decimal("1025.00")
        assert updated["2"].amount == Decimal("150.00")

    def test_rewrites_texts(self, sample_rows):
        updated = update_item(sample_rows, "2.1.1.1", unit_price=Decimal("4.5")).by_id()
        pricing = updated["2.1.1.1"].pricing
        assert pricing.unit_price == Decimal("4.50")
        assert pricing.unit_price_text == "4.5"
        assert pricing.quantity_text == "50"

    def test_unknown_item_raises(self, sample_rows):
        with pytest.raises(UnknownItemError):
            update_item(sample_rows, "1.1", quantity=Decimal("1"))

    def test_matches_full_recompute(self, sample_rows):
        direct = update_item(sample_rows, "1.1.1.1", quantity=Decimal("3"))
        rows = [
            replace(row, pricing=replace(row.pricing, quantity=Decimal("3.00"), quantity_text="3"))
            if row.id == "1.1.1.1"
            else row
            for row in sample_rows
        ]
        assert direct == calculate_amounts(rows)
