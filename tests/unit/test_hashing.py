"""Tests for deterministic hashing (budget_kernel/utils/hashing.py)."""

from decimal import Decimal

import pytest

from budget_kernel.domain.budget import Level
from budget_kernel.utils.hashing import canonicalize_json, hash_payload, hash_rows


class TestCanonicalizeJson:
    def test_keys_sorted_without_whitespace(self):
        assert canonicalize_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_decimal_normalized(self):
        assert canonicalize_json({"x": Decimal("1.50")}) == canonicalize_json({"x": Decimal("1.5")})

    def test_enum_uses_value(self):
        assert canonicalize_json([Level.CHAPTER]) == '["chapter"]'

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            canonicalize_json({"x": object()})


class TestHashRows:
    def test_sha256_hex(self):
        digest = hash_payload({"a": 1})
        assert len(digest) == 64
        assert digest == hash_payload({"a": 1})

    def test_deterministic(self):
        rows = [["id", "name"], ["1", "Demolition"]]
        assert hash_rows(rows, {"decimals": 2}) == hash_rows([list(r) for r in rows], {"decimals": 2})

    def test_row_order_matters(self):
        assert hash_rows([["a"], ["b"]]) != hash_rows([["b"], ["a"]])

    def test_options_change_hash(self):
        assert hash_rows("id\n1\n", {"decimals": 2}) != hash_rows("id\n1\n", {"decimals": 4})

    def test_text_and_rows_differ(self):
        assert hash_rows("a") != hash_rows([["a"]])
