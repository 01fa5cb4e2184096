"""Tests for the engine tracer (budget_engines/tracer.py)."""

from decimal import Decimal

from budget_engines.tracer import compute_input_fingerprint, traced_engine

from tests.conftest import make_item


@traced_engine("sample", "2.1", fingerprint_fields=("rows", "factor"))
def _sample_engine(rows, factor=Decimal("1")):
    return len(rows) * factor


class TestComputeInputFingerprint:
    def test_deterministic(self):
        args = {"rows": [make_item("1.1.1.1", "2", "5")]}
        assert compute_input_fingerprint(("rows",), args) == compute_input_fingerprint(("rows",), dict(args))

    def test_decimal_scale_ignored(self):
        assert compute_input_fingerprint(("x",), {"x": Decimal("300")}) == compute_input_fingerprint(
            ("x",), {"x": Decimal("300.00")}
        )

    def test_changes_with_input(self):
        a = compute_input_fingerprint(("rows",), {"rows": [make_item("1.1.1.1", "2", "5")]})
        b = compute_input_fingerprint(("rows",), {"rows": [make_item("1.1.1.1", "3", "5")]})
        assert a != b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(("x",), {"x": None})

    def test_sixteen_hex_chars(self):
        fp = compute_input_fingerprint(("x",), {"x": 1})
        assert len(fp) == 16
        int(fp, 16)


class TestTracedEngine:
    def test_result_passes_through(self):
        assert _sample_engine([1, 2], Decimal("3")) == Decimal("6")

    def test_emits_trace(self, captured_logs):
        _sample_engine([1, 2])
        trace = next(r for r in captured_logs() if r["message"] == "BUDGET_ENGINE_TRACE")
        assert trace["trace_type"] == "BUDGET_ENGINE_TRACE"
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["duration_ms"] >= 0
        assert trace["logger"] == "budget_kernel.engines.tracer"

    def test_positional_and_keyword_fingerprint_alike(self, captured_logs):
        _sample_engine([1], Decimal("2"))
        _sample_engine(rows=[1], factor=Decimal("2"))
        fingerprints = [r["input_fingerprint"] for r in captured_logs() if r["message"] == "BUDGET_ENGINE_TRACE"]
        assert len(fingerprints) == 2
        assert fingerprints[0] == fingerprints[1]

    def test_preserves_metadata(self):
        assert _sample_engine.__name__ == "_sample_engine"
