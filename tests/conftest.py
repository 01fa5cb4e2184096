"""
Pytest fixtures for the budget engine test suite.

Provides:
- Structured logging configuration and log capture
- Sample budget sources (English and Spanish templates)
- Row builders for engine tests that bypass ingestion
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from budget_kernel.domain.budget import ItemPricing, Level, LineRow
from budget_kernel.domain.values import ZERO, NodeId
from budget_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture budget_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            BudgetPipeline().run(text)
            logs = captured_logs()
            assert any(r["message"] == "budget_pipeline_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("budget_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end pipeline scenario over a full source"
    )


# =============================================================================
# Sample sources
# =============================================================================


SPANISH_BUDGET = (
    "nivel,id,nombre,descripcion,ud,%iva,cantidad,pvp\n"
    "Capítulo,1,Demolición,,,,,\n"
    "Subcapítulo,1.1,Tabiques,,,,,\n"
    "Apartado,1.1.1,Ladrillo,,,,,\n"
    'Partida,1.1.1.1,Tabique interior,Derribo manual,m2,21,2,"150,00"\n'
)

ENGLISH_BUDGET = (
    "level,id,name,description,unit,tax_percentage,quantity,unit_price\n"
    "chapter,1,Structure,,,,,\n"
    "subchapter,1.1,Foundations,,,,,\n"
    "section,1.1.1,Footings,,,,,\n"
    "item,1.1.1.1,Concrete,Poured footing,m3,21,10,100\n"
    "item,1.1.1.2,Rebar,Steel bars,kg,10,100,2.5\n"
    "chapter,2,Finishes,,,,,\n"
    "subchapter,2.1,Paint,,,,,\n"
    "section,2.1.1,Walls,,,,,\n"
    "item,2.1.1.1,Primer,,m2,21,50,3\n"
)


@pytest.fixture
def spanish_budget() -> str:
    return SPANISH_BUDGET


@pytest.fixture
def english_budget() -> str:
    return ENGLISH_BUDGET


# =============================================================================
# Row builders
# =============================================================================


def make_container(node_id: str, name: str = "", amount: Decimal = ZERO, line: int | None = None) -> LineRow:
    """Container row whose level follows the id depth."""
    nid = NodeId.parse(node_id)
    return LineRow(
        node_id=nid,
        level=Level.for_depth(nid.depth),
        name=name or f"Container {node_id}",
        amount=amount,
        line=line,
    )


def make_item(
    node_id: str,
    quantity: str = "1",
    unit_price: str = "0",
    tax: str = "21",
    parsed: bool = True,
    amount: Decimal = ZERO,
    line: int | None = None,
) -> LineRow:
    """Item row; ``parsed=True`` fills the Decimal values from the texts."""
    pricing = ItemPricing(
        unit="ud",
        quantity_text=quantity,
        unit_price_text=unit_price,
        tax_percentage_text=tax,
        quantity=Decimal(quantity) if parsed else None,
        unit_price=Decimal(unit_price) if parsed else None,
        tax_percentage=Decimal(tax) if parsed else None,
        parsed=parsed,
    )
    return LineRow(
        node_id=NodeId.parse(node_id),
        level=Level.ITEM,
        name=f"Item {node_id}",
        pricing=pricing,
        amount=amount,
        line=line,
    )


@pytest.fixture
def sample_rows() -> list[LineRow]:
    """Two chapters, three items, parsed but not yet amounted."""
    return [
        make_container("1"),
        make_container("1.1"),
        make_container("1.1.1"),
        make_item("1.1.1.1", "10", "100", "21"),
        make_item("1.1.1.2", "100", "2.5", "10"),
        make_container("2"),
        make_container("2.1"),
        make_container("2.1.1"),
        make_item("2.1.1.1", "50", "3", "21"),
    ]
