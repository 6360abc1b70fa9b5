"""
Unit tests for estimate pricing.
"""

import pytest

from blueprint_takeoff.services.material_catalog import TRADE_ORDER
from blueprint_takeoff.services.pricing import category_totals, compute_totals
from blueprint_takeoff.services.takeoff_models import TakeoffItem


def _item(lid, material_id, category, cost, raw_qty, quantity, waste=1.0):
    return TakeoffItem(
        id=material_id, name=material_id, unit="EA", cost=cost, category=category,
        waste=waste, lid=lid, raw_qty=raw_qty, quantity=quantity,
        total_cost=round(quantity * cost, 2), confidence=0.95,
    )


@pytest.fixture
def simple_items():
    return [
        _item(1, "a", "Framing", 10.0, 50, 55, waste=1.10),
        _item(2, "b", "Foundation", 500.0, 1, 1),
    ]


class TestComputeTotals:
    """Tests for the labor/overhead roll-up."""

    def test_multipliers(self, simple_items):
        totals = compute_totals(simple_items, sqft=100)
        assert totals.material_total == pytest.approx(1050.0)
        assert totals.labor_total == pytest.approx(1417.5)
        assert totals.overhead == pytest.approx((1050.0 + 1417.5) * 0.18)
        assert totals.grand_total == pytest.approx(1050.0 * 2.35 * 1.18)
        assert totals.cost_per_sf == pytest.approx(totals.grand_total / 100)

    def test_waste_cost(self, simple_items):
        totals = compute_totals(simple_items, sqft=100)
        assert totals.waste_cost == pytest.approx(50.0)
        assert totals.waste_pct == pytest.approx(50.0 / 1050.0 * 100)

    def test_sqft_floor(self, simple_items):
        assert compute_totals(simple_items, sqft=0).cost_per_sf == pytest.approx(
            compute_totals(simple_items, sqft=1).cost_per_sf
        )

    def test_override_rates(self, simple_items):
        totals = compute_totals(simple_items, sqft=100, labor_multiplier=1.0, overhead_rate=0.0)
        assert totals.grand_total == pytest.approx(2100.0)

    def test_empty(self):
        totals = compute_totals([], sqft=2400)
        assert totals.grand_total == 0
        assert totals.waste_pct == 0.0

    def test_to_dict_rounded(self, simple_items):
        data = compute_totals(simple_items, sqft=100).to_dict()
        assert data["labor_total"] == 1417.5
        assert data["waste_pct"] == 4.8


class TestCategoryTotals:
    """Tests for per-trade sums."""

    def test_canonical_order(self, simple_items):
        totals = category_totals(simple_items)
        assert list(totals) == ["Foundation", "Framing"]
        assert totals["Framing"] == pytest.approx(550.0)

    def test_default_takeoff_covers_all_trades(self, default_takeoff):
        assert list(category_totals(default_takeoff)) == TRADE_ORDER
