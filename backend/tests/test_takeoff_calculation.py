"""
Unit tests for the quantity derivation engine.

Tests cover:
- Building geometry
- The emission primitive (pricing, waste, lids, skips)
- Per-trade formulas and conditional lines
- Determinism and seeded confidence jitter
- Engine-side parameter validation
- Line edits
"""

import math

import pytest

from blueprint_takeoff.services.material_catalog import DEFAULT_CATALOG, TRADE_ORDER
from blueprint_takeoff.services.takeoff_calculation import (
    BuildingGeometry,
    EmissionStatus,
    TakeoffBuilder,
    default_confidence,
    remove_item,
    update_item_quantity,
)
from blueprint_takeoff.services.takeoff_engine import derive_takeoff, derive_takeoff_report
from blueprint_takeoff.services.takeoff_models import (
    BlueprintParams,
    ConfidenceLevel,
    FoundationType,
    InvalidBlueprintParams,
    RoofType,
    UnknownLineItem,
    round_half_up,
)
from blueprint_takeoff.services.takeoffs.finishes import flooring_mix

from conftest import find_item


# ==================
# GEOMETRY
# ==================

class TestBuildingGeometry:
    """Tests for geometry derived from parameters."""

    def test_single_story_gable(self, default_params):
        geo = BuildingGeometry.from_params(default_params)
        assert geo.footprint == 2400
        assert geo.perimeter == pytest.approx(195.96, abs=0.01)
        assert geo.interior_wall_lf == pytest.approx(840)
        assert geo.exterior_wall_area == pytest.approx(195.96 * 9, abs=0.1)
        assert geo.roof_area == pytest.approx(2832)
        assert geo.roof_squares == pytest.approx(28.32)
        assert geo.full_baths == 2

    def test_two_story_hip(self):
        geo = BuildingGeometry.from_params(BlueprintParams(sqft=3000, stories=2, roof_type="hip", bathrooms=2.5))
        assert geo.footprint == 1500
        assert geo.roof_area == pytest.approx(1875)
        assert geo.exterior_wall_area == pytest.approx(geo.perimeter * 9 * 2)
        assert geo.full_baths == 2

    def test_to_dict_rounded(self, default_params):
        data = BuildingGeometry.from_params(default_params).to_dict()
        assert data["perimeter"] == 195.96
        assert data["roof_squares"] == 28.32


# ==================
# EMISSION PRIMITIVE
# ==================

class TestTakeoffBuilder:
    """Tests for TakeoffBuilder.add."""

    def test_emits_priced_line(self):
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG)
        emission = builder.add("rf01", 28.32, 0.94)
        assert emission.status == EmissionStatus.EMITTED
        item = emission.item
        assert item.lid == 1
        assert item.raw_qty == 29
        assert item.quantity == 32
        assert item.total_cost == 3680.0
        assert item.confidence == 0.94
        assert item.category == "Roofing"

    def test_lids_sequential(self):
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG)
        builder.add("el09", 1)
        builder.add("dw11", 1)
        builder.add("pl12", 1)
        assert [i.lid for i in builder.items] == [1, 2]

    def test_unknown_material_skipped(self):
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG)
        emission = builder.add("dw11", 1, 0.98)
        assert emission.status == EmissionStatus.SKIPPED_UNKNOWN_MATERIAL
        assert not emission.emitted
        assert builder.items == []
        assert builder.skipped == [emission]

    @pytest.mark.parametrize("qty", [0, -3, float("nan")])
    def test_non_positive_quantity_skipped(self, qty):
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG)
        emission = builder.add("fn06", qty)
        assert emission.status == EmissionStatus.SKIPPED_ZERO_QUANTITY
        assert builder.items == []

    def test_float_noise_does_not_round_up(self):
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG)
        item = builder.add("f02", 2400).item
        assert item.quantity == 2472
        assert item.total_cost == 16068.0

    def test_default_confidence_deterministic(self):
        value = default_confidence("hv04")
        assert value == default_confidence("hv04")
        assert 0.90 <= value < 0.98
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG)
        assert builder.add("hv04", 10).item.confidence == round(value, 3)

    def test_seeded_jitter_bounded(self):
        builder = TakeoffBuilder(catalog=DEFAULT_CATALOG, seed=42)
        item = builder.add("hv01", 1, 0.98).item
        assert abs(item.confidence - 0.98) <= 0.02 + 1e-9
        assert 0.0 <= item.confidence <= 1.0


# ==================
# FULL TAKEOFF
# ==================

class TestDeriveTakeoff:
    """Tests for the assembled takeoff."""

    def test_default_house(self, default_takeoff):
        assert len(default_takeoff) == 73
        assert [i.lid for i in default_takeoff] == list(range(1, 74))

        shingles = find_item(default_takeoff, "rf01")
        assert shingles.raw_qty == 29
        assert shingles.quantity == 32

        assert find_item(default_takeoff, "pl06").quantity == 2
        assert find_item(default_takeoff, "dw10") is not None
        assert find_item(default_takeoff, "r09") is None

    def test_trades_in_canonical_order(self, default_takeoff):
        seen = []
        for item in default_takeoff:
            if not seen or seen[-1] != item.category:
                seen.append(item.category)
        assert seen == TRADE_ORDER

    def test_no_degenerate_lines(self, default_takeoff):
        for item in default_takeoff:
            assert item.quantity > 0
            assert item.raw_qty > 0
            assert item.quantity >= item.raw_qty
            assert item.total_cost == round(item.quantity * item.cost, 2)
            assert item.id in DEFAULT_CATALOG

    def test_deterministic(self, default_params):
        assert derive_takeoff(default_params) == derive_takeoff(default_params)
        assert derive_takeoff(default_params, seed=7) == derive_takeoff(default_params, seed=7)

    def test_seed_changes_only_confidence(self, default_params):
        plain = derive_takeoff(default_params)
        seeded = derive_takeoff(default_params, seed=7)
        assert [(i.id, i.quantity) for i in plain] == [(i.id, i.quantity) for i in seeded]
        for a, b in zip(plain, seeded):
            assert abs(a.confidence - b.confidence) <= 0.02 + 1e-9

    def test_crawl_adds_floor_joists(self):
        items = derive_takeoff(BlueprintParams(foundation_type=FoundationType.CRAWL))
        joists = find_item(items, "r09")
        hangers = find_item(items, "r11")
        assert joists.raw_qty == hangers.raw_qty == math.ceil(2400 * 0.065)
        assert find_item(items, "f05") is None

    def test_basement_walls(self):
        items = derive_takeoff(BlueprintParams(foundation_type="basement"))
        barrier = find_item(items, "f04")
        assert barrier.raw_qty == math.ceil(2400 + 4 * math.sqrt(2400) * 8)

    def test_single_car_garage_requests_missing_door(self):
        report = derive_takeoff_report(BlueprintParams(garage_size=1))
        assert report.unknown_materials == ["dw11"]
        assert find_item(report.items, "dw10") is None

    def test_no_garage(self):
        report = derive_takeoff_report(BlueprintParams(garage_size=0))
        assert report.unknown_materials == []
        assert find_item(report.items, "dw10") is None

    def test_half_baths_round_half_up(self):
        items = derive_takeoff(BlueprintParams(bathrooms=2.5))
        assert find_item(items, "pl06").quantity == 3
        assert find_item(items, "hv10").quantity == 3
        assert find_item(items, "pl08").quantity == 2
        assert find_item(items, "el05").quantity == 8

    def test_smoke_detectors(self):
        items = derive_takeoff(BlueprintParams(bedrooms=4, stories=2, sqft=3000))
        assert find_item(items, "el12").quantity == 7
        assert find_item(items, "hv09").quantity == 2

    def test_flat_roof_is_smallest(self):
        def roof_squares(roof_type):
            return find_item(derive_takeoff(BlueprintParams(roof_type=roof_type)), "rf01").raw_qty
        assert roof_squares(RoofType.FLAT) < roof_squares(RoofType.GABLE) < roof_squares(RoofType.HIP)

    def test_small_house_drops_lvp(self):
        items = derive_takeoff(BlueprintParams(sqft=800, bedrooms=3, garage_size=2))
        assert find_item(items, "fn06") is None
        assert flooring_mix(800, 3, 2.0, 2)["lvp"] == 0

    def test_oversized_sqft_clamped(self):
        report = derive_takeoff_report(BlueprintParams(sqft=80000))
        assert report.params.sqft == 50000
        assert report.geometry.sqft == 50000

    def test_report_to_dict(self, default_params):
        data = derive_takeoff_report(default_params).to_dict()
        assert data["item_count"] == 73
        assert data["geometry"]["roof_area"] == 2832.0
        assert data["items"][0]["confidence_level"] in {c.value for c in ConfidenceLevel}


class TestEngineValidation:
    """The engine re-checks what the caller should have normalized."""

    @pytest.mark.parametrize("sqft", [-5, 0, float("nan"), float("inf")])
    def test_rejects_bad_sqft(self, sqft):
        with pytest.raises(InvalidBlueprintParams):
            derive_takeoff(BlueprintParams(sqft=sqft))

    def test_rejects_zero_stories(self):
        with pytest.raises(InvalidBlueprintParams):
            derive_takeoff(BlueprintParams(stories=0))

    def test_rejects_non_params(self):
        with pytest.raises(InvalidBlueprintParams):
            derive_takeoff({"sqft": 2400})


# ==================
# EDITS
# ==================

class TestEdits:
    """Tests for quantity edits and removals."""

    def test_update_quantity(self, default_takeoff):
        toilet = find_item(default_takeoff, "pl06")
        edited = update_item_quantity(default_takeoff, toilet.lid, 3)
        new_toilet = find_item(edited, "pl06")
        assert new_toilet.quantity == 3
        assert new_toilet.total_cost == 675.0
        assert new_toilet.raw_qty == toilet.raw_qty
        assert find_item(default_takeoff, "pl06").quantity == 2

    def test_update_to_zero_keeps_line(self, default_takeoff):
        toilet = find_item(default_takeoff, "pl06")
        edited = update_item_quantity(default_takeoff, toilet.lid, 0)
        assert len(edited) == len(default_takeoff)
        assert find_item(edited, "pl06").total_cost == 0

    def test_negative_quantity_rejected(self, default_takeoff):
        with pytest.raises(ValueError):
            update_item_quantity(default_takeoff, 1, -1)

    def test_unknown_lid(self, default_takeoff):
        with pytest.raises(UnknownLineItem):
            update_item_quantity(default_takeoff, 999, 1)
        with pytest.raises(UnknownLineItem):
            remove_item(default_takeoff, 999)

    def test_remove_keeps_other_lids(self, default_takeoff):
        edited = remove_item(default_takeoff, 5)
        assert len(edited) == 72
        assert 5 not in [i.lid for i in edited]
        assert [i.lid for i in edited][:5] == [1, 2, 3, 4, 6]


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(1.5) == 2
    assert round_half_up(2.4) == 2
    assert round_half_up(-2.5) == -3
