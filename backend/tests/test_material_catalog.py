"""
Unit tests for the material catalog.

Tests cover:
- Default catalog shape and ordering
- Lookup behaviour
- Material validation
"""

import pytest

from blueprint_takeoff.services.material_catalog import (
    DEFAULT_CATALOG,
    Material,
    MaterialCatalog,
    TRADE_ORDER,
    TradeCategory,
    get_material,
)


class TestDefaultCatalog:
    """Tests for the shipped price book."""

    def test_material_count(self):
        assert len(DEFAULT_CATALOG) == 76

    def test_every_trade_present_in_order(self):
        assert DEFAULT_CATALOG.categories() == TRADE_ORDER
        assert len(TRADE_ORDER) == 11

    def test_waste_and_cost_sane(self):
        for material in DEFAULT_CATALOG:
            assert material.cost >= 0
            assert material.waste >= 1.0
            assert material.category in TRADE_ORDER

    def test_lookup(self):
        shingles = get_material("rf01")
        assert shingles.name == "Arch. Shingles 30yr"
        assert shingles.unit == "SQ"
        assert shingles.waste == 1.12
        assert "rf01" in DEFAULT_CATALOG

    def test_unknown_id(self):
        assert get_material("dw11") is None
        assert "zz99" not in DEFAULT_CATALOG

    def test_to_dict(self):
        data = DEFAULT_CATALOG.to_dict()
        assert data["version"] == "2025.1"
        assert data["material_count"] == 76
        assert data["sections"]["roofing"][0]["id"] == "rf01"


class TestMaterialCatalog:
    """Tests for building alternate catalogs."""

    def test_custom_catalog(self):
        catalog = MaterialCatalog({
            "misc": [Material("x01", "Widget", "EA", 10.0, TradeCategory.FINISHES.value)],
        }, version="test")
        assert len(catalog) == 1
        assert catalog.get("x01").waste == 1.0
        assert get_material("x01", catalog).name == "Widget"

    def test_duplicate_id_rejected(self):
        widget = Material("x01", "Widget", "EA", 10.0, "Finishes")
        with pytest.raises(ValueError, match="Duplicate"):
            MaterialCatalog({"a": [widget], "b": [widget]})

    def test_negative_cost_rejected(self):
        with pytest.raises(ValueError):
            Material("x01", "Widget", "EA", -1.0, "Finishes")

    def test_waste_below_one_rejected(self):
        with pytest.raises(ValueError):
            Material("x01", "Widget", "EA", 1.0, "Finishes", waste=0.9)

    def test_unknown_categories_sorted_last(self):
        catalog = MaterialCatalog({
            "misc": [
                Material("x01", "Widget", "EA", 1.0, "Zeta"),
                Material("x02", "Gadget", "EA", 1.0, "Alpha"),
                Material("x03", "Stud", "EA", 1.0, "Framing"),
            ],
        })
        assert catalog.categories() == ["Framing", "Alpha", "Zeta"]
