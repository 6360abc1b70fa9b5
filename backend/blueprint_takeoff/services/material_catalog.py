"""
Material Catalog

Static, read-only registry of priced materials grouped into trade sections.
Both the quantity derivation engine and the audit engine receive a catalog
instance, so regional or versioned price books can be substituted freely.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Any


class TradeCategory(str, Enum):
    """The 11 residential trades, in canonical report order."""
    FOUNDATION = "Foundation"
    FRAMING = "Framing"
    EXTERIOR = "Exterior"
    ROOFING = "Roofing"
    DRYWALL = "Drywall"
    INSULATION = "Insulation"
    DOORS_WINDOWS = "Doors/Windows"
    ELECTRICAL = "Electrical"
    PLUMBING = "Plumbing"
    HVAC = "HVAC"
    FINISHES = "Finishes"


TRADE_ORDER: List[str] = [c.value for c in TradeCategory]


@dataclass(frozen=True)
class Material:
    """
    Catalog entry.

    `waste` is the purchase multiplier applied to the net quantity
    (1.10 = 10% waste).
    """
    id: str
    name: str
    unit: str         # SF, LF, EA, SQ, GAL, BX, SH, RL, SET, ...
    cost: float
    category: str
    waste: float = 1.0

    def __post_init__(self):
        if self.cost < 0:
            raise ValueError(f"Material {self.id} has negative cost {self.cost}")
        if self.waste < 1.0:
            raise ValueError(f"Material {self.id} has waste factor {self.waste} below 1.0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "cost": self.cost,
            "category": self.category,
            "waste": self.waste,
        }


class MaterialCatalog:
    """Immutable id → Material lookup built from named sections."""

    def __init__(self, sections: Dict[str, List[Material]], version: str = "default"):
        self.version = version
        self._sections: Dict[str, tuple] = {}
        self._by_id: Dict[str, Material] = {}

        for section, materials in sections.items():
            self._sections[section] = tuple(materials)
            for material in materials:
                if material.id in self._by_id:
                    raise ValueError(f"Duplicate material id '{material.id}' in section '{section}'")
                self._by_id[material.id] = material

    def get(self, material_id: str) -> Optional[Material]:
        return self._by_id.get(material_id)

    def __contains__(self, material_id: str) -> bool:
        return material_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Material]:
        for materials in self._sections.values():
            yield from materials

    def sections(self) -> Dict[str, List[Material]]:
        return {name: list(materials) for name, materials in self._sections.items()}

    def categories(self) -> List[str]:
        """Categories present in the catalog, in canonical trade order."""
        present = {m.category for m in self}
        ordered = [c for c in TRADE_ORDER if c in present]
        return ordered + sorted(present - set(ordered))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "material_count": len(self),
            "sections": {
                name: [m.to_dict() for m in materials]
                for name, materials in self._sections.items()
            },
        }


def _m(id: str, name: str, unit: str, cost: float, category: TradeCategory, waste: float) -> Material:
    return Material(id=id, name=name, unit=unit, cost=cost, category=category.value, waste=waste)


F, R, E, RF = TradeCategory.FOUNDATION, TradeCategory.FRAMING, TradeCategory.EXTERIOR, TradeCategory.ROOFING
D, N, DW = TradeCategory.DRYWALL, TradeCategory.INSULATION, TradeCategory.DOORS_WINDOWS
EL, PL, HV, FN = TradeCategory.ELECTRICAL, TradeCategory.PLUMBING, TradeCategory.HVAC, TradeCategory.FINISHES

DEFAULT_SECTIONS: Dict[str, List[Material]] = {
    "foundation": [
        _m("f02", 'Concrete Slab (4")', "SF", 6.50, F, 1.03),
        _m("f03", "#4 Rebar", "LF", 1.15, F, 1.10),
        _m("f04", "Vapor Barrier 6mil", "SF", 0.12, F, 1.08),
        _m("f05", 'Gravel Base 4"', "SF", 1.25, F, 1.05),
        _m("f06", "Anchor Bolts", "EA", 2.85, F, 1.00),
        _m("f07", "Form Boards", "LF", 1.80, F, 1.08),
        _m("f08", "Wire Mesh 6x6", "SF", 0.32, F, 1.10),
    ],
    "framing": [
        _m("r01", "2x4 Studs Pre-cut", "EA", 4.28, R, 1.08),
        _m("r02", "2x6 Studs Pre-cut", "EA", 6.85, R, 1.08),
        _m("r03", "2x4 Plates 16'", "LF", 0.55, R, 1.05),
        _m("r04", "2x6 Plates 16'", "LF", 0.82, R, 1.05),
        _m("r05", "2x10 Headers", "LF", 2.10, R, 1.10),
        _m("r06", "2x12 Ridge", "LF", 2.95, R, 1.10),
        _m("r07", 'OSB Sheathing 7/16"', "SF", 0.85, R, 1.08),
        _m("r08", "Roof Trusses", "EA", 165.00, R, 1.00),
        _m("r09", "2x10 Floor Joists", "EA", 18.50, R, 1.05),
        _m("r10", "LVL Beam", "LF", 12.50, R, 1.05),
        _m("r11", "Joist Hangers", "EA", 2.75, R, 1.00),
        _m("r13", "16d Nails (50lb box)", "BX", 65.00, R, 1.00),
    ],
    "exterior": [
        _m("e01", "Vinyl Siding D4.5", "SF", 3.75, E, 1.10),
        _m("e02", "House Wrap (Tyvek)", "SF", 0.18, E, 1.08),
        _m("e03", "Vented Soffit", "LF", 5.20, E, 1.05),
        _m("e04", "Aluminum Fascia", "LF", 3.80, E, 1.05),
    ],
    "roofing": [
        _m("rf01", "Arch. Shingles 30yr", "SQ", 115.00, RF, 1.12),
        _m("rf02", "Synthetic Underlayment", "SQ", 28.00, RF, 1.10),
        _m("rf03", "Drip Edge", "LF", 1.45, RF, 1.05),
        _m("rf04", "Ridge Vent", "LF", 3.50, RF, 1.05),
        _m("rf05", "Ice & Water Shield", "SF", 0.95, RF, 1.05),
    ],
    "drywall": [
        _m("i01", '1/2" Drywall 4x12', "SH", 16.50, D, 1.10),
        _m("i02", '5/8" Drywall Ceiling', "SH", 19.50, D, 1.10),
        _m("i03", "Joint Compound 5gal", "EA", 14.50, D, 1.00),
        _m("i04", "Paper Tape", "RL", 5.75, D, 1.00),
        _m("i05", "Drywall Screws 25lb", "BX", 42.00, D, 1.00),
    ],
    "insulation": [
        _m("n01", "R-38 Batt (attic)", "SF", 1.15, N, 1.05),
        _m("n03", "R-13 Batt (walls)", "SF", 0.55, N, 1.05),
        _m("n04", "R-21 Batt (ext. walls)", "SF", 0.78, N, 1.05),
    ],
    "doors_windows": [
        _m("dw01", 'Ext Steel Door 36"', "EA", 385.00, DW, 1.00),
        _m("dw04", "Int Door Prehung", "EA", 145.00, DW, 1.00),
        _m("dw05", "Bi-fold Closet Door", "EA", 95.00, DW, 1.00),
        _m("dw06", "Double-Hung Window", "EA", 285.00, DW, 1.00),
        _m("dw10", "Garage Door 16x7", "EA", 1250.00, DW, 1.00),
    ],
    "electrical": [
        _m("el01", "14/2 NM-B Wire", "LF", 0.65, EL, 1.15),
        _m("el02", "12/2 NM-B Wire", "LF", 0.85, EL, 1.15),
        _m("el04", "Duplex Outlet", "EA", 3.50, EL, 1.00),
        _m("el05", "GFCI Outlet", "EA", 18.50, EL, 1.00),
        _m("el06", "Switch", "EA", 3.25, EL, 1.00),
        _m("el09", "200A Main Panel", "EA", 485.00, EL, 1.00),
        _m("el10", "20A Breaker", "EA", 8.50, EL, 1.00),
        _m("el11", 'Recessed Light 6"', "EA", 28.00, EL, 1.00),
        _m("el12", "Smoke/CO Detector", "EA", 35.00, EL, 1.00),
    ],
    "plumbing": [
        _m("pl01", '1/2" PEX Tubing', "LF", 0.85, PL, 1.12),
        _m("pl02", '3/4" PEX Main', "LF", 1.25, PL, 1.12),
        _m("pl03", '3" PVC DWV', "LF", 3.45, PL, 1.10),
        _m("pl04", '4" PVC Main Drain', "LF", 4.80, PL, 1.10),
        _m("pl06", "Toilet", "EA", 225.00, PL, 1.00),
        _m("pl07", "Vanity w/ Sink", "EA", 385.00, PL, 1.00),
        _m("pl08", "Bathtub/Shower", "EA", 650.00, PL, 1.00),
        _m("pl10", "Kitchen Sink SS", "EA", 285.00, PL, 1.00),
        _m("pl12", "Water Heater 50gal", "EA", 850.00, PL, 1.00),
    ],
    "hvac": [
        _m("hv01", "Gas Furnace 80k BTU", "EA", 2200.00, HV, 1.00),
        _m("hv02", "A/C Condenser 3-ton", "EA", 2800.00, HV, 1.00),
        _m("hv04", '6" Flex Duct', "LF", 2.15, HV, 1.10),
        _m("hv06", "Trunk Line", "LF", 8.50, HV, 1.08),
        _m("hv07", "Supply Register", "EA", 12.50, HV, 1.00),
        _m("hv08", "Return Grille", "EA", 22.00, HV, 1.00),
        _m("hv09", "Thermostat", "EA", 85.00, HV, 1.00),
        _m("hv10", "Bath Exhaust Fan", "EA", 65.00, HV, 1.00),
        _m("hv11", "Range Hood", "EA", 185.00, HV, 1.00),
    ],
    "finishes": [
        _m("fn01", "Interior Paint (gal)", "GAL", 38.00, FN, 1.00),
        _m("fn02", "Primer (gal)", "GAL", 28.00, FN, 1.00),
        _m("fn03", "Baseboard Trim", "LF", 1.85, FN, 1.08),
        _m("fn06", "LVP Flooring", "SF", 3.25, FN, 1.10),
        _m("fn07", "Carpet w/ Pad", "SF", 4.50, FN, 1.08),
        _m("fn08", "Ceramic Tile", "SF", 5.80, FN, 1.12),
        _m("fn10", "Kitchen Cabinets", "SET", 3200.00, FN, 1.00),
        _m("fn11", "Countertop", "LF", 45.00, FN, 1.05),
    ],
}

DEFAULT_CATALOG = MaterialCatalog(DEFAULT_SECTIONS, version="2025.1")


def get_material(material_id: str, catalog: Optional[MaterialCatalog] = None) -> Optional[Material]:
    """Look up a material by id, in the default catalog unless one is given."""
    return (catalog or DEFAULT_CATALOG).get(material_id)
