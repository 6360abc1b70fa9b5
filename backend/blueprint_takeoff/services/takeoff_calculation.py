"""
Takeoff Calculation Primitives

Formulas:
- Footprint = sqft / stories
- Perimeter = 4 × sqrt(footprint)   (square-footprint approximation)
- Interior wall LF = 0.35 × sqft
- Exterior wall area = perimeter × ceiling height × stories
- Interior wall area = interior wall LF × ceiling height
- Roof area = footprint × pitch factor (hip 1.25, gable 1.18, flat 1.05)
- Roof squares = roof area / 100

Every trade formula goes through TakeoffBuilder.add, which prices the line
from the catalog, applies the waste multiplier and assigns the next lid.
"""

import logging
import math
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from blueprint_takeoff.services.material_catalog import MaterialCatalog
from blueprint_takeoff.services.takeoff_models import (
    BlueprintParams,
    InvalidBlueprintParams,
    RoofType,
    TakeoffItem,
    UnknownLineItem,
)

logger = logging.getLogger(__name__)

CEILING_HEIGHT_FT = 9.0
INTERIOR_WALL_LF_PER_SF = 0.35
SF_PER_ROOF_SQUARE = 100.0

PITCH_FACTORS = {
    RoofType.HIP: 1.25,
    RoofType.GABLE: 1.18,
    RoofType.FLAT: 1.05,
}

CONFIDENCE_JITTER = 0.02


def _ceil(value: float) -> int:
    """Ceiling that ignores float noise (2472.0000000001 -> 2472)."""
    return int(math.ceil(round(value, 9)))


def default_confidence(material_id: str) -> float:
    """Deterministic baseline for call sites that give no confidence."""
    return 0.90 + ((ord(material_id[0]) * 7 + ord(material_id[-1]) * 13) % 80) / 1000


@dataclass(frozen=True)
class BuildingGeometry:
    """Geometric quantities every trade formula is derived from."""
    sqft: float
    stories: int
    footprint: float
    perimeter: float
    interior_wall_lf: float
    ceiling_height: float
    exterior_wall_area: float
    interior_wall_area: float
    roof_area: float
    bathrooms: float
    bedrooms: int
    full_baths: int

    @property
    def total_wall_area(self) -> float:
        return self.exterior_wall_area + self.interior_wall_area

    @property
    def roof_squares(self) -> float:
        return self.roof_area / SF_PER_ROOF_SQUARE

    @classmethod
    def from_params(cls, params: BlueprintParams) -> "BuildingGeometry":
        sqft = float(params.sqft)
        stories = int(params.stories)
        footprint = sqft / stories
        perimeter = math.sqrt(footprint) * 4
        interior_wall_lf = sqft * INTERIOR_WALL_LF_PER_SF

        return cls(
            sqft=sqft,
            stories=stories,
            footprint=footprint,
            perimeter=perimeter,
            interior_wall_lf=interior_wall_lf,
            ceiling_height=CEILING_HEIGHT_FT,
            exterior_wall_area=perimeter * CEILING_HEIGHT_FT * stories,
            interior_wall_area=interior_wall_lf * CEILING_HEIGHT_FT,
            roof_area=footprint * PITCH_FACTORS[params.roof_type],
            bathrooms=float(params.bathrooms),
            bedrooms=int(params.bedrooms),
            full_baths=int(math.floor(params.bathrooms)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sqft": self.sqft,
            "stories": self.stories,
            "footprint": round(self.footprint, 2),
            "perimeter": round(self.perimeter, 2),
            "interior_wall_lf": round(self.interior_wall_lf, 2),
            "ceiling_height": self.ceiling_height,
            "exterior_wall_area": round(self.exterior_wall_area, 2),
            "interior_wall_area": round(self.interior_wall_area, 2),
            "total_wall_area": round(self.total_wall_area, 2),
            "roof_area": round(self.roof_area, 2),
            "roof_squares": round(self.roof_squares, 2),
            "full_baths": self.full_baths,
        }


class EmissionStatus(str, Enum):
    EMITTED = "emitted"
    SKIPPED_ZERO_QUANTITY = "skipped_zero_quantity"
    SKIPPED_UNKNOWN_MATERIAL = "skipped_unknown_material"


@dataclass
class Emission:
    """Outcome of one emission request."""
    status: EmissionStatus
    material_id: str
    requested_qty: float
    item: Optional[TakeoffItem] = None

    @property
    def emitted(self) -> bool:
        return self.status == EmissionStatus.EMITTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "material_id": self.material_id,
            "requested_qty": self.requested_qty,
            "lid": self.item.lid if self.item else None,
        }


@dataclass
class TakeoffBuilder:
    """
    Collects takeoff lines for one run.

    Confidence jitter, when a seed is given, comes from a per-run generator;
    nothing here touches the process-wide random source.
    """
    catalog: MaterialCatalog
    seed: Optional[int] = None
    items: List[TakeoffItem] = field(default_factory=list)
    skipped: List[Emission] = field(default_factory=list)

    def __post_init__(self):
        self._rng = random.Random(self.seed) if self.seed is not None else None

    def _confidence(self, material_id: str, baseline: Optional[float]) -> float:
        confidence = baseline if baseline is not None else default_confidence(material_id)
        if self._rng is not None:
            confidence += self._rng.uniform(-CONFIDENCE_JITTER, CONFIDENCE_JITTER)
        return round(min(1.0, max(0.0, confidence)), 3)

    def add(self, material_id: str, raw_qty: float, confidence: Optional[float] = None) -> Emission:
        material = self.catalog.get(material_id)
        if material is None:
            logger.debug(f"Skipping unknown material '{material_id}' (qty {raw_qty})")
            emission = Emission(EmissionStatus.SKIPPED_UNKNOWN_MATERIAL, material_id, raw_qty)
            self.skipped.append(emission)
            return emission

        if not math.isfinite(raw_qty) or raw_qty <= 0:
            emission = Emission(EmissionStatus.SKIPPED_ZERO_QUANTITY, material_id, raw_qty)
            self.skipped.append(emission)
            return emission

        item = TakeoffItem.from_material(
            material,
            lid=len(self.items) + 1,
            raw_qty=_ceil(raw_qty),
            quantity=_ceil(raw_qty * material.waste),
            confidence=self._confidence(material_id, confidence),
        )
        self.items.append(item)
        return Emission(EmissionStatus.EMITTED, material_id, raw_qty, item=item)


def check_engine_params(params: BlueprintParams) -> float:
    """
    Reject params the engines cannot work with.

    Returns the sqft as a float. Raises InvalidBlueprintParams for
    non-positive or non-finite sqft and for fewer than one story.
    """
    if not isinstance(params, BlueprintParams):
        raise InvalidBlueprintParams(f"Expected BlueprintParams, got {type(params).__name__}")

    try:
        sqft = float(params.sqft)
    except (TypeError, ValueError):
        raise InvalidBlueprintParams(f"sqft must be numeric, got {params.sqft!r}")
    if not math.isfinite(sqft) or sqft <= 0:
        raise InvalidBlueprintParams(f"sqft must be a positive finite number, got {params.sqft!r}")
    try:
        stories = int(params.stories)
    except (TypeError, ValueError):
        raise InvalidBlueprintParams(f"stories must be an integer, got {params.stories!r}")
    if stories < 1:
        raise InvalidBlueprintParams(f"stories must be at least 1, got {params.stories!r}")
    return sqft


def validate_engine_params(params: BlueprintParams, min_sqft: float, max_sqft: float) -> BlueprintParams:
    """Re-check the caller's normalization and clamp a positive sqft into bounds."""
    sqft = check_engine_params(params)
    clamped = max(min_sqft, min(max_sqft, sqft))
    if clamped != params.sqft:
        params = replace(params, sqft=clamped)
    return params


# ==================
# EDITS
# ==================

def _find_index(items: List[TakeoffItem], lid: int) -> int:
    for index, item in enumerate(items):
        if item.lid == lid:
            return index
    raise UnknownLineItem(lid)


def update_item_quantity(items: List[TakeoffItem], lid: int, quantity: int) -> List[TakeoffItem]:
    """Return a new takeoff with one line's purchase quantity replaced."""
    if quantity < 0:
        raise ValueError(f"Quantity must be non-negative, got {quantity}")
    index = _find_index(items, lid)
    updated = list(items)
    updated[index] = items[index].with_quantity(int(quantity))
    return updated


def remove_item(items: List[TakeoffItem], lid: int) -> List[TakeoffItem]:
    """Return a new takeoff without the given line."""
    index = _find_index(items, lid)
    return items[:index] + items[index + 1:]
