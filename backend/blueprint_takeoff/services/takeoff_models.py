"""
Blueprint Takeoff - Core Data Models

This module defines the data structures shared by the quantity derivation
engine and the audit engine.

Inputs (BlueprintParams):
- Supplied once per run, immutable for the run
- Normalized by the caller before reaching the engine

Takeoff lines (TakeoffItem):
- One per material actually quantified
- `lid` is a run-scoped handle used for edits and audit linkage

Audit output (AuditResult):
- Always regenerated in full, never patched
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.material_catalog import Material


class TakeoffError(Exception):
    """Base class for takeoff engine errors."""


class InvalidBlueprintParams(TakeoffError, ValueError):
    """Building parameters are malformed or outside what the engine accepts."""


class UnknownLineItem(TakeoffError, KeyError):
    """An edit addressed a lid that is not part of the takeoff."""


class RoofType(str, Enum):
    GABLE = "gable"
    HIP = "hip"
    FLAT = "flat"


class FoundationType(str, Enum):
    SLAB = "slab"
    CRAWL = "crawl"
    BASEMENT = "basement"


class ConfidenceLevel(str, Enum):
    """Confidence level categories (UI colour bands)."""
    HIGH = "high"      # >= settings.confidence_high
    MEDIUM = "medium"  # confidence_warn .. confidence_high
    LOW = "low"        # < settings.confidence_warn, flagged by the audit


class FlagLevel(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    PASS = "pass"


class LayerStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves away from zero (2.5 -> 3)."""
    if value < 0:
        return -round_half_up(-value)
    return int(math.floor(value + 0.5))


def _get_confidence_level(confidence: float) -> ConfidenceLevel:
    """Map confidence score to level using the configured bands."""
    if confidence >= settings.confidence_high:
        return ConfidenceLevel.HIGH
    elif confidence >= settings.confidence_warn:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


# camelCase names used by the web client and the vision collaborator
WIRE_ALIASES = {
    "garageSize": "garage_size",
    "roofType": "roof_type",
    "foundationType": "foundation_type",
    "projectName": "project_name",
    "zipCode": "zip_code",
}


@dataclass(frozen=True)
class BlueprintParams:
    """
    Building parameters for one takeoff run.

    The engine assumes `sqft` is finite and positive and `stories >= 1`;
    use `parameter_intake.normalize_params` to get there from raw input.
    """
    sqft: float = 2400.0
    stories: int = 1
    bedrooms: int = 3
    bathrooms: float = 2.0
    garage_size: int = 2
    roof_type: RoofType = RoofType.GABLE
    foundation_type: FoundationType = FoundationType.SLAB
    project_name: str = ""
    zip_code: str = ""

    def __post_init__(self):
        try:
            object.__setattr__(self, "roof_type", RoofType(self.roof_type))
            object.__setattr__(self, "foundation_type", FoundationType(self.foundation_type))
        except ValueError as e:
            raise InvalidBlueprintParams(str(e)) from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlueprintParams":
        """Build params from snake_case or camelCase keys; unknown keys are ignored."""
        known = {f for f in cls.__dataclass_fields__}
        kwargs = {}
        for key, value in data.items():
            name = WIRE_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sqft": self.sqft,
            "stories": self.stories,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "garage_size": self.garage_size,
            "roof_type": self.roof_type.value,
            "foundation_type": self.foundation_type.value,
            "project_name": self.project_name,
            "zip_code": self.zip_code,
        }


@dataclass(frozen=True)
class TakeoffItem:
    """One quantified, priced material line."""
    id: str
    name: str
    unit: str
    cost: float
    category: str
    waste: float
    lid: int
    raw_qty: int          # net quantity, rounded up
    quantity: int         # purchased quantity = ceil(net × waste)
    total_cost: float
    confidence: float

    @classmethod
    def from_material(
        cls,
        material: Material,
        lid: int,
        raw_qty: int,
        quantity: int,
        confidence: float,
    ) -> "TakeoffItem":
        return cls(
            id=material.id,
            name=material.name,
            unit=material.unit,
            cost=material.cost,
            category=material.category,
            waste=material.waste,
            lid=lid,
            raw_qty=raw_qty,
            quantity=quantity,
            total_cost=round(quantity * material.cost, 2),
            confidence=confidence,
        )

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return _get_confidence_level(self.confidence)

    @property
    def waste_cost(self) -> float:
        """Dollars attributable to the waste allowance on this line."""
        return (self.quantity - self.raw_qty) * self.cost

    def with_quantity(self, quantity: int) -> "TakeoffItem":
        """Copy of this line with an edited purchase quantity and re-priced total."""
        return replace(self, quantity=quantity, total_cost=round(quantity * self.cost, 2))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TakeoffItem":
        return cls(
            id=data["id"],
            name=data["name"],
            unit=data["unit"],
            cost=float(data["cost"]),
            category=data.get("category", data.get("cat")),
            waste=float(data["waste"]),
            lid=int(data["lid"]),
            raw_qty=int(data.get("raw_qty", data.get("rawQty"))),
            quantity=int(data["quantity"]),
            total_cost=float(data.get("total_cost", data.get("totalCost"))),
            confidence=float(data["confidence"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lid": self.lid,
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "cost": self.cost,
            "category": self.category,
            "waste": self.waste,
            "raw_qty": self.raw_qty,
            "quantity": self.quantity,
            "total_cost": self.total_cost,
            "confidence": round(self.confidence, 3),
            "confidence_level": self.confidence_level.value,
        }


@dataclass
class AuditFlag:
    """A single audit finding."""
    layer: int
    level: FlagLevel
    message: str
    lid: Optional[int] = None   # links the finding to a takeoff line

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layer": self.layer,
            "level": self.level.value,
            "message": self.message,
            "lid": self.lid,
        }


@dataclass
class AuditLayer:
    """Summary of one validation layer."""
    name: str
    status: LayerStatus
    detail: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "detail": self.detail,
        }


@dataclass
class AuditResult:
    """
    Scored, graded report over a takeoff.

    `item_flags` maps lid -> "error" | "warn" for rows to highlight; absent
    lids carry no item-level flag.
    """
    score: int
    grade: str
    layers: List[AuditLayer] = field(default_factory=list)
    flags: List[AuditFlag] = field(default_factory=list)
    item_flags: Dict[int, str] = field(default_factory=dict)
    totals: Optional[Any] = None  # pricing.EstimateTotals

    @property
    def errors(self) -> int:
        return sum(1 for f in self.flags if f.level == FlagLevel.ERROR)

    @property
    def warnings(self) -> int:
        return sum(1 for f in self.flags if f.level == FlagLevel.WARN)

    def flags_for_layer(self, layer: int) -> List[AuditFlag]:
        return [f for f in self.flags if f.layer == layer]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "grade": self.grade,
            "errors": self.errors,
            "warnings": self.warnings,
            "layers": [layer.to_dict() for layer in self.layers],
            "flags": [f.to_dict() for f in self.flags],
            "item_flags": dict(self.item_flags),
            "totals": self.totals.to_dict() if self.totals else None,
        }
