"""
Quantity Derivation Engine

Turns one set of BlueprintParams into an ordered list of priced takeoff
lines. Pure function of (params, catalog, seed): no I/O, no global state.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.material_catalog import DEFAULT_CATALOG, MaterialCatalog
from blueprint_takeoff.services.takeoff_calculation import (
    BuildingGeometry,
    Emission,
    EmissionStatus,
    TakeoffBuilder,
    validate_engine_params,
)
from blueprint_takeoff.services.takeoff_models import BlueprintParams, TakeoffItem
from blueprint_takeoff.services.takeoffs import TRADE_TAKEOFFS

logger = logging.getLogger(__name__)


@dataclass
class TakeoffReport:
    """Items of one run plus what the formulas asked for but did not get."""
    params: BlueprintParams
    geometry: BuildingGeometry
    items: List[TakeoffItem] = field(default_factory=list)
    skipped: List[Emission] = field(default_factory=list)

    @property
    def unknown_materials(self) -> List[str]:
        return [e.material_id for e in self.skipped if e.status == EmissionStatus.SKIPPED_UNKNOWN_MATERIAL]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "params": self.params.to_dict(),
            "geometry": self.geometry.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "skipped": [e.to_dict() for e in self.skipped],
            "item_count": len(self.items),
        }


def derive_takeoff_report(
    params: BlueprintParams,
    catalog: MaterialCatalog = DEFAULT_CATALOG,
    seed: Optional[int] = None,
) -> TakeoffReport:
    """
    Run every trade formula in fixed trade order.

    Args:
        params: Normalized building parameters
        catalog: Price book to quantify against
        seed: Optional seed for reproducible confidence jitter

    Returns:
        TakeoffReport with lids 1..n in emission order

    Raises:
        InvalidBlueprintParams: sqft non-positive/non-finite or stories < 1
    """
    params = validate_engine_params(params, settings.min_sqft, settings.max_sqft)
    geometry = BuildingGeometry.from_params(params)
    builder = TakeoffBuilder(catalog=catalog, seed=seed)

    for trade, takeoff in TRADE_TAKEOFFS:
        before = len(builder.items)
        takeoff(builder, geometry, params)
        logger.debug(f"{trade}: {len(builder.items) - before} lines")

    report = TakeoffReport(params=params, geometry=geometry, items=builder.items, skipped=builder.skipped)
    if report.unknown_materials:
        logger.info(f"Materials not in catalog {catalog.version}: {report.unknown_materials}")
    logger.info(f"Derived {len(report.items)} takeoff lines for {params.sqft:.0f} SF")
    return report


def derive_takeoff(
    params: BlueprintParams,
    catalog: MaterialCatalog = DEFAULT_CATALOG,
    seed: Optional[int] = None,
) -> List[TakeoffItem]:
    """Ordered takeoff lines for the given parameters."""
    return derive_takeoff_report(params, catalog=catalog, seed=seed).items
