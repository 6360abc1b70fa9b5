"""
Estimate pricing: labor, overhead and waste derived from material totals.

Formulas:
- Labor = materials × labor multiplier (1.35)
- Overhead & profit = (materials + labor) × overhead rate (0.18)
- Grand total = materials + labor + overhead
- $/SF = grand total / max(sqft, 1)
- Waste $ = Σ (quantity − raw_qty) × unit cost
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from blueprint_takeoff.core.config import settings
from blueprint_takeoff.services.material_catalog import TRADE_ORDER
from blueprint_takeoff.services.takeoff_models import TakeoffItem


@dataclass(frozen=True)
class EstimateTotals:
    material_total: float
    labor_total: float
    overhead: float
    grand_total: float
    cost_per_sf: float
    waste_cost: float

    @property
    def waste_pct(self) -> float:
        """Waste dollars as a percentage of materials."""
        if self.material_total <= 0:
            return 0.0
        return self.waste_cost / self.material_total * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "material_total": round(self.material_total, 2),
            "labor_total": round(self.labor_total, 2),
            "overhead": round(self.overhead, 2),
            "grand_total": round(self.grand_total, 2),
            "cost_per_sf": round(self.cost_per_sf, 2),
            "waste_cost": round(self.waste_cost, 2),
            "waste_pct": round(self.waste_pct, 1),
        }


def compute_totals(
    items: List[TakeoffItem],
    sqft: float,
    labor_multiplier: Optional[float] = None,
    overhead_rate: Optional[float] = None,
) -> EstimateTotals:
    """Price a takeoff. Multipliers default to the configured values."""
    if labor_multiplier is None:
        labor_multiplier = settings.labor_multiplier
    if overhead_rate is None:
        overhead_rate = settings.overhead_rate

    material_total = sum(item.total_cost for item in items)
    labor_total = material_total * labor_multiplier
    overhead = (material_total + labor_total) * overhead_rate
    grand_total = material_total + labor_total + overhead

    return EstimateTotals(
        material_total=material_total,
        labor_total=labor_total,
        overhead=overhead,
        grand_total=grand_total,
        cost_per_sf=grand_total / max(float(sqft), 1.0),
        waste_cost=sum(item.waste_cost for item in items),
    )


def category_totals(items: List[TakeoffItem]) -> "OrderedDict[str, float]":
    """Material dollars per category, canonical trades first."""
    sums: Dict[str, float] = {}
    for item in items:
        sums[item.category] = sums.get(item.category, 0.0) + item.total_cost

    ordered = OrderedDict()
    for category in TRADE_ORDER:
        if category in sums:
            ordered[category] = sums.pop(category)
    for category in sorted(sums):
        ordered[category] = sums[category]
    return ordered
