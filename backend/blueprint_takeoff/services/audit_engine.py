"""
Takeoff Audit Engine

Runs seven independent validation layers over a finished takeoff and rolls
the findings into a 0-100 score and a letter grade.

Layers:
1. Overall $/SF Benchmark    - grand total per SF vs residential range
2. Trade $/SF Ranges         - material $/SF per trade vs benchmark table
3. Cross-Trade Consistency   - fixture counts vs bedrooms/bathrooms/stories
4. Quantity Ratio Checks     - dependent materials vs their drivers
5. Completeness Check        - required trades and essential equipment
6. Item Reasonableness       - confidence bands, high-value lines, outliers
7. Waste Factor Audit        - waste dollars and unusual waste factors

Score = 100 - 12 × errors - 4 × warnings, clamped to [0, 100].

Plausibility problems never raise; they become flags. A malformed input
shape raises TypeError, and unusable sqft or stories raise
InvalidBlueprintParams.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from blueprint_takeoff.core.config import DEFAULT_TRADE_RANGES, Settings, settings as default_settings
from blueprint_takeoff.services.material_catalog import (
    DEFAULT_CATALOG,
    MaterialCatalog,
    TRADE_ORDER,
)
from blueprint_takeoff.services.pricing import EstimateTotals, category_totals, compute_totals
from blueprint_takeoff.services.takeoff_calculation import check_engine_params
from blueprint_takeoff.services.takeoffs.mechanical import gfci_required, smoke_detectors_required
from blueprint_takeoff.services.takeoff_models import (
    AuditFlag,
    AuditLayer,
    AuditResult,
    BlueprintParams,
    FlagLevel,
    FoundationType,
    LayerStatus,
    TakeoffItem,
    round_half_up,
)

logger = logging.getLogger(__name__)

LAYER_NAMES = [
    "Overall $/SF Benchmark",
    "Trade $/SF Ranges",
    "Cross-Trade Consistency",
    "Quantity Ratio Checks",
    "Completeness Check",
    "Item Reasonableness",
    "Waste Factor Audit",
]

_SEVERITY = {
    FlagLevel.PASS: 0,
    FlagLevel.INFO: 0,
    FlagLevel.WARN: 1,
    FlagLevel.ERROR: 2,
}


@dataclass
class AuditThresholds:
    """Every tunable number the audit uses."""
    psf_fail_min: float = 80.0
    psf_warn_min: float = 100.0
    psf_warn_max: float = 350.0
    psf_fail_max: float = 500.0
    trade_ranges: Dict[str, Tuple[float, float]] = field(default_factory=lambda: dict(DEFAULT_TRADE_RANGES))

    # Layer 4 bands: dependent quantity per driver quantity
    sheets_per_compound_pail: Tuple[float, float] = (4.0, 25.0)   # 1 pail per 4..25 sheets
    studs_per_nail_box: Tuple[float, float] = (25.0, 200.0)       # 1 box per 25..200 studs
    primer_to_paint: Tuple[float, float] = (0.6, 1.0)             # primer gal / paint gal

    required_trades: List[str] = field(default_factory=lambda: list(TRADE_ORDER))
    optional_trades: List[str] = field(default_factory=list)

    confidence_warn: float = 0.88
    confidence_error: float = 0.80
    high_value_item_cost: float = 5000.0
    category_outlier_share: float = 0.75
    category_outlier_min_lines: int = 3

    high_waste_factor: float = 1.15
    max_item_waste_share: float = 0.02

    error_penalty: int = 12
    warning_penalty: int = 4
    grade_a_min: int = 90
    grade_b_min: int = 75
    grade_c_min: int = 60

    labor_multiplier: float = 1.35
    overhead_rate: float = 0.18

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "AuditThresholds":
        config = config or default_settings
        return cls(
            psf_fail_min=config.psf_fail_min,
            psf_warn_min=config.psf_warn_min,
            psf_warn_max=config.psf_warn_max,
            psf_fail_max=config.psf_fail_max,
            trade_ranges=dict(config.trade_ranges),
            sheets_per_compound_pail=tuple(config.sheets_per_compound_pail),
            studs_per_nail_box=tuple(config.studs_per_nail_box),
            primer_to_paint=tuple(config.primer_to_paint),
            required_trades=list(config.required_trades if config.required_trades is not None else TRADE_ORDER),
            optional_trades=list(config.optional_trades),
            confidence_warn=config.confidence_warn,
            confidence_error=config.confidence_error,
            high_value_item_cost=config.high_value_item_cost,
            category_outlier_share=config.category_outlier_share,
            category_outlier_min_lines=config.category_outlier_min_lines,
            high_waste_factor=config.high_waste_factor,
            max_item_waste_share=config.max_item_waste_share,
            error_penalty=config.error_penalty,
            warning_penalty=config.warning_penalty,
            grade_a_min=config.grade_a_min,
            grade_b_min=config.grade_b_min,
            grade_c_min=config.grade_c_min,
            labor_multiplier=config.labor_multiplier,
            overhead_rate=config.overhead_rate,
        )


def grade_for_score(score: int, thresholds: Optional[AuditThresholds] = None) -> str:
    """Letter grade for a 0-100 score (A/B/C/D)."""
    t = thresholds or AuditThresholds.from_settings()
    if score >= t.grade_a_min:
        return "A"
    elif score >= t.grade_b_min:
        return "B"
    elif score >= t.grade_c_min:
        return "C"
    return "D"


def score_for_counts(errors: int, warnings: int, thresholds: Optional[AuditThresholds] = None) -> int:
    t = thresholds or AuditThresholds.from_settings()
    return max(0, min(100, 100 - errors * t.error_penalty - warnings * t.warning_penalty))


# ==================
# AUDIT CONTEXT
# ==================

class _AuditContext:
    """Shared, read-only views over the takeoff for the layer checks."""

    def __init__(self, items: List[TakeoffItem], params: BlueprintParams,
                 catalog: MaterialCatalog, thresholds: AuditThresholds):
        self.items = items
        self.params = params
        self.catalog = catalog
        self.t = thresholds
        self.sqft = max(1.0, float(params.sqft))
        self.totals = compute_totals(
            items, params.sqft,
            labor_multiplier=thresholds.labor_multiplier,
            overhead_rate=thresholds.overhead_rate,
        )
        self.category_totals = category_totals(items)
        self._by_id: Dict[str, List[TakeoffItem]] = {}
        for item in items:
            self._by_id.setdefault(item.id, []).append(item)

        self.flags: List[AuditFlag] = []
        self.item_flags: Dict[int, str] = {}

    def qty(self, material_id: str) -> int:
        return sum(item.quantity for item in self._by_id.get(material_id, []))

    def line(self, material_id: str) -> Optional[TakeoffItem]:
        lines = self._by_id.get(material_id)
        return lines[0] if lines else None

    def material_name(self, material_id: str) -> str:
        material = self.catalog.get(material_id)
        return material.name if material else material_id

    def flag(self, layer: int, level: FlagLevel, message: str, lid: Optional[int] = None) -> AuditFlag:
        flag = AuditFlag(layer=layer, level=level, message=message, lid=lid)
        self.flags.append(flag)
        if lid is not None and level in (FlagLevel.ERROR, FlagLevel.WARN):
            current = self.item_flags.get(lid)
            if current is None or _SEVERITY[level] > _SEVERITY[FlagLevel(current)]:
                self.item_flags[lid] = level.value
        return flag

    def layer_flags(self, layer: int) -> List[AuditFlag]:
        return [f for f in self.flags if f.layer == layer]

    def issue_count(self, layer: int) -> int:
        return sum(1 for f in self.layer_flags(layer) if f.level in (FlagLevel.ERROR, FlagLevel.WARN))

    def status(self, layer: int) -> LayerStatus:
        worst = max((_SEVERITY[f.level] for f in self.layer_flags(layer)), default=0)
        if worst == 2:
            return LayerStatus.FAIL
        elif worst == 1:
            return LayerStatus.WARN
        return LayerStatus.PASS


# ==================
# LAYERS
# ==================

def _check_overall_psf(ctx: _AuditContext) -> str:
    t = ctx.t
    psf = ctx.totals.cost_per_sf
    target = f"${t.psf_warn_min:.0f}-${t.psf_warn_max:.0f}"

    if psf < t.psf_fail_min:
        ctx.flag(1, FlagLevel.ERROR, f"Total ${psf:.0f}/SF is far below the ${t.psf_fail_min:.0f} minimum. Likely missing major trades.")
    elif psf > t.psf_fail_max:
        ctx.flag(1, FlagLevel.ERROR, f"Total ${psf:.0f}/SF is far above the ${t.psf_fail_max:.0f} ceiling. Check for duplicates.")
    elif psf < t.psf_warn_min:
        ctx.flag(1, FlagLevel.WARN, f"${psf:.0f}/SF is below the {target} residential range. Check for missing items.")
    elif psf > t.psf_warn_max:
        ctx.flag(1, FlagLevel.WARN, f"${psf:.0f}/SF exceeds the {target} residential range. Check for duplicates.")
    else:
        ctx.flag(1, FlagLevel.PASS, f"${psf:.0f}/SF is within the {target} residential range.")
    return f"${psf:.0f}/SF vs {target}"


def _check_trade_ranges(ctx: _AuditContext) -> str:
    for category, (lo, hi) in ctx.t.trade_ranges.items():
        amount = ctx.category_totals.get(category, 0.0)
        cpsf = amount / ctx.sqft
        if amount == 0:
            ctx.flag(2, FlagLevel.ERROR, f"{category} has $0. All items missing or removed. Expected ${lo}-${hi}/SF.")
        elif cpsf < lo * 0.5:
            ctx.flag(2, FlagLevel.ERROR, f"{category} is ${cpsf:.2f}/SF, below the ${lo}-${hi} benchmark. Missing items likely.")
        elif cpsf < lo:
            ctx.flag(2, FlagLevel.WARN, f"{category} is ${cpsf:.2f}/SF, below the ${lo}-${hi} range.")
        elif cpsf > hi * 1.5:
            ctx.flag(2, FlagLevel.WARN, f"{category} is ${cpsf:.2f}/SF, above the ${lo}-${hi} range.")

    issues = ctx.issue_count(2)
    if issues == 0:
        ctx.flag(2, FlagLevel.PASS, f"All {len(ctx.t.trade_ranges)} trades within $/SF ranges.")
        return f"All {len(ctx.t.trade_ranges)} trades in range"
    return f"{issues} trades outside ranges"


def _check_cross_trade(ctx: _AuditContext) -> str:
    params = ctx.params
    baths = round_half_up(params.bathrooms)

    def lid_of(material_id: str) -> Optional[int]:
        line = ctx.line(material_id)
        return line.lid if line else None

    for material_id, label, suffix in (
        ("pl06", "Toilets", "Should be 1:1."),
        ("pl07", "Vanities", "Should be 1:1."),
        ("hv10", "Exhaust fans", "Code requires 1 per bath."),
    ):
        count = ctx.qty(material_id)
        if count != baths:
            ctx.flag(3, FlagLevel.WARN, f"{label} ({count}) ≠ bathrooms ({baths}). {suffix}", lid=lid_of(material_id))

    smoke = ctx.qty("el12")
    smoke_needed = smoke_detectors_required(params.bedrooms, params.stories)
    if smoke < smoke_needed:
        ctx.flag(
            3, FlagLevel.WARN,
            f"Smoke detectors ({smoke}) < code minimum ({smoke_needed}): "
            f"{params.bedrooms} bedrooms + {params.stories} floor(s) + 1 common.",
            lid=lid_of("el12"),
        )

    gfci = ctx.qty("el05")
    gfci_needed = gfci_required(params.bathrooms)
    if gfci < gfci_needed:
        ctx.flag(
            3, FlagLevel.WARN,
            f"GFCIs ({gfci}) below minimum ({gfci_needed}): {baths} bath + 2 kitchen + 1 garage + 1 ext + 1 laundry.",
            lid=lid_of("el05"),
        )

    issues = ctx.issue_count(3)
    if issues == 0:
        ctx.flag(3, FlagLevel.PASS, "All cross-trade fixture counts match code requirements.")
        return "All counts consistent"
    return f"{issues} mismatches"


def _check_ratio(ctx: _AuditContext, dependent_id: str, driver_total: int, band: Tuple[float, float],
                 per_driver: bool, label: str) -> None:
    """
    Flag a dependent quantity outside its band relative to its driver.

    per_driver=True: band is drivers-per-dependent (1 pail per 4..25 sheets).
    per_driver=False: band is dependent/driver ratio (primer 0.6..1.0 × paint).
    """
    if driver_total <= 0:
        return
    dependent = ctx.line(dependent_id)
    count = ctx.qty(dependent_id)
    lo, hi = band
    if per_driver:
        minimum, maximum = math.ceil(driver_total / hi), driver_total / lo
    else:
        minimum, maximum = math.ceil(driver_total * lo), driver_total * hi

    lid = dependent.lid if dependent else None
    if count < minimum:
        ctx.flag(4, FlagLevel.WARN, f"{label} ({count}) low for {driver_total}. Expected at least {minimum}.", lid=lid)
    elif count > maximum:
        ctx.flag(4, FlagLevel.WARN, f"{label} ({count}) high for {driver_total}. Expected at most {math.floor(maximum)}.", lid=lid)


def _check_quantity_ratios(ctx: _AuditContext) -> str:
    t = ctx.t
    _check_ratio(ctx, "i03", ctx.qty("i01") + ctx.qty("i02"), t.sheets_per_compound_pail, True,
                 "Joint compound pails vs drywall sheets")
    _check_ratio(ctx, "r13", ctx.qty("r01") + ctx.qty("r02"), t.studs_per_nail_box, True,
                 "Nail boxes vs studs")
    _check_ratio(ctx, "fn02", ctx.qty("fn01"), t.primer_to_paint, False,
                 "Primer gallons vs paint gallons")

    issues = ctx.issue_count(4)
    if issues == 0:
        ctx.flag(4, FlagLevel.PASS, "All material ratios check out.")
        return "Ratios proportional"
    return f"{issues} ratio issues"


def _essentials(params: BlueprintParams) -> List[str]:
    required = ["el09", "pl12", "hv01"]
    if params.foundation_type != FoundationType.SLAB:
        required.append("r09")
    if params.garage_size >= 2:
        required.append("dw10")
    return required


def _check_completeness(ctx: _AuditContext) -> str:
    present = set(ctx.category_totals)
    missing_required = [c for c in ctx.t.required_trades if c not in present]
    missing_optional = [c for c in ctx.t.optional_trades if c not in present]

    if missing_required:
        ctx.flag(5, FlagLevel.ERROR, f"Missing trades: {', '.join(missing_required)}.")
    if missing_optional:
        ctx.flag(5, FlagLevel.WARN, f"Missing optional trades: {', '.join(missing_optional)}.")
    if not missing_required and not missing_optional:
        ctx.flag(5, FlagLevel.PASS, f"All {len(ctx.t.required_trades)} residential trades present.")

    missing_essentials = [ctx.material_name(mid) for mid in _essentials(ctx.params) if ctx.qty(mid) == 0]
    if missing_essentials:
        ctx.flag(5, FlagLevel.ERROR, f"Missing essential equipment: {', '.join(missing_essentials)}.")

    missing = len(missing_required) + len(missing_optional) + len(missing_essentials)
    return f"{missing} items missing" if missing else "All trades & essentials present"


def _check_items(ctx: _AuditContext) -> str:
    t = ctx.t
    low_confidence = 0
    for item in ctx.items:
        pct = f"{item.confidence * 100:.0f}%"
        if item.confidence < t.confidence_error:
            low_confidence += 1
            ctx.flag(6, FlagLevel.ERROR, f"{item.name} has very low confidence ({pct}). Re-derive or verify.", lid=item.lid)
        elif item.confidence < t.confidence_warn:
            low_confidence += 1
            ctx.flag(6, FlagLevel.WARN, f"{item.name} has low confidence ({pct}). Verify manually.", lid=item.lid)
        if item.total_cost > t.high_value_item_cost:
            ctx.flag(6, FlagLevel.INFO, f"{item.name} is high-value (${item.total_cost:,.2f}). Double-check.", lid=item.lid)

    lines_per_category: Dict[str, List[TakeoffItem]] = {}
    for item in ctx.items:
        lines_per_category.setdefault(item.category, []).append(item)
    for category, lines in lines_per_category.items():
        total = ctx.category_totals.get(category, 0.0)
        if len(lines) < t.category_outlier_min_lines or total <= 0:
            continue
        for item in lines:
            share = item.total_cost / total
            if share > t.category_outlier_share:
                ctx.flag(6, FlagLevel.INFO, f"{item.name} is {share:.0%} of {category} cost.", lid=item.lid)

    if low_confidence == 0:
        ctx.flag(6, FlagLevel.PASS, "All items within confidence thresholds.")
        return "All items OK"
    return f"{low_confidence} low-confidence items"


def _check_waste(ctx: _AuditContext) -> str:
    t = ctx.t
    totals = ctx.totals
    for item in ctx.items:
        if item.waste > t.high_waste_factor:
            ctx.flag(7, FlagLevel.INFO, f"{item.name} has {round((item.waste - 1) * 100)}% waste factor (above average).", lid=item.lid)
        if totals.grand_total > 0 and item.waste_cost > totals.grand_total * t.max_item_waste_share:
            ctx.flag(
                7, FlagLevel.WARN,
                f"{item.name} waste (${item.waste_cost:,.0f}) exceeds {t.max_item_waste_share:.0%} of the estimate.",
                lid=item.lid,
            )

    summary = f"${totals.waste_cost:,.0f} waste ({totals.waste_pct:.1f}%)"
    ctx.flag(7, FlagLevel.INFO, f"Total waste cost: {summary} of materials.")
    return summary


_LAYER_CHECKS = [
    _check_overall_psf,
    _check_trade_ranges,
    _check_cross_trade,
    _check_quantity_ratios,
    _check_completeness,
    _check_items,
    _check_waste,
]


# ==================
# ENTRY POINT
# ==================

def _empty_result(totals: EstimateTotals) -> AuditResult:
    return AuditResult(
        score=0,
        grade="D",
        layers=[AuditLayer(name=name, status=LayerStatus.FAIL, detail="No data") for name in LAYER_NAMES],
        flags=[AuditFlag(layer=5, level=FlagLevel.ERROR, message="No items in takeoff. Generate a takeoff first.")],
        item_flags={},
        totals=totals,
    )


def audit(
    items: List[TakeoffItem],
    params: BlueprintParams,
    catalog: Optional[MaterialCatalog] = None,
    thresholds: Optional[AuditThresholds] = None,
) -> AuditResult:
    """
    Audit a takeoff in full. Call again after every edit.

    Args:
        items: Takeoff lines (possibly user-edited)
        params: Parameters the takeoff was derived from
        catalog: Catalog used for display names of essential equipment
        thresholds: Benchmarks and penalties (defaults from settings)

    Returns:
        AuditResult with exactly seven layers in fixed order

    Raises:
        TypeError: items is not a list of TakeoffItem or params is not BlueprintParams
        InvalidBlueprintParams: sqft non-positive/non-finite or stories < 1
    """
    if not isinstance(items, list) or not all(isinstance(i, TakeoffItem) for i in items):
        raise TypeError("items must be a list of TakeoffItem")
    if not isinstance(params, BlueprintParams):
        raise TypeError(f"params must be BlueprintParams, got {type(params).__name__}")
    check_engine_params(params)

    t = thresholds or AuditThresholds.from_settings()
    catalog = catalog or DEFAULT_CATALOG

    if not items:
        logger.info("Audit on empty takeoff: grade D")
        return _empty_result(compute_totals(items, params.sqft, t.labor_multiplier, t.overhead_rate))

    ctx = _AuditContext(items, params, catalog, t)
    layers = []
    for number, (name, check) in enumerate(zip(LAYER_NAMES, _LAYER_CHECKS), start=1):
        detail = check(ctx)
        layers.append(AuditLayer(name=name, status=ctx.status(number), detail=detail))

    result = AuditResult(
        score=0,
        grade="D",
        layers=layers,
        flags=ctx.flags,
        item_flags=ctx.item_flags,
        totals=ctx.totals,
    )
    result.score = score_for_counts(result.errors, result.warnings, t)
    result.grade = grade_for_score(result.score, t)

    logger.info(
        f"Audit: {len(items)} lines, {result.errors} errors, {result.warnings} warnings, "
        f"score {result.score} ({result.grade})"
    )
    return result
