"""
Finishes Takeoff

Flooring mix:
- Carpet = bedrooms × 180 SF
- Tile = round(bathrooms) × 50 + 120 SF (baths + kitchen/entry)
- LVP = remainder, less 250 SF per garage stall, floored at zero
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams, round_half_up

CARPET_SF_PER_BEDROOM = 180
TILE_SF_PER_BATH = 50
TILE_SF_BASE = 120
GARAGE_SF_PER_STALL = 250
COUNTERTOP_LF = 12


def flooring_mix(sqft: float, bedrooms: int, bathrooms: float, garage_size: int) -> dict:
    carpet = bedrooms * CARPET_SF_PER_BEDROOM
    tile = round_half_up(bathrooms) * TILE_SF_PER_BATH + TILE_SF_BASE
    lvp = max(0.0, sqft - carpet - tile - garage_size * GARAGE_SF_PER_STALL)
    return {"carpet": carpet, "tile": tile, "lvp": lvp}


def takeoff_finishes(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    walls = geo.total_wall_area
    builder.add("fn01", math.ceil(walls / 350), 0.91)   # 1 gal per ~350 SF
    builder.add("fn02", math.ceil(walls / 400), 0.92)
    builder.add("fn03", geo.perimeter + geo.interior_wall_lf, 0.93)

    mix = flooring_mix(geo.sqft, geo.bedrooms, geo.bathrooms, params.garage_size)
    builder.add("fn07", mix["carpet"], 0.89)
    builder.add("fn08", mix["tile"], 0.9)
    builder.add("fn06", mix["lvp"], 0.88)

    builder.add("fn10", 1, 0.9)
    builder.add("fn11", COUNTERTOP_LF, 0.89)
