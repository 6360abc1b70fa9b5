"""
Framing Takeoff

Exterior walls are 2x6 (R-20+ cavity), interior partitions 2x4, both at
16" on center. Floor joists and hangers only apply off-slab.
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams, FoundationType

STUD_SPACING_IN = 16
EXTERIOR_STUD_EXTRA = 1.15   # corners, kings, jacks
INTERIOR_STUD_EXTRA = 1.10   # intersections
PLATES_PER_WALL = 3          # bottom + double top
HEADER_LF_PER_OPENING = 5
SF_PER_WINDOW = 170
FIXED_OPENINGS = 2 + 8       # exterior doors + interior doors
JOISTS_PER_FOOTPRINT_SF = 0.065
SF_PER_NAIL_BOX = 350


def opening_count(sqft: float) -> int:
    """Doors plus windows that need a header."""
    return FIXED_OPENINGS + math.ceil(sqft / SF_PER_WINDOW)


def takeoff_framing(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    fp, per, iw = geo.footprint, geo.perimeter, geo.interior_wall_lf

    exterior_studs = (per * 12) / STUD_SPACING_IN * geo.stories * EXTERIOR_STUD_EXTRA
    interior_studs = (iw * 12) / STUD_SPACING_IN * INTERIOR_STUD_EXTRA
    builder.add("r02", exterior_studs, 0.94)
    builder.add("r01", interior_studs, 0.94)
    builder.add("r04", per * PLATES_PER_WALL, 0.95)
    builder.add("r03", iw * PLATES_PER_WALL, 0.95)
    builder.add("r05", opening_count(geo.sqft) * HEADER_LF_PER_OPENING, 0.93)
    builder.add("r06", per * 0.3, 0.91)                                  # ridge board LF
    builder.add("r07", geo.exterior_wall_area + geo.roof_area, 0.95)     # wall + roof deck
    builder.add("r08", math.ceil(math.sqrt(fp) / 2), 0.91)               # trusses at 24" OC

    if params.foundation_type != FoundationType.SLAB:
        joists = math.ceil(fp * JOISTS_PER_FOOTPRINT_SF)
        builder.add("r09", joists, 0.94)
        builder.add("r11", joists, 0.93)                                 # 1:1 with joists

    builder.add("r10", math.sqrt(fp) * 0.4, 0.9)
    builder.add("r13", math.ceil(geo.sqft / SF_PER_NAIL_BOX), 0.91)
