"""
Foundation Takeoff

Branches on foundation type:
- slab: slab-on-grade with gravel base, vapor barrier, rebar and mesh
- crawl: ~3 ft stem walls plus a ground vapor barrier
- basement: 8 ft perimeter walls plus floor slab and waterproofing

Anchor bolts go in every 4 ft of perimeter for all three.
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams, FoundationType

BASEMENT_WALL_HEIGHT_FT = 8
STEM_WALL_HEIGHT_FT = 3
STEM_WALL_SF_FACTOR = 0.67  # 8" wide stem wall expressed as slab-equivalent SF
ANCHOR_BOLT_SPACING_FT = 4


def takeoff_foundation(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    fp, per = geo.footprint, geo.perimeter
    anchor_bolts = math.ceil(per / ANCHOR_BOLT_SPACING_FT)

    if params.foundation_type == FoundationType.BASEMENT:
        builder.add("f02", fp, 0.95)                                    # basement floor slab
        builder.add("f05", fp, 0.94)                                    # gravel under slab
        builder.add("f04", fp + per * BASEMENT_WALL_HEIGHT_FT, 0.93)    # floor + walls
        builder.add("f03", per * BASEMENT_WALL_HEIGHT_FT + fp * 0.5, 0.91)
        builder.add("f08", fp, 0.92)
        builder.add("f06", anchor_bolts, 0.95)
        builder.add("f07", per * 2, 0.91)                               # forms for tall walls
    elif params.foundation_type == FoundationType.CRAWL:
        builder.add("f02", per * STEM_WALL_HEIGHT_FT * STEM_WALL_SF_FACTOR, 0.93)
        builder.add("f04", fp, 0.94)                                    # ground vapor barrier
        builder.add("f03", per * 1.5, 0.92)
        builder.add("f06", anchor_bolts, 0.95)
        builder.add("f07", per, 0.92)
    else:
        builder.add("f02", fp, 0.96)
        builder.add("f05", fp, 0.95)
        builder.add("f04", fp, 0.94)
        builder.add("f03", fp * 0.5, 0.93)                              # #4 rebar, approx LF
        builder.add("f08", fp, 0.93)
        builder.add("f06", anchor_bolts, 0.95)
        builder.add("f07", per, 0.92)
