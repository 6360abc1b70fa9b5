"""
Building Envelope Takeoff (exterior, roofing, insulation)

Siding covers 85% of gross exterior wall (openings removed); wrap covers it
all. Roofing is in squares of 100 SF.
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams

SIDING_NET_SHARE = 0.85
ICE_SHIELD_WIDTH_FT = 3


def takeoff_exterior(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    builder.add("e01", geo.exterior_wall_area * SIDING_NET_SHARE, 0.93)
    builder.add("e02", geo.exterior_wall_area, 0.96)
    builder.add("e03", geo.perimeter, 0.94)
    builder.add("e04", geo.perimeter, 0.95)


def takeoff_roofing(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    builder.add("rf01", geo.roof_squares, 0.94)
    builder.add("rf02", geo.roof_squares, 0.95)
    builder.add("rf03", geo.perimeter * 1.1, 0.96)
    builder.add("rf04", math.sqrt(geo.footprint), 0.94)
    builder.add("rf05", geo.perimeter * ICE_SHIELD_WIDTH_FT, 0.93)


def takeoff_insulation(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    builder.add("n01", geo.footprint, 0.94)            # R-38 attic
    builder.add("n04", geo.exterior_wall_area, 0.95)   # R-21 in 2x6 cavity
