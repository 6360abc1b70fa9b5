"""
Doors & Windows Takeoff

Garage doors depend on car count: the 16x7 door needs a 2+ car garage,
a single-car garage asks for the 9x7 door (dw11).
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams

EXTERIOR_DOORS = 2
SF_PER_WINDOW = 170
DOUBLE_GARAGE_DOOR_MIN_CARS = 2


def takeoff_doors_windows(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    builder.add("dw01", EXTERIOR_DOORS, 0.97)
    builder.add("dw04", geo.bedrooms + geo.bathrooms + 3, 0.95)
    builder.add("dw05", geo.bedrooms + 1, 0.94)
    builder.add("dw06", math.ceil(geo.sqft / SF_PER_WINDOW), 0.94)

    if params.garage_size == 1:
        builder.add("dw11", 1, 0.98)
    if params.garage_size >= DOUBLE_GARAGE_DOOR_MIN_CARS:
        builder.add("dw10", 1, 0.98)
