"""
MEP Takeoff (electrical, plumbing, HVAC)

Fixture counts follow residential code minimums:
- GFCI: 1 per bath + 2 kitchen + 1 garage + 1 exterior + 1 laundry
- Smoke/CO: 1 per bedroom + 1 per floor + 1 common area
- Toilets, vanities and bath fans: 1 per (rounded) bathroom
- Tubs/showers: 1 per full bath

Pipe runs scale with the fractional bathroom count.
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams, round_half_up

SF_PER_OUTLET_CIRCUIT = 55
GFCI_NON_BATH_LOCATIONS = 5
SF_PER_RECESSED_LIGHT = 75
SF_PER_CONDENSER = 1500
SF_PER_SUPPLY_REGISTER = 140
SF_PER_RETURN_GRILLE = 600


def gfci_required(bathrooms: float) -> int:
    return round_half_up(bathrooms) + GFCI_NON_BATH_LOCATIONS


def smoke_detectors_required(bedrooms: int, stories: int) -> int:
    return bedrooms + stories + 1


def takeoff_electrical(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    sq = geo.sqft
    outlets = math.ceil(sq / SF_PER_OUTLET_CIRCUIT)
    builder.add("el01", sq * 1.2, 0.9)
    builder.add("el02", sq * 0.4, 0.89)
    builder.add("el04", outlets, 0.93)
    builder.add("el05", gfci_required(geo.bathrooms), 0.94)
    builder.add("el06", math.ceil(outlets * 0.5), 0.92)
    builder.add("el09", 1, 0.99)
    builder.add("el10", math.ceil(outlets * 0.7) + 6, 0.92)
    builder.add("el11", math.ceil(sq / SF_PER_RECESSED_LIGHT), 0.91)
    builder.add("el12", smoke_detectors_required(geo.bedrooms, geo.stories), 0.95)


def takeoff_plumbing(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    baths = geo.bathrooms
    builder.add("pl01", baths * 45 + 30, 0.9)
    builder.add("pl02", baths * 25 + 20, 0.89)
    builder.add("pl03", baths * 18 + 15, 0.88)
    builder.add("pl04", 30 + baths * 8, 0.87)
    builder.add("pl06", round_half_up(baths), 0.98)
    builder.add("pl07", round_half_up(baths), 0.97)
    builder.add("pl08", geo.full_baths, 0.96)
    builder.add("pl10", 1, 0.97)
    builder.add("pl12", 1, 0.99)


def takeoff_hvac(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    sq = geo.sqft
    builder.add("hv01", 1, 0.98)
    builder.add("hv02", math.ceil(sq / SF_PER_CONDENSER), 0.97)
    builder.add("hv04", sq * 0.12, 0.88)
    builder.add("hv06", sq * 0.025, 0.86)
    builder.add("hv07", math.ceil(sq / SF_PER_SUPPLY_REGISTER), 0.92)
    builder.add("hv08", math.ceil(sq / SF_PER_RETURN_GRILLE) + 1, 0.93)
    builder.add("hv09", geo.stories, 0.98)                       # 1 thermostat per story
    builder.add("hv10", round_half_up(geo.bathrooms), 0.95)
    builder.add("hv11", 1, 0.96)
