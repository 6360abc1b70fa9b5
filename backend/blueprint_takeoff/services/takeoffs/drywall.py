"""
Drywall Takeoff

Formulas:
- Wall sheets = ceil(total wall area / 48)   (4x12 sheet)
- Ceiling sheets = ceil(footprint / 48)
- Joint compound: 1 pail per ~400 SF of wall
- Paper tape: 1 roll per ~500 SF
- Screws: 1 box per ~300 SF
"""

import math

from blueprint_takeoff.services.takeoff_calculation import BuildingGeometry, TakeoffBuilder
from blueprint_takeoff.services.takeoff_models import BlueprintParams

SHEET_SF = 48


def takeoff_drywall(builder: TakeoffBuilder, geo: BuildingGeometry, params: BlueprintParams) -> None:
    walls = geo.total_wall_area
    builder.add("i01", math.ceil(walls / SHEET_SF), 0.95)
    builder.add("i02", math.ceil(geo.footprint / SHEET_SF), 0.94)
    builder.add("i03", math.ceil(walls / 400), 0.92)
    builder.add("i04", math.ceil(walls / 500), 0.93)
    builder.add("i05", math.ceil(walls / 300), 0.91)
