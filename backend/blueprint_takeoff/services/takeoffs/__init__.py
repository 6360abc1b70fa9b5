"""
Trade Takeoff Package

Each module implements `takeoff_*` functions that take a TakeoffBuilder, the
building geometry and the run parameters, and emit that trade's lines.

TRADE_TAKEOFFS lists them in the fixed emission order, which is also the
lid order of a fresh takeoff.
"""

from blueprint_takeoff.services.takeoffs.foundation import takeoff_foundation
from blueprint_takeoff.services.takeoffs.framing import takeoff_framing
from blueprint_takeoff.services.takeoffs.envelope import (
    takeoff_exterior,
    takeoff_roofing,
    takeoff_insulation,
)
from blueprint_takeoff.services.takeoffs.drywall import takeoff_drywall
from blueprint_takeoff.services.takeoffs.openings import takeoff_doors_windows
from blueprint_takeoff.services.takeoffs.mechanical import (
    takeoff_electrical,
    takeoff_plumbing,
    takeoff_hvac,
)
from blueprint_takeoff.services.takeoffs.finishes import takeoff_finishes

TRADE_TAKEOFFS = [
    ("Foundation", takeoff_foundation),
    ("Framing", takeoff_framing),
    ("Exterior", takeoff_exterior),
    ("Roofing", takeoff_roofing),
    ("Drywall", takeoff_drywall),
    ("Insulation", takeoff_insulation),
    ("Doors/Windows", takeoff_doors_windows),
    ("Electrical", takeoff_electrical),
    ("Plumbing", takeoff_plumbing),
    ("HVAC", takeoff_hvac),
    ("Finishes", takeoff_finishes),
]

__all__ = [
    "TRADE_TAKEOFFS",
    "takeoff_foundation",
    "takeoff_framing",
    "takeoff_exterior",
    "takeoff_roofing",
    "takeoff_drywall",
    "takeoff_insulation",
    "takeoff_doors_windows",
    "takeoff_electrical",
    "takeoff_plumbing",
    "takeoff_hvac",
    "takeoff_finishes",
]
