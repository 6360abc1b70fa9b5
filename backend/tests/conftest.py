"""Shared fixtures for takeoff tests."""

import pytest

from blueprint_takeoff.services.takeoff_engine import derive_takeoff
from blueprint_takeoff.services.takeoff_models import BlueprintParams


@pytest.fixture
def default_params():
    """2400 SF, 1 story, 3BR/2BA, 2-car garage, gable roof, slab."""
    return BlueprintParams()


@pytest.fixture
def default_takeoff(default_params):
    """Takeoff for the default house, no confidence jitter."""
    return derive_takeoff(default_params)


def find_item(items, material_id):
    for item in items:
        if item.id == material_id:
            return item
    return None
