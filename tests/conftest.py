import itertools
import logging

import pytest

from constellation.data_models import Body, SimulationSettings
from constellation.vector_utils import Vector3


@pytest.fixture
def ideal_settings():
    """Unit constants and no cutoffs beyond the near-field one."""
    return SimulationSettings(
        gravity=1.0,
        shape_constant=1.0,
        interaction_radius=1e9,
        world_bound=1e9,
        max_pair_force=float("inf"),
    )


@pytest.fixture
def make_body(ideal_settings):
    ids = itertools.count()

    def _make(position=(0.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0), radius=1.0, settings=None, **kwargs):
        return Body(
            id=next(ids),
            radius=radius,
            position=Vector3(*position),
            velocity=Vector3(*velocity),
            settings=settings or ideal_settings,
            **kwargs,
        )

    return _make


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)
