"""
conftest.py: shared pytest fixtures for the daylight engine test suite.

All tests are pure unit tests over in-memory models; no host application
is involved.

Import-path bootstrapping:
    The repository root is inserted into sys.path so that ``core``,
    ``models``, ``importers`` etc. resolve regardless of where pytest is invoked.
"""

import os
import sys

import pytest

_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from models.building import Category, Construction, Window, WindowFrame  # noqa: E402
from models.geometry import BoundingBox  # noqa: E402
from utils.config_loader import DaylightConfig  # noqa: E402
from importers.memory_model import InMemoryModel  # noqa: E402
from core.scene_index import SceneIndex  # noqa: E402


# ---------------------------------------------------------------------------
# Standard test window
#
#   1000 × 1500 mm, sill 900 mm on a level at 0.0 m, facing -Y, so the
#   α fan and the β cross-section look along +Y.
#   Wood frame 60 mm all round:
#     glass bottom = 900 + 60 + 17 = 977 mm  → reference height 0.977 m
#     glass top    = 2.4 - 0.06    = 2.34 m  → glass midpoint 1.6585 m
#     Ad           = 880 × 1363 mm           = 1.19944 m²
# ---------------------------------------------------------------------------

WINDOW_BBOX = BoundingBox((-0.5, -0.05, 0.9), (0.5, 0.05, 2.4))
FACING = (0.0, -1.0, 0.0)
Z_REF = 0.977
Z_MID = 0.5 * (0.977 + 2.34)


def wood_frame(**overrides) -> WindowFrame:
    values = dict(
        width_mm=1000.0,
        height_mm=1500.0,
        sill_height_mm=900.0,
        construction=Construction.WOOD,
        top_mm=60.0,
        side_mm=60.0,
        bottom_mm=60.0,
    )
    values.update(overrides)
    return WindowFrame(**values)


def make_window(window_id: str = 'w1', frame: WindowFrame = None, **overrides) -> Window:
    values = dict(
        id=window_id,
        bbox=WINDOW_BBOX,
        facing=FACING,
        frame=frame or wood_frame(),
        level_elevation=0.0,
    )
    values.update(overrides)
    return Window(**values)


def scene_of(model: InMemoryModel) -> SceneIndex:
    return SceneIndex.build(model)


@pytest.fixture
def config():
    """Default run configuration (11 rays, 5 m, 600 mm floor, 0.55 ratio)."""
    return DaylightConfig()


@pytest.fixture
def empty_scene():
    return SceneIndex.build(InMemoryModel())


@pytest.fixture
def wall_in_front_model():
    """
    A 3 m tall wall, 200 mm thick, whose near face is 4 m in front of the
    window (y = 4.0 .. 4.2), running 20 m along X.
    """
    model = InMemoryModel()
    model.add_box('front', Category.WALL, (-10.0, 4.0, 0.0), (10.0, 4.2, 3.0), direction=(1.0, 0.0, 0.0))
    return model
