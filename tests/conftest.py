import os
import random
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from arena_levelgen.generators.layout.layout_types import ArenaGrid, Room  # noqa: E402
from arena_levelgen.pipeline import ArenaPipeline, PipelineSettings  # noqa: E402


class FixedRng:
    """Stand-in RNG: random() returns a fixed value, ranges return their low end."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value

    def randint(self, a, b):
        return a

    def randrange(self, start, stop=None):
        return 0 if stop is None else start

    def uniform(self, a, b):
        return a


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def make_grid():
    def _make(width=32, depth=32, rooms=(), cell_size=4.0):
        grid = ArenaGrid(width, depth, cell_size)
        for room in rooms:
            grid.carve_room(room)
        return grid
    return _make


@pytest.fixture(scope="session")
def arena_result():
    """Full default build: seed 12345 on a 96x96 grid."""
    return ArenaPipeline(PipelineSettings(seed=12345)).generate()


@pytest.fixture(scope="session")
def arena_layout(arena_result):
    assert arena_result.success, arena_result.errors
    return arena_result.layout


@pytest.fixture(scope="session")
def small_settings():
    return PipelineSettings(
        grid_width=48,
        grid_depth=48,
        seed=7,
        desired_room_count=8,
        min_room_size=6,
        max_room_size=14,
    )


def spawn_and_large_room():
    """Spawn room plus one 12x12 room on a 32x32 grid."""
    return [Room(2, 2, 9, 9), Room(14, 14, 25, 25)]
