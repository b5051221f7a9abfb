import math
import random

import pytest

from arena_levelgen.generators.layout.layout_types import ArenaGrid, Room
from arena_levelgen.generators.archetypes.archetype_planner import RoomArchetype
from arena_levelgen.generators.heightfield.staircase import (
    StaircaseBuilder, StaircaseResult, round_half_up
)


def _build_one(room, seed=0, floors=2, grid_size=24):
    grid = ArenaGrid(grid_size, grid_size)
    grid.carve_room(room)
    result = StaircaseResult()
    built = StaircaseBuilder(random.Random(seed), 18.0, floors).build_room(grid, 1, room, result)
    return built, result


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_small_room_is_skipped():
    built, result = _build_one(Room(5, 5, 9, 9))
    assert not built
    assert result.ramps == [] and result.landings == []
    assert result.shaft_cells == set()


def test_single_floor_is_skipped():
    built, result = _build_one(Room(2, 2, 17, 9), floors=1)
    assert not built


@pytest.mark.parametrize("seed", range(6))
def test_ramp_geometry(seed):
    built, result = _build_one(Room(2, 2, 17, 9), seed=seed)
    assert built
    ramp = result.ramps[0]
    assert {ramp.start_cell, ramp.end_cell} == {(4, 5), (15, 5)}
    assert ramp.story == 0
    assert ramp.has_support
    assert ramp.start[1] == 0.0 and ramp.end[1] == 18.0
    assert ramp.pitch_degrees == pytest.approx(-math.degrees(math.atan2(18.0, 44.0)))
    assert abs(ramp.yaw_degrees) == pytest.approx(90.0)
    assert ramp.length == pytest.approx(math.hypot(44.0, 18.0))


def test_landings_bracket_the_ramp():
    built, result = _build_one(Room(2, 2, 17, 9))
    low, high = result.landings
    ramp = result.ramps[0]
    assert (low.x, low.z) == ramp.start_cell and low.floor == 0 and low.top_y == 0.0
    assert (high.x, high.z) == ramp.end_cell and high.floor == 1 and high.top_y == 18.0


def test_connector_samples_and_shafts():
    built, result = _build_one(Room(2, 2, 17, 9))
    heights = result.connector_heights
    assert len(heights) >= 4
    assert all(0.0 <= y <= 18.0 for y in heights.values())
    for x, z in heights:
        assert {(x + dx, z + dz) for dx in (-1, 0, 1) for dz in (-1, 0, 1)} <= result.shaft_cells
    assert result.is_shaft(4, 4)
    assert not result.is_shaft(10, 8)


def test_depth_axis_ramp():
    built, result = _build_one(Room(2, 2, 9, 17))
    ramp = result.ramps[0]
    assert {ramp.start_cell, ramp.end_cell} == {(5, 4), (5, 15)}
    assert abs(ramp.yaw_degrees) in (pytest.approx(0.0), pytest.approx(180.0))


def test_upper_story_has_no_support():
    stories = set()
    for seed in range(30):
        built, result = _build_one(Room(2, 2, 17, 9), seed=seed, floors=4)
        ramp = result.ramps[0]
        stories.add(ramp.story)
        assert ramp.has_support == (ramp.story == 0)
        assert ramp.start[1] == pytest.approx(ramp.story * 18.0)
    assert stories <= {0, 1, 2}
    assert len(stories) > 1


def test_build_visits_only_staircase_rooms():
    rooms = [Room(2, 2, 9, 9), Room(2, 12, 17, 19), Room(5, 5, 9, 9)]
    grid = ArenaGrid(32, 32)
    archetypes = {1: RoomArchetype.STAIRCASE, 2: RoomArchetype.STAIRCASE}
    result = StaircaseBuilder(random.Random(2), 18.0, 2).build(grid, rooms, archetypes)
    assert [r.room_index for r in result.ramps] == [1]
    assert result.skipped_rooms == [2]
