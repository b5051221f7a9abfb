import random

import numpy as np

from arena_levelgen.generators.layout.layout_types import ArenaGrid, Room
from arena_levelgen.generators.archetypes.archetype_planner import RoomArchetype
from arena_levelgen.generators.heightfield.height_field import (
    HeightFieldGenerator, relax_heights, smoothness_violations, collect_wall_extensions
)
from conftest import spawn_and_large_room


def _generate(archetype, stacked_floor_count=2, seed=3):
    rooms = spawn_and_large_room()
    grid = ArenaGrid(32, 32)
    for room in rooms:
        grid.carve_room(room)
    generator = HeightFieldGenerator(random.Random(seed), stacked_floor_count=stacked_floor_count)
    return grid, rooms, generator.generate(grid, rooms, {1: archetype})


# ---------------------------------------------------------------------------
# Relaxation
# ---------------------------------------------------------------------------

def test_relax_lowers_spikes():
    heights = np.array([[0, 5, 0]], dtype=np.int16)
    passes = relax_heights(heights)
    assert heights.tolist() == [[0, 1, 0]]
    assert passes >= 3


def test_relax_leaves_isolated_cells_alone():
    heights = np.array([[-1, 7, -1]], dtype=np.int16)
    relax_heights(heights)
    assert heights.tolist() == [[-1, 7, -1]]


def test_relax_cascades_down_a_tower():
    heights = np.array([[0, 8, 8, 8, 8]], dtype=np.int16)
    relax_heights(heights)
    assert heights.tolist() == [[0, 1, 2, 3, 4]]
    assert smoothness_violations(heights) == []


def test_smoothness_violations_reports_x_z():
    heights = np.array([[0, 0], [0, 3]], dtype=np.int16)
    assert smoothness_violations(heights) == [(1, 1)]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

def test_firing_line_relaxed_to_one_tier():
    grid, rooms, result = _generate(RoomArchetype.LARGE_ENCOUNTER)
    assert grid.get_tier(15, 19) == 1
    assert smoothness_violations(grid.heights) == []


def test_one_tile_per_filled_cell_and_floor():
    grid, rooms, result = _generate(RoomArchetype.SMALL_EMPTY)
    filled = int(np.count_nonzero(grid.heights >= 0))
    assert filled == 64 + 144
    assert len(result.tiles_on_floor(0)) == filled
    assert len(result.tiles_on_floor(1)) == filled
    assert len(result.tiles) == 2 * filled


def test_tile_top_heights():
    grid, rooms, result = _generate(RoomArchetype.LARGE_ENCOUNTER)
    assert result.top_heights[(15, 19)] == 1.5
    upper = [t for t in result.tiles_on_floor(1) if (t.x, t.z) == (15, 19)]
    assert upper[0].top_y == 18.0 + 1.5
    assert len(result.top_heights) == len(result.tiles_on_floor(0))


def test_ramp_samples_override_floor_heights():
    grid, rooms, result = _generate(RoomArchetype.STAIRCASE)
    samples = result.staircases.connector_heights
    ramp = result.staircases.ramps[0]
    assert samples
    for cell, height in samples.items():
        assert result.top_heights[cell] == height
    assert result.top_heights[ramp.end_cell] == (ramp.story + 1) * 18.0
    # Every sample sits over a floor-0 tile, so no new cells appear
    assert len(result.top_heights) == len(result.tiles_on_floor(0))


def test_non_parkour_tiles_cover_full_cell():
    grid, rooms, result = _generate(RoomArchetype.SMALL_EMPTY)
    assert all(tile.footprint == grid.cell_size for tile in result.tiles)


def test_parkour_tiles_use_random_footprint():
    grid, rooms, result = _generate(RoomArchetype.VERTICAL_PARKOUR)
    room = rooms[1]
    parkour_tiles = [t for t in result.tiles if room.contains(t.x, t.z)]
    assert parkour_tiles
    assert all(0.6 * 4.0 <= t.footprint <= 0.9 * 4.0 for t in parkour_tiles)


def test_ceiling_mask_per_floor():
    grid, rooms, result = _generate(RoomArchetype.SMALL_EMPTY)
    assert len(result.ceiling_masks) == 2
    assert result.ceiling_panel_count() == 2 * grid.open_cell_count()


def test_staircase_shafts_skip_upper_floor_tiles():
    rooms = [Room(2, 2, 9, 9), Room(2, 14, 25, 21)]
    grid = ArenaGrid(32, 32)
    for room in rooms:
        grid.carve_room(room)
    generator = HeightFieldGenerator(random.Random(4), stacked_floor_count=2)
    result = generator.generate(grid, rooms, {1: RoomArchetype.STAIRCASE})

    shafts = result.staircases.shaft_cells
    assert shafts
    assert len(result.staircases.ramps) == 1
    upper = {(t.x, t.z) for t in result.tiles_on_floor(1)}
    lower = {(t.x, t.z) for t in result.tiles_on_floor(0)}
    assert not upper & shafts
    assert shafts <= lower
    for mask in result.ceiling_masks:
        assert not any(mask[z, x] for x, z in shafts)


def test_single_floor_builds_no_ramps():
    grid, rooms, result = _generate(RoomArchetype.STAIRCASE, stacked_floor_count=1)
    assert result.staircases.ramps == []
    assert result.staircases.skipped_rooms == [1]
    assert result.tiles_on_floor(1) == []


def test_spawn_platform_guaranteed():
    rooms = spawn_and_large_room()
    grid = ArenaGrid(32, 32)
    for room in rooms:
        grid.carve_room(room)
    # Knock the spawn center out of the wall field
    grid.walls[5, 5] = True
    result = HeightFieldGenerator(random.Random(1)).generate(grid, rooms, {1: RoomArchetype.SMALL_EMPTY})
    for x in range(4, 7):
        for z in range(4, 7):
            assert (x, z) in result.top_heights
    assert result.top_heights[(5, 5)] == 0.0


def test_wall_extensions_ring_parkour_rooms():
    grid, rooms, result = _generate(RoomArchetype.HALLWAY_PARKOUR)
    room = rooms[1]
    # 14 x 14 ring around a 12 x 12 room, all solid
    assert len(result.wall_extensions) == 4 * 13
    ext = result.wall_extensions[0]
    assert ext.base_y == 18.0
    assert ext.height == 36.0
    assert ext.position[1] == 18.0 + 18.0
    assert all(not room.contains(e.x, e.z) for e in result.wall_extensions)


def test_no_wall_extensions_without_parkour():
    grid, rooms, result = _generate(RoomArchetype.LARGE_EMPTY)
    assert result.wall_extensions == []
    assert collect_wall_extensions(grid, rooms, {1: RoomArchetype.LARGE_EMPTY}, 18.0) == []


def test_tiny_staircase_room_stays_flat():
    rooms = [Room(2, 2, 9, 9), Room(14, 14, 18, 18)]
    grid = ArenaGrid(32, 32)
    for room in rooms:
        grid.carve_room(room)
    result = HeightFieldGenerator(random.Random(0)).generate(grid, rooms, {1: RoomArchetype.STAIRCASE})
    assert result.staircases.skipped_rooms == [1]
    assert result.staircases.shaft_cells == set()
    assert (grid.heights[14:19, 14:19] == 0).all()
