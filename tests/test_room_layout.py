import random

from arena_levelgen.generators.layout.layout_types import ArenaGrid
from arena_levelgen.generators.layout.corridors import CorridorCarver
from arena_levelgen.generators.layout.room_layout import (
    RoomLayoutPlanner, biased_room_size, create_room_around, spawn_room_size
)
from arena_levelgen.validation.checks.layout_checks import (
    check_border_closure, check_connectivity, check_room_overlap
)


def _plan(seed=7, width=48, depth=48, **kwargs):
    rng = random.Random(seed)
    grid = ArenaGrid(width, depth)
    planner = RoomLayoutPlanner(rng, CorridorCarver(rng), **kwargs)
    return grid, planner, planner.plan(grid)


def test_spawn_room_size_respects_clear_radius():
    assert spawn_room_size(5, 8, 26) == 10
    assert spawn_room_size(2, 8, 26) == 9
    assert spawn_room_size(20, 8, 12) == 14


def test_create_room_around_stays_off_border():
    room = create_room_around(48, 48, 10, 10, 96, 96)
    assert (room.min_x, room.min_z) == (43, 43)
    assert room.width == 10 and room.depth == 10

    corner = create_room_around(1, 1, 10, 10, 24, 24)
    assert corner.min_x == 1 and corner.min_z == 1
    edge = create_room_around(23, 23, 10, 10, 24, 24)
    assert edge.max_x <= 21 and edge.max_z <= 21


def test_biased_room_size_within_range():
    rng = random.Random(5)
    for bias in (0.0, 0.72, 1.0):
        for _ in range(200):
            assert 8 <= biased_room_size(rng, 8, 26, bias) <= 26


def test_full_bias_draws_from_upper_part():
    rng = random.Random(5)
    # Split of [8, 26] sits at round(8 + 18 * 0.55) = 18
    assert all(biased_room_size(rng, 8, 26, 1.0) >= 18 for _ in range(100))
    assert all(biased_room_size(rng, 8, 26, 0.0) <= 18 for _ in range(100))


def test_spawn_room_is_first_and_centered():
    grid, planner, layout = _plan()
    spawn = layout.rooms[0]
    assert layout.spawn_room is spawn
    assert abs(spawn.center_x - 24) <= 1 and abs(spawn.center_z - 24) <= 1


def test_plan_keeps_invariants():
    for seed in range(5):
        grid, planner, layout = _plan(seed=seed, desired_room_count=8, min_room_size=6, max_room_size=12)
        assert 1 <= len(layout.rooms) <= 8
        assert check_border_closure(grid) == []
        assert check_connectivity(grid, layout.rooms) == []
        assert check_room_overlap(layout) == []


def test_every_room_after_spawn_has_a_corridor():
    grid, planner, layout = _plan(desired_room_count=8, min_room_size=6, max_room_size=12)
    targets = [end for _, end in layout.connections]
    assert targets == list(range(1, len(layout.rooms)))
    assert all(start < end for start, end in layout.connections)


def test_target_is_at_least_six_rooms():
    rng = random.Random(1)
    planner = RoomLayoutPlanner(rng, CorridorCarver(rng), desired_room_count=2)
    assert planner.target_rooms == 6


def test_same_seed_same_plan():
    grid_a, _, layout_a = _plan(seed=99)
    grid_b, _, layout_b = _plan(seed=99)
    assert layout_a.rooms == layout_b.rooms
    assert layout_a.connections == layout_b.connections
    assert (grid_a.walls == grid_b.walls).all()


def test_crowded_grid_degrades_to_spawn_room_only():
    grid, planner, layout = _plan(width=24, depth=24, min_room_size=16, max_room_size=18)
    assert len(layout.rooms) >= 1
    assert layout.rooms[0].width == 17
    assert check_border_closure(grid) == []
    assert check_connectivity(grid, layout.rooms) == []


def test_fallback_pass_keeps_large_room_bias(monkeypatch):
    from arena_levelgen.generators.layout import room_layout

    draws = []
    real_size = room_layout.biased_room_size

    def recording_size(rng, min_size, max_size, bias):
        draws.append((min_size, max_size, bias))
        return real_size(rng, min_size, max_size, bias)

    monkeypatch.setattr(room_layout, "biased_room_size", recording_size)
    _plan(width=24, depth=24, min_room_size=16, max_room_size=18, large_room_bias=0.9)

    fallback = [d for d in draws if d[:2] == (14, 16)]
    assert fallback
    assert all(bias == 0.9 for _, _, bias in draws)
