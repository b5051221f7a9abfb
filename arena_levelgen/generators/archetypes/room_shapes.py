"""
Per-archetype height rules.

Each shaper writes platform tiers into the interior cells of one room
(``min+1 .. max-1`` on both axes). The room rim keeps the tier it had after
``ArenaGrid.reset_heights`` so doorways always land on walkable floor.

Shapers are plain functions looked up through ``ROOM_SHAPERS``; adding an
archetype without a shaper fails at import time.
"""

import random
from typing import Callable, Dict, Set

from ..layout.layout_types import ArenaGrid, Room, Cell, NO_PLATFORM
from .archetype_planner import RoomArchetype


RoomShaper = Callable[[ArenaGrid, Room, int, random.Random], None]

# Ring width (Manhattan distance) of the stepped large-empty rooms
LARGE_EMPTY_RING_WIDTH = 4
# Scatter parkour platform count range and per-platform placement budget
SCATTER_MIN_PLATFORMS = 3
SCATTER_MAX_PLATFORMS = 6
SCATTER_ATTEMPTS = 40


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _fill_interior(grid: ArenaGrid, room: Room, tier: int):
    grid.heights[room.min_z + 1:room.max_z, room.min_x + 1:room.max_x] = tier


# ---------------------------------------------------------------------------
# Shapers
# ---------------------------------------------------------------------------

def shape_flat(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    """Flat tier 0 floor (small empty and staircase rooms)"""
    _fill_interior(grid, room, 0)


def shape_small_encounter(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    """Flat floor with one raised bump at the room center"""
    _fill_interior(grid, room, 0)
    bump = clamp(max_tier // 2, 1, max_tier)
    if room.contains_interior(room.center_x, room.center_z):
        grid.set_tier(room.center_x, room.center_z, bump)


def shape_large_empty(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    """Concentric Manhattan rings stepping down from the center"""
    max_step = clamp(max_tier // 2, 1, max_tier)
    for x, z in room.interior_cells():
        distance = abs(x - room.center_x) + abs(z - room.center_z)
        ring = clamp(distance // LARGE_EMPTY_RING_WIDTH, 0, max_step)
        grid.set_tier(x, z, max(0, max_step - ring))


def shape_large_encounter(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    """Flat floor plus a raised firing line on every third column of the center row"""
    _fill_interior(grid, room, 0)
    high = clamp(max_tier - 1, 1, max_tier)
    for x in range(room.min_x + 1, room.max_x):
        if x % 3 == 0:
            grid.set_tier(x, room.center_z, high)


def shape_hallway_parkour(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    """Void interior crossed by either weaving lanes or scattered rising platforms"""
    _fill_interior(grid, room, NO_PLATFORM)
    if rng.random() < 0.5:
        _hallway_lanes(grid, room, max_tier)
    else:
        _hallway_scatter(grid, room, max_tier, rng)


def _hallway_lanes(grid: ArenaGrid, room: Room, max_tier: int):
    along_x = room.along_x
    if along_x:
        lane_a = room.center_z
        lane_b = clamp(room.center_z + 1, room.min_z + 1, room.max_z - 1)
        start, stop = room.min_x + 1, room.max_x - 1
    else:
        lane_a = room.center_x
        lane_b = clamp(room.center_x + 1, room.min_x + 1, room.max_x - 1)
        start, stop = room.min_z + 1, room.max_z - 1
    high = clamp(max_tier // 2 + 1, 1, max_tier)

    for p in range(start, stop + 1):
        alternate = p % 2 == 0
        tier_a = high if alternate else 0
        tier_b = 0 if alternate else high
        if along_x:
            grid.set_tier(p, lane_a, tier_a)
            grid.set_tier(p, lane_b, tier_b)
        else:
            grid.set_tier(lane_a, p, tier_a)
            grid.set_tier(lane_b, p, tier_b)


def _hallway_scatter(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    along_x = room.along_x
    if along_x:
        long_from, long_to = room.min_x + 1, room.max_x - 1
        side_from, side_to = room.min_z + 1, room.max_z - 1
    else:
        long_from, long_to = room.min_z + 1, room.max_z - 1
        side_from, side_to = room.min_x + 1, room.max_x - 1
    if long_from > long_to or side_from > side_to:
        return

    count = rng.randint(SCATTER_MIN_PLATFORMS, SCATTER_MAX_PLATFORMS)
    used: Set[Cell] = set()
    span = long_to - long_from

    for i in range(count):
        tier = clamp(i + 1, 1, max_tier)
        base = long_from + (span * (i + 1)) // (count + 1)
        for _ in range(SCATTER_ATTEMPTS):
            along = clamp(base + rng.randint(-1, 1), long_from, long_to)
            side = rng.randint(side_from, side_to)
            cell = (along, side) if along_x else (side, along)
            if cell in used:
                continue
            used.add(cell)
            grid.set_tier(cell[0], cell[1], tier)
            break


def shape_vertical_parkour(grid: ArenaGrid, room: Room, max_tier: int, rng: random.Random):
    """Void interior with a zig-zag of rising platforms around the center"""
    _fill_interior(grid, room, NO_PLATFORM)
    top = clamp(max_tier, 2, 8)
    cx, cz = room.center

    for i in range(top + 2):
        sign = -1 if i % 2 == 0 else 1
        x = clamp(cx + sign * (i // 2), room.min_x + 1, room.max_x - 1)
        z = clamp(cz - sign * (i // 2), room.min_z + 1, room.max_z - 1)
        tier = clamp(i, 0, top)
        grid.set_tier(x, z, tier)

        # Shadow platform one tier lower on the +x side
        if x + 1 < room.max_x:
            grid.set_tier(x + 1, z, max(0, tier - 1))

    grid.set_tier(cx, cz, 1)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

ROOM_SHAPERS: Dict[RoomArchetype, RoomShaper] = {
    RoomArchetype.SMALL_EMPTY: shape_flat,
    RoomArchetype.SMALL_ENCOUNTER: shape_small_encounter,
    RoomArchetype.LARGE_EMPTY: shape_large_empty,
    RoomArchetype.LARGE_ENCOUNTER: shape_large_encounter,
    RoomArchetype.STAIRCASE: shape_flat,
    RoomArchetype.HALLWAY_PARKOUR: shape_hallway_parkour,
    RoomArchetype.VERTICAL_PARKOUR: shape_vertical_parkour,
}

_unshaped = [a.name for a in RoomArchetype if a not in ROOM_SHAPERS]
if _unshaped:
    raise RuntimeError(f"No room shaper registered for: {', '.join(_unshaped)}")


def apply_room_shape(grid: ArenaGrid, room: Room, archetype: RoomArchetype,
                     max_tier: int, rng: random.Random):
    ROOM_SHAPERS[archetype](grid, room, max_tier, rng)
