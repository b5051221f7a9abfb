#!/usr/bin/env python3
"""
Room Layout Planner

Places the spawn room at the center of the grid, then rejection-samples
additional rooms. Each accepted room is carved and linked by a corridor:
primary-pass rooms connect to the previously accepted room, fallback-pass
rooms connect to their nearest neighbour so the carved space stays a single
connected region even under packing pressure.

A one-room result (spawn room only) is a valid, degraded layout.

Author: Arena Level Generator
License: MIT
"""

import logging
import random
from typing import List, Optional

from .layout_types import ArenaGrid, Room, RoomLayout
from .corridors import CorridorCarver

logger = logging.getLogger(__name__)


# Rooms below this target count are never requested
MIN_TARGET_ROOMS = 6
# Attempt budgets per missing room
PRIMARY_ATTEMPTS_PER_ROOM = 80
FALLBACK_ATTEMPTS_PER_ROOM = 140
# Rejection padding (cells of clearance between rooms)
PRIMARY_PADDING = 1
FALLBACK_PADDING = 0
# Size relaxation applied to the fallback pass
FALLBACK_SIZE_RELAXATION = 2
# Lerp factor of the small/large size split point
SIZE_SPLIT_FACTOR = 0.55
# Absolute smallest room edge
MIN_ROOM_EDGE = 4


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def clamp(value, low, high):
    return max(low, min(high, value))


def biased_room_size(rng: random.Random, min_size: int, max_size: int, large_room_bias: float) -> int:
    """
    Sample a room edge length biased toward the large end of the range.

    The range is split at 55% between min and max; with probability
    ``large_room_bias`` the size is drawn from the upper part, otherwise from
    the lower part (both inclusive of the split).
    """
    clamped_min = max(MIN_ROOM_EDGE, min_size)
    clamped_max = max(clamped_min + 1, max_size)
    split = clamp(round(lerp(clamped_min, clamped_max, SIZE_SPLIT_FACTOR)), clamped_min, clamped_max)

    if rng.random() < large_room_bias:
        return rng.randint(split, clamped_max)
    return rng.randint(clamped_min, split)


def create_room_around(center_x: int, center_z: int, width: int, depth: int,
                       grid_width: int, grid_depth: int) -> Room:
    """Build a room of the given size centered on a cell, kept off the border"""
    min_x = max(1, min(center_x - width // 2, grid_width - 2 - width))
    min_z = max(1, min(center_z - depth // 2, grid_depth - 2 - depth))
    return Room(min_x, min_z, min_x + width - 1, min_z + depth - 1)


def spawn_room_size(spawn_clear_radius: int, min_room_size: int, max_room_size: int) -> int:
    safe_max = max(min_room_size, max_room_size)
    return clamp(max(spawn_clear_radius * 2, min_room_size + 1), min_room_size, safe_max + 2)


class RoomLayoutPlanner:
    """
    Produces the ordered room list for a map build.

    Room 0 is always the spawn room. The list grows toward
    ``max(6, desired_room_count)`` entries as far as placement attempts allow.
    """

    def __init__(self, rng: random.Random, carver: CorridorCarver,
                 desired_room_count: int = 14,
                 min_room_size: int = 8,
                 max_room_size: int = 26,
                 corridor_width: int = 1,
                 spawn_clear_radius: int = 5,
                 large_room_bias: float = 0.72):
        self.rng = rng
        self.carver = carver
        self.desired_room_count = desired_room_count
        self.min_room_size = min_room_size
        self.max_room_size = max(min_room_size, max_room_size)
        self.corridor_width = corridor_width
        self.spawn_clear_radius = spawn_clear_radius
        self.large_room_bias = large_room_bias

        # Diagnostics
        self.rejected_placements = 0

    @property
    def target_rooms(self) -> int:
        return max(MIN_TARGET_ROOMS, self.desired_room_count)

    def plan(self, grid: ArenaGrid) -> RoomLayout:
        """
        Carve rooms and corridors into the grid's wall field.

        Args:
            grid: Freshly created (all-solid) grid

        Returns:
            RoomLayout with the ordered rooms, primary-pass count and the
            corridor connections that were carved
        """
        layout = RoomLayout()
        self.rejected_placements = 0

        spawn_size = spawn_room_size(self.spawn_clear_radius, self.min_room_size, self.max_room_size)
        spawn_room = create_room_around(
            grid.width // 2, grid.depth // 2, spawn_size, spawn_size, grid.width, grid.depth
        )
        grid.carve_room(spawn_room)
        layout.rooms.append(spawn_room)

        self._primary_pass(grid, layout)
        layout.primary_count = len(layout.rooms)

        if len(layout.rooms) < self.target_rooms:
            self._fallback_pass(grid, layout)

        # Corridors may have been carved right up to the edge
        grid.enforce_border()

        logger.debug(
            "Placed %d/%d rooms (%d primary, %d rejected candidates)",
            len(layout.rooms), self.target_rooms, layout.primary_count, self.rejected_placements
        )
        return layout

    def _primary_pass(self, grid: ArenaGrid, layout: RoomLayout):
        attempts = self.target_rooms * PRIMARY_ATTEMPTS_PER_ROOM
        for _ in range(attempts):
            if len(layout.rooms) >= self.target_rooms:
                break

            candidate = self._random_room(
                grid, self.min_room_size, self.max_room_size, self.large_room_bias
            )
            if candidate is None or self._overlaps(candidate, layout.rooms, PRIMARY_PADDING):
                self.rejected_placements += 1
                continue

            previous_index = len(layout.rooms) - 1
            self._accept(grid, layout, candidate, previous_index)

    def _fallback_pass(self, grid: ArenaGrid, layout: RoomLayout):
        """Relaxed sizes and padding; attach each room to its nearest neighbour"""
        relaxed_min = max(MIN_ROOM_EDGE, self.min_room_size - FALLBACK_SIZE_RELAXATION)
        relaxed_max = max(relaxed_min + 1, self.max_room_size - FALLBACK_SIZE_RELAXATION)
        remaining = self.target_rooms - len(layout.rooms)
        attempts = remaining * FALLBACK_ATTEMPTS_PER_ROOM

        for _ in range(attempts):
            if len(layout.rooms) >= self.target_rooms:
                break

            candidate = self._random_room(grid, relaxed_min, relaxed_max, self.large_room_bias)
            if candidate is None or self._overlaps(candidate, layout.rooms, FALLBACK_PADDING):
                self.rejected_placements += 1
                continue

            nearest_index = self._nearest_room_index(candidate, layout.rooms)
            self._accept(grid, layout, candidate, nearest_index)

        if len(layout.rooms) < self.target_rooms:
            logger.debug("Fallback pass ended short: %d/%d rooms", len(layout.rooms), self.target_rooms)

    def _accept(self, grid: ArenaGrid, layout: RoomLayout, room: Room, connect_to: int):
        grid.carve_room(room)
        self.carver.carve(grid, layout.rooms[connect_to].center, room.center, self.corridor_width)
        layout.connections.append((connect_to, len(layout.rooms)))
        layout.rooms.append(room)

    def _random_room(self, grid: ArenaGrid, min_size: int, max_size: int, bias: float) -> Optional[Room]:
        room_width = biased_room_size(self.rng, min_size, max_size, bias)
        room_depth = biased_room_size(self.rng, min_size, max_size, bias)

        # Min corner range is [1, extent - size - 2]
        x_stop = grid.width - room_width - 1
        z_stop = grid.depth - room_depth - 1
        if x_stop <= 1 or z_stop <= 1:
            return None

        min_x = self.rng.randrange(1, x_stop)
        min_z = self.rng.randrange(1, z_stop)
        return Room(min_x, min_z, min_x + room_width - 1, min_z + room_depth - 1)

    @staticmethod
    def _overlaps(candidate: Room, rooms: List[Room], padding: int) -> bool:
        return any(candidate.intersects(existing, padding) for existing in rooms)

    @staticmethod
    def _nearest_room_index(candidate: Room, rooms: List[Room]) -> int:
        best_index = 0
        best_distance = None
        for index, room in enumerate(rooms):
            distance = candidate.manhattan_to(room)
            if best_distance is None or distance < best_distance:
                best_distance = distance
                best_index = index
        return best_index
