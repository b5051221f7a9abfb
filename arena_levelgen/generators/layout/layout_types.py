#!/usr/bin/env python3
"""
Layout Types for Arena Grid Generation

This module defines the core data structures shared by every generation
stage: the cell grid with its wall and height fields, rooms, doorways and
the derived platform geometry (tiles, landings, ramps).

The grid is tile-based internally; world coordinates are produced on demand
by centering the grid on the origin and scaling by the cell size.

Author: Arena Level Generator
License: MIT
"""

from typing import List, Optional, Set, Tuple, Iterator
from dataclasses import dataclass, field
from enum import Enum
from collections import deque
import numpy as np


# Smallest grid extent accepted on either axis (settings are clamped to it)
MIN_GRID_SIZE = 24

# Height-field sentinel for "no platform"
NO_PLATFORM = -1

Cell = Tuple[int, int]
WorldPoint = Tuple[float, float, float]


class DoorDirection(Enum):
    """Side of a room a doorway opens onto (+z is north)"""
    NORTH = (0, 1)
    SOUTH = (0, -1)
    EAST = (1, 0)
    WEST = (-1, 0)

    @property
    def offset(self) -> Cell:
        """Grid step pointing out of the room"""
        return self.value

    @property
    def is_north_south(self) -> bool:
        return self in (DoorDirection.NORTH, DoorDirection.SOUTH)


@dataclass(frozen=True)
class Room:
    """Axis-aligned room rectangle with inclusive bounds"""
    min_x: int
    min_z: int
    max_x: int
    max_z: int

    @property
    def center_x(self) -> int:
        return (self.min_x + self.max_x) // 2

    @property
    def center_z(self) -> int:
        return (self.min_z + self.max_z) // 2

    @property
    def center(self) -> Cell:
        return (self.center_x, self.center_z)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def depth(self) -> int:
        return self.max_z - self.min_z + 1

    @property
    def area(self) -> int:
        return self.width * self.depth

    @property
    def along_x(self) -> bool:
        """True when the long axis runs along X (ties go to X)"""
        return self.width >= self.depth

    def intersects(self, other: 'Room', padding: int) -> bool:
        """Check overlap with another room after growing both by padding"""
        return not (self.max_x + padding < other.min_x or
                    self.min_x - padding > other.max_x or
                    self.max_z + padding < other.min_z or
                    self.min_z - padding > other.max_z)

    def contains(self, x: int, z: int) -> bool:
        return self.min_x <= x <= self.max_x and self.min_z <= z <= self.max_z

    def contains_interior(self, x: int, z: int) -> bool:
        """Check if a cell lies strictly inside the room's rim"""
        return self.min_x < x < self.max_x and self.min_z < z < self.max_z

    def cells(self) -> Iterator[Cell]:
        for x in range(self.min_x, self.max_x + 1):
            for z in range(self.min_z, self.max_z + 1):
                yield x, z

    def interior_cells(self) -> Iterator[Cell]:
        for x in range(self.min_x + 1, self.max_x):
            for z in range(self.min_z + 1, self.max_z):
                yield x, z

    def manhattan_to(self, other: 'Room') -> int:
        """Manhattan distance between room centers"""
        return abs(self.center_x - other.center_x) + abs(self.center_z - other.center_z)


@dataclass
class ArenaGrid:
    """
    The shared cell grid.

    Holds the wall field (True = solid) and the height field (tier index,
    NO_PLATFORM for void/solid). Arrays are indexed [z, x]; use the
    accessors, which bounds-check, rather than indexing directly.
    """

    width: int   # Width in cells
    depth: int   # Depth in cells
    cell_size: float = 4.0
    walls: np.ndarray = field(init=False)
    heights: np.ndarray = field(init=False)

    def __post_init__(self):
        """Start fully solid with no platforms"""
        self.walls = np.ones((self.depth, self.width), dtype=bool)
        self.heights = np.full((self.depth, self.width), NO_PLATFORM, dtype=np.int16)

    # -- wall field --

    def in_bounds(self, x: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= z < self.depth

    def is_solid(self, x: int, z: int) -> bool:
        """Wall lookup; anything outside the grid counts as solid"""
        if not self.in_bounds(x, z):
            return True
        return bool(self.walls[z, x])

    def is_open(self, x: int, z: int) -> bool:
        return not self.is_solid(x, z)

    def carve(self, x: int, z: int):
        if self.in_bounds(x, z):
            self.walls[z, x] = False

    def carve_room(self, room: Room):
        """Clear every cell of a room, rim included"""
        self.walls[room.min_z:room.max_z + 1, room.min_x:room.max_x + 1] = False

    def enforce_border(self):
        """Force the outermost ring solid"""
        self.walls[0, :] = True
        self.walls[self.depth - 1, :] = True
        self.walls[:, 0] = True
        self.walls[:, self.width - 1] = True

    # -- height field --

    def get_tier(self, x: int, z: int) -> int:
        if not self.in_bounds(x, z):
            return NO_PLATFORM
        return int(self.heights[z, x])

    def set_tier(self, x: int, z: int, tier: int):
        if self.in_bounds(x, z):
            self.heights[z, x] = tier

    def is_filled(self, x: int, z: int) -> bool:
        return self.get_tier(x, z) >= 0

    def reset_heights(self):
        """Walkable cells start at tier 0, solid cells carry no platform"""
        self.heights = np.where(self.walls, NO_PLATFORM, 0).astype(np.int16)

    # -- coordinates --

    def cell_to_world(self, x: float, z: float, y: float = 0.0) -> WorldPoint:
        """Convert a (possibly fractional) cell to world space, grid centered on origin"""
        x_start = -((self.width - 1) * self.cell_size) * 0.5
        z_start = -((self.depth - 1) * self.cell_size) * 0.5
        return (x_start + x * self.cell_size, float(y), z_start + z * self.cell_size)

    # -- connectivity --

    def flood_fill(self, start_x: int, start_z: int) -> Set[Cell]:
        """Collect every open cell 4-connected to the start cell"""
        region: Set[Cell] = set()
        if self.is_solid(start_x, start_z):
            return region

        queue = deque([(start_x, start_z)])
        region.add((start_x, start_z))
        while queue:
            x, z = queue.popleft()
            for dx, dz in [(0, 1), (0, -1), (1, 0), (-1, 0)]:
                nx, nz = x + dx, z + dz
                if (nx, nz) not in region and self.is_open(nx, nz):
                    region.add((nx, nz))
                    queue.append((nx, nz))
        return region

    def open_cell_count(self) -> int:
        return int(np.count_nonzero(~self.walls))


@dataclass
class PlatformTile:
    """One physical platform tile for a (cell, floor) pair"""
    x: int
    z: int
    floor: int
    tier: int
    top_y: float       # World height of the walkable top
    footprint: float   # Edge length in world units
    position: WorldPoint


@dataclass
class RampSegment:
    """Sloped connector between two stacked floors inside a staircase room"""
    room_index: int
    story: int                # Lower floor index; the ramp climbs to story + 1
    start_cell: Cell
    end_cell: Cell
    start: WorldPoint
    end: WorldPoint
    pitch_degrees: float      # -atan2(rise, run)
    yaw_degrees: float
    length: float
    has_support: bool = False  # Support panel underneath, lowest story only

    @property
    def midpoint(self) -> WorldPoint:
        return tuple((a + b) * 0.5 for a, b in zip(self.start, self.end))


@dataclass(frozen=True)
class Doorway:
    """Room boundary cell that opens onto carved exterior space"""
    x: int
    z: int
    direction: DoorDirection

    def manhattan_to(self, other: 'Doorway') -> int:
        return abs(self.x - other.x) + abs(self.z - other.z)


@dataclass
class RoomLayout:
    """Output of the room layout planner"""
    rooms: List[Room] = field(default_factory=list)
    primary_count: int = 0   # Rooms 0..primary_count-1 came from spawn + primary pass
    connections: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def spawn_room(self) -> Optional[Room]:
        return self.rooms[0] if self.rooms else None
