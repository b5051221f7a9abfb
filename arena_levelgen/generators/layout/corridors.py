"""
Corridor carving between grid points.

Corridors are carved straight into the wall field: a direct two-segment L
path, or a three-segment "long" path routed through a random midpoint line.
Every integer step along a segment stamps a square brush of the brush radius.
"""

import random
from typing import Tuple

from .layout_types import ArenaGrid, Cell


def brush_radius_for_width(corridor_width: int) -> int:
    """Corridor width 1 carves single cells, each extra unit widens the brush"""
    return max(0, corridor_width - 1)


def carve_disk(grid: ArenaGrid, center_x: int, center_z: int, radius: int):
    """Clear the square of cells within ``radius`` of the center, never touching the outer ring"""
    min_x = max(1, center_x - radius)
    max_x = min(grid.width - 2, center_x + radius)
    min_z = max(1, center_z - radius)
    max_z = min(grid.depth - 2, center_z + radius)
    if min_x > max_x or min_z > max_z:
        return
    grid.walls[min_z:max_z + 1, min_x:max_x + 1] = False


def carve_line(grid: ArenaGrid, start_x: int, start_z: int, end_x: int, end_z: int, radius: int):
    """Walk X first, then Z, stamping the brush at every step"""
    x, z = start_x, start_z

    while x != end_x:
        carve_disk(grid, x, z, radius)
        x += 1 if x < end_x else -1

    while z != end_z:
        carve_disk(grid, x, z, radius)
        z += 1 if z < end_z else -1

    carve_disk(grid, end_x, end_z, radius)


class CorridorCarver:
    """
    Connects two grid points with a walkable path.

    With probability ``long_corridor_chance`` the path detours through a
    random midpoint line, which gives less grid-aligned connective tissue
    than plain L paths.
    """

    def __init__(self, rng: random.Random, long_corridor_chance: float = 0.65):
        self.rng = rng
        self.long_corridor_chance = long_corridor_chance
        self.long_corridors = 0
        self.direct_corridors = 0

    def carve(self, grid: ArenaGrid, start: Cell, end: Cell, corridor_width: int):
        radius = brush_radius_for_width(corridor_width)
        if self.rng.random() < self.long_corridor_chance:
            self.carve_long(grid, start, end, radius)
        else:
            self.carve_direct(grid, start, end, radius)

    def carve_direct(self, grid: ArenaGrid, start: Cell, end: Cell, radius: int):
        """Two-segment L path, axis order chosen 50/50"""
        (start_x, start_z), (end_x, end_z) = start, end
        if self.rng.random() < 0.5:
            carve_line(grid, start_x, start_z, end_x, start_z, radius)
            carve_line(grid, end_x, start_z, end_x, end_z, radius)
        else:
            carve_line(grid, start_x, start_z, start_x, end_z, radius)
            carve_line(grid, start_x, end_z, end_x, end_z, radius)
        self.direct_corridors += 1

    def carve_long(self, grid: ArenaGrid, start: Cell, end: Cell, radius: int):
        """Three-segment path through one random axis-aligned midpoint"""
        (start_x, start_z), (end_x, end_z) = start, end
        if self.rng.random() < 0.5:
            mid_z = self.rng.randrange(2, grid.depth - 2)
            carve_line(grid, start_x, start_z, start_x, mid_z, radius)
            carve_line(grid, start_x, mid_z, end_x, mid_z, radius)
            carve_line(grid, end_x, mid_z, end_x, end_z, radius)
        else:
            mid_x = self.rng.randrange(2, grid.width - 2)
            carve_line(grid, start_x, start_z, mid_x, start_z, radius)
            carve_line(grid, mid_x, start_z, mid_x, end_z, radius)
            carve_line(grid, mid_x, end_z, end_x, end_z, radius)
        self.long_corridors += 1

    @property
    def stats(self) -> Tuple[int, int]:
        """(direct, long) corridor counts carved so far"""
        return self.direct_corridors, self.long_corridors
