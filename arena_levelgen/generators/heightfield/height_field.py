#!/usr/bin/env python3
"""
Height-Field Generator

Turns the room plan into stacked platform geometry:

1. Reset the height field (walkable cells tier 0, solid cells no platform)
2. Apply each room's archetype shaper
3. Relax the field so no filled cell sits more than one tier above its
   lowest filled neighbour
4. Build staircase ramps and their shafts
5. Emit one platform tile per (cell, floor), leaving stairwells open
6. Build per-floor ceiling masks
7. Guarantee a 3x3 floor-0 platform block under the player spawn

Parkour rooms additionally get wall extensions on their enclosing solid
cells so jumps cannot clear the outer walls.

Author: Arena Level Generator
License: MIT
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

import numpy as np

from ..layout.layout_types import ArenaGrid, Room, Cell, PlatformTile, WorldPoint
from ..archetypes.archetype_planner import RoomArchetype
from ..archetypes.room_shapes import apply_room_shape
from .staircase import StaircaseBuilder, StaircaseResult

logger = logging.getLogger(__name__)


MIN_RELAX_PASSES = 3
# Tiers never exceed 8, so the field settles well before this
MAX_RELAX_PASSES = 64
# Wall extensions rise this many wall heights above the regular wall
WALL_EXTENSION_FACTOR = 2.0

_UNFILLED = np.iinfo(np.int16).max


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class WallExtension:
    """Extra wall block stacked on top of a solid cell around a parkour room"""
    x: int
    z: int
    base_y: float
    height: float
    position: WorldPoint   # Center of the block


@dataclass
class HeightFieldResult:
    tiles: List[PlatformTile] = field(default_factory=list)
    top_heights: Dict[Cell, float] = field(default_factory=dict)   # Floor 0 plus ramp samples
    ceiling_masks: List[np.ndarray] = field(default_factory=list)  # One [z, x] mask per floor
    staircases: StaircaseResult = field(default_factory=StaircaseResult)
    wall_extensions: List[WallExtension] = field(default_factory=list)
    relax_passes: int = 0

    def tiles_on_floor(self, floor: int) -> List[PlatformTile]:
        return [tile for tile in self.tiles if tile.floor == floor]

    def ceiling_panel_count(self) -> int:
        return sum(int(np.count_nonzero(mask)) for mask in self.ceiling_masks)


# ---------------------------------------------------------------------------
# Relaxation
# ---------------------------------------------------------------------------

def neighbour_floor(heights: np.ndarray) -> np.ndarray:
    """Lowest filled orthogonal neighbour per cell (_UNFILLED where none)"""
    source = np.where(heights >= 0, heights, _UNFILLED).astype(np.int32)
    padded = np.pad(source, 1, mode='constant', constant_values=_UNFILLED)
    return np.minimum.reduce([
        padded[:-2, 1:-1],
        padded[2:, 1:-1],
        padded[1:-1, :-2],
        padded[1:-1, 2:],
    ])


def relax_heights(heights: np.ndarray, min_passes: int = MIN_RELAX_PASSES,
                  max_passes: int = MAX_RELAX_PASSES) -> int:
    """
    Lower filled cells in place until each is at most one tier above its
    lowest filled neighbour.

    Runs at least ``min_passes`` passes and keeps going while a pass still
    changes something.

    Returns:
        Number of passes run
    """
    passes = 0
    while passes < max_passes:
        lowest = neighbour_floor(heights)
        cap = lowest + 1
        too_high = (heights >= 0) & (lowest != _UNFILLED) & (heights > cap)
        passes += 1
        if not too_high.any():
            if passes >= min_passes:
                break
            continue
        heights[too_high] = cap[too_high]
    return passes


def smoothness_violations(heights: np.ndarray) -> List[Cell]:
    """Filled cells more than one tier above their lowest filled neighbour, as (x, z)"""
    lowest = neighbour_floor(heights)
    bad = (heights >= 0) & (lowest != _UNFILLED) & (heights > lowest + 1)
    return [(int(x), int(z)) for z, x in np.argwhere(bad)]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class HeightFieldGenerator:
    """Builds the height field and the platform geometry derived from it"""

    def __init__(self, rng: random.Random,
                 wall_height: float = 18.0,
                 platform_level_height: float = 1.5,
                 max_platform_tiers: int = 4,
                 stacked_floor_count: int = 2,
                 platform_footprint_min: float = 0.6,
                 platform_footprint_max: float = 0.9):
        self.rng = rng
        self.wall_height = wall_height
        self.platform_level_height = platform_level_height
        self.max_platform_tiers = max_platform_tiers
        self.stacked_floor_count = max(1, stacked_floor_count)
        self.platform_footprint_min = min(platform_footprint_min, platform_footprint_max)
        self.platform_footprint_max = max(platform_footprint_min, platform_footprint_max)
        self.staircase_builder = StaircaseBuilder(rng, wall_height, self.stacked_floor_count)

    def generate(self, grid: ArenaGrid, rooms: List[Room],
                 archetypes: Mapping[int, RoomArchetype]) -> HeightFieldResult:
        result = HeightFieldResult()
        grid.reset_heights()

        for index in sorted(archetypes):
            apply_room_shape(grid, rooms[index], archetypes[index], self.max_platform_tiers, self.rng)

        result.relax_passes = relax_heights(grid.heights)
        result.staircases = self.staircase_builder.build(grid, rooms, archetypes)

        parkour_mask = self._parkour_mask(grid, rooms, archetypes)
        self._emit_tiles(grid, parkour_mask, result)
        # Ramp samples mark the walkable height of the cells they cross
        result.top_heights.update(result.staircases.connector_heights)
        self._build_ceilings(grid, result)
        if rooms:
            self._ensure_spawn_platform(grid, rooms[0], result)
        result.wall_extensions = collect_wall_extensions(grid, rooms, archetypes, self.wall_height)

        logger.debug(
            "Height field: %d tiles over %d floors, %d relax passes, %d wall extensions",
            len(result.tiles), self.stacked_floor_count, result.relax_passes, len(result.wall_extensions)
        )
        return result

    def top_y(self, floor: int, tier: int) -> float:
        return floor * self.wall_height + tier * self.platform_level_height

    @staticmethod
    def _parkour_mask(grid: ArenaGrid, rooms: List[Room],
                      archetypes: Mapping[int, RoomArchetype]) -> np.ndarray:
        mask = np.zeros_like(grid.walls)
        for index, archetype in archetypes.items():
            if archetype.is_parkour:
                room = rooms[index]
                mask[room.min_z:room.max_z + 1, room.min_x:room.max_x + 1] = True
        return mask

    def _footprint(self, grid: ArenaGrid, parkour: bool) -> float:
        if not parkour:
            return grid.cell_size
        return self.rng.uniform(self.platform_footprint_min, self.platform_footprint_max) * grid.cell_size

    def _make_tile(self, grid: ArenaGrid, x: int, z: int, floor: int, tier: int, footprint: float) -> PlatformTile:
        top = self.top_y(floor, tier)
        return PlatformTile(
            x=x, z=z, floor=floor, tier=tier, top_y=top,
            footprint=footprint, position=grid.cell_to_world(x, z, top),
        )

    def _emit_tiles(self, grid: ArenaGrid, parkour_mask: np.ndarray, result: HeightFieldResult):
        shafts = result.staircases.shaft_cells
        filled = np.argwhere(grid.heights >= 0)

        for floor in range(self.stacked_floor_count):
            for z, x in filled:
                x, z = int(x), int(z)
                if floor > 0 and (x, z) in shafts:
                    continue
                tier = int(grid.heights[z, x])
                tile = self._make_tile(grid, x, z, floor, tier, self._footprint(grid, bool(parkour_mask[z, x])))
                result.tiles.append(tile)
                if floor == 0:
                    result.top_heights[(x, z)] = tile.top_y

    def _build_ceilings(self, grid: ArenaGrid, result: HeightFieldResult):
        shaft_mask = np.zeros_like(grid.walls)
        for x, z in result.staircases.shaft_cells:
            shaft_mask[z, x] = True

        open_cells = ~grid.walls & ~shaft_mask
        result.ceiling_masks = [open_cells.copy() for _ in range(self.stacked_floor_count)]

    def _ensure_spawn_platform(self, grid: ArenaGrid, spawn_room: Room, result: HeightFieldResult):
        cx, cz = spawn_room.center
        for x in range(cx - 1, cx + 2):
            for z in range(cz - 1, cz + 2):
                if not grid.in_bounds(x, z) or (x, z) in result.top_heights:
                    continue
                grid.set_tier(x, z, 0)
                tile = self._make_tile(grid, x, z, 0, 0, grid.cell_size)
                result.tiles.append(tile)
                result.top_heights[(x, z)] = tile.top_y


def collect_wall_extensions(grid: ArenaGrid, rooms: List[Room],
                            archetypes: Mapping[int, RoomArchetype],
                            wall_height: float) -> List[WallExtension]:
    """Solid cells on the ring enclosing each parkour room, raised above the wall"""
    extension_height = wall_height * WALL_EXTENSION_FACTOR
    center_y = wall_height + extension_height * 0.5
    seen = set()
    extensions: List[WallExtension] = []

    for index in sorted(archetypes):
        if not archetypes[index].is_parkour:
            continue
        room = rooms[index]
        ring = []
        for x in range(room.min_x - 1, room.max_x + 2):
            ring.append((x, room.min_z - 1))
            ring.append((x, room.max_z + 1))
        for z in range(room.min_z, room.max_z + 1):
            ring.append((room.min_x - 1, z))
            ring.append((room.max_x + 1, z))

        for x, z in ring:
            if (x, z) in seen or not grid.in_bounds(x, z) or not grid.is_solid(x, z):
                continue
            seen.add((x, z))
            extensions.append(WallExtension(
                x=x, z=z, base_y=wall_height, height=extension_height,
                position=grid.cell_to_world(x, z, center_y),
            ))
    return extensions
