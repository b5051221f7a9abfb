"""
Staircase and ramp builder.

Each staircase room gets one sloped connector between two adjacent stacked
floors: a landing at each end, a ramp segment between them and a set of
sampled connector heights along the incline. A 3x3 shaft is cleared around
every sample so the floor above and the ceiling leave the stairwell open.
"""

import math
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Set

from ..layout.layout_types import ArenaGrid, Room, Cell, PlatformTile, RampSegment
from ..archetypes.archetype_planner import RoomArchetype

logger = logging.getLogger(__name__)


# Endpoints sit this many cells in from each end of the long axis
RAMP_END_INSET = 2
# Rooms whose long-axis extent minus 4 is below this are skipped
MIN_AVAILABLE_RUN = 4
MIN_RAMP_SAMPLES = 4


@dataclass
class StaircaseResult:
    """Everything the staircase pass produced for one build"""
    landings: List[PlatformTile] = field(default_factory=list)
    ramps: List[RampSegment] = field(default_factory=list)
    connector_heights: Dict[Cell, float] = field(default_factory=dict)
    shaft_cells: Set[Cell] = field(default_factory=set)
    skipped_rooms: List[int] = field(default_factory=list)

    def is_shaft(self, x: int, z: int) -> bool:
        return (x, z) in self.shaft_cells


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class StaircaseBuilder:
    """Builds floor-to-floor ramps inside every STAIRCASE room"""

    def __init__(self, rng: random.Random, wall_height: float = 18.0, stacked_floor_count: int = 2):
        self.rng = rng
        self.wall_height = wall_height
        self.stacked_floor_count = stacked_floor_count

    def build(self, grid: ArenaGrid, rooms: List[Room],
              archetypes: Mapping[int, RoomArchetype]) -> StaircaseResult:
        result = StaircaseResult()
        for index in sorted(archetypes):
            if archetypes[index] != RoomArchetype.STAIRCASE:
                continue
            if not self.build_room(grid, index, rooms[index], result):
                result.skipped_rooms.append(index)

        logger.debug(
            "Staircases: %d ramps, %d skipped rooms, %d shaft cells",
            len(result.ramps), len(result.skipped_rooms), len(result.shaft_cells)
        )
        return result

    def build_room(self, grid: ArenaGrid, room_index: int, room: Room, result: StaircaseResult) -> bool:
        """
        Build the ramp for one room.

        Returns:
            False when the room is skipped (run too short or a single floor)
        """
        along_x = room.along_x
        long_extent = room.width if along_x else room.depth
        if long_extent - 4 < MIN_AVAILABLE_RUN:
            logger.debug("Staircase room %d skipped: long extent %d too short", room_index, long_extent)
            return False
        if self.stacked_floor_count < 2:
            logger.debug("Staircase room %d skipped: only one stacked floor", room_index)
            return False

        story = self.rng.randint(0, self.stacked_floor_count - 2)
        forward = self.rng.random() < 0.5

        if along_x:
            low_end = (room.min_x + RAMP_END_INSET, room.center_z)
            high_end = (room.max_x - RAMP_END_INSET, room.center_z)
        else:
            low_end = (room.center_x, room.min_z + RAMP_END_INSET)
            high_end = (room.center_x, room.max_z - RAMP_END_INSET)
        start_cell, end_cell = (low_end, high_end) if forward else (high_end, low_end)

        start_y = story * self.wall_height
        end_y = (story + 1) * self.wall_height
        start = grid.cell_to_world(start_cell[0], start_cell[1], start_y)
        end = grid.cell_to_world(end_cell[0], end_cell[1], end_y)

        dx = end[0] - start[0]
        dz = end[2] - start[2]
        run = math.hypot(dx, dz)
        rise = end_y - start_y

        result.landings.append(self._landing(grid, start_cell, story, start_y))
        result.ramps.append(RampSegment(
            room_index=room_index,
            story=story,
            start_cell=start_cell,
            end_cell=end_cell,
            start=start,
            end=end,
            pitch_degrees=-math.degrees(math.atan2(rise, run)),
            yaw_degrees=math.degrees(math.atan2(dx, dz)),
            length=math.hypot(run, rise),
            has_support=story == 0,
        ))
        result.landings.append(self._landing(grid, end_cell, story + 1, end_y))

        self._register_samples(grid, start_cell, end_cell, start_y, end_y, run, result)
        return True

    def _landing(self, grid: ArenaGrid, cell: Cell, floor: int, top_y: float) -> PlatformTile:
        return PlatformTile(
            x=cell[0],
            z=cell[1],
            floor=floor,
            tier=0,
            top_y=top_y,
            footprint=grid.cell_size,
            position=grid.cell_to_world(cell[0], cell[1], top_y),
        )

    def _register_samples(self, grid: ArenaGrid, start_cell: Cell, end_cell: Cell,
                          start_y: float, end_y: float, run: float, result: StaircaseResult):
        samples = max(MIN_RAMP_SAMPLES, int(run / grid.cell_size) + 2)
        for i in range(samples):
            t = i / (samples - 1)
            x = round_half_up(start_cell[0] + (end_cell[0] - start_cell[0]) * t)
            z = round_half_up(start_cell[1] + (end_cell[1] - start_cell[1]) * t)
            result.connector_heights[(x, z)] = start_y + (end_y - start_y) * t

            for sx in range(x - 1, x + 2):
                for sz in range(z - 1, z + 2):
                    if grid.in_bounds(sx, sz):
                        result.shaft_cells.add((sx, sz))
