"""
Doorway detection and barrier placement.

A doorway is a room boundary cell that opens onto carved space outside the
room. Neighbouring doorways facing the same way collapse into one so a wide
corridor gets a single barrier.
"""

from dataclasses import dataclass
from typing import List, Tuple

from ..generators.layout.layout_types import ArenaGrid, Room, Doorway, DoorDirection, WorldPoint


@dataclass
class BarrierSpec:
    """Box that seals a doorway while an encounter is active"""
    room_index: int
    doorway_index: int
    doorway: Doorway
    position: WorldPoint
    scale: Tuple[float, float, float]   # (x, y, z) extents
    enabled: bool = False

    @property
    def name(self) -> str:
        return f"Barrier_{self.room_index}_{self.doorway_index}"


def try_add_doorway(doorways: List[Doorway], doorway: Doorway, corridor_width: int) -> bool:
    """
    Append a doorway unless one facing the same way is already within
    ``corridor_width`` (Manhattan) of it.

    Returns:
        True if the doorway was added
    """
    for existing in doorways:
        if existing.direction == doorway.direction and existing.manhattan_to(doorway) <= corridor_width:
            return False
    doorways.append(doorway)
    return True


def collect_doorways(grid: ArenaGrid, room: Room, corridor_width: int) -> List[Doorway]:
    """Walk the four room edges and collect the cells that lead outside"""
    doorways: List[Doorway] = []

    for x in range(room.min_x, room.max_x + 1):
        if grid.is_open(x, room.max_z) and grid.is_open(x, room.max_z + 1):
            try_add_doorway(doorways, Doorway(x, room.max_z, DoorDirection.NORTH), corridor_width)
        if grid.is_open(x, room.min_z) and grid.is_open(x, room.min_z - 1):
            try_add_doorway(doorways, Doorway(x, room.min_z, DoorDirection.SOUTH), corridor_width)

    for z in range(room.min_z, room.max_z + 1):
        if grid.is_open(room.max_x, z) and grid.is_open(room.max_x + 1, z):
            try_add_doorway(doorways, Doorway(room.max_x, z, DoorDirection.EAST), corridor_width)
        if grid.is_open(room.min_x, z) and grid.is_open(room.min_x - 1, z):
            try_add_doorway(doorways, Doorway(room.min_x, z, DoorDirection.WEST), corridor_width)

    return doorways


def create_door_barrier(grid: ArenaGrid, doorway: Doorway, wall_height: float,
                        barrier_thickness: float, room_index: int, doorway_index: int) -> BarrierSpec:
    """Full-height slab across the doorway, pushed half a cell outward"""
    cell = grid.cell_size
    x, y, z = grid.cell_to_world(doorway.x, doorway.z, wall_height * 0.5)
    dx, dz = doorway.direction.offset

    if doorway.direction.is_north_south:
        scale = (cell, wall_height, barrier_thickness)
    else:
        scale = (barrier_thickness, wall_height, cell)

    position = (x + dx * cell * 0.5, y, z + dz * cell * 0.5)
    return BarrierSpec(
        room_index=room_index,
        doorway_index=doorway_index,
        doorway=doorway,
        position=position,
        scale=scale,
    )
