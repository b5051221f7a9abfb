"""
Layout Module for Arena Grid Generation

Cell grid, room rectangles, corridor carving and the room layout planner
that every later generation stage builds on.
"""

from .layout_types import (
    ArenaGrid,
    Room,
    RoomLayout,
    Doorway,
    DoorDirection,
    PlatformTile,
    RampSegment,
    MIN_GRID_SIZE,
    NO_PLATFORM,
)
from .corridors import CorridorCarver, carve_disk, carve_line, brush_radius_for_width
from .room_layout import RoomLayoutPlanner, biased_room_size, spawn_room_size

__all__ = [
    'ArenaGrid',
    'Room',
    'RoomLayout',
    'Doorway',
    'DoorDirection',
    'PlatformTile',
    'RampSegment',
    'MIN_GRID_SIZE',
    'NO_PLATFORM',
    'CorridorCarver',
    'carve_disk',
    'carve_line',
    'brush_radius_for_width',
    'RoomLayoutPlanner',
    'biased_room_size',
    'spawn_room_size',
]
