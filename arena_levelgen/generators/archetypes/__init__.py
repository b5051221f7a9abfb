"""
Room archetypes: planning which room gets which structure, and the height
rules that give each archetype its shape.
"""

from .archetype_planner import (
    RoomArchetype,
    ArchetypePlanner,
    LARGE_ROOM_AREA,
    is_large_room,
    count_archetypes,
)
from .room_shapes import ROOM_SHAPERS, apply_room_shape

__all__ = [
    'RoomArchetype',
    'ArchetypePlanner',
    'LARGE_ROOM_AREA',
    'is_large_room',
    'count_archetypes',
    'ROOM_SHAPERS',
    'apply_room_shape',
]
