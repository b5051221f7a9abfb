"""
Room archetype planning.

Tags every non-spawn room with exactly one structural archetype. Rooms are
bucketed by area; staircases and the two parkour kinds are drawn first from
disjoint random selections, then the rest become encounter or empty rooms.
"""

import logging
import random
from enum import Enum, auto
from typing import Dict, List, Set

from ..layout.layout_types import Room

logger = logging.getLogger(__name__)


# Rooms with at least this many cells count as large
LARGE_ROOM_AREA = 170

# Chance that a leftover room becomes an encounter room
LARGE_ENCOUNTER_CHANCE = 0.7
SMALL_ENCOUNTER_CHANCE = 0.6


class RoomArchetype(Enum):
    """Structural category of a room"""
    SMALL_EMPTY = auto()
    SMALL_ENCOUNTER = auto()
    LARGE_EMPTY = auto()
    LARGE_ENCOUNTER = auto()
    STAIRCASE = auto()
    HALLWAY_PARKOUR = auto()
    VERTICAL_PARKOUR = auto()

    @property
    def is_parkour(self) -> bool:
        return self in (RoomArchetype.HALLWAY_PARKOUR, RoomArchetype.VERTICAL_PARKOUR)

    @property
    def is_encounter(self) -> bool:
        return self in (RoomArchetype.SMALL_ENCOUNTER, RoomArchetype.LARGE_ENCOUNTER)


def is_large_room(room: Room) -> bool:
    return room.area >= LARGE_ROOM_AREA


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class ArchetypePlanner:
    """Assigns archetypes to rooms 1..n-1; room 0 (spawn) is never tagged"""

    def __init__(self, rng: random.Random, staircase_count: int = 4):
        self.rng = rng
        self.staircase_count = staircase_count

    def plan(self, rooms: List[Room]) -> Dict[int, RoomArchetype]:
        archetypes: Dict[int, RoomArchetype] = {}
        if len(rooms) <= 1:
            return archetypes

        small_rooms: List[int] = []
        large_rooms: List[int] = []
        for index in range(1, len(rooms)):
            if is_large_room(rooms[index]):
                large_rooms.append(index)
            else:
                small_rooms.append(index)

        used: Set[int] = set()
        room_count = len(rooms)

        staircase_pool = large_rooms if large_rooms else small_rooms
        staircase_targets = min(max(1, self.staircase_count),
                                len(large_rooms) if large_rooms else room_count - 1)
        self._assign_random(archetypes, staircase_pool, used, RoomArchetype.STAIRCASE, staircase_targets)

        hallway_targets = clamp((room_count - 1) // 8, 1, 3)
        self._assign_random(archetypes, large_rooms, used, RoomArchetype.HALLWAY_PARKOUR, hallway_targets)

        vertical_targets = clamp((room_count - 1) // 10, 1, 2)
        self._assign_random(archetypes, large_rooms, used, RoomArchetype.VERTICAL_PARKOUR, vertical_targets)

        for index in range(1, room_count):
            if index in used:
                continue

            large = is_large_room(rooms[index])
            encounter = self.rng.random() < (LARGE_ENCOUNTER_CHANCE if large else SMALL_ENCOUNTER_CHANCE)
            if large:
                archetypes[index] = RoomArchetype.LARGE_ENCOUNTER if encounter else RoomArchetype.LARGE_EMPTY
            else:
                archetypes[index] = RoomArchetype.SMALL_ENCOUNTER if encounter else RoomArchetype.SMALL_EMPTY

        logger.debug(
            "Archetypes: %d large, %d small rooms -> %s",
            len(large_rooms), len(small_rooms), count_archetypes(archetypes)
        )
        return archetypes

    def _assign_random(self, archetypes: Dict[int, RoomArchetype], candidates: List[int],
                       used: Set[int], archetype: RoomArchetype, target_count: int):
        """Draw up to target_count unused candidates without replacement"""
        if target_count <= 0:
            return

        available = [index for index in candidates if index not in used]
        placed = 0
        while placed < target_count and available:
            index = available.pop(self.rng.randrange(len(available)))
            used.add(index)
            archetypes[index] = archetype
            placed += 1


def count_archetypes(archetypes: Dict[int, RoomArchetype]) -> Dict[str, int]:
    """Histogram of archetype names, handy for logs and debug exports"""
    counts: Dict[str, int] = {}
    for archetype in archetypes.values():
        counts[archetype.name] = counts.get(archetype.name, 0) + 1
    return counts
