"""
Layout validation checks.

Validates a finished arena build against its structural invariants:
- Border closure (GRID-001)
- Connectivity from the spawn room (GRID-002)
- Primary-pass clearance (ROOM-001)
- Archetype exclusivity (ROOM-002)
- Fallback-pass overlap (ROOM-003)
- Height smoothness (HGT-001)
- Spawn platform (SPWN-001)
"""

from typing import TYPE_CHECKING, List, Mapping

import numpy as np

from ...generators.layout.layout_types import ArenaGrid, Room, RoomLayout, Cell
from ...generators.archetypes.archetype_planner import RoomArchetype
from ...generators.heightfield.height_field import smoothness_violations
from ..core import ValidationIssue, ValidationResult
from ..rules import GRID_001, GRID_002, ROOM_001, ROOM_002, ROOM_003, HGT_001, SPWN_001

if TYPE_CHECKING:
    from ...pipeline.layout_state import ArenaLayout


def check_border_closure(grid: ArenaGrid) -> List[ValidationIssue]:
    issues = []
    ring = np.zeros_like(grid.walls)
    ring[0, :] = ring[-1, :] = True
    ring[:, 0] = ring[:, -1] = True

    for z, x in np.argwhere(ring & ~grid.walls):
        issues.append(GRID_001.issue(cell=(int(x), int(z)), x=int(x), z=int(z)))
    return issues


def check_connectivity(grid: ArenaGrid, rooms: List[Room]) -> List[ValidationIssue]:
    """Flood fill from the spawn room center must reach every room center"""
    if not rooms:
        return []

    region = grid.flood_fill(*rooms[0].center)
    issues = []
    for index, room in enumerate(rooms):
        if room.center not in region:
            issues.append(GRID_002.issue(room_index=index, room=index, x=room.center_x, z=room.center_z))
    return issues


def check_room_overlap(room_layout: RoomLayout) -> List[ValidationIssue]:
    """Primary-pass rooms keep padding 1 from earlier rooms, fallback rooms padding 0"""
    issues = []
    rooms = room_layout.rooms
    for index in range(1, len(rooms)):
        primary = index < room_layout.primary_count
        padding = 1 if primary else 0
        rule = ROOM_001 if primary else ROOM_003
        for other in range(index):
            if rooms[index].intersects(rooms[other], padding):
                issues.append(rule.issue(room_index=index, room=index, other=other))
    return issues


def check_archetype_exclusivity(rooms: List[Room],
                                archetypes: Mapping[int, RoomArchetype]) -> List[ValidationIssue]:
    issues = []
    if 0 in archetypes:
        issues.append(ROOM_002.issue(room_index=0, details="Spawn room carries an archetype"))

    expected = set(range(1, len(rooms)))
    missing = sorted(expected - set(archetypes))
    unknown = sorted(set(archetypes) - expected - {0})
    if missing:
        issues.append(ROOM_002.issue(details=f"Rooms without an archetype: {missing}"))
    if unknown:
        issues.append(ROOM_002.issue(details=f"Archetypes for rooms that do not exist: {unknown}"))
    return issues


def check_height_smoothness(grid: ArenaGrid) -> List[ValidationIssue]:
    issues = []
    for x, z in smoothness_violations(grid.heights):
        issues.append(HGT_001.issue(cell=(x, z), x=x, z=z, tier=grid.get_tier(x, z)))
    return issues


def check_spawn_platform(rooms: List[Room], top_heights: Mapping[Cell, float]) -> List[ValidationIssue]:
    if not rooms:
        return []

    cx, cz = rooms[0].center
    issues = []
    for x in range(cx - 1, cx + 2):
        for z in range(cz - 1, cz + 2):
            if (x, z) not in top_heights:
                issues.append(SPWN_001.issue(cell=(x, z), x=x, z=z))
    return issues


def validate_layout(layout: 'ArenaLayout') -> ValidationResult:
    """Run every layout check against a finished build"""
    result = ValidationResult()
    result.extend(check_border_closure(layout.grid))
    result.extend(check_connectivity(layout.grid, layout.rooms))
    result.extend(check_room_overlap(layout.room_layout))
    result.extend(check_archetype_exclusivity(layout.rooms, layout.archetypes))
    result.extend(check_height_smoothness(layout.grid))
    result.extend(check_spawn_platform(layout.rooms, layout.height_field.top_heights))
    return result
