"""
Layout state produced by the generation pipeline.

``ArenaLayout`` bundles every stage's output for one build: the grid with its
wall and height fields, the ordered rooms and their archetypes, platform
geometry, staircases, encounters and the floor-0 top-height lookup used to
drop the player onto the generated floor.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set

from ..generators.layout.layout_types import (
    ArenaGrid, Room, RoomLayout, Doorway, PlatformTile, RampSegment, Cell
)
from ..generators.archetypes.archetype_planner import RoomArchetype
from ..generators.heightfield.height_field import HeightFieldResult, WallExtension
from ..encounters.doorways import BarrierSpec
from ..encounters.encounter_builder import EncounterDefinition, instantiate_encounters
from ..encounters.encounter_controller import HandleTable, RoomEncounterController
from ..conversion.spawn_placement import PlayerSpawnPlacer


@dataclass
class ArenaLayout:
    """
    Complete result of one arena build.

    Attributes:
        seed: Seed the build was generated from
        grid: Cell grid (wall field and final height field)
        room_layout: Rooms, primary-pass count and corridor connections
        archetypes: Read-only room index -> archetype map (no entry for room 0)
        height_field: Tiles, ceilings, staircases and wall extensions
        encounters: One definition per encounter room
        wall_height: World height of one stacked floor
        stacked_floor_count: Number of stacked floors that received tiles
        lock_on_enter: Whether encounters close their barriers on entry
    """
    seed: int
    grid: ArenaGrid
    room_layout: RoomLayout
    archetypes: Mapping[int, RoomArchetype]
    height_field: HeightFieldResult
    encounters: List[EncounterDefinition] = field(default_factory=list)
    wall_height: float = 18.0
    stacked_floor_count: int = 2
    lock_on_enter: bool = True

    def __post_init__(self):
        if not isinstance(self.archetypes, MappingProxyType):
            self.archetypes = MappingProxyType(dict(self.archetypes))

    # -- rooms --

    @property
    def rooms(self) -> List[Room]:
        return self.room_layout.rooms

    @property
    def spawn_room(self) -> Optional[Room]:
        return self.room_layout.spawn_room

    def rooms_of(self, archetype: RoomArchetype) -> List[int]:
        return sorted(i for i, a in self.archetypes.items() if a == archetype)

    # -- geometry --

    @property
    def tiles(self) -> List[PlatformTile]:
        return self.height_field.tiles

    @property
    def ramps(self) -> List[RampSegment]:
        return self.height_field.staircases.ramps

    @property
    def landings(self) -> List[PlatformTile]:
        return self.height_field.staircases.landings

    @property
    def shaft_cells(self) -> Set[Cell]:
        return self.height_field.staircases.shaft_cells

    @property
    def connector_heights(self) -> Dict[Cell, float]:
        return self.height_field.staircases.connector_heights

    @property
    def wall_extensions(self) -> List[WallExtension]:
        return self.height_field.wall_extensions

    def ceiling_height(self, floor: int) -> float:
        return (floor + 1) * self.wall_height

    def top_height_at(self, x: int, z: int) -> Optional[float]:
        """Walkable height at a cell (floor 0 or a ramp sample), None where nothing stands"""
        return self.height_field.top_heights.get((x, z))

    # -- encounters --

    @property
    def doorways(self) -> List[Doorway]:
        return [d for encounter in self.encounters for d in encounter.doorways]

    @property
    def barriers(self) -> List[BarrierSpec]:
        return [b for encounter in self.encounters for b in encounter.barriers]

    def instantiate_encounters(self, table: HandleTable) -> Dict[int, RoomEncounterController]:
        """Register every encounter's entities and return controllers keyed by room index"""
        return instantiate_encounters(self.encounters, table, self.lock_on_enter)

    def make_spawn_placer(self, fallback_height: float = 1.0,
                          max_attempts: int = 180) -> PlayerSpawnPlacer:
        return PlayerSpawnPlacer(self.grid, self.height_field.top_heights,
                                 fallback_height=fallback_height, max_attempts=max_attempts)

    def get_stats(self) -> Dict[str, int]:
        return {
            'room_count': len(self.rooms),
            'primary_room_count': self.room_layout.primary_count,
            'corridor_count': len(self.room_layout.connections),
            'tile_count': len(self.tiles),
            'ramp_count': len(self.ramps),
            'shaft_cell_count': len(self.shaft_cells),
            'encounter_count': len(self.encounters),
            'enemy_count': sum(len(e.enemies) for e in self.encounters),
            'barrier_count': len(self.barriers),
            'wall_extension_count': len(self.wall_extensions),
        }
