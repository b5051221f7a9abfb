"""
Encounter construction.

Turns every encounter-archetype room into an ``EncounterDefinition``: the
room trigger volume, its doorway barriers and a set of enemy spawns drawn
from weighted enemy variants. ``instantiate_encounter`` registers a
definition's entities in a ``HandleTable`` and wires up its controller.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..generators.layout.layout_types import ArenaGrid, Room, Cell, Doorway, WorldPoint
from ..generators.archetypes.archetype_planner import RoomArchetype
from .doorways import BarrierSpec, collect_doorways, create_door_barrier
from .encounter_controller import Entity, EntityKind, HandleTable, RoomEncounterController

logger = logging.getLogger(__name__)


SPAWN_ATTEMPTS_PER_ENEMY = 20
MIN_SPAWN_WEIGHT = 0.01


@dataclass
class EnemyVariant:
    """Tuning for one kind of enemy"""
    name: str = "Grunt"
    shape: str = "capsule"
    color: Tuple[float, float, float] = (0.75, 0.18, 0.18)
    spawn_weight: float = 1.0
    size_range: Tuple[float, float] = (0.9, 1.1)
    health: float = 70.0
    move_speed: float = 2.8
    vision_radius: float = 16.0
    contact_damage: float = 10.0
    attack_range: float = 1.45
    attack_cooldown: float = 0.9


DEFAULT_ENEMY_VARIANTS: List[EnemyVariant] = [
    EnemyVariant(
        name="Grunt", shape="capsule", color=(0.75, 0.22, 0.22), spawn_weight=1.6,
        size_range=(0.9, 1.1), health=70.0, move_speed=2.8, vision_radius=16.0,
        contact_damage=10.0, attack_range=1.4, attack_cooldown=0.9,
    ),
    EnemyVariant(
        name="Runner", shape="sphere", color=(0.9, 0.65, 0.2), spawn_weight=1.0,
        size_range=(0.65, 0.9), health=45.0, move_speed=4.2, vision_radius=18.0,
        contact_damage=7.0, attack_range=1.25, attack_cooldown=0.55,
    ),
    EnemyVariant(
        name="Brute", shape="cube", color=(0.45, 0.18, 0.75), spawn_weight=0.7,
        size_range=(1.2, 1.5), health=140.0, move_speed=1.9, vision_radius=14.0,
        contact_damage=18.0, attack_range=1.8, attack_cooldown=1.25,
    ),
]


@dataclass
class EnemySpawn:
    variant: EnemyVariant
    cell: Cell
    position: WorldPoint
    scale: float
    controller_height: float
    controller_radius: float

    @property
    def name(self) -> str:
        return f"Enemy_{self.variant.name}"


@dataclass
class EncounterDefinition:
    """Everything needed to stand up one room encounter"""
    room_index: int
    archetype: RoomArchetype
    trigger_center: WorldPoint
    trigger_size: Tuple[float, float, float]
    doorways: List[Doorway] = field(default_factory=list)
    barriers: List[BarrierSpec] = field(default_factory=list)
    enemies: List[EnemySpawn] = field(default_factory=list)


def pick_variant(rng: random.Random, variants: Sequence[EnemyVariant]) -> EnemyVariant:
    """Weighted pick; weights below 0.01 are raised to 0.01"""
    if not variants:
        return EnemyVariant()

    total = sum(max(MIN_SPAWN_WEIGHT, v.spawn_weight) for v in variants)
    roll = rng.random() * total
    cumulative = 0.0
    for variant in variants:
        cumulative += max(MIN_SPAWN_WEIGHT, variant.spawn_weight)
        if roll <= cumulative:
            return variant
    return variants[-1]


def determine_enemy_count(rng: random.Random, room: Room, spawn_room: Room,
                          min_enemies: int, max_enemies: int) -> int:
    """Uniform count in [min, max], one extra when the room is larger than the spawn room"""
    min_count = max(1, min_enemies)
    max_count = max(min_count, max_enemies)
    count = rng.randint(min_count, max_count)
    if room.area > spawn_room.area:
        count += 1
    return count


def make_enemy_spawn(rng: random.Random, variant: EnemyVariant, cell: Cell, position: WorldPoint) -> EnemySpawn:
    low, high = min(variant.size_range), max(variant.size_range)
    scale = rng.uniform(low, high)
    return EnemySpawn(
        variant=variant,
        cell=cell,
        position=position,
        scale=scale,
        controller_height=max(1.0, min(3.0, 1.6 * scale)),
        controller_radius=max(0.2, min(0.8, 0.32 * scale)),
    )


class EncounterBuilder:
    """Builds encounter definitions for SMALL_ENCOUNTER and LARGE_ENCOUNTER rooms"""

    def __init__(self, rng: random.Random, grid: ArenaGrid,
                 wall_height: float = 18.0,
                 corridor_width: int = 1,
                 barrier_thickness: float = 0.45,
                 min_enemies: int = 2,
                 max_enemies: int = 5,
                 variants: Optional[Sequence[EnemyVariant]] = None):
        self.rng = rng
        self.grid = grid
        self.wall_height = wall_height
        self.corridor_width = corridor_width
        self.barrier_thickness = barrier_thickness
        self.min_enemies = min_enemies
        self.max_enemies = max_enemies
        self.variants = list(variants) if variants else list(DEFAULT_ENEMY_VARIANTS)

    def build(self, rooms: List[Room], archetypes: Mapping[int, RoomArchetype],
              top_heights: Mapping[Cell, float]) -> List[EncounterDefinition]:
        definitions = []
        if not rooms:
            return definitions

        spawn_room = rooms[0]
        for index in sorted(archetypes):
            if archetypes[index].is_encounter:
                definitions.append(self.build_room(index, rooms[index], archetypes[index], spawn_room, top_heights))

        logger.debug("Built %d encounters with %d enemies", len(definitions),
                     sum(len(d.enemies) for d in definitions))
        return definitions

    def build_room(self, room_index: int, room: Room, archetype: RoomArchetype,
                   spawn_room: Room, top_heights: Mapping[Cell, float]) -> EncounterDefinition:
        grid = self.grid
        definition = EncounterDefinition(
            room_index=room_index,
            archetype=archetype,
            trigger_center=grid.cell_to_world(room.center_x, room.center_z, self.wall_height * 0.5),
            trigger_size=(room.width * grid.cell_size, self.wall_height, room.depth * grid.cell_size),
        )

        definition.doorways = collect_doorways(grid, room, self.corridor_width)
        for doorway_index, doorway in enumerate(definition.doorways):
            definition.barriers.append(create_door_barrier(
                grid, doorway, self.wall_height, self.barrier_thickness, room_index, doorway_index
            ))

        count = determine_enemy_count(self.rng, room, spawn_room, self.min_enemies, self.max_enemies)
        definition.enemies = self._sample_enemies(room, count, top_heights)
        return definition

    def _sample_enemies(self, room: Room, count: int, top_heights: Mapping[Cell, float]) -> List[EnemySpawn]:
        enemies: List[EnemySpawn] = []
        for _ in range(count * SPAWN_ATTEMPTS_PER_ENEMY):
            if len(enemies) >= count:
                break
            x = self.rng.randrange(room.min_x + 1, room.max_x)
            z = self.rng.randrange(room.min_z + 1, room.max_z)
            if self.grid.is_solid(x, z) or not self.grid.is_filled(x, z):
                continue

            position = self.grid.cell_to_world(x, z, top_heights.get((x, z), 0.0))
            variant = pick_variant(self.rng, self.variants)
            enemies.append(make_enemy_spawn(self.rng, variant, (x, z), position))
        return enemies


def instantiate_encounter(definition: EncounterDefinition, table: HandleTable,
                          lock_on_enter: bool = True) -> RoomEncounterController:
    """Register a definition's enemies and barriers and return its controller"""
    controller = RoomEncounterController(table, definition.room_index, lock_on_enter)

    for index, enemy in enumerate(definition.enemies):
        handle = table.spawn(Entity(
            kind=EntityKind.ENEMY,
            name=f"{enemy.name}_{index}",
            payload={'spawn': enemy},
        ))
        controller.add_enemy(handle)

    for barrier in definition.barriers:
        handle = table.spawn(Entity(
            kind=EntityKind.BARRIER,
            name=barrier.name,
            payload={'spec': barrier},
        ))
        controller.add_barrier(handle)

    return controller


def instantiate_encounters(definitions: Sequence[EncounterDefinition], table: HandleTable,
                           lock_on_enter: bool = True) -> Dict[int, RoomEncounterController]:
    return {d.room_index: instantiate_encounter(d, table, lock_on_enter) for d in definitions}
