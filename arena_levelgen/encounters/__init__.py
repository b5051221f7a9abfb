"""
Room encounters: doorway barriers, enemy spawns and the per-room state
machine that gates progress until a room is cleared.
"""

from .doorways import BarrierSpec, collect_doorways, try_add_doorway, create_door_barrier
from .encounter_controller import (
    Handle,
    HandleTable,
    Entity,
    EntityKind,
    EncounterState,
    RoomEncounterController,
)
from .encounter_builder import (
    EnemyVariant,
    EnemySpawn,
    EncounterDefinition,
    EncounterBuilder,
    DEFAULT_ENEMY_VARIANTS,
    pick_variant,
    determine_enemy_count,
    instantiate_encounter,
    instantiate_encounters,
)

__all__ = [
    'BarrierSpec',
    'collect_doorways',
    'try_add_doorway',
    'create_door_barrier',
    'Handle',
    'HandleTable',
    'Entity',
    'EntityKind',
    'EncounterState',
    'RoomEncounterController',
    'EnemyVariant',
    'EnemySpawn',
    'EncounterDefinition',
    'EncounterBuilder',
    'DEFAULT_ENEMY_VARIANTS',
    'pick_variant',
    'determine_enemy_count',
    'instantiate_encounter',
    'instantiate_encounters',
]
