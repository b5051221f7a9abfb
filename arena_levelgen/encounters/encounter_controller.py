"""
Room encounter state machine.

Entities (player, enemies, barriers) live in a ``HandleTable`` and are
referenced by generation-counted handles, so a destroyed enemy reads as dead
even after its slot has been reused. A ``RoomEncounterController`` goes
IDLE -> ACTIVATED when the player enters the room trigger and
ACTIVATED -> COMPLETED once none of its enemies are alive.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class EntityKind(Enum):
    PLAYER = auto()
    ENEMY = auto()
    BARRIER = auto()
    PROP = auto()


class EncounterState(Enum):
    IDLE = auto()
    ACTIVATED = auto()
    COMPLETED = auto()


@dataclass(frozen=True)
class Handle:
    index: int
    generation: int


@dataclass
class Entity:
    kind: EntityKind
    name: str = ""
    enabled: bool = True
    parent: Optional[Handle] = None
    payload: Dict[str, Any] = field(default_factory=dict)


class HandleTable:
    """
    Slot storage for encounter entities.

    Destroying an entity bumps its slot generation; handles from before the
    bump report as dead. Handles this table never issued raise KeyError.
    """

    def __init__(self):
        self._slots: List[Optional[Entity]] = []
        self._generations: List[int] = []
        self._free: List[int] = []

    def spawn(self, entity: Entity) -> Handle:
        if self._free:
            index = self._free.pop()
            self._slots[index] = entity
        else:
            index = len(self._slots)
            self._slots.append(entity)
            self._generations.append(0)
        return Handle(index, self._generations[index])

    def _check_issued(self, handle: Handle):
        if not (0 <= handle.index < len(self._slots)) or handle.generation > self._generations[handle.index]:
            raise KeyError(f"Handle {handle} was not issued by this table")

    def is_alive(self, handle: Handle) -> bool:
        self._check_issued(handle)
        return (self._generations[handle.index] == handle.generation
                and self._slots[handle.index] is not None)

    def get(self, handle: Handle) -> Optional[Entity]:
        """Entity behind a live handle, None once destroyed"""
        if not self.is_alive(handle):
            return None
        return self._slots[handle.index]

    def destroy(self, handle: Handle) -> bool:
        """Destroy a live entity; destroying a dead handle is a no-op"""
        if not self.is_alive(handle):
            return False
        self._slots[handle.index] = None
        self._generations[handle.index] += 1
        self._free.append(handle.index)
        return True

    def set_enabled(self, handle: Handle, enabled: bool) -> bool:
        entity = self.get(handle)
        if entity is None:
            return False
        entity.enabled = enabled
        return True

    def find_ancestor(self, handle: Handle, kind: EntityKind) -> Optional[Handle]:
        """Walk from an entity up its parent chain to the first entity of the given kind"""
        visited = set()
        current: Optional[Handle] = handle
        while current is not None and current not in visited:
            visited.add(current)
            entity = self.get(current)
            if entity is None:
                return None
            if entity.kind == kind:
                return current
            current = entity.parent
        return None

    def __len__(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)


class RoomEncounterController:
    """Gates one room: wakes its enemies on entry, unlocks its exits once they are dead"""

    def __init__(self, table: HandleTable, room_index: Optional[int] = None, lock_on_enter: bool = True):
        self.table = table
        self.room_index = room_index
        self.lock_on_enter = lock_on_enter
        self.enemies: List[Handle] = []
        self.barriers: List[Handle] = []
        self.state = EncounterState.IDLE

    @property
    def activated(self) -> bool:
        return self.state != EncounterState.IDLE

    @property
    def completed(self) -> bool:
        return self.state == EncounterState.COMPLETED

    def add_enemy(self, handle: Handle):
        if self.table.set_enabled(handle, False):
            self.enemies.append(handle)

    def add_barrier(self, handle: Handle):
        if self.table.set_enabled(handle, False):
            self.barriers.append(handle)

    def alive_enemy_count(self) -> int:
        return sum(1 for handle in self.enemies if self.table.is_alive(handle))

    def on_trigger_enter(self, body: Handle) -> bool:
        """
        Handle a body entering the room trigger.

        Returns:
            True if this call activated the encounter
        """
        if self.state != EncounterState.IDLE:
            return False
        if self.table.find_ancestor(body, EntityKind.PLAYER) is None:
            return False

        self._activate()
        return True

    def update(self) -> EncounterState:
        """Poll for completion; call once per simulation tick"""
        if self.state == EncounterState.ACTIVATED and self.alive_enemy_count() == 0:
            self._complete()
        return self.state

    def _activate(self):
        self.state = EncounterState.ACTIVATED
        for handle in self.enemies:
            self.table.set_enabled(handle, True)
        if self.lock_on_enter:
            for handle in self.barriers:
                self.table.set_enabled(handle, True)
        logger.info("Encounter %s activated: %d enemies, %d barriers",
                    self.room_index, len(self.enemies), len(self.barriers))

    def _complete(self):
        self.state = EncounterState.COMPLETED
        for handle in self.barriers:
            self.table.destroy(handle)
        self.barriers.clear()
        logger.info("Encounter %s completed", self.room_index)
