"""
Deferred player spawn placement.

The player may not exist yet when a map finishes building. The placer keeps
a ``PendingSpawn`` and retries once per tick until the player shows up or
the attempt budget runs out, at which point it gives up with one warning.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from ..generators.layout.layout_types import ArenaGrid, Room, Cell, WorldPoint

logger = logging.getLogger(__name__)


MAX_SPAWN_ATTEMPTS = 180
# Lift above the floor so the player's collider starts clear of it
SPAWN_CLEARANCE = 0.05


@dataclass
class PlayerBody:
    """The bits of a player the placer needs"""
    position: WorldPoint
    # Offset from the body origin to the bottom of its collider, None without one
    bottom_offset: Optional[float] = None


@dataclass
class PendingSpawn:
    pending: bool = False
    attempts: int = 0
    target: Optional[WorldPoint] = None
    cell: Optional[Cell] = None


PlayerLocator = Callable[[], Optional[PlayerBody]]


class PlayerSpawnPlacer:
    """Places the player at the spawn-room center on the generated floor"""

    def __init__(self, grid: ArenaGrid, top_heights: Mapping[Cell, float],
                 fallback_height: float = 1.0,
                 max_attempts: int = MAX_SPAWN_ATTEMPTS,
                 base_y: float = 0.0):
        self.grid = grid
        self.top_heights = top_heights
        self.fallback_height = fallback_height
        self.max_attempts = max_attempts
        self.base_y = base_y
        self.state = PendingSpawn()
        self.timed_out = False

    @property
    def pending(self) -> bool:
        return self.state.pending

    def queue(self, spawn_room: Room, locate_player: PlayerLocator) -> bool:
        """
        Target the spawn room center and try to place the player right away.

        Returns:
            True if the player was placed immediately
        """
        cell = spawn_room.center
        self.state = PendingSpawn(
            pending=False,
            attempts=0,
            target=self.grid.cell_to_world(cell[0], cell[1], self.base_y),
            cell=cell,
        )
        self.timed_out = False
        placed = self._try_place(locate_player)
        self.state.pending = not placed
        return placed

    def tick(self, locate_player: PlayerLocator) -> bool:
        """
        Retry a pending placement.

        Returns:
            True if the player was placed on this tick
        """
        if not self.state.pending:
            return False

        if self._try_place(locate_player):
            self.state.pending = False
            return True

        self.state.attempts += 1
        if self.state.attempts >= self.max_attempts:
            self.state.pending = False
            self.timed_out = True
            logger.warning("Auto player spawn timed out: no player found after %d attempts",
                           self.state.attempts)
        return False

    def resolve_floor_y(self) -> float:
        """Generated floor height under the spawn cell, base height when there is none"""
        if self.state.cell is None:
            return self.base_y
        return self.top_heights.get(self.state.cell, self.base_y)

    def spawn_height(self, player: PlayerBody) -> float:
        floor_y = self.resolve_floor_y()
        if player.bottom_offset is not None:
            return floor_y - player.bottom_offset + SPAWN_CLEARANCE
        return floor_y + self.fallback_height

    def _try_place(self, locate_player: PlayerLocator) -> bool:
        player = locate_player()
        if player is None or self.state.target is None:
            return False

        x, _, z = self.state.target
        player.position = (x, self.spawn_height(player), z)
        return True
