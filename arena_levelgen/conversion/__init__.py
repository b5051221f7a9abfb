"""
Conversion of generated layouts into runtime placements.
"""

from .spawn_placement import (
    PlayerSpawnPlacer,
    PendingSpawn,
    PlayerBody,
    MAX_SPAWN_ATTEMPTS,
)

__all__ = [
    'PlayerSpawnPlacer',
    'PendingSpawn',
    'PlayerBody',
    'MAX_SPAWN_ATTEMPTS',
]
