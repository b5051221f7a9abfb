"""
Validation check modules.

- layout_checks: Border closure, connectivity, room placement, archetypes,
  height smoothness and the spawn platform
"""

from .layout_checks import (
    check_border_closure,
    check_connectivity,
    check_room_overlap,
    check_archetype_exclusivity,
    check_height_smoothness,
    check_spawn_platform,
    validate_layout,
)

__all__ = [
    'check_border_closure',
    'check_connectivity',
    'check_room_overlap',
    'check_archetype_exclusivity',
    'check_height_smoothness',
    'check_spawn_platform',
    'validate_layout',
]
