"""
Height field generation: per-cell platform tiers, tile emission, ceilings
and the floor-to-floor staircases.
"""

from .height_field import (
    HeightFieldGenerator,
    HeightFieldResult,
    WallExtension,
    relax_heights,
    smoothness_violations,
    collect_wall_extensions,
)
from .staircase import StaircaseBuilder, StaircaseResult

__all__ = [
    'HeightFieldGenerator',
    'HeightFieldResult',
    'WallExtension',
    'relax_heights',
    'smoothness_violations',
    'collect_wall_extensions',
    'StaircaseBuilder',
    'StaircaseResult',
]
