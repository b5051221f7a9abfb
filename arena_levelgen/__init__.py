"""
Arena Level Generator

Procedural multi-room arena layouts for shooter levels: rooms and corridors
on a cell grid, per-room archetypes, stacked platform geometry with
floor-to-floor ramps, and gated combat encounters.
"""

from .pipeline import ArenaPipeline, PipelineSettings, PipelineResult, ArenaLayout, generate_arena

__version__ = '1.0.0'

__all__ = [
    'ArenaPipeline',
    'PipelineSettings',
    'PipelineResult',
    'ArenaLayout',
    'generate_arena',
]
