"""
Arena Generation Pipeline Module.

Provides the staged generation pipeline, its settings and the resulting
layout state.
"""

from .automated_pipeline import (
    ArenaPipeline,
    PipelineSettings,
    PipelineResult,
    PipelineStage,
    PipelineError,
    clamp_settings,
    resolve_seed,
    generate_arena,
)

from .layout_state import ArenaLayout

from .settings_storage import (
    save_settings,
    load_settings,
    load_settings_from_path,
    list_saved_settings,
    delete_settings,
)

__all__ = [
    # Pipeline core
    'ArenaPipeline',
    'PipelineSettings',
    'PipelineResult',
    'PipelineStage',
    'PipelineError',
    'clamp_settings',
    'resolve_seed',
    'generate_arena',
    # Layout state
    'ArenaLayout',
    # Presets
    'save_settings',
    'load_settings',
    'load_settings_from_path',
    'list_saved_settings',
    'delete_settings',
]
