"""
Debug utilities for the arena generation pipeline.
"""

from .graph_export import export_layout_dot, export_layout_json, layout_to_dict, render_ascii

__all__ = [
    'export_layout_dot',
    'export_layout_json',
    'layout_to_dict',
    'render_ascii',
]
