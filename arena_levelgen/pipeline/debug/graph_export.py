"""
Graph export utilities for layout debugging.

Provides export functions to inspect arena layouts as:
- DOT format (Graphviz) for the room/corridor graph
- JSON format for programmatic analysis and reproducibility tracking
- ASCII maps of the wall and height fields for quick terminal checks
"""

from typing import Dict, Any, List, TYPE_CHECKING
import json

from ...generators.archetypes.archetype_planner import RoomArchetype, count_archetypes

if TYPE_CHECKING:
    from ..layout_state import ArenaLayout


ARCHETYPE_COLORS = {
    None: '#90EE90',                              # Spawn room, light green
    RoomArchetype.SMALL_EMPTY: '#D3D3D3',         # Light gray
    RoomArchetype.LARGE_EMPTY: '#A9A9A9',         # Dark gray
    RoomArchetype.SMALL_ENCOUNTER: '#FFB6C1',     # Light pink
    RoomArchetype.LARGE_ENCOUNTER: '#FFD700',     # Gold
    RoomArchetype.STAIRCASE: '#87CEEB',           # Sky blue
    RoomArchetype.HALLWAY_PARKOUR: '#DDA0DD',     # Plum
    RoomArchetype.VERTICAL_PARKOUR: '#BA55D3',    # Orchid
}

ASCII_WALL = '#'
ASCII_VOID = ' '


def _room_label(layout: 'ArenaLayout', index: int) -> str:
    archetype = layout.archetypes.get(index)
    return archetype.name if archetype else "SPAWN"


def export_layout_dot(layout: 'ArenaLayout') -> str:
    """Export the room graph as Graphviz DOT.

    Args:
        layout: Finished arena build

    Returns:
        DOT format string for visualization with Graphviz or online viewers
    """
    lines = ['graph ArenaLayout {']
    lines.append('  node [shape=box, style=filled];')
    lines.append('')

    for index, room in enumerate(layout.rooms):
        label_lines = [
            _room_label(layout, index),
            f"id: {index}",
            f"pos: ({room.center_x}, {room.center_z})",
            f"size: {room.width}x{room.depth}",
        ]
        label = '\\n'.join(label_lines)
        color = ARCHETYPE_COLORS.get(layout.archetypes.get(index), '#D3D3D3')
        lines.append(f'  room_{index} [label="{label}" fillcolor="{color}"];')

    lines.append('')

    # Fallback-pass corridors are dashed
    for start_id, end_id in layout.room_layout.connections:
        style = 'solid' if end_id < layout.room_layout.primary_count else 'dashed'
        lines.append(f'  room_{start_id} -- room_{end_id} [style={style}];')

    lines.append('}')
    return '\n'.join(lines)


def layout_to_dict(layout: 'ArenaLayout') -> Dict[str, Any]:
    rooms = []
    for index, room in enumerate(layout.rooms):
        archetype = layout.archetypes.get(index)
        rooms.append({
            'id': index,
            'archetype': archetype.name if archetype else None,
            'bounds': {
                'min_x': room.min_x, 'min_z': room.min_z,
                'max_x': room.max_x, 'max_z': room.max_z,
            },
            'primary': index < layout.room_layout.primary_count,
        })

    ramps = [
        {
            'room': ramp.room_index,
            'story': ramp.story,
            'start_cell': list(ramp.start_cell),
            'end_cell': list(ramp.end_cell),
            'pitch_degrees': round(ramp.pitch_degrees, 3),
            'length': round(ramp.length, 3),
            'has_support': ramp.has_support,
        }
        for ramp in layout.ramps
    ]

    encounters = [
        {
            'room': encounter.room_index,
            'doorways': [
                {'x': d.x, 'z': d.z, 'direction': d.direction.name} for d in encounter.doorways
            ],
            'enemies': [
                {'variant': e.variant.name, 'cell': list(e.cell)} for e in encounter.enemies
            ],
        }
        for encounter in layout.encounters
    ]

    return {
        'grid': {
            'width': layout.grid.width,
            'depth': layout.grid.depth,
            'cell_size': layout.grid.cell_size,
        },
        'rooms': rooms,
        'connections': [list(c) for c in layout.room_layout.connections],
        'ramps': ramps,
        'encounters': encounters,
    }


def export_layout_json(layout: 'ArenaLayout') -> str:
    """Export the layout as JSON with metadata.

    Args:
        layout: Finished arena build

    Returns:
        JSON string with layout and debug metadata
    """
    output = {
        'metadata': {
            'seed': layout.seed,
            'version': '1.0',
            'generator': 'arena-levelgen',
        },
        'statistics': dict(layout.get_stats(), room_types=count_archetypes(layout.archetypes)),
        'layout': layout_to_dict(layout),
    }
    return json.dumps(output, indent=2)


def render_ascii(layout: 'ArenaLayout', show_heights: bool = True) -> str:
    """Render the grid top-down, north (+z) at the top.

    Solid cells are '#', voids are blank, filled cells show their tier
    (or '.' when show_heights is False).
    """
    grid = layout.grid
    rows: List[str] = []
    for z in range(grid.depth - 1, -1, -1):
        row = []
        for x in range(grid.width):
            if grid.is_solid(x, z):
                row.append(ASCII_WALL)
            elif not grid.is_filled(x, z):
                row.append(ASCII_VOID)
            elif show_heights:
                row.append(str(min(9, grid.get_tier(x, z))))
            else:
                row.append('.')
        rows.append(''.join(row))
    return '\n'.join(rows)
