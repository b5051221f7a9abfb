import json

from arena_levelgen.pipeline.debug import export_layout_dot, export_layout_json, layout_to_dict, render_ascii


def test_dot_lists_every_room_and_corridor(arena_layout):
    dot = export_layout_dot(arena_layout)
    assert dot.startswith("graph ArenaLayout {")
    assert dot.rstrip().endswith("}")
    for index in range(len(arena_layout.rooms)):
        assert f"room_{index} [" in dot
    assert dot.count(" -- ") == len(arena_layout.room_layout.connections)
    assert "SPAWN" in dot


def test_json_export(arena_layout):
    data = json.loads(export_layout_json(arena_layout))
    assert data['metadata']['seed'] == 12345
    assert data['statistics']['room_count'] == len(arena_layout.rooms)
    assert data['layout']['rooms'][0]['archetype'] is None
    assert data['layout']['grid']['width'] == 96
    assert sum(data['statistics']['room_types'].values()) == len(arena_layout.rooms) - 1


def test_layout_dict_ramps(arena_layout):
    data = layout_to_dict(arena_layout)
    assert len(data['ramps']) == len(arena_layout.ramps)
    assert all(r['pitch_degrees'] < 0 for r in data['ramps'])


def test_ascii_map(arena_layout):
    lines = render_ascii(arena_layout).split("\n")
    assert len(lines) == arena_layout.grid.depth
    assert all(len(line) == arena_layout.grid.width for line in lines)
    assert set(lines[0]) == {"#"}
    assert set(lines[-1]) == {"#"}

    flat = render_ascii(arena_layout, show_heights=False)
    assert not any(ch.isdigit() for ch in flat)
