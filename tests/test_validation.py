import numpy as np

from arena_levelgen.generators.layout.layout_types import ArenaGrid, Room, RoomLayout
from arena_levelgen.generators.archetypes.archetype_planner import RoomArchetype
from arena_levelgen.validation import (
    ALL_RULES, Severity, ValidationIssue, ValidationResult, get_rule, get_rules_by_category, validate_layout
)
from arena_levelgen.validation.checks.layout_checks import (
    check_archetype_exclusivity, check_border_closure, check_connectivity, check_height_smoothness,
    check_room_overlap, check_spawn_platform
)


def test_rule_registry():
    assert get_rule("GRID-001").severity == Severity.FAIL
    assert get_rule("NOPE-999") is None
    assert {r.code for r in get_rules_by_category("ROOM")} == {"ROOM-001", "ROOM-002", "ROOM-003"}
    assert all(code == rule.code for code, rule in ALL_RULES.items())


def test_open_border_reported():
    grid = ArenaGrid(24, 24)
    grid.walls[0, 5] = False
    issues = check_border_closure(grid)
    assert [i.code for i in issues] == ["GRID-001"]
    assert issues[0].location == "(5, 0)"


def test_unreachable_room_reported():
    grid = ArenaGrid(32, 32)
    rooms = [Room(2, 2, 9, 9), Room(14, 14, 20, 20)]
    for room in rooms:
        grid.carve_room(room)
    issues = check_connectivity(grid, rooms)
    assert [i.location for i in issues] == ["room 1"]


def test_overlap_rules_by_pass():
    primary = RoomLayout(rooms=[Room(2, 2, 9, 9), Room(10, 2, 15, 9)], primary_count=2)
    assert [i.code for i in check_room_overlap(primary)] == ["ROOM-001"]

    # Touching is fine for fallback rooms, overlapping is not
    fallback = RoomLayout(rooms=[Room(2, 2, 9, 9), Room(10, 2, 15, 9), Room(15, 2, 18, 9)], primary_count=1)
    assert [i.code for i in check_room_overlap(fallback)] == ["ROOM-003"]


def test_archetype_exclusivity():
    rooms = [Room(0, 0, 5, 5)] * 3
    assert check_archetype_exclusivity(rooms, {1: RoomArchetype.STAIRCASE, 2: RoomArchetype.SMALL_EMPTY}) == []
    issues = check_archetype_exclusivity(rooms, {0: RoomArchetype.SMALL_EMPTY, 1: RoomArchetype.STAIRCASE})
    assert len(issues) == 2
    assert all(i.code == "ROOM-002" for i in issues)


def test_height_spike_reported():
    grid = ArenaGrid(24, 24)
    grid.heights[5:8, 5:8] = 0
    grid.heights[6, 6] = 4
    issues = check_height_smoothness(grid)
    assert [(i.code, i.location) for i in issues] == [("HGT-001", "(6, 6)")]


def test_spawn_platform_gap_reported():
    rooms = [Room(2, 2, 9, 9)]
    top = {(x, z): 0.0 for x in range(4, 7) for z in range(4, 7)}
    assert check_spawn_platform(rooms, top) == []
    del top[(5, 5)]
    assert [i.location for i in check_spawn_platform(rooms, top)] == ["(5, 5)"]


def test_result_bookkeeping():
    result = ValidationResult()
    assert result.passed
    assert result.report() == "Validation passed: No issues found"

    result.add_issue(ValidationIssue(Severity.WARN, "X-1", "soft", "ref"))
    assert result.passed and len(result.warnings) == 1

    other = ValidationResult([get_rule("GRID-001").issue(cell=(0, 0), x=0, z=0)])
    result.merge(other)
    assert result.failed
    assert result.codes() == ["X-1", "GRID-001"]
    data = result.to_dict()
    assert data['fail_count'] == 1 and data['warn_count'] == 1
    assert "FAILED" in result.report()
    assert result.summary() == "FAILED: 2 issue(s) (GRID-001 x1, X-1 x1)"
    assert list(result.by_code()) == ["X-1", "GRID-001"]
    assert result.cells() == [(0, 0)]
    assert data["codes"] == {"X-1": 1, "GRID-001": 1}
    assert str(other.issues[0]).startswith("[FAIL] GRID-001 at=(0, 0)")


def test_default_build_validates(arena_layout):
    result = validate_layout(arena_layout)
    assert result.passed, result.report()
    assert result.issues == []


def test_validation_catches_tampering(arena_layout):
    grid = arena_layout.grid
    original = grid.heights.copy()
    try:
        cx, cz = arena_layout.spawn_room.center
        grid.heights[cz, cx] = 6
        codes = validate_layout(arena_layout).codes()
        assert "HGT-001" in codes
    finally:
        grid.heights = original
    assert np.array_equal(grid.heights, original)
