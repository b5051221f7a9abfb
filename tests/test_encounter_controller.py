import logging

import pytest

from arena_levelgen.encounters.encounter_controller import (
    Entity, EntityKind, EncounterState, Handle, HandleTable, RoomEncounterController
)


@pytest.fixture()
def table():
    return HandleTable()


@pytest.fixture()
def room(table):
    controller = RoomEncounterController(table, room_index=4)
    enemies = [table.spawn(Entity(EntityKind.ENEMY, f"Enemy_{i}")) for i in range(3)]
    barriers = [table.spawn(Entity(EntityKind.BARRIER, f"Barrier_4_{i}")) for i in range(2)]
    for handle in enemies:
        controller.add_enemy(handle)
    for handle in barriers:
        controller.add_barrier(handle)
    return controller, enemies, barriers


def _player(table):
    return table.spawn(Entity(EntityKind.PLAYER, "Player"))


# ---------------------------------------------------------------------------
# HandleTable
# ---------------------------------------------------------------------------

def test_destroyed_handle_reads_dead_after_slot_reuse(table):
    old = table.spawn(Entity(EntityKind.ENEMY))
    assert table.destroy(old)
    new = table.spawn(Entity(EntityKind.ENEMY))
    assert new.index == old.index
    assert not table.is_alive(old)
    assert table.is_alive(new)
    assert table.get(old) is None


def test_destroy_twice_is_noop(table):
    handle = table.spawn(Entity(EntityKind.PROP))
    assert table.destroy(handle)
    assert not table.destroy(handle)
    assert len(table) == 0


def test_foreign_handles_raise(table):
    with pytest.raises(KeyError):
        table.is_alive(Handle(5, 0))
    handle = table.spawn(Entity(EntityKind.PROP))
    with pytest.raises(KeyError):
        table.get(Handle(handle.index, handle.generation + 1))


def test_find_ancestor_walks_parent_chain(table):
    player = _player(table)
    weapon = table.spawn(Entity(EntityKind.PROP, parent=player))
    hitbox = table.spawn(Entity(EntityKind.PROP, parent=weapon))
    assert table.find_ancestor(hitbox, EntityKind.PLAYER) == player
    assert table.find_ancestor(weapon, EntityKind.ENEMY) is None


# ---------------------------------------------------------------------------
# RoomEncounterController
# ---------------------------------------------------------------------------

def test_added_entities_start_disabled(table, room):
    controller, enemies, barriers = room
    assert controller.state == EncounterState.IDLE
    assert all(not table.get(h).enabled for h in enemies + barriers)


def test_full_encounter_lifecycle(table, room, caplog):
    controller, enemies, barriers = room
    player = _player(table)

    with caplog.at_level(logging.INFO):
        assert controller.on_trigger_enter(player)
    assert controller.state == EncounterState.ACTIVATED
    assert all(table.get(h).enabled for h in enemies + barriers)
    assert "Encounter 4 activated" in caplog.text

    table.destroy(enemies[0])
    table.destroy(enemies[1])
    assert controller.update() == EncounterState.ACTIVATED
    assert controller.alive_enemy_count() == 1

    table.destroy(enemies[2])
    assert controller.update() == EncounterState.COMPLETED
    assert controller.completed
    assert controller.barriers == []
    assert not any(table.is_alive(h) for h in barriers)


def test_trigger_is_idempotent(table, room):
    controller, enemies, barriers = room
    player = _player(table)
    assert controller.on_trigger_enter(player)
    assert not controller.on_trigger_enter(player)
    assert controller.state == EncounterState.ACTIVATED


def test_reentering_cleared_room_does_nothing(table, room):
    controller, enemies, barriers = room
    player = _player(table)
    assert controller.on_trigger_enter(player)
    for handle in enemies:
        table.destroy(handle)
    while controller.update() != EncounterState.COMPLETED:
        pass

    assert not controller.on_trigger_enter(player)
    assert controller.state == EncounterState.COMPLETED
    assert controller.barriers == []
    assert not any(table.is_alive(h) for h in barriers)
    assert controller.update() == EncounterState.COMPLETED


def test_child_of_player_triggers(table, room):
    controller, _, _ = room
    player = _player(table)
    collider = table.spawn(Entity(EntityKind.PROP, "Collider", parent=player))
    assert controller.on_trigger_enter(collider)
    assert controller.activated


def test_non_player_bodies_ignored(table, room):
    controller, enemies, _ = room
    assert not controller.on_trigger_enter(enemies[0])
    crate = table.spawn(Entity(EntityKind.PROP, "Crate"))
    assert not controller.on_trigger_enter(crate)
    assert controller.state == EncounterState.IDLE


def test_update_before_activation_stays_idle(table, room):
    controller, enemies, _ = room
    for handle in enemies:
        table.destroy(handle)
    assert controller.update() == EncounterState.IDLE


def test_no_lock_on_enter_keeps_barriers_open(table):
    controller = RoomEncounterController(table, room_index=1, lock_on_enter=False)
    enemy = table.spawn(Entity(EntityKind.ENEMY))
    barrier = table.spawn(Entity(EntityKind.BARRIER))
    controller.add_enemy(enemy)
    controller.add_barrier(barrier)

    controller.on_trigger_enter(_player(table))
    assert table.get(enemy).enabled
    assert not table.get(barrier).enabled


def test_empty_room_completes_on_first_update(table):
    controller = RoomEncounterController(table)
    controller.on_trigger_enter(_player(table))
    assert controller.update() == EncounterState.COMPLETED
