import pytest

from tinyjs.environment import EnvironmentArena


def test_child_resolves_parent_through_arena():
    arena = EnvironmentArena()
    root = arena.create_root()
    child = root.create_child('block')
    assert child.parent is root
    assert root.parent is None
    assert child.depth == 1
    assert len(arena) == 2


def test_get_and_set_are_local():
    arena = EnvironmentArena()
    root = arena.create_root()
    child = root.create_child()
    root.set('x', 1)
    assert root.get('x') == 1
    assert child.get('x') is None
    assert not child.has('x')
    child.set('x', 2)
    assert root.get('x') == 1
    assert child.get('x') == 2


def test_release_recycles_slots():
    arena = EnvironmentArena()
    root = arena.create_root()
    first = root.create_child()
    first_id = first.id
    arena.release(first)
    assert len(arena) == 1
    with pytest.raises(KeyError):
        arena[first_id]
    second = root.create_child()
    assert second.id == first_id
    assert second.values == {}


def test_release_ignores_stale_handle():
    arena = EnvironmentArena()
    root = arena.create_root()
    stale = root.create_child()
    arena.release(stale)
    fresh = root.create_child()
    arena.release(stale)
    assert arena[fresh.id] is fresh


def test_pinned_scope_and_ancestors_survive_release():
    arena = EnvironmentArena()
    root = arena.create_root()
    outer = root.create_child('outer')
    inner = outer.create_child('inner')
    arena.pin(inner)
    assert arena.is_pinned(outer) and arena.is_pinned(root)
    arena.release(inner)
    arena.release(outer)
    assert arena[inner.id] is inner
    assert inner.parent.parent is root


def test_clear_drops_everything():
    arena = EnvironmentArena()
    root = arena.create_root()
    arena.pin(root.create_child())
    arena.clear()
    assert len(arena) == 0
    assert list(arena) == []


def test_pin_reports_newly_pinned_scopes():
    arena = EnvironmentArena()
    root = arena.create_root()
    outer = root.create_child()
    inner = outer.create_child()
    assert arena.pin(outer) == [outer, root]
    assert arena.pin(inner) == [inner]
    assert arena.pin(inner) == []


def test_serials_follow_creation_order():
    arena = EnvironmentArena()
    root = arena.create_root()
    first = root.create_child()
    arena.release(first)
    second = root.create_child()
    assert second.id == first.id
    assert root.serial < first.serial < second.serial
