"""Tests for cached children counts."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from happy_tree.core.database.hierarchy import CounterCache, TreeNavigator, TreeRepository
from happy_tree.core.database.observers import QueryCounter
from tests.fixtures.tree_models import CountedCategory


@pytest.fixture
def counted_repo(tree_settings) -> TreeRepository[CountedCategory]:
    return TreeRepository(CountedCategory, observers=[QueryCounter()], settings=tree_settings)


async def _count(session, repo, node) -> int:
    found = await repo.find_by_id(session, node.id)
    return found.children_count


@pytest.mark.unit
class TestCounterCacheUnit:
    async def test_node_added_ignores_roots(self):
        store = AsyncMock()
        cache = CounterCache(store)

        await cache.node_added(None, None)
        await cache.node_added(None, 7)

        store.increment_counter.assert_awaited_once_with(None, 7)

    async def test_node_moved_same_parent_is_noop(self):
        store = AsyncMock()
        await CounterCache(store).node_moved(None, 3, 3)

        store.increment_counter.assert_not_awaited()
        store.decrement_counter.assert_not_awaited()

    async def test_node_moved_from_root(self):
        store = AsyncMock()
        await CounterCache(store).node_moved(None, None, 5)

        store.decrement_counter.assert_not_awaited()
        store.increment_counter.assert_awaited_once_with(None, 5)


@pytest.mark.unit
class TestCounterMaintenance:
    async def test_insert_increments_parent(self, db_session, counted_repo):
        parent = await counted_repo.insert(db_session, name="parent")
        await counted_repo.insert(db_session, name="a", parent_id=parent.id)
        await counted_repo.insert(db_session, name="b", parent_id=parent.id)

        assert await _count(db_session, counted_repo, parent) == 2

    async def test_reparent_moves_one_count(self, db_session, counted_repo):
        old = await counted_repo.insert(db_session, name="old")
        new = await counted_repo.insert(db_session, name="new")
        child = await counted_repo.insert(db_session, name="child", parent_id=old.id)
        await counted_repo.insert(db_session, name="sibling", parent_id=old.id)

        counter = counted_repo.observers[0]
        counter.reset()
        await counted_repo.update(db_session, child, parent_id=new.id)

        assert counter.operations[-2:] == ["decrement_counter", "increment_counter"]
        assert await _count(db_session, counted_repo, old) == 1
        assert await _count(db_session, counted_repo, new) == 1

    async def test_rename_does_not_touch_counters(self, db_session, counted_repo):
        parent = await counted_repo.insert(db_session, name="parent")
        child = await counted_repo.insert(db_session, name="child", parent_id=parent.id)

        counter = counted_repo.observers[0]
        counter.reset()
        await counted_repo.update(db_session, child, name="renamed")

        assert "increment_counter" not in counter.operations
        assert await _count(db_session, counted_repo, parent) == 1

    async def test_delete_decrements_parent(self, db_session, counted_repo):
        parent = await counted_repo.insert(db_session, name="parent")
        child = await counted_repo.insert(db_session, name="child", parent_id=parent.id)

        await counted_repo.delete(db_session, child)

        assert await _count(db_session, counted_repo, parent) == 0

    async def test_recount_children_repairs_drift(self, db_session, counted_repo):
        parent = await counted_repo.insert(db_session, name="parent")
        await counted_repo.insert(db_session, name="a", parent_id=parent.id)
        await counted_repo.update(db_session, parent, children_count=42)

        await counted_repo.recount_children(db_session, parent.id)

        assert await _count(db_session, counted_repo, parent) == 1


@pytest.mark.unit
class TestLoadedCounters:
    async def test_loaded_parent_sees_new_children(self, db_session, counted_repo, tree_settings):
        parent = await counted_repo.insert(db_session, name="parent")
        child = await counted_repo.insert(db_session, name="a", parent_id=parent.id)
        await counted_repo.insert(db_session, name="b", parent_id=parent.id)

        tree = TreeNavigator(counted_repo, settings=tree_settings)

        assert parent.children_count == 2
        assert (await tree.parent(db_session, child)).children_count == 2

    async def test_loaded_parents_follow_a_move(self, db_session, counted_repo):
        old = await counted_repo.insert(db_session, name="old")
        new = await counted_repo.insert(db_session, name="new")
        child = await counted_repo.insert(db_session, name="child", parent_id=old.id)

        await counted_repo.update(db_session, child, parent_id=new.id)

        assert (old.children_count, new.children_count) == (0, 1)

    async def test_loaded_parent_after_recount(self, db_session, counted_repo):
        parent = await counted_repo.insert(db_session, name="parent")
        await counted_repo.insert(db_session, name="a", parent_id=parent.id)
        await counted_repo.update(db_session, parent, children_count=7)

        await counted_repo.recount_children(db_session, parent.id)

        assert parent.children_count == 1

    async def test_preassigned_parent_moves_counts(self, db_session, counted_repo):
        old = await counted_repo.insert(db_session, name="old")
        new = await counted_repo.insert(db_session, name="new")
        child = await counted_repo.insert(db_session, name="child", parent_id=old.id)

        child.parent_id = new.id
        await counted_repo.update(db_session, child, name="child")

        assert (old.children_count, new.children_count) == (0, 1)
