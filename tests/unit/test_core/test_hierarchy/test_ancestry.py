"""Tests for AncestryWalker: parent-chain walks and their cost."""

from __future__ import annotations

import pytest


@pytest.mark.unit
class TestAncestorIds:
    async def test_child_to_root_order(self, db_session, tree, sample_tree, query_counter):
        ids = await tree.ancestor_ids(db_session, sample_tree.grandchild)

        assert ids == [sample_tree.child1.id, sample_tree.root.id]
        assert query_counter.operations == ["parent_id_of", "parent_id_of"]

    async def test_root_has_no_ancestors(self, db_session, tree, sample_tree, query_counter):
        assert await tree.ancestor_ids(db_session, sample_tree.root) == []
        assert await tree.ancestors_count(db_session, sample_tree.root) == 0
        assert query_counter.count == 0

    async def test_ancestors_count(self, db_session, tree, sample_tree):
        assert await tree.ancestors_count(db_session, sample_tree.grandchild) == 2
        assert await tree.ancestors_count(db_session, sample_tree.child2) == 1


@pytest.mark.unit
class TestAncestors:
    async def test_ancestors(self, db_session, tree, sample_tree, query_counter):
        ancestors = await tree.ancestors(db_session, sample_tree.grandchild)

        assert ancestors == [sample_tree.child1, sample_tree.root]
        assert query_counter.operations == ["find_by_id", "find_by_id"]

    async def test_child_ancestors_is_root(self, db_session, tree, sample_tree):
        assert await tree.ancestors(db_session, sample_tree.child1) == [sample_tree.root]

    async def test_self_and_ancestors(self, db_session, tree, sample_tree):
        nodes = await tree.self_and_ancestors(db_session, sample_tree.grandchild)

        assert nodes == [sample_tree.grandchild, sample_tree.child1, sample_tree.root]

    async def test_ancestors_is_idempotent(self, db_session, tree, sample_tree):
        first = await tree.ancestors(db_session, sample_tree.grandchild)
        second = await tree.ancestors(db_session, sample_tree.grandchild)

        assert first == second


@pytest.mark.unit
class TestRoot:
    async def test_root_of_root_is_self_without_calls(self, db_session, tree, sample_tree, query_counter):
        assert await tree.root(db_session, sample_tree.root) is sample_tree.root
        assert await tree.root_id(db_session, sample_tree.root) == sample_tree.root.id
        assert query_counter.count == 0

    async def test_root_materializes_once(self, db_session, tree, sample_tree, query_counter):
        root = await tree.root(db_session, sample_tree.grandchild)

        assert root is sample_tree.root
        assert query_counter.operations == ["parent_id_of", "parent_id_of", "find_by_id"]

    async def test_root_id(self, db_session, tree, sample_tree):
        assert await tree.root_id(db_session, sample_tree.child2) == sample_tree.root.id


@pytest.mark.unit
class TestMissingRows:
    async def test_chain_stops_at_missing_parent(self, db_session, repo, tree):
        orphan = await repo.insert(db_session, name="orphan", parent_id=4242)

        assert await tree.ancestor_ids(db_session, orphan) == []
        assert await tree.ancestors(db_session, orphan) == []
        assert await tree.ancestors_count(db_session, orphan) == 0
        assert await tree.root_id(db_session, orphan) == orphan.id
        assert await tree.root(db_session, orphan) is orphan

    async def test_chain_keeps_ids_below_missing_row(self, db_session, repo, tree):
        middle = await repo.insert(db_session, name="middle", parent_id=4242)
        leaf = await repo.insert(db_session, name="leaf", parent_id=middle.id)

        assert await tree.ancestor_ids(db_session, leaf) == [middle.id]
        assert await tree.root(db_session, leaf) is middle
