"""Capability interfaces: models satisfy them, and any conforming store works."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from happy_tree.core.database.exceptions import NotFoundError
from happy_tree.core.database.hierarchy import (
    Identifiable,
    ParentReferencing,
    TraversalOptions,
    TreeNavigator,
    TreeNode,
)
from tests.fixtures.tree_models import Category


@dataclass(eq=False)
class Folder:
    id: int
    parent: int | None = None

    @property
    def tree_parent_key(self) -> int | None:
        return self.parent


class DictStore:
    """Read-only store over a dict, enough for navigation."""

    model = Folder
    parent_key_name = "parent"

    def __init__(self, *folders: Folder):
        self.rows = {f.id: f for f in folders}
        self.calls: list[str] = []

    async def find_by_id(self, session, id):
        self.calls.append("find_by_id")
        return self.rows.get(id)

    async def parent_id_of(self, session, id):
        self.calls.append("parent_id_of")
        if id not in self.rows:
            raise NotFoundError("Folder", {"id": id})
        return self.rows[id].parent

    async def children_of(self, session, parent_ids, options=None):
        self.calls.append("children_of")
        ids = set(parent_ids)
        children = [f for f in self.rows.values() if f.parent in ids]
        return self._limit(children, options)

    async def child_ids_of(self, session, parent_ids, options=None):
        return [f.id for f in await self.children_of(session, parent_ids, options)]

    async def has_children(self, session, id):
        self.calls.append("has_children")
        return any(f.parent == id for f in self.rows.values())

    @staticmethod
    def _limit(children: list[Folder], options: TraversalOptions | None) -> list[Folder]:
        if options is None or options.limit is None:
            return children
        kept: dict[Any, list[Folder]] = {}
        for child in children:
            kept.setdefault(child.parent, []).append(child)
        return [c for group in kept.values() for c in group[: options.limit]]


@pytest.fixture
def folders() -> DictStore:
    return DictStore(Folder(1), Folder(2, 1), Folder(3, 2), Folder(4, 1), Folder(5))


@pytest.fixture
def folder_tree(folders, tree_settings) -> TreeNavigator[Folder]:
    return TreeNavigator(folders, settings=tree_settings)


@pytest.mark.unit
class TestCapabilities:
    def test_mapped_model_is_tree_node(self):
        node = Category(name="x")

        assert isinstance(node, Identifiable)
        assert isinstance(node, ParentReferencing)
        assert isinstance(node, TreeNode)

    def test_plain_object_is_tree_node(self):
        assert isinstance(Folder(1), TreeNode)

    def test_object_without_parent_key_is_not(self):
        @dataclass
        class Loose:
            id: int

        assert not isinstance(Loose(1), ParentReferencing)


@pytest.mark.unit
class TestNavigationOverAnyStore:
    async def test_descendants(self, folders, folder_tree):
        root = folders.rows[1]

        assert [f.id for f in await folder_tree.descendants_dfs(None, root)] == [2, 3, 4]
        assert [f.id for f in await folder_tree.descendants_bfs(None, root)] == [2, 4, 3]
        assert await folder_tree.descendants_count(None, root) == 3

    async def test_ancestry(self, folders, folder_tree):
        leaf = folders.rows[3]

        assert await folder_tree.ancestor_ids(None, leaf) == [2, 1]
        assert await folder_tree.root(None, leaf) is folders.rows[1]

    async def test_predicates_and_guard(self, folders, folder_tree):
        root, leaf = folders.rows[1], folders.rows[3]

        assert await folder_tree.ancestor_of(None, root, leaf)
        assert not await folder_tree.ancestor_of(None, root, Category(name="x"))
        assert await folder_tree.parent_errors(None, root, 3)

    async def test_per_parent_limit(self, folders, folder_tree):
        ids = await folder_tree.descendant_ids(None, folders.rows[1], TraversalOptions(limit=1, traversal="bfs"))

        assert ids == [2, 3]

    async def test_dangling_parent_ends_walk(self, folder_tree):
        orphan = Folder(9, parent=99)

        assert await folder_tree.ancestor_ids(None, orphan) == []
        assert await folder_tree.root(None, orphan) is orphan
