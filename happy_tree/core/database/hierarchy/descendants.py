"""Descendant traversal engine.

Four strategies, selectable per call through ``TraversalOptions.traversal``:

    bfs            one ``child_ids_of``/``children_of`` call per level
    dfs            one call per descendant, plus one; pre-order
    bfs_recursive  children first, then each child's subtree in turn
    dfs_recursive  pre-order, fetching children of each node recursively

Every strategy applies the options' order, limit and condition to each
children query on its own, so ``limit=2`` keeps two children per node at
every depth and a node rejected by ``condition`` is never expanded.

For any options, the four strategies return the same set of nodes; BFS
and DFS differ only in sequence.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, TypeVar

from happy_tree.core.database.hierarchy.component import TreeComponent
from happy_tree.core.database.hierarchy.options import Traversal, TraversalOptions

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class DescendantTraversal(TreeComponent[T]):
    """Descendant listing, id projection and counting."""

    # ------------------------------------------------------------------
    # Streaming primitives
    # ------------------------------------------------------------------

    async def iter_level_ids(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> AsyncIterator[list[Any]]:
        """Yield descendant ids one level at a time, nearest level first."""
        level: list[Any] = [node.id]  # type: ignore[attr-defined]
        while level:
            level = list(await self.store.child_ids_of(session, level, options))
            if level:
                yield level

    async def iter_level_nodes(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> AsyncIterator[list[T]]:
        """Yield descendant records one level at a time, nearest level first."""
        level: list[T] = [node]
        while level:
            level = list(
                await self.store.children_of(session, [n.id for n in level], options)  # type: ignore[attr-defined]
            )
            if level:
                yield level

    async def iter_descendant_ids(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> AsyncIterator[Any]:
        """Yield descendant ids in pre-order.

        A node's children are pushed to the front of the pending queue, so
        they are visited right after it and before its next sibling.
        """
        pending = deque(await self.store.child_ids_of(session, [node.id], options))  # type: ignore[attr-defined]
        while pending:
            current = pending.popleft()
            yield current
            children = await self.store.child_ids_of(session, [current], options)
            pending.extendleft(reversed(children))

    async def iter_descendant_nodes(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> AsyncIterator[T]:
        """Yield descendant records in pre-order."""
        pending = deque(await self.store.children_of(session, [node.id], options))  # type: ignore[attr-defined]
        while pending:
            current = pending.popleft()
            yield current
            children = await self.store.children_of(session, [current.id], options)  # type: ignore[attr-defined]
            pending.extendleft(reversed(children))

    # ------------------------------------------------------------------
    # Recursive strategies
    # ------------------------------------------------------------------

    async def _bfs_recursive_nodes(self, session: AsyncSession, parent_id: Any, options: TraversalOptions) -> list[T]:
        children = list(await self.store.children_of(session, [parent_id], options))
        result = list(children)
        for child in children:
            result.extend(await self._bfs_recursive_nodes(session, child.id, options))  # type: ignore[attr-defined]
        return result

    async def _dfs_recursive_nodes(self, session: AsyncSession, parent_id: Any, options: TraversalOptions) -> list[T]:
        result: list[T] = []
        for child in await self.store.children_of(session, [parent_id], options):
            result.append(child)
            result.extend(await self._dfs_recursive_nodes(session, child.id, options))  # type: ignore[attr-defined]
        return result

    async def _bfs_recursive_ids(self, session: AsyncSession, parent_id: Any, options: TraversalOptions) -> list[Any]:
        children = list(await self.store.child_ids_of(session, [parent_id], options))
        result = list(children)
        for child_id in children:
            result.extend(await self._bfs_recursive_ids(session, child_id, options))
        return result

    async def _dfs_recursive_ids(self, session: AsyncSession, parent_id: Any, options: TraversalOptions) -> list[Any]:
        result: list[Any] = []
        for child_id in await self.store.child_ids_of(session, [parent_id], options):
            result.append(child_id)
            result.extend(await self._dfs_recursive_ids(session, child_id, options))
        return result

    async def _count_recursive(self, session: AsyncSession, parent_id: Any, options: TraversalOptions) -> int:
        total = 0
        for child_id in await self.store.child_ids_of(session, [parent_id], options):
            total += 1 + await self._count_recursive(session, child_id, options)
        return total

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def descendants(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        """All descendant records (``listing_traversal`` strategy by default)."""
        options = TraversalOptions.coerce(options)
        strategy = options.resolve_traversal(self.settings.listing_traversal)

        match strategy:
            case Traversal.BFS:
                nodes = [n async for level in self.iter_level_nodes(session, node, options) for n in level]
            case Traversal.DFS:
                nodes = [n async for n in self.iter_descendant_nodes(session, node, options)]
            case Traversal.BFS_RECURSIVE:
                nodes = await self._bfs_recursive_nodes(session, node.id, options)  # type: ignore[attr-defined]
            case Traversal.DFS_RECURSIVE:
                nodes = await self._dfs_recursive_nodes(session, node.id, options)  # type: ignore[attr-defined]

        self._lazy.debug(lambda: f"descendants[{strategy}]: {node!r} -> {len(nodes)} nodes")
        return nodes

    async def descendant_ids(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[Any]:
        """All descendant ids (``listing_traversal`` strategy by default)."""
        options = TraversalOptions.coerce(options)
        strategy = options.resolve_traversal(self.settings.listing_traversal)

        match strategy:
            case Traversal.BFS:
                ids = [i async for level in self.iter_level_ids(session, node, options) for i in level]
            case Traversal.DFS:
                ids = [i async for i in self.iter_descendant_ids(session, node, options)]
            case Traversal.BFS_RECURSIVE:
                ids = await self._bfs_recursive_ids(session, node.id, options)  # type: ignore[attr-defined]
            case Traversal.DFS_RECURSIVE:
                ids = await self._dfs_recursive_ids(session, node.id, options)  # type: ignore[attr-defined]

        self._lazy.debug(lambda: f"descendant_ids[{strategy}]: {node!r} -> {ids}")
        return ids

    async def descendants_count(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> int:
        """Number of descendants (``count_traversal`` strategy, BFS by default).

        BFS sums the size of each level and costs one call per level.
        """
        options = TraversalOptions.coerce(options)
        strategy = options.resolve_traversal(self.settings.count_traversal)

        if strategy is Traversal.BFS:
            count = sum([len(level) async for level in self.iter_level_ids(session, node, options)])
        elif strategy is Traversal.DFS:
            count = sum([1 async for _ in self.iter_descendant_ids(session, node, options)])
        else:
            count = await self._count_recursive(session, node.id, options)  # type: ignore[attr-defined]

        self._lazy.debug(lambda: f"descendants_count[{strategy}]: {node!r} -> {count}")
        return count

    async def self_and_descendants(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        return [node, *await self.descendants(session, node, options)]

    async def childless(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        """Descendants that have no children of their own.

        One descendant walk plus one ``leaf_ids_among`` call. Children that
        the options filter out still count as children.
        """
        nodes = await self.descendants(session, node, options)
        if not nodes:
            return []
        leaf_ids = await self.store.leaf_ids_among(session, [n.id for n in nodes])  # type: ignore[attr-defined]
        return [n for n in nodes if n.id in leaf_ids]  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    # Per-strategy shortcuts
    # ------------------------------------------------------------------

    @staticmethod
    def _using(options: TraversalOptions | None, strategy: Traversal) -> TraversalOptions:
        return TraversalOptions.coerce(options).with_traversal(strategy)

    async def descendants_bfs(self, session: AsyncSession, node: T, options: TraversalOptions | None = None) -> list[T]:
        return await self.descendants(session, node, self._using(options, Traversal.BFS))

    async def descendants_dfs(self, session: AsyncSession, node: T, options: TraversalOptions | None = None) -> list[T]:
        return await self.descendants(session, node, self._using(options, Traversal.DFS))

    async def self_and_descendants_bfs(
        self, session: AsyncSession, node: T, options: TraversalOptions | None = None
    ) -> list[T]:
        return await self.self_and_descendants(session, node, self._using(options, Traversal.BFS))

    async def self_and_descendants_dfs(
        self, session: AsyncSession, node: T, options: TraversalOptions | None = None
    ) -> list[T]:
        return await self.self_and_descendants(session, node, self._using(options, Traversal.DFS))

    async def descendant_ids_bfs(
        self, session: AsyncSession, node: T, options: TraversalOptions | None = None
    ) -> list[Any]:
        return await self.descendant_ids(session, node, self._using(options, Traversal.BFS))

    async def descendant_ids_dfs(
        self, session: AsyncSession, node: T, options: TraversalOptions | None = None
    ) -> list[Any]:
        return await self.descendant_ids(session, node, self._using(options, Traversal.DFS))

    async def descendants_count_bfs(
        self, session: AsyncSession, node: T, options: TraversalOptions | None = None
    ) -> int:
        return await self.descendants_count(session, node, self._using(options, Traversal.BFS))

    async def descendants_count_dfs(
        self, session: AsyncSession, node: T, options: TraversalOptions | None = None
    ) -> int:
        return await self.descendants_count(session, node, self._using(options, Traversal.DFS))


__all__ = ["DescendantTraversal"]
