"""Walking up the parent chain."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from happy_tree.core.database.exceptions import NotFoundError
from happy_tree.core.database.hierarchy.component import TreeComponent

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class AncestryWalker(TreeComponent[T]):
    """Ancestor queries driven by a single parent-id cursor.

    The id-only variants cost one ``parent_id_of`` call per level; the
    record variants one ``find_by_id`` per level. ``root`` walks ids and
    materializes only the final one. Results are in child-to-root order.

    A row that disappears mid-walk ends the chain there: the missing id is
    not reported and nothing above it is visited.
    """

    async def ancestor_ids(self, session: AsyncSession, node: T) -> list[Any]:
        ids: list[Any] = []
        cursor = self.parent_key(node)
        while cursor is not None:
            try:
                next_cursor = await self.store.parent_id_of(session, cursor)
            except NotFoundError:
                self._lazy.debug(lambda: f"ancestor_ids: {cursor} missing, chain ends")
                break
            ids.append(cursor)
            cursor = next_cursor
        return ids

    async def ancestors(self, session: AsyncSession, node: T) -> list[T]:
        nodes: list[T] = []
        cursor = self.parent_key(node)
        while cursor is not None:
            ancestor = await self.store.find_by_id(session, cursor)
            if ancestor is None:
                self._lazy.debug(lambda: f"ancestors: {cursor} missing, chain ends")
                break
            nodes.append(ancestor)
            cursor = self.parent_key(ancestor)
        return nodes

    async def self_and_ancestors(self, session: AsyncSession, node: T) -> list[T]:
        return [node, *await self.ancestors(session, node)]

    async def ancestors_count(self, session: AsyncSession, node: T) -> int:
        count = 0
        cursor = self.parent_key(node)
        while cursor is not None:
            try:
                cursor = await self.store.parent_id_of(session, cursor)
            except NotFoundError:
                break
            count += 1
        return count

    async def root_id(self, session: AsyncSession, node: T) -> Any:
        """Id of the topmost reachable ancestor; ``node.id`` for a root (no calls)."""
        root_id = node.id  # type: ignore[attr-defined]
        cursor = self.parent_key(node)
        while cursor is not None:
            try:
                next_cursor = await self.store.parent_id_of(session, cursor)
            except NotFoundError:
                self._lazy.debug(lambda: f"root_id: {cursor} missing, stopping at {root_id}")
                break
            root_id = cursor
            cursor = next_cursor
        return root_id

    async def root(self, session: AsyncSession, node: T) -> T | None:
        """Topmost ancestor, or ``node`` itself when it is a root (no calls)."""
        if self.parent_key(node) is None:
            return node

        root_id = await self.root_id(session, node)
        if root_id == node.id:  # type: ignore[attr-defined]
            return node
        return await self.store.find_by_id(session, root_id)


__all__ = ["AncestryWalker"]
