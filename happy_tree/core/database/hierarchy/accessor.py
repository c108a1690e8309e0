"""Immediate-neighbourhood navigation: parent, children, siblings, roots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from happy_tree.core.database.hierarchy.component import TreeComponent
from happy_tree.core.database.hierarchy.options import TraversalOptions

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class NodeAccessor(TreeComponent[T]):
    """One-hop navigation around a node.

    Cost per call:
        is_root / is_child          0 (reads the loaded parent key)
        parent                      0 for a root, else 1
        children / child_ids        1
        is_leaf / is_parent         1 (existence probe)
        self_and_siblings/siblings  1
    """

    async def parent(self, session: AsyncSession, node: T) -> T | None:
        parent_id = self.parent_key(node)
        if parent_id is None:
            return None
        return await self.store.find_by_id(session, parent_id)

    async def children(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        return list(await self.store.children_of(session, [node.id], options))  # type: ignore[attr-defined]

    async def child_ids(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[Any]:
        return list(await self.store.child_ids_of(session, [node.id], options))  # type: ignore[attr-defined]

    def is_root(self, node: T) -> bool:
        return self.parent_key(node) is None

    def is_child(self, node: T) -> bool:
        return self.parent_key(node) is not None

    async def is_leaf(self, session: AsyncSession, node: T) -> bool:
        return not await self.store.has_children(session, node.id)  # type: ignore[attr-defined]

    async def is_parent(self, session: AsyncSession, node: T) -> bool:
        return await self.store.has_children(session, node.id)  # type: ignore[attr-defined]

    async def self_and_siblings(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        """Nodes sharing ``node``'s parent, ``node`` included.

        For a root that is the full root set.
        """
        parent_id = self.parent_key(node)
        if parent_id is None:
            return list(await self.store.roots(session, options))
        return list(await self.store.children_of(session, [parent_id], options))

    async def siblings(
        self,
        session: AsyncSession,
        node: T,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        """``self_and_siblings`` minus ``node`` itself (matched by id)."""
        node_id = node.id  # type: ignore[attr-defined]
        return [n for n in await self.self_and_siblings(session, node, options) if n.id != node_id]  # type: ignore[attr-defined]

    async def roots(
        self,
        session: AsyncSession,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        return list(await self.store.roots(session, options))

    async def first_root(self, session: AsyncSession) -> T | None:
        """First root by default sibling order."""
        found = await self.store.roots(session, TraversalOptions(limit=1))
        return found[0] if found else None

    async def leaves(
        self,
        session: AsyncSession,
        options: TraversalOptions | None = None,
    ) -> list[T]:
        """Every node of the table that has no children."""
        return list(await self.store.leaves(session, options))


__all__ = ["NodeAccessor"]
