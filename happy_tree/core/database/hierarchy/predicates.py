"""Ancestor / descendant relationship tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from happy_tree.core.database.exceptions import NotFoundError
from happy_tree.core.database.hierarchy.component import TreeComponent

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from happy_tree.core.database.hierarchy.protocols import RecordStore


async def is_ancestor_id(
    store: RecordStore[Any],
    session: AsyncSession,
    ancestor_id: Any,
    start_id: Any,
) -> bool:
    """Whether ``ancestor_id`` appears on the parent chain beginning at ``start_id``.

    ``start_id`` itself is compared first, then each parent id in turn. One
    ``parent_id_of`` call per step; stops at the first match, at a root, or
    at a missing row.
    """
    if ancestor_id is None:
        return False

    key = start_id
    while key is not None:
        if key == ancestor_id:
            return True
        try:
            key = await store.parent_id_of(session, key)
        except NotFoundError:
            return False
    return False


T = TypeVar("T")


class RelationshipPredicates(TreeComponent[T]):
    """``ancestor_of`` and its mirror ``descendant_of``.

    Both answer False, without querying, for ``None`` or for objects that are
    not instances of the store's model.
    """

    def _comparable(self, node: Any, other: Any) -> bool:
        return isinstance(node, self.model) and isinstance(other, self.model)

    async def ancestor_of(self, session: AsyncSession, node: T, other: Any) -> bool:
        """True if ``node`` is a proper ancestor of ``other``.

        Walks up from ``other``'s parent; cost is at most the depth of
        ``other``.
        """
        if not self._comparable(node, other):
            return False

        found = await is_ancestor_id(self.store, session, node.id, self.parent_key(other))  # type: ignore[attr-defined]
        self._lazy.debug(lambda: f"ancestor_of: {node!r} -> {other!r} = {found}")
        return found

    async def descendant_of(self, session: AsyncSession, node: T, other: Any) -> bool:
        """True if ``node`` is a proper descendant of ``other``."""
        return await self.ancestor_of(session, other, node)


__all__ = [
    "RelationshipPredicates",
    "is_ancestor_id",
]
