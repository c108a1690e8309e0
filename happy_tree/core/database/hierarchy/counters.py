"""Children counter cache maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from happy_tree.core.database.hierarchy.protocols import RecordStore


class CounterCache:
    """Keeps a parent's cached children count in step with writes.

    Each adjustment is a single relative ``increment_counter`` /
    ``decrement_counter`` call on the store, never a read-modify-write, so
    concurrent writers cannot lose updates. Stores without a counter field
    treat both calls as no-ops.
    """

    def __init__(self, store: RecordStore[Any]) -> None:
        self.store = store

    async def node_added(self, session: AsyncSession, parent_id: Any) -> None:
        if parent_id is not None:
            await self.store.increment_counter(session, parent_id)

    async def node_removed(self, session: AsyncSession, parent_id: Any) -> None:
        if parent_id is not None:
            await self.store.decrement_counter(session, parent_id)

    async def node_moved(self, session: AsyncSession, old_parent_id: Any, new_parent_id: Any) -> None:
        """Decrement the old parent, then increment the new one."""
        if old_parent_id == new_parent_id:
            return
        await self.node_removed(session, old_parent_id)
        await self.node_added(session, new_parent_id)


__all__ = ["CounterCache"]
