"""Single entry point combining every traversal component."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self, TypeVar

from happy_tree.core.database.hierarchy.accessor import NodeAccessor
from happy_tree.core.database.hierarchy.ancestry import AncestryWalker
from happy_tree.core.database.hierarchy.descendants import DescendantTraversal
from happy_tree.core.database.hierarchy.guards import CycleGuard
from happy_tree.core.database.hierarchy.predicates import RelationshipPredicates
from happy_tree.core.database.hierarchy.repository import TreeRepository

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from happy_tree.core.database.hierarchy.options import CascadePolicy
    from happy_tree.core.database.hierarchy.protocols import QueryObserver
    from happy_tree.core.settings import TreeSettings


T = TypeVar("T")


class TreeNavigator(
    NodeAccessor[T],
    AncestryWalker[T],
    DescendantTraversal[T],
    RelationshipPredicates[T],
    CycleGuard[T],
):
    """Tree operations for one model over one Record Store.

    Every method takes the session explicitly and issues its Store calls
    sequentially; a navigator holds no per-call state and can be shared.

    Example:
        tree = TreeNavigator.for_model(Category)

        async with session_scope(factory) as session:
            root = await tree.store.insert(session, name="root")
            child = await tree.create_child(session, root, name="child")
            await tree.descendant_ids(session, root)   # [child.id]
            await tree.root(session, child)           # root
            await tree.ancestor_of(session, root, child)  # True
    """

    @classmethod
    def for_model(
        cls,
        model: type[T],
        *,
        observers: Iterable[QueryObserver] | None = None,
        settings: TreeSettings | None = None,
    ) -> Self:
        """Navigator backed by a fresh ``TreeRepository`` for ``model``."""
        store = TreeRepository(model, observers=observers, settings=settings)
        return cls(store, settings=settings)

    async def create_child(self, session: AsyncSession, parent: T | None, **fields: Any) -> T:
        """Insert a node under ``parent`` (a new root when ``parent`` is None)."""
        parent_id = None if parent is None else parent.id  # type: ignore[attr-defined]
        return await self.store.insert(session, **{**fields, self.parent_key_name: parent_id})

    async def move(self, session: AsyncSession, node: T, new_parent: T | None) -> T:
        """Reparent ``node``; rejected if it would create a cycle.

        Raises:
            ParentValidationError: ``new_parent`` is ``node`` or one of its descendants
        """
        parent_id = None if new_parent is None else new_parent.id  # type: ignore[attr-defined]
        return await self.store.update(session, node, **{self.parent_key_name: parent_id})

    async def delete(
        self,
        session: AsyncSession,
        node: T,
        *,
        cascade: CascadePolicy | str | None = None,
    ) -> None:
        await self.store.delete(session, node, cascade=cascade)


__all__ = ["TreeNavigator"]
