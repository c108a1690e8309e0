"""Capability interfaces for the traversal engine.

The engine never imports a concrete model. It needs nodes that are
``Identifiable`` and ``ParentReferencing`` and a store that satisfies
``RecordStore``. ``TreeRepository`` is the SQLAlchemy implementation; any
other object with the same coroutine methods works too.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from happy_tree.core.database.observers import StoreCall
    from happy_tree.core.database.hierarchy.options import CascadePolicy, TraversalOptions


T = TypeVar("T")


@runtime_checkable
class Identifiable(Protocol):
    """A record with a store-assigned identity."""

    id: Any


@runtime_checkable
class ParentReferencing(Protocol):
    """A record holding a nullable reference to its parent's id."""

    @property
    def tree_parent_key(self) -> Any:
        """Parent id, or None for a root."""
        ...


@runtime_checkable
class TreeNode(Identifiable, ParentReferencing, Protocol):
    """Both capabilities: what every traversal operates on."""


QueryObserver = Callable[["StoreCall"], None]
"""Hook invoked by the store once per Store call, before it executes."""


class RecordStore(Protocol[T]):
    """Record Store contract consumed by the traversal engine.

    Every method is one round trip to the underlying storage. Point lookups
    that miss return ``None`` (``find_by_id``) or raise ``NotFoundError``
    (``parent_id_of``); storage failures raise ``StoreUnavailableError``.
    """

    model: type[T]

    @property
    def parent_key_name(self) -> str: ...

    async def find_by_id(self, session: AsyncSession, id: Any) -> T | None: ...  # noqa: A002

    async def parent_id_of(self, session: AsyncSession, id: Any) -> Any: ...  # noqa: A002

    async def children_of(
        self,
        session: AsyncSession,
        parent_ids: Iterable[Any],
        options: TraversalOptions | None = None,
    ) -> Sequence[T]: ...

    async def child_ids_of(
        self,
        session: AsyncSession,
        parent_ids: Iterable[Any],
        options: TraversalOptions | None = None,
    ) -> Sequence[Any]: ...

    async def count_children(
        self,
        session: AsyncSession,
        parent_ids: Iterable[Any],
        options: TraversalOptions | None = None,
    ) -> int: ...

    async def has_children(self, session: AsyncSession, id: Any) -> bool: ...  # noqa: A002

    async def roots(
        self,
        session: AsyncSession,
        options: TraversalOptions | None = None,
    ) -> Sequence[T]: ...

    async def leaves(
        self,
        session: AsyncSession,
        options: TraversalOptions | None = None,
    ) -> Sequence[T]: ...

    async def leaf_ids_among(self, session: AsyncSession, ids: Iterable[Any]) -> set[Any]: ...

    async def insert(self, session: AsyncSession, **fields: Any) -> T: ...

    async def update(self, session: AsyncSession, node: T, **fields: Any) -> T: ...

    async def delete(
        self,
        session: AsyncSession,
        node: T,
        *,
        cascade: CascadePolicy | str | None = None,
    ) -> None: ...

    async def increment_counter(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        field: str | None = None,
    ) -> None: ...

    async def decrement_counter(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        field: str | None = None,
    ) -> None: ...


__all__ = [
    "Identifiable",
    "ParentReferencing",
    "QueryObserver",
    "RecordStore",
    "TreeNode",
]
