"""SQLAlchemy Record Store for parent-pointer trees.

``TreeRepository`` is the only place that builds SQL for tree models. The
traversal components in this package call its coroutines and never see a
statement. Each public read method is exactly one Store call.

Example:
    from happy_tree.core.database.hierarchy import TraversalOptions, TreeRepository

    repo = TreeRepository(Category, observers=[counter])
    ids = await repo.child_ids_of(session, [1, 2], TraversalOptions(limit=2))
    root = await repo.insert(session, name="root")
    child = await repo.insert(session, name="child", parent_id=root.id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import exists, func, select, update
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import aliased
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.orm.util import identity_key
from sqlalchemy.sql.elements import ColumnElement

from happy_tree.core.database.exceptions import (
    DeleteRestrictedError,
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
)
from happy_tree.core.database.filters import LimitOffset, OrderBy, StatementFilter
from happy_tree.core.database.hierarchy.counters import CounterCache
from happy_tree.core.database.hierarchy.guards import CycleGuard
from happy_tree.core.database.hierarchy.options import (
    CascadePolicy,
    TraversalOptions,
    normalize_sort,
)
from happy_tree.core.database.repository import BaseRepository
from happy_tree.core.exceptions import ParentValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

    from happy_tree.core.database.hierarchy.protocols import QueryObserver
    from happy_tree.core.settings import TreeSettings


T = TypeVar("T")


class TreeRepository(BaseRepository[T]):
    """Record Store for models using ``TreeNodeMixin``.

    Provides (on top of ``BaseRepository``):
        - find_by_id / parent_id_of point lookups
        - children_of / child_ids_of / count_children for a frontier of parents
        - has_children / roots / leaves / leaf_ids_among
        - insert / update / delete with cycle checks, counter cache and cascade
        - increment_counter / decrement_counter / recount_children
    """

    __slots__ = ("settings", "counters", "guard")

    def __init__(
        self,
        model: type[T],
        *,
        observers: Iterable[QueryObserver] | None = None,
        settings: TreeSettings | None = None,
    ) -> None:
        super().__init__(model, observers=observers)
        if settings is None:
            from happy_tree.core.settings import get_tree_settings

            settings = get_tree_settings()
        self.settings = settings
        self.counters = CounterCache(self)
        self.guard = CycleGuard(self, settings=settings)

    # ------------------------------------------------------------------
    # Model introspection
    # ------------------------------------------------------------------

    @property
    def parent_key_name(self) -> str:
        return getattr(self.model, "__parent_column__", "parent_id")

    @property
    def counter_field(self) -> str | None:
        return getattr(self.model, "__counter_cache__", None)

    def _parent_attr(self) -> InstrumentedAttribute[Any]:
        return getattr(self.model, self.parent_key_name)

    def _column(self, name: str, option: str) -> InstrumentedAttribute[Any]:
        if name not in sa_inspect(self.model).column_attrs:
            msg = f"Unknown field {name!r} on {self.model.__name__}"
            raise InvalidFilterError(msg, filter_name=option)
        return getattr(self.model, name)

    def _order(self, options: TraversalOptions) -> OrderBy:
        if options.order is not None:
            specs = options.order
        else:
            specs = tuple(normalize_sort(s) for s in getattr(self.model, "__tree_order__", ()))

        fields = [self._column(name, "order") for name, _ in specs]
        directions = [direction for _, direction in specs]

        pk = self._pk_attr()
        if pk.key not in {name for name, _ in specs}:
            fields.append(pk)
            directions.append("asc")
        return OrderBy(fields, directions)

    def _apply_condition(self, statement: Select[Any], options: TraversalOptions) -> Select[Any]:
        condition = options.condition
        if condition is None:
            return statement
        if isinstance(condition, StatementFilter):
            return condition.apply(statement)
        if isinstance(condition, ColumnElement):
            return statement.where(condition)
        msg = f"Unsupported condition type {type(condition).__name__}"
        raise InvalidFilterError(msg, filter_name="condition")

    def _children_statement(
        self,
        parent_ids: Sequence[Any],
        options: TraversalOptions,
        *columns: Any,
    ) -> Select[Any]:
        """SELECT ``columns`` for the children of ``parent_ids``.

        The limit applies per parent. With several parents that needs a
        ``row_number()`` window partitioned by parent key.
        """
        parent = self._parent_attr()
        order = self._order(options)

        if options.limit is not None and len(parent_ids) > 1:
            pk = self._pk_attr()
            rank = func.row_number().over(partition_by=parent, order_by=order.clauses())
            ranked = self._apply_condition(
                select(pk.label("ranked_id"), rank.label("tree_rank")).where(parent.in_(parent_ids)),
                options,
            ).subquery("ranked")
            stmt = (
                select(*columns)
                .join(ranked, pk == ranked.c.ranked_id)
                .where(ranked.c.tree_rank <= options.limit)
            )
            return order.apply(stmt)

        stmt = self._apply_condition(select(*columns).where(parent.in_(parent_ids)), options)
        stmt = order.apply(stmt)
        if options.limit is not None:
            stmt = LimitOffset(options.limit).apply(stmt)
        return stmt

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_id(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        return await self.get(session, id)

    async def parent_id_of(self, session: AsyncSession, id: Any) -> Any:  # noqa: A002
        """Parent id of the row ``id`` (None for a root).

        Raises:
            NotFoundError: No row with that id
        """
        stmt = select(self._parent_attr()).where(self._pk_attr() == id)
        result = await self._execute(session, stmt, "parent_id_of", id=id)
        row = result.first()
        if row is None:
            self._lazy.debug(lambda: f"db.parent_id_of: {self.model.__name__}({id}) -> missing")
            raise NotFoundError(self.model.__name__, {"id": id})
        return row[0]

    async def children_of(
        self,
        session: AsyncSession,
        parent_ids: Iterable[Any],
        options: TraversalOptions | None = None,
    ) -> Sequence[T]:
        """Children of every id in ``parent_ids`` in one statement."""
        ids = list(parent_ids)
        if not ids:
            return []

        options = TraversalOptions.coerce(options)
        stmt = self._children_statement(ids, options, self.model)
        result = await self._execute(session, stmt, "children_of", parent_ids=ids, limit=options.limit)
        nodes = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.children_of: {self.model.__name__}{ids} -> {len(nodes)} nodes"
        )
        return nodes

    async def child_ids_of(
        self,
        session: AsyncSession,
        parent_ids: Iterable[Any],
        options: TraversalOptions | None = None,
    ) -> Sequence[Any]:
        """Ids of the children of every id in ``parent_ids`` in one statement."""
        ids = list(parent_ids)
        if not ids:
            return []

        options = TraversalOptions.coerce(options)
        stmt = self._children_statement(ids, options, self._pk_attr())
        result = await self._execute(session, stmt, "child_ids_of", parent_ids=ids, limit=options.limit)
        child_ids = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.child_ids_of: {self.model.__name__}{ids} -> {list(child_ids)}"
        )
        return child_ids

    async def count_children(
        self,
        session: AsyncSession,
        parent_ids: Iterable[Any],
        options: TraversalOptions | None = None,
    ) -> int:
        """Number of children of ``parent_ids`` matching the options."""
        ids = list(parent_ids)
        if not ids:
            return 0

        options = TraversalOptions.coerce(options)
        matching = self._children_statement(ids, options, self._pk_attr()).subquery("matching")
        stmt = select(func.count()).select_from(matching)
        result = await self._execute(session, stmt, "count_children", parent_ids=ids, limit=options.limit)
        total = int(result.scalar_one())

        self._lazy.debug(lambda: f"db.count_children: {self.model.__name__}{ids} -> {total}")
        return total

    async def has_children(self, session: AsyncSession, id: Any) -> bool:  # noqa: A002
        stmt = select(exists().where(self._parent_attr() == id))
        result = await self._execute(session, stmt, "has_children", id=id)
        return bool(result.scalar())

    async def roots(
        self,
        session: AsyncSession,
        options: TraversalOptions | None = None,
    ) -> Sequence[T]:
        """Every node without a parent, in sibling order."""
        options = TraversalOptions.coerce(options)
        stmt = self._apply_condition(select(self.model).where(self._parent_attr().is_(None)), options)
        stmt = self._order(options).apply(stmt)
        if options.limit is not None:
            stmt = LimitOffset(options.limit).apply(stmt)

        result = await self._execute(session, stmt, "roots", limit=options.limit)
        return result.scalars().all()

    async def leaves(
        self,
        session: AsyncSession,
        options: TraversalOptions | None = None,
    ) -> Sequence[T]:
        """Every node without children, in sibling order."""
        options = TraversalOptions.coerce(options)
        child = aliased(self.model)
        has_child = exists().where(getattr(child, self.parent_key_name) == self._pk_attr())

        stmt = self._apply_condition(select(self.model).where(~has_child), options)
        stmt = self._order(options).apply(stmt)
        if options.limit is not None:
            stmt = LimitOffset(options.limit).apply(stmt)

        result = await self._execute(session, stmt, "leaves", limit=options.limit)
        return result.scalars().all()

    async def leaf_ids_among(self, session: AsyncSession, ids: Iterable[Any]) -> set[Any]:
        """Subset of ``ids`` whose rows have no children."""
        ids_list = list(ids)
        if not ids_list:
            return set()

        pk = self._pk_attr()
        child = aliased(self.model)
        has_child = exists().where(getattr(child, self.parent_key_name) == pk)
        stmt = select(pk).where(pk.in_(ids_list), ~has_child)

        result = await self._execute(session, stmt, "leaf_ids_among", ids=ids_list)
        return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Persist a new node and bump its parent's counter cache."""
        parent_id = getattr(instance, self.parent_key_name)
        await self.guard.validate_parent(session, instance, parent_id)

        instance = await super().create(session, instance)
        await self.counters.node_added(session, parent_id)
        return instance

    async def insert(self, session: AsyncSession, **fields: Any) -> T:
        """Build a node from ``fields`` and persist it."""
        return await self.create(session, self.model(**fields))

    async def update(self, session: AsyncSession, node: T, **fields: Any) -> T:
        """Assign ``fields`` to ``node`` and flush.

        The parent reference is compared with its last flushed value, so an
        assignment made on ``node`` before this call is checked too. A
        changed parent goes through the cycle guard first; on rejection the
        parent reference is restored and nothing is written.

        Raises:
            ParentValidationError: The new parent would create a cycle
            RepositoryError: ``fields`` names an unmapped attribute
        """
        columns = sa_inspect(self.model).column_attrs
        unknown = [name for name in fields if name not in columns]
        if unknown:
            msg = f"Unknown field(s) for {self.model.__name__}"
            raise RepositoryError(msg, details={"fields": unknown})

        key = self.parent_key_name
        new_parent_id = fields.get(key, getattr(node, key))
        with session.no_autoflush:
            old_parent_id = await self._persisted_parent_id(session, node)
            reparent = new_parent_id != old_parent_id
            if reparent:
                try:
                    await self.guard.validate_parent(session, node, new_parent_id)
                except ParentValidationError:
                    setattr(node, key, old_parent_id)
                    raise

        for name, value in fields.items():
            setattr(node, name, value)
        session.add(node)
        node_id = getattr(node, "id", None)
        await self._flush(session, "update", id=node_id, fields=sorted(fields))

        if reparent:
            await self.counters.node_moved(session, old_parent_id, new_parent_id)
            self._logger.info(
                "Node moved",
                extra={
                    "entity": self.model.__name__,
                    "id": str(node_id),
                    "from_parent": str(old_parent_id),
                    "to_parent": str(new_parent_id),
                    "operation": "db.update",
                },
            )
        return node

    async def _persisted_parent_id(self, session: AsyncSession, node: T) -> Any:
        """Parent id as last flushed, ignoring unflushed assignments on ``node``."""
        state = sa_inspect(node)
        history = state.attrs[self.parent_key_name].history
        if history.deleted:
            return history.deleted[0]
        if history.unchanged:
            return history.unchanged[0]
        if state.persistent:
            return await self.parent_id_of(session, state.identity[0])
        return None

    async def delete(
        self,
        session: AsyncSession,
        node: T,
        *,
        cascade: CascadePolicy | str | None = None,
    ) -> None:
        """Delete ``node`` applying a cascade policy to its children.

        Policy: ``cascade`` argument, else the model's ``__dependent__``,
        else ``TreeSettings.default_cascade``.

        Raises:
            DeleteRestrictedError: Policy is ``restrict`` and the node has children
        """
        policy = CascadePolicy(
            cascade or getattr(self.model, "__dependent__", None) or self.settings.default_cascade
        )
        node_id = getattr(node, "id", None)
        parent_id = getattr(node, self.parent_key_name)

        if policy is CascadePolicy.RESTRICT:
            if await self.has_children(session, node_id):
                raise DeleteRestrictedError(self.model.__name__, node_id)
        elif policy is CascadePolicy.NULLIFY:
            stmt = (
                update(self.model)
                .where(self._parent_attr() == node_id)
                .values({self.parent_key_name: None})
            )
            result = await self._execute(session, stmt, "nullify_children", id=node_id)
            self._lazy.debug(
                lambda: f"db.nullify_children: {self.model.__name__}({node_id}) -> {result.rowcount} promoted"
            )
        else:
            descendant_ids = await self._collect_descendant_ids(session, node_id)
            await self.delete_many(session, descendant_ids)

        await session.delete(node)
        await self._flush(session, "delete", id=node_id)
        await self.counters.node_removed(session, parent_id)

        self._logger.info(
            "Entity deleted",
            extra={
                "entity": self.model.__name__,
                "id": str(node_id),
                "policy": str(policy),
                "operation": "db.delete",
            },
        )

    async def _collect_descendant_ids(self, session: AsyncSession, node_id: Any) -> list[Any]:
        """Every descendant id, one ``child_ids_of`` call per level."""
        collected: list[Any] = []
        frontier: Sequence[Any] = [node_id]
        while frontier:
            frontier = await self.child_ids_of(session, frontier)
            collected.extend(frontier)
        return collected

    # ------------------------------------------------------------------
    # Counter cache
    # ------------------------------------------------------------------

    async def increment_counter(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        field: str | None = None,
    ) -> None:
        await self._adjust_counter(session, id, field, 1, "increment_counter")

    async def decrement_counter(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        field: str | None = None,
    ) -> None:
        await self._adjust_counter(session, id, field, -1, "decrement_counter")

    async def _adjust_counter(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        field: str | None,
        delta: int,
        operation: str,
    ) -> None:
        field = field or self.counter_field
        if field is None:
            return

        column = self._column(field, "counter_cache")
        stmt = (
            update(self.model)
            .where(self._pk_attr() == id)
            .values({field: column + delta})
            .returning(column)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(session, stmt, operation, id=id, field=field)
        self._sync_loaded(session, id, field, result.scalar_one_or_none())
        self._lazy.debug(lambda: f"db.{operation}: {self.model.__name__}({id}).{field}")

    def _sync_loaded(self, session: AsyncSession, id: Any, field: str, value: Any) -> None:  # noqa: A002
        """Copy a counter value written by UPDATE onto the instance the session holds."""
        if value is None:
            return
        instance = session.identity_map.get(identity_key(self.model, id))
        if instance is not None:
            set_committed_value(instance, field, value)

    async def recount_children(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        field: str | None = None,
    ) -> None:
        """Reset a cached children count from the live rows in one statement."""
        field = field or self.counter_field
        if field is None:
            msg = f"{self.model.__name__} has no counter cache"
            raise RepositoryError(msg, details={"id": id})

        self._column(field, "counter_cache")
        child = aliased(self.model)
        live_count = (
            select(func.count())
            .select_from(child)
            .where(getattr(child, self.parent_key_name) == id)
            .scalar_subquery()
        )
        stmt = (
            update(self.model)
            .where(self._pk_attr() == id)
            .values({field: live_count})
            .returning(getattr(self.model, field))
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(session, stmt, "recount_children", id=id, field=field)
        self._sync_loaded(session, id, field, result.scalar_one_or_none())
        self._logger.info(
            "Children counter recomputed",
            extra={"entity": self.model.__name__, "id": str(id), "operation": "db.recount_children"},
        )


__all__ = ["TreeRepository"]
