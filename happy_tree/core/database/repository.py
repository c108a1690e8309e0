"""Minimal generic repository for SQLAlchemy models.

Provides basic CRUD operations with explicit session passing. Every
statement goes through ``_execute`` so that registered observers see each
round trip and driver-level failures surface as ``StoreUnavailableError``.

Example:
    from happy_tree.core.database import BaseRepository

    class TagRepository(BaseRepository[Tag]):
        async def find_by_slug(self, session: AsyncSession, slug: str) -> Tag | None:
            stmt = select(Tag).where(Tag.slug == slug)
            result = await self._execute(session, stmt, "find_by_slug", slug=slug)
            return result.scalar_one_or_none()

    tag_repo = TagRepository(Tag)
    tag = await tag_repo.get(session, tag_id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy import delete as sql_delete
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

from happy_tree.core.database.exceptions import NotFoundError, StoreUnavailableError
from happy_tree.core.database.observers import StoreCall
from happy_tree.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.engine import Result
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql import Executable

    from happy_tree.core.database.hierarchy.protocols import QueryObserver


def _is_unavailable(exc: DBAPIError) -> bool:
    return isinstance(exc, OperationalError | InterfaceError) or exc.connection_invalidated


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Minimal generic repository for CRUD operations.

    Provides:
        - get(session, id) -> T | None
        - get_or_raise(session, id) -> T (raises NotFoundError)
        - list(session, limit, offset) -> Sequence[T]
        - create(session, instance) -> T
        - delete(session, instance) -> None
        - delete_many(session, ids) -> int

    Session is always explicit - no hidden state.
    """

    __slots__ = ("model", "observers", "_logger", "_lazy")

    def __init__(
        self,
        model: type[T],
        *,
        observers: Iterable[QueryObserver] | None = None,
    ) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., Category)
            observers: Callables notified once per Store call
        """
        self.model = model
        self.observers: list[QueryObserver] = list(observers or ())
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"repository.{model.__name__}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    def add_observer(self, observer: QueryObserver) -> None:
        self.observers.append(observer)

    def remove_observer(self, observer: QueryObserver) -> None:
        self.observers.remove(observer)

    def _notify(self, operation: str, params: dict[str, Any]) -> None:
        if not self.observers:
            return
        call = StoreCall(operation=operation, entity=self.model.__name__, params=params)
        for observer in self.observers:
            observer(call)

    async def _execute(
        self,
        session: AsyncSession,
        statement: Executable,
        operation: str,
        **params: Any,
    ) -> Result[Any]:
        """Run one statement as one Store call.

        Raises:
            StoreUnavailableError: The database could not be reached
        """
        self._notify(operation, params)
        try:
            return await session.execute(statement)
        except DBAPIError as exc:
            if not _is_unavailable(exc):
                raise
            self._logger.exception(
                "Store call failed",
                extra={"entity": self.model.__name__, "operation": f"db.{operation}"},
            )
            raise StoreUnavailableError(operation, self.model.__name__) from exc

    async def _flush(self, session: AsyncSession, operation: str, **params: Any) -> None:
        """Flush pending unit-of-work changes as one Store call."""
        self._notify(operation, params)
        try:
            await session.flush()
        except DBAPIError as exc:
            if not _is_unavailable(exc):
                raise
            self._logger.exception(
                "Store flush failed",
                extra={"entity": self.model.__name__, "operation": f"db.{operation}"},
            )
            raise StoreUnavailableError(operation, self.model.__name__) from exc

    async def get(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        *,
        options: Iterable[Any] | None = None,
    ) -> T | None:
        """Get entity by primary key.

        Always issues a SELECT (never served from the identity map alone), so
        every lookup is one observable Store call.

        Args:
            session: Database session
            id: Primary key value
            options: SQLAlchemy loader options (e.g., selectinload)

        Returns:
            Entity if found, None otherwise
        """
        stmt = select(self.model).where(self._pk_attr() == id)
        if options:
            stmt = stmt.options(*options)
        result = await self._execute(session, stmt, "find_by_id", id=id)
        instance = result.scalar_one_or_none()

        self._lazy.debug(
            lambda: f"db.get: {self.model.__name__}({id}) -> {'found' if instance else 'not found'}"
        )
        return instance

    async def get_or_raise(
        self,
        session: AsyncSession,
        id: Any,  # noqa: A002
        *,
        options: Iterable[Any] | None = None,
    ) -> T:
        """Get entity by primary key or raise NotFoundError.

        Raises:
            NotFoundError: If entity doesn't exist
        """
        instance = await self.get(session, id, options=options)
        if instance is None:
            self._logger.info(
                "Entity not found",
                extra={
                    "entity": self.model.__name__,
                    "id": str(id),
                    "operation": "db.get_or_raise",
                },
            )
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def list(
        self,
        session: AsyncSession,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[T]:
        """List entities ordered by primary key.

        Args:
            session: Database session
            limit: Maximum results to return
            offset: Number of results to skip
        """
        stmt = select(self.model).order_by(self._pk_attr()).limit(limit).offset(offset)
        result = await self._execute(session, stmt, "list", limit=limit, offset=offset)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.list: {self.model.__name__}(limit={limit}, offset={offset}) -> {len(items)} items"
        )
        return items

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Persist a new entity.

        Adds to session, flushes to get generated values (like id),
        and refreshes to ensure instance is up-to-date.

        Args:
            session: Database session
            instance: Entity instance to persist

        Returns:
            Persisted entity with generated fields populated
        """
        session.add(instance)
        await self._flush(session, "insert")
        await session.refresh(instance)

        entity_id = getattr(instance, "id", None)
        self._lazy.debug(lambda: f"db.create: {self.model.__name__}(id={entity_id})")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        """Delete an entity.

        Args:
            session: Database session
            instance: Entity to delete
        """
        entity_id = getattr(instance, "id", None)
        await session.delete(instance)
        await self._flush(session, "delete", id=entity_id)

        self._logger.info(
            "Entity deleted",
            extra={"entity": self.model.__name__, "id": str(entity_id), "operation": "db.delete"},
        )

    async def delete_many(
        self,
        session: AsyncSession,
        ids: Iterable[Any],
    ) -> int:
        """Delete multiple entities by primary key.

        Uses a single DELETE statement. Does not load entities into the
        session - directly executes DELETE WHERE id IN (...).

        Args:
            session: Database session
            ids: Primary key values to delete

        Returns:
            Number of rows deleted
        """
        ids_list = list(ids)
        if not ids_list:
            return 0

        pk_attr = self._pk_attr()
        stmt = sql_delete(self.model).where(pk_attr.in_(ids_list))
        result = await self._execute(session, stmt, "delete_many", ids=ids_list)
        deleted_count: int = result.rowcount if hasattr(result, "rowcount") else 0

        # WARNING level for bulk deletes > 10 (audit-worthy)
        if deleted_count > 10:
            self._logger.warning(
                "Bulk delete executed",
                extra={
                    "entity": self.model.__name__,
                    "requested": len(ids_list),
                    "deleted": deleted_count,
                    "operation": "db.delete_many",
                },
            )
        else:
            self._lazy.debug(
                lambda: f"db.delete_many: {self.model.__name__} -> {deleted_count} deleted"
            )
        return deleted_count

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        """Get primary key attribute.

        Inspects the model to find the primary key column.
        Falls back to 'id' if the model has no mapper.
        """
        from sqlalchemy import inspect as sa_inspect
        from sqlalchemy.exc import NoInspectionAvailable

        try:
            mapper = sa_inspect(self.model)
        except NoInspectionAvailable:
            mapper = None
        pk_cols = getattr(mapper, "primary_key", None)
        if pk_cols:
            return cast("InstrumentedAttribute[Any]", getattr(self.model, pk_cols[0].name))
        return cast("InstrumentedAttribute[Any]", self.model.id)  # type: ignore[attr-defined]


__all__ = ["BaseRepository"]
