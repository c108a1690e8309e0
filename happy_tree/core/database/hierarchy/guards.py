"""Cycle prevention for parent assignments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from happy_tree.core.database.hierarchy.component import TreeComponent
from happy_tree.core.database.hierarchy.predicates import is_ancestor_id
from happy_tree.core.exceptions import (
    DescendantParentError,
    ParentValidationError,
    SelfParentError,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class CycleGuard(TreeComponent[T]):
    """Rejects parent assignments that would create a cycle.

    ``TreeRepository`` runs ``validate_parent`` before every write that sets
    a parent, against the pre-write state of the tree. Checks in order:

    1. the candidate is the node itself (no Store call);
    2. the candidate is currently a descendant of the node. Detected by
       walking up from the candidate, so the cost is the candidate's depth
       rather than the size of the node's subtree.

    A candidate id with no row behind it passes; referential integrity is
    the foreign key's job.
    """

    async def validate_parent(self, session: AsyncSession, node: Any, parent_id: Any) -> None:
        """Raise ``ParentValidationError`` if ``parent_id`` is not an acceptable parent.

        Raises:
            SelfParentError: ``parent_id`` is the node's own id
            DescendantParentError: ``parent_id`` is one of the node's descendants
        """
        node_id = getattr(node, "id", None)
        if parent_id is None or node_id is None:
            return

        field = self.parent_key_name
        if parent_id == node_id:
            self._logger.info(
                "Rejected self parent",
                extra={"entity": self.model.__name__, "id": str(node_id), "operation": "tree.validate_parent"},
            )
            raise SelfParentError(field=field, node_id=node_id)

        if await is_ancestor_id(self.store, session, node_id, parent_id):
            self._logger.info(
                "Rejected descendant parent",
                extra={
                    "entity": self.model.__name__,
                    "id": str(node_id),
                    "parent_id": str(parent_id),
                    "operation": "tree.validate_parent",
                },
            )
            raise DescendantParentError(field=field, node_id=node_id, parent_id=parent_id)

    async def parent_errors(self, session: AsyncSession, node: Any, parent_id: Any) -> dict[str, list[str]]:
        """Validation errors keyed by field, empty when the assignment is valid.

        Example:
            >>> await tree.parent_errors(session, root, root.id)
            {'parent_id': ['cannot be its own id']}
        """
        try:
            await self.validate_parent(session, node, parent_id)
        except ParentValidationError as exc:
            return {exc.field: [exc.detail]}
        return {}


__all__ = ["CycleGuard"]
