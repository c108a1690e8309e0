"""Custom exception classes for tree operations."""

from __future__ import annotations

from typing import Any


class HappyTreeError(Exception):
    """Base exception for tree-level errors.

    Attributes:
        detail: Human-readable error message.
        type: Error type identifier.
        extra: Additional context-specific information about the error.
    """

    def __init__(
        self,
        detail: str,
        type: str = "about:blank",  # noqa: A002
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail
        self.type = type
        self.extra = extra or {}
        super().__init__(detail)


class ParentValidationError(HappyTreeError, ValueError):
    """A parent-reference assignment was rejected before any write.

    Attributes:
        field: Name of the parent-reference attribute the error belongs to.
        node_id: Id of the node being written.
        parent_id: Rejected parent id.

    Example:
        try:
            await repo.update(session, node, parent_id=descendant.id)
        except ParentValidationError as exc:
            errors = {exc.field: [exc.detail]}
    """

    def __init__(
        self,
        detail: str,
        *,
        field: str,
        node_id: Any,
        parent_id: Any,
        type: str = "invalid-parent",  # noqa: A002
    ) -> None:
        self.field = field
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            detail,
            type=type,
            extra={"field": field, "node_id": node_id, "parent_id": parent_id},
        )


class SelfParentError(ParentValidationError):
    """Node assigned as its own parent."""

    def __init__(self, *, field: str, node_id: Any) -> None:
        super().__init__(
            "cannot be its own id",
            field=field,
            node_id=node_id,
            parent_id=node_id,
            type="self-parent",
        )


class DescendantParentError(ParentValidationError):
    """Node assigned one of its current descendants as parent."""

    def __init__(self, *, field: str, node_id: Any, parent_id: Any) -> None:
        super().__init__(
            "cannot be a descendant's id",
            field=field,
            node_id=node_id,
            parent_id=parent_id,
            type="descendant-parent",
        )


__all__ = [
    "DescendantParentError",
    "HappyTreeError",
    "ParentValidationError",
    "SelfParentError",
]
