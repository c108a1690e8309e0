"""Database repository exceptions.

Custom exceptions for Record Store operations that give better error
messages and typing than raw SQLAlchemy exceptions.
"""
from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base exception for repository operations.

    Raised when a repository operation fails due to programming
    errors, configuration issues, or unexpected states.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize repository error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class NotFoundError(RepositoryError):
    """Entity not found in database.

    Raised when a point lookup by primary key misses. Traversals treat it
    as "no such node": the missing row contributes nothing and the walk
    carries on for unaffected branches.

    Attributes:
        model_name: Name of the model class that wasn't found
        identifier: The key/value that was searched for
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]):
        """Initialize not found error.

        Args:
            model_name: Name of the model (e.g., "Category")
            identifier: Key-value pairs used in the search (e.g., {"id": 123})
        """
        self.model_name = model_name
        self.identifier = identifier

        id_str = ", ".join(f"{k}={v!r}" for k, v in identifier.items())
        message = f"{model_name} not found with {id_str}"

        super().__init__(message, details={"model": model_name, **identifier})

    def __repr__(self) -> str:
        """Repr for debugging."""
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


class InvalidFilterError(RepositoryError):
    """Invalid filter, order or limit parameters.

    Raised when traversal options reference non-existent fields or carry
    a condition the store cannot turn into a structured query.
    """

    def __init__(self, message: str, filter_name: str | None = None):
        """Initialize invalid filter error.

        Args:
            message: Error description
            filter_name: Name of the problematic option (if applicable)
        """
        details = {"filter": filter_name} if filter_name else {}
        super().__init__(message, details=details)


class StoreUnavailableError(RepositoryError):
    """The database could not serve a Store call.

    Wraps driver-level operational failures (lost connection, locked
    database). The original exception is chained as ``__cause__``. A
    traversal that hits this error is aborted as a whole.
    """

    def __init__(self, operation: str, model_name: str):
        self.operation = operation
        self.model_name = model_name
        super().__init__(
            f"Store unavailable during {operation}",
            details={"model": model_name, "operation": operation},
        )


class DeleteRestrictedError(RepositoryError):
    """Delete refused because the node still has children.

    Raised by the ``restrict`` cascade policy.
    """

    def __init__(self, model_name: str, node_id: Any):
        self.model_name = model_name
        self.node_id = node_id
        super().__init__(
            f"Cannot delete {model_name} with children",
            details={"model": model_name, "id": node_id},
        )


__all__ = [
    "DeleteRestrictedError",
    "InvalidFilterError",
    "NotFoundError",
    "RepositoryError",
    "StoreUnavailableError",
]
