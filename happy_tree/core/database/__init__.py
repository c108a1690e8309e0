"""Core database package: declarative base, repositories and tree support.

Base Classes and Mixins:
    - Base: Declarative base with constraint naming convention
    - IntegerPKMixin: Auto-increment integer primary key
    - TreeNodeMixin / ChildCountMixin: Parent-pointer tree columns

Repository:
    - BaseRepository[T]: Generic CRUD with explicit session passing
    - TreeRepository[T]: Record Store for tree models

Traversal:
    - TreeNavigator[T]: Ancestors, descendants, siblings, predicates
    - TraversalOptions: Per-call order / limit / condition / strategy

Query Filters:
    - ExpressionFilter: Wrap a SQLAlchemy boolean expression
    - SearchFilter: Multi-field text search with LIKE
    - OrderBy: Column sorting (asc/desc)
    - LimitOffset: LIMIT / OFFSET
    - CollectionFilter: WHERE ... IN clauses
    - FilterGroup: Combine multiple filters

Observation:
    - StoreCall / QueryCounter: Injectable per-repository query observer
"""

from __future__ import annotations

from happy_tree.core.database.base import (
    NAMING_CONVENTION,
    Base,
    IntegerPKMixin,
)
from happy_tree.core.database.exceptions import (
    DeleteRestrictedError,
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
    StoreUnavailableError,
)
from happy_tree.core.database.filters import (
    CollectionFilter,
    ExpressionFilter,
    FilterGroup,
    LimitOffset,
    OrderBy,
    SearchFilter,
    StatementFilter,
)
from happy_tree.core.database.hierarchy import (
    CascadePolicy,
    ChildCountMixin,
    Traversal,
    TraversalOptions,
    TreeNavigator,
    TreeNodeMixin,
    TreeRepository,
)
from happy_tree.core.database.observers import QueryCounter, StoreCall
from happy_tree.core.database.repository import BaseRepository

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "CascadePolicy",
    "ChildCountMixin",
    "CollectionFilter",
    "DeleteRestrictedError",
    "ExpressionFilter",
    "FilterGroup",
    "IntegerPKMixin",
    "InvalidFilterError",
    "LimitOffset",
    "NotFoundError",
    "OrderBy",
    "QueryCounter",
    "RepositoryError",
    "SearchFilter",
    "StatementFilter",
    "StoreCall",
    "StoreUnavailableError",
    "Traversal",
    "TraversalOptions",
    "TreeNavigator",
    "TreeNodeMixin",
    "TreeRepository",
]
