"""Parent-pointer trees for async SQLAlchemy models.

Example:
    from happy_tree import TreeNavigator, TraversalOptions

    tree = TreeNavigator.for_model(Category)
    ids = await tree.descendant_ids(session, root, TraversalOptions(limit=2))
"""

from __future__ import annotations

from happy_tree.core.database import (
    Base,
    CascadePolicy,
    ChildCountMixin,
    IntegerPKMixin,
    QueryCounter,
    Traversal,
    TraversalOptions,
    TreeNavigator,
    TreeNodeMixin,
    TreeRepository,
)
from happy_tree.core.exceptions import (
    DescendantParentError,
    HappyTreeError,
    ParentValidationError,
    SelfParentError,
)

__version__ = "0.1.0"

__all__ = [
    "Base",
    "CascadePolicy",
    "ChildCountMixin",
    "DescendantParentError",
    "HappyTreeError",
    "IntegerPKMixin",
    "ParentValidationError",
    "QueryCounter",
    "SelfParentError",
    "Traversal",
    "TraversalOptions",
    "TreeNavigator",
    "TreeNodeMixin",
    "TreeRepository",
    "__version__",
]
