"""Parent-pointer tree support for SQLAlchemy models.

Models opt in with ``TreeNodeMixin`` (and ``ChildCountMixin`` for a cached
children count). ``TreeRepository`` is the Record Store that builds every
statement; ``TreeNavigator`` combines the traversal components on top of
it.

Example:
    from happy_tree.core.database.hierarchy import TraversalOptions, TreeNavigator

    tree = TreeNavigator.for_model(Category)
    top_two = await tree.descendants(
        session, root, TraversalOptions(order=["name"], limit=2, traversal="bfs")
    )
"""

from __future__ import annotations

from happy_tree.core.database.hierarchy.accessor import NodeAccessor
from happy_tree.core.database.hierarchy.ancestry import AncestryWalker
from happy_tree.core.database.hierarchy.component import TreeComponent
from happy_tree.core.database.hierarchy.counters import CounterCache
from happy_tree.core.database.hierarchy.descendants import DescendantTraversal
from happy_tree.core.database.hierarchy.guards import CycleGuard
from happy_tree.core.database.hierarchy.mixins import ChildCountMixin, TreeNodeMixin
from happy_tree.core.database.hierarchy.navigator import TreeNavigator
from happy_tree.core.database.hierarchy.options import (
    DEFAULT_OPTIONS,
    CascadePolicy,
    Traversal,
    TraversalOptions,
)
from happy_tree.core.database.hierarchy.predicates import RelationshipPredicates
from happy_tree.core.database.hierarchy.protocols import (
    Identifiable,
    ParentReferencing,
    QueryObserver,
    RecordStore,
    TreeNode,
)
from happy_tree.core.database.hierarchy.repository import TreeRepository

__all__ = [
    "DEFAULT_OPTIONS",
    "AncestryWalker",
    "CascadePolicy",
    "ChildCountMixin",
    "CounterCache",
    "CycleGuard",
    "DescendantTraversal",
    "Identifiable",
    "NodeAccessor",
    "ParentReferencing",
    "QueryObserver",
    "RecordStore",
    "RelationshipPredicates",
    "Traversal",
    "TraversalOptions",
    "TreeComponent",
    "TreeNavigator",
    "TreeNode",
    "TreeRepository",
]
