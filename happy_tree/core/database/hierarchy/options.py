"""Per-call traversal configuration.

A traversal call takes one ``TraversalOptions`` value. The same order,
limit and condition are applied independently to every level's children
query, so ``TraversalOptions(limit=2)`` means "at most two children of each
node, at every depth", and a node excluded by ``condition`` is never
expanded (its subtree is pruned).

Example:
    >>> opts = TraversalOptions(order=["-name"], limit=2, traversal="bfs")
    >>> opts.order
    (('name', 'desc'),)
    >>> opts.traversal
    <Traversal.BFS: 'bfs'>
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

    from happy_tree.core.database.filters import StatementFilter

SortDirection = Literal["asc", "desc"]
SortSpec = tuple[str, SortDirection]


class Traversal(StrEnum):
    """Descendant traversal strategies."""

    BFS = "bfs"
    BFS_RECURSIVE = "bfs_recursive"
    DFS = "dfs"
    DFS_RECURSIVE = "dfs_recursive"

    @property
    def is_breadth_first(self) -> bool:
        return self in (Traversal.BFS, Traversal.BFS_RECURSIVE)

    @property
    def is_recursive(self) -> bool:
        return self in (Traversal.BFS_RECURSIVE, Traversal.DFS_RECURSIVE)


class CascadePolicy(StrEnum):
    """What happens to a node's children when it is deleted."""

    DESTROY = "destroy"
    NULLIFY = "nullify"
    RESTRICT = "restrict"


def normalize_sort(spec: str | Sequence[str]) -> SortSpec:
    if isinstance(spec, str):
        if spec.startswith("-"):
            return (spec[1:], "desc")
        return (spec, "asc")

    name, direction = spec
    direction = direction.lower()
    if direction not in ("asc", "desc"):
        msg = f"Invalid sort direction {direction!r} for {name!r}"
        raise ValueError(msg)
    return (name, direction)


@dataclass(slots=True, frozen=True, eq=False)
class TraversalOptions:
    """Order, limit, condition and strategy for one traversal call.

    Attributes:
        order: Sibling ordering as ``(field, direction)`` pairs. Accepts
            ``"name"`` / ``"-name"`` shorthand. ``None`` uses the model's
            ``__tree_order__`` (primary key by default).
        limit: Maximum children kept per parent at every level.
        condition: Structured condition (a ``StatementFilter`` or SQLAlchemy
            boolean expression) every returned node must satisfy.
        traversal: Strategy override. ``None`` uses the operation default
            from ``TreeSettings``.
    """

    order: tuple[SortSpec, ...] | None = None
    limit: int | None = None
    condition: StatementFilter | ColumnElement[bool] | None = None
    traversal: Traversal | None = None

    def __post_init__(self) -> None:
        if self.order is not None:
            specs: Any = self.order
            if isinstance(specs, str):
                specs = [specs]
            object.__setattr__(self, "order", tuple(normalize_sort(s) for s in specs))

        if self.limit is not None and (isinstance(self.limit, bool) or self.limit < 1):
            msg = f"limit must be a positive integer, got {self.limit!r}"
            raise ValueError(msg)

        if self.traversal is not None and not isinstance(self.traversal, Traversal):
            object.__setattr__(self, "traversal", Traversal(self.traversal))

    def with_traversal(self, traversal: Traversal | str) -> TraversalOptions:
        """Copy of these options with a different strategy."""
        return dataclasses.replace(self, traversal=Traversal(traversal))

    def without_limit(self) -> TraversalOptions:
        """Copy of these options with the per-parent limit removed."""
        return dataclasses.replace(self, limit=None)

    def resolve_traversal(self, default: Traversal) -> Traversal:
        return self.traversal or default

    @classmethod
    def coerce(cls, options: TraversalOptions | None) -> TraversalOptions:
        return DEFAULT_OPTIONS if options is None else options


DEFAULT_OPTIONS = TraversalOptions()


__all__ = [
    "DEFAULT_OPTIONS",
    "CascadePolicy",
    "SortDirection",
    "SortSpec",
    "normalize_sort",
    "Traversal",
    "TraversalOptions",
]
