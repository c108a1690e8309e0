"""Structured query filters for SQLAlchemy statements.

Traversal conditions and sibling ordering are passed to the Record Store
as these value objects, never as SQL text. Each filter only knows how to
modify a ``Select``; the store decides where in the statement it goes
(e.g. inside a per-parent window subquery).

Usage:
    from sqlalchemy import select
    from happy_tree.core.database.filters import CollectionFilter, OrderBy

    stmt = select(Category)
    stmt = CollectionFilter(Category.kind, ["folder"]).apply(stmt)
    stmt = OrderBy(Category.name, "desc").apply(stmt)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import Select, and_, false, func, or_

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.elements import ColumnElement


class StatementFilter(ABC):
    """Base class for statement filters.

    All filters implement `apply()` which modifies a SQLAlchemy statement.
    """

    @abstractmethod
    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply filter to statement.

        Args:
            statement: SQLAlchemy select statement

        Returns:
            Modified select statement
        """
        ...


class ExpressionFilter(StatementFilter):
    """Wrap a SQLAlchemy boolean expression as a filter.

    Example:
        stmt = ExpressionFilter(Category.name != "archive").apply(stmt)
    """

    def __init__(self, expression: ColumnElement[bool]):
        self.expression = expression

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply expression as a WHERE clause."""
        return statement.where(self.expression)

    def __repr__(self) -> str:
        return f"ExpressionFilter({self.expression})"


class SearchFilter(StatementFilter):
    """Multi-field text search using LIKE.

    Example:
        stmt = SearchFilter([Category.name, Category.slug], "shoe").apply(stmt)
        # WHERE (lower(name) LIKE '%shoe%' OR lower(slug) LIKE '%shoe%')
    """

    def __init__(
        self,
        fields: InstrumentedAttribute[Any] | Sequence[InstrumentedAttribute[Any]],
        value: str,
        *,
        case_insensitive: bool = True,
        operator: Literal["and", "or"] = "or",
    ):
        """Initialize search filter.

        Args:
            fields: Single field or list of fields to search
            value: Search term
            case_insensitive: Lower-case both sides before comparing
            operator: Join multiple fields with AND or OR
        """
        self.fields = [fields] if not isinstance(fields, Sequence) else list(fields)
        self.value = value
        self.case_insensitive = case_insensitive
        self.operator = operator

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply search filter to statement."""
        if not self.value or not self.fields:
            return statement

        search_term = f"%{self.value}%"
        conditions = []

        for field in self.fields:
            if self.case_insensitive:
                condition = func.lower(field).like(search_term.lower())
            else:
                condition = field.like(search_term)
            conditions.append(condition)

        if self.operator == "or":
            return statement.where(or_(*conditions))
        return statement.where(and_(*conditions))


class OrderBy(StatementFilter):
    """Column ordering/sorting.

    Example:
        stmt = OrderBy(Category.name, "desc").apply(stmt)

        # Multiple orderings
        stmt = OrderBy([Category.position, Category.id], ["asc", "asc"]).apply(stmt)
    """

    def __init__(
        self,
        fields: InstrumentedAttribute[Any] | Sequence[InstrumentedAttribute[Any]],
        sort_order: Literal["asc", "desc"] | Sequence[Literal["asc", "desc"]] = "asc",
    ):
        """Initialize ordering filter.

        Args:
            fields: Single field or list of fields to order by
            sort_order: Sort direction(s) - 'asc' or 'desc'
        """
        self.fields = [fields] if not isinstance(fields, Sequence) else list(fields)

        if isinstance(sort_order, str):
            self.sort_orders = [sort_order] * len(self.fields)
        else:
            self.sort_orders = list(sort_order)
            if len(self.sort_orders) != len(self.fields):
                msg = "sort_order length must match fields length"
                raise ValueError(msg)

    def clauses(self) -> list[ColumnElement[Any]]:
        """Ordering expressions, usable in ``order_by`` or ``over()``."""
        return [
            field.desc() if order == "desc" else field.asc()
            for field, order in zip(self.fields, self.sort_orders, strict=True)
        ]

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply ordering to statement."""
        return statement.order_by(*self.clauses())


class LimitOffset(StatementFilter):
    """Pagination using LIMIT and OFFSET.

    Example:
        stmt = LimitOffset(limit=2).apply(stmt)
    """

    def __init__(self, limit: int, offset: int = 0):
        """Initialize pagination filter.

        Args:
            limit: Maximum number of results
            offset: Number of results to skip
        """
        self.limit = limit
        self.offset = offset

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply pagination to statement."""
        return statement.limit(self.limit).offset(self.offset)


class CollectionFilter(StatementFilter):
    """Filter by collection (WHERE ... IN).

    Example:
        stmt = CollectionFilter(Category.kind, ["folder", "tag"]).apply(stmt)

        # NOT IN clause
        stmt = CollectionFilter(Category.kind, ["archive"], invert=True).apply(stmt)
    """

    def __init__(
        self,
        field: InstrumentedAttribute[Any],
        values: Sequence[Any],
        *,
        invert: bool = False,
    ):
        """Initialize collection filter.

        Args:
            field: Field to filter
            values: Collection of values to match
            invert: If True, use NOT IN instead of IN
        """
        self.field = field
        self.values = list(values)
        self.invert = invert

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply collection filter to statement."""
        if not self.values:
            # Empty collection - return statement that matches nothing
            return statement.where(false()) if not self.invert else statement

        if self.invert:
            return statement.where(self.field.notin_(self.values))
        return statement.where(self.field.in_(self.values))


class FilterGroup(StatementFilter):
    """Combine multiple filters (AND semantics).

    Example:
        condition = FilterGroup([
            SearchFilter(Category.name, "shoe"),
            CollectionFilter(Category.kind, ["archive"], invert=True),
        ])
    """

    def __init__(self, filters: Sequence[StatementFilter]):
        self.filters = list(filters)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply all filters to statement."""
        for filter_obj in self.filters:
            statement = filter_obj.apply(statement)
        return statement


__all__ = [
    "CollectionFilter",
    "ExpressionFilter",
    "FilterGroup",
    "LimitOffset",
    "OrderBy",
    "SearchFilter",
    "StatementFilter",
]
