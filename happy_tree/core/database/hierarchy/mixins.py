"""Mixins for models stored as parent-pointer trees.

Each row references its parent's primary key. The mixins only add columns
and zero-query properties; all navigation that touches the database lives
in ``TreeNavigator`` so the session is always explicit.
"""

from __future__ import annotations

from typing import Any, ClassVar

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class TreeNodeMixin:
    """Self-referencing parent key plus tree configuration hooks.

    The model must have an integer ``id`` primary key (see
    ``IntegerPKMixin``) and an explicit ``__tablename__``.

    Example:
        >>> class Category(Base, IntegerPKMixin, TreeNodeMixin):
        ...     __tablename__ = "categories"
        ...     __tree_order__ = ("name",)
        ...     __dependent__ = "nullify"
        ...     name: Mapped[str] = mapped_column(String(255))
        >>>
        >>> tree = TreeNavigator.for_model(Category)
        >>> ancestors = await tree.ancestors(session, node)

    Class attributes:
        __parent_column__: Attribute holding the parent id. Override together
            with your own column to rename it.
        __tree_order__: Default sibling ordering (``"name"`` or ``"-name"``).
            Empty means primary key ascending, i.e. insertion order.
        __counter_cache__: Column caching the number of direct children.
            Not defined here so that ``ChildCountMixin`` can set it in any
            base-class order.
        __dependent__: Cascade policy used when a node is deleted. None
            defers to ``TreeSettings.default_cascade``.
    """

    __allow_unmapped__ = True

    __parent_column__: ClassVar[str] = "parent_id"
    __tree_order__: ClassVar[tuple[str, ...]] = ()
    __dependent__: ClassVar[str | None] = None

    @declared_attr
    def parent_id(cls) -> Mapped[int | None]:
        return mapped_column(
            Integer,
            ForeignKey(f"{cls.__tablename__}.id"),
            nullable=True,
            index=True,
            comment="Parent node id (NULL for roots)",
        )

    @property
    def tree_parent_key(self) -> Any:
        """Parent id. Does NOT query the database."""
        return getattr(self, self.__parent_column__)

    @property
    def is_root(self) -> bool:
        """True if this node has no parent. Does NOT query the database."""
        return self.tree_parent_key is None

    @property
    def is_child(self) -> bool:
        """True if this node has a parent. Does NOT query the database."""
        return self.tree_parent_key is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={getattr(self, 'id', None)!r}, parent={self.tree_parent_key!r})"


class ChildCountMixin:
    """Cached count of direct children.

    Maintained incrementally by ``TreeRepository`` on insert, reparent and
    delete through atomic ``UPDATE ... SET children_count = children_count ± 1``
    statements. Never recomputed on read.
    """

    __allow_unmapped__ = True

    __counter_cache__: ClassVar[str | None] = "children_count"

    children_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
        comment="Cached number of direct children",
    )


__all__ = [
    "ChildCountMixin",
    "TreeNodeMixin",
]
