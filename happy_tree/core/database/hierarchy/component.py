"""Shared state for the traversal components."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from happy_tree.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from happy_tree.core.database.hierarchy.protocols import RecordStore
    from happy_tree.core.settings import TreeSettings


T = TypeVar("T")


class TreeComponent(Generic[T]):
    """Holds the Record Store, tree settings and loggers.

    Components never keep per-call state, so one instance can serve any
    number of sequential calls on different sessions.
    """

    def __init__(self, store: RecordStore[T], *, settings: TreeSettings | None = None) -> None:
        if settings is None:
            from happy_tree.core.settings import get_tree_settings

            settings = get_tree_settings()

        self.store = store
        self.settings = settings
        entity = getattr(store.model, "__name__", "Node")
        self._logger = logging.getLogger(f"hierarchy.{type(self).__name__}")
        self._lazy = get_lazy_logger(f"hierarchy.{type(self).__name__}", entity=entity)

    @property
    def model(self) -> type[T]:
        return self.store.model

    @property
    def parent_key_name(self) -> str:
        return self.store.parent_key_name

    @staticmethod
    def parent_key(node: Any) -> Any:
        """Parent id of ``node`` without touching the store."""
        return node.tree_parent_key


__all__ = ["TreeComponent"]
