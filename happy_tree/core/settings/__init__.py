"""Pydantic Settings v2 configuration.

One frozen settings model per concern, read from environment variables
(and an optional ``.env`` file):

    TREE_*  traversal defaults and delete cascade
    DB_*    async engine and session
    LOG_*   root logging

Import settings via the cached loaders:
    from happy_tree.core.settings import get_tree_settings
"""

from __future__ import annotations

from .database import DatabaseSettings
from .loader import (
    clear_all_caches,
    get_db_settings,
    get_logging_settings,
    get_tree_settings,
)
from .logs import LoggingSettings
from .tree import TreeSettings

__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "TreeSettings",
    "clear_all_caches",
    "get_db_settings",
    "get_logging_settings",
    "get_tree_settings",
]
