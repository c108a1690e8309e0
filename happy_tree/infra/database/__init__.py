"""Database engine and session wiring."""

from __future__ import annotations

from happy_tree.infra.database.session import (
    close_engine,
    create_engine,
    create_session_factory,
    create_tables,
    session_scope,
)

__all__ = [
    "close_engine",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "session_scope",
]
