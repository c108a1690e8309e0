"""Pytest configuration and shared fixtures.

Organization:
    - Database Fixtures: in-memory SQLite engine and session
    - Tree Fixtures: settings, observer, repository, navigator, sample forest
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from happy_tree.core.database.hierarchy import TreeNavigator, TreeRepository
from happy_tree.core.database.observers import QueryCounter
from happy_tree.core.settings import TreeSettings, clear_all_caches
from tests.fixtures.tree_models import Category, SampleTree, build_sample_tree

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite.

    Yields:
        Async SQLAlchemy engine connected to in-memory SQLite.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create async database session with table creation and cleanup.

    This fixture:
    1. Creates all tables defined in Base.metadata
    2. Provides a session for database operations
    3. Rolls back the transaction after each test
    4. Drops the tables
    """
    from happy_tree.core.database.base import Base

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ============================================================================
# Tree Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Make every test read settings from its own environment."""
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def tree_settings() -> TreeSettings:
    """Default tree settings, independent of TREE_* variables."""
    return TreeSettings(listing_traversal="dfs", count_traversal="bfs", default_cascade="destroy")


@pytest.fixture
def query_counter() -> QueryCounter:
    return QueryCounter()


@pytest.fixture
def repo(query_counter: QueryCounter, tree_settings: TreeSettings) -> TreeRepository[Category]:
    return TreeRepository(Category, observers=[query_counter], settings=tree_settings)


@pytest.fixture
def tree(repo: TreeRepository[Category], tree_settings: TreeSettings) -> TreeNavigator[Category]:
    return TreeNavigator(repo, settings=tree_settings)


@pytest.fixture
async def sample_tree(
    db_session: AsyncSession,
    repo: TreeRepository[Category],
    query_counter: QueryCounter,
) -> SampleTree[Category]:
    """The sample forest, with the observer reset afterwards.

    root -> child1 -> grandchild, root -> child2, plus root2 and root3.
    """
    nodes = await build_sample_tree(db_session, repo)
    query_counter.reset()
    return nodes
