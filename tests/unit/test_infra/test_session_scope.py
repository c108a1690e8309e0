"""Tests for engine and session helpers."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from happy_tree.core.database.hierarchy import TreeNavigator
from happy_tree.core.settings import DatabaseSettings
from happy_tree.infra.database import (
    close_engine,
    create_engine,
    create_session_factory,
    create_tables,
    session_scope,
)
from tests.fixtures.tree_models import Category


@pytest.fixture
async def engine():
    engine = create_engine(DatabaseSettings())
    await create_tables(engine)
    try:
        yield engine
    finally:
        await close_engine(engine)


@pytest.mark.unit
class TestSessionScope:
    async def test_commits_on_success(self, engine, tree_settings):
        factory = create_session_factory(engine, DatabaseSettings())
        tree = TreeNavigator.for_model(Category, settings=tree_settings)

        async with session_scope(factory) as session:
            root = await tree.store.insert(session, name="root")
            await tree.create_child(session, root, name="child")

        async with session_scope(factory) as session:
            names = (await session.execute(select(Category.name).order_by(Category.id))).scalars().all()

        assert names == ["root", "child"]

    async def test_rolls_back_and_reraises(self, engine, tree_settings):
        factory = create_session_factory(engine, DatabaseSettings())
        tree = TreeNavigator.for_model(Category, settings=tree_settings)

        with pytest.raises(RuntimeError, match="abort"):
            async with session_scope(factory) as session:
                await tree.store.insert(session, name="discarded")
                raise RuntimeError("abort")

        async with session_scope(factory) as session:
            assert await tree.roots(session) == []

    async def test_expire_on_commit_follows_settings(self, engine):
        factory = create_session_factory(engine, DatabaseSettings(expire_on_commit=True))

        assert factory.kw["expire_on_commit"] is True


@pytest.mark.unit
class TestCreateEngine:
    async def test_in_memory_sqlite_is_shared(self):
        engine = create_engine(DatabaseSettings())
        try:
            await create_tables(engine)
            factory = create_session_factory(engine, DatabaseSettings())

            async with session_scope(factory) as first:
                first.add(Category(name="shared"))

            async with session_scope(factory) as second:
                count = len((await second.execute(select(Category))).scalars().all())

            assert count == 1
        finally:
            await close_engine(engine)

    def test_uses_loader_settings_by_default(self, monkeypatch):
        monkeypatch.setenv("DB_ECHO", "true")

        engine = create_engine()

        assert engine.echo is True
