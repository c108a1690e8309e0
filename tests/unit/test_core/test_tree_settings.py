"""Unit tests for the Pydantic settings models and cached loaders."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from happy_tree.core.database.hierarchy.options import CascadePolicy, Traversal
from happy_tree.core.settings import (
    DatabaseSettings,
    LoggingSettings,
    TreeSettings,
    clear_all_caches,
    get_db_settings,
    get_logging_settings,
    get_tree_settings,
)


@pytest.mark.unit
class TestTreeSettings:
    def test_defaults(self):
        settings = TreeSettings()

        assert settings.listing_traversal is Traversal.DFS
        assert settings.count_traversal is Traversal.BFS
        assert settings.default_cascade is CascadePolicy.DESTROY

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TREE_LISTING_TRAVERSAL", "bfs_recursive")
        monkeypatch.setenv("TREE_DEFAULT_CASCADE", "restrict")

        settings = TreeSettings()

        assert settings.listing_traversal is Traversal.BFS_RECURSIVE
        assert settings.default_cascade is CascadePolicy.RESTRICT

    def test_invalid_traversal_rejected(self):
        with pytest.raises(ValidationError):
            TreeSettings(count_traversal="sideways")

    def test_frozen(self):
        settings = TreeSettings()

        with pytest.raises(ValidationError):
            settings.default_cascade = CascadePolicy.NULLIFY


@pytest.mark.unit
class TestDatabaseSettings:
    def test_defaults(self):
        settings = DatabaseSettings()

        assert settings.url == "sqlite+aiosqlite:///:memory:"
        assert settings.echo is False
        assert settings.expire_on_commit is False
        assert settings.is_sqlite is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DB_URL", "postgresql+asyncpg://app@localhost/app")
        monkeypatch.setenv("DB_ECHO", "true")

        settings = DatabaseSettings()

        assert settings.is_sqlite is False
        assert settings.echo is True


@pytest.mark.unit
class TestLoggingSettings:
    def test_level_is_normalised(self):
        settings = LoggingSettings(level="debug")

        assert settings.level == "DEBUG"
        assert settings.level_int == logging.DEBUG

    def test_invalid_level_rejected(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")

    def test_json_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_JSON", "true")

        assert LoggingSettings().json_logs is True

    def test_json_by_field_name(self):
        assert LoggingSettings(json_logs=True).json_logs is True


@pytest.mark.unit
class TestLoaders:
    def test_loaders_are_cached(self):
        assert get_tree_settings() is get_tree_settings()
        assert get_db_settings() is get_db_settings()
        assert get_logging_settings() is get_logging_settings()

    def test_clear_all_caches_reloads(self, monkeypatch):
        first = get_tree_settings()
        monkeypatch.setenv("TREE_COUNT_TRAVERSAL", "dfs")
        clear_all_caches()

        second = get_tree_settings()

        assert second is not first
        assert second.count_traversal is Traversal.DFS

    def test_components_use_loader_by_default(self, monkeypatch):
        from happy_tree.core.database.hierarchy import TreeNavigator
        from tests.fixtures.tree_models import Category

        monkeypatch.setenv("TREE_LISTING_TRAVERSAL", "bfs")
        clear_all_caches()

        tree = TreeNavigator.for_model(Category)

        assert tree.settings.listing_traversal is Traversal.BFS
        assert tree.store.settings is tree.settings
