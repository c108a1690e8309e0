"""Fixtures for whole-forest tests."""

from __future__ import annotations

import pytest

from happy_tree.core.database.hierarchy import TreeNavigator
from tests.fixtures.tree_models import Category, CountedCategory, build_forest


@pytest.fixture
async def forest(db_session, repo, query_counter) -> dict[str, Category]:
    nodes = await build_forest(db_session, repo)
    query_counter.reset()
    return nodes


@pytest.fixture
def counted_tree(tree_settings) -> TreeNavigator[CountedCategory]:
    return TreeNavigator.for_model(CountedCategory, settings=tree_settings)
