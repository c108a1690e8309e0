"""Tests for tree and repository exception types."""

from __future__ import annotations

import pytest

from happy_tree.core.database.exceptions import (
    DeleteRestrictedError,
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
    StoreUnavailableError,
)
from happy_tree.core.exceptions import (
    DescendantParentError,
    HappyTreeError,
    ParentValidationError,
    SelfParentError,
)


@pytest.mark.unit
class TestParentValidationErrors:
    def test_self_parent(self):
        exc = SelfParentError(field="parent_id", node_id=3)

        assert isinstance(exc, ParentValidationError)
        assert isinstance(exc, HappyTreeError)
        assert exc.type == "self-parent"
        assert exc.parent_id == 3
        assert exc.extra == {"field": "parent_id", "node_id": 3, "parent_id": 3}
        assert str(exc) == "cannot be its own id"

    def test_descendant_parent(self):
        exc = DescendantParentError(field="parent_id", node_id=1, parent_id=4)

        assert exc.detail == "cannot be a descendant's id"
        assert exc.type == "descendant-parent"
        assert exc.node_id == 1
        assert exc.parent_id == 4

    def test_base_defaults(self):
        exc = HappyTreeError("boom")

        assert exc.type == "about:blank"
        assert exc.extra == {}


@pytest.mark.unit
class TestRepositoryErrors:
    def test_not_found_message(self):
        exc = NotFoundError("Category", {"id": 7})

        assert isinstance(exc, RepositoryError)
        assert str(exc) == "Category not found with id=7 (model='Category', id=7)"
        assert repr(exc) == "NotFoundError(model='Category', identifier={'id': 7})"

    def test_invalid_filter_details(self):
        exc = InvalidFilterError("Unknown field 'x'", filter_name="order")

        assert exc.details == {"filter": "order"}

    def test_store_unavailable(self):
        exc = StoreUnavailableError("child_ids_of", "Category")

        assert exc.operation == "child_ids_of"
        assert "Store unavailable during child_ids_of" in str(exc)

    def test_delete_restricted(self):
        exc = DeleteRestrictedError("Category", 5)

        assert exc.details == {"model": "Category", "id": 5}

    def test_message_without_details(self):
        assert str(RepositoryError("plain")) == "plain"
