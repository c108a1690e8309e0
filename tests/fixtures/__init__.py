"""Test fixtures for pytest.

This module re-exports the tree models and builders used across the suite.
"""

from .tree_models import (
    Category,
    CountedCategory,
    NullifyCategory,
    RestrictCategory,
    SampleTree,
    build_sample_tree,
)

__all__ = [
    "Category",
    "CountedCategory",
    "NullifyCategory",
    "RestrictCategory",
    "SampleTree",
    "build_sample_tree",
]
