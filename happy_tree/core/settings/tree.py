"""Tree traversal settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from happy_tree.core.database.hierarchy.options import CascadePolicy, Traversal


class TreeSettings(BaseSettings):
    """Defaults for traversal strategy and delete cascade.

    Environment variables use TREE_ prefix.
    Example: TREE_LISTING_TRAVERSAL=bfs, TREE_DEFAULT_CASCADE=nullify

    A per-call ``TraversalOptions.traversal`` and a model's ``__dependent__``
    always win over these defaults.
    """

    listing_traversal: Traversal = Field(
        default=Traversal.DFS,
        description="Strategy for descendants, descendant_ids, self_and_descendants and childless",
    )

    count_traversal: Traversal = Field(
        default=Traversal.BFS,
        description="Strategy for descendants_count (BFS costs one query per level)",
    )

    default_cascade: CascadePolicy = Field(
        default=CascadePolicy.DESTROY,
        description="Cascade policy applied on delete when neither the call nor the model sets one",
    )

    model_config = SettingsConfigDict(
        env_prefix="TREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
