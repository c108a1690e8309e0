"""Store call observation.

``TreeRepository`` notifies every registered observer once per Store call,
before the statement runs. Observers are plain callables injected per
repository; there is no process-wide query counter.

Example:
    >>> counter = QueryCounter()
    >>> repo = TreeRepository(Category, observers=[counter])
    >>> tree = TreeNavigator(repo)
    >>> await tree.descendants_count(session, root)
    3
    >>> counter.count
    3
    >>> counter.operations
    ['child_ids_of', 'child_ids_of', 'child_ids_of']
"""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True)
class StoreCall:
    """One round trip to the Record Store.

    Attributes:
        operation: Store method name (e.g. ``child_ids_of``)
        entity: Model class name
        params: Call parameters worth reporting (ids, limit, ...)
    """

    operation: str
    entity: str
    params: dict[str, Any] = field(default_factory=dict)


class QueryCounter:
    """Observer that records Store calls.

    Used by tests to assert the cost model of each traversal (one call per
    level for BFS, one per descendant plus one for DFS, ...).
    """

    def __init__(self) -> None:
        self.calls: list[StoreCall] = []

    def __call__(self, call: StoreCall) -> None:
        self.calls.append(call)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def operations(self) -> list[str]:
        return [call.operation for call in self.calls]

    def by_operation(self) -> Counter[str]:
        return Counter(self.operations)

    def reset(self) -> None:
        self.calls.clear()

    @contextmanager
    def measure(self) -> Iterator[QueryCounter]:
        """Reset, then yield self so the block's calls can be inspected."""
        self.reset()
        yield self


__all__ = [
    "QueryCounter",
    "StoreCall",
]
