"""Read-only data-flow view over the edges of a graph store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._algorithms import reachable, topological_sort

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable


@dataclass(frozen=True, slots=True)
class DependencyGraph[T: Hashable]:
    """Directed graph of "data flows from a to b" relations.

    Unlike the edge list of a graph store, this view collapses parallel edges
    and forgets ports: it only knows which node feeds which. Cycles are allowed;
    ``has_cycle`` and ``topological_order`` report on them.

    Attributes:
        _sources: Mapping from node to the nodes feeding it.
        _targets: Mapping from node to the nodes it feeds.

    """

    _sources: dict[T, frozenset[T]] = field(default_factory=dict)
    _targets: dict[T, frozenset[T]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[T, T]], nodes: Iterable[T] = ()) -> DependencyGraph[T]:
        """Build a view from ``(source, target)`` pairs.

        Args:
            edges: Pairs meaning "source feeds target".
            nodes: Extra nodes to include even if no edge touches them.

        Returns:
            A new DependencyGraph.

        Example:
            >>> graph = DependencyGraph.from_edges([("a", "b")], nodes=["c"])
            >>> sorted(graph.nodes)
            ['a', 'b', 'c']

        """
        sources: dict[T, set[T]] = {node: set() for node in nodes}
        targets: dict[T, set[T]] = {node: set() for node in sources}
        for src, dst in edges:
            sources.setdefault(src, set())
            targets.setdefault(src, set()).add(dst)
            sources.setdefault(dst, set()).add(src)
            targets.setdefault(dst, set())
        return cls(
            _sources={node: frozenset(v) for node, v in sources.items()},
            _targets={node: frozenset(v) for node, v in targets.items()},
        )

    @property
    def nodes(self) -> frozenset[T]:
        """All nodes in the view."""
        return frozenset(self._sources)

    def sources_of(self, node: T) -> frozenset[T]:
        """Nodes directly feeding ``node``."""
        return self._sources.get(node, frozenset())

    def targets_of(self, node: T) -> frozenset[T]:
        """Nodes directly fed by ``node``."""
        return self._targets.get(node, frozenset())

    def upstream(self, node: T) -> frozenset[T]:
        """All nodes whose data transitively flows into ``node``."""
        return frozenset(reachable(self._sources, [node]))

    def downstream(self, node: T) -> frozenset[T]:
        """All nodes that ``node`` transitively feeds."""
        return frozenset(reachable(self._targets, [node]))

    def reaches(self, start: T, goal: T) -> bool:
        """Whether data can flow from ``start`` to ``goal`` (``start == goal`` counts)."""
        return start == goal or goal in reachable(self._targets, [start])

    def topological_order(self) -> list[T]:
        """Nodes ordered so that sources come before the nodes they feed.

        Raises:
            ValueError: If the view contains a cycle.

        """
        return topological_sort(self._targets)

    def has_cycle(self) -> bool:
        try:
            self.topological_order()
        except ValueError:
            return True
        return False

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, node: object) -> bool:
        return node in self._sources
