"""Graph module providing the per-level graph store and its data-flow view.

This module contains:
- Position, Node, Edge: immutable graph elements
- GraphStore: copy-on-write collection of nodes and edges for one graph level
- DependencyGraph[T]: node-level "feeds" view used for cycle checks and ordering
- reachable, topological_sort: traversal algorithms
"""

from ._algorithms import reachable, topological_sort
from ._dependency_graph import DependencyGraph
from ._elements import Edge, Node, Position
from ._store import GraphStore

__all__ = ["DependencyGraph", "Edge", "GraphStore", "Node", "Position", "reachable", "topological_sort"]
