"""Graph store: the nodes and edges of one graph level."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._dependency_graph import DependencyGraph
from ._elements import Edge, Node

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphStore:
    """Nodes and edges of a single graph level, keyed by id.

    A store is never mutated. Every ``with_*``/``without_*`` method returns a new
    store and reuses the untouched mapping by reference, so callers can detect
    which half changed with an identity check.

    The store itself keeps one structural invariant: an input port has at most
    one incoming edge. ``with_edge`` replaces any edge already feeding the same
    target port. Type and port checks live in the connection validator.

    Attributes:
        nodes: Mapping from node id to Node, in insertion order.
        edges: Mapping from edge id to Edge, in insertion order.

    """

    nodes: dict[str, Node] = field(default_factory=dict)
    edges: dict[str, Edge] = field(default_factory=dict)

    @classmethod
    def from_elements(cls, nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()) -> GraphStore:
        """Build a store from node and edge sequences (no invariant checks)."""
        return cls(
            nodes={node.id: node for node in nodes},
            edges={edge.id: edge for edge in edges},
        )

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Edge | None:
        return self.edges.get(edge_id)

    def incoming_edge(self, target: str, target_handle: str) -> Edge | None:
        """The edge feeding an input port, if the port is connected."""
        return next(
            (e for e in self.edges.values() if e.target == target and e.target_handle == target_handle),
            None,
        )

    def incident_edges(self, node_id: str) -> list[Edge]:
        """All edges with ``node_id`` as source or target."""
        return [edge for edge in self.edges.values() if edge.touches(node_id)]

    def is_input_connected(self, node_id: str, port_name: str) -> bool:
        return self.incoming_edge(node_id, port_name) is not None

    def with_node(self, node: Node) -> GraphStore:
        """Return a store where ``node`` is added, or replaces the node with the same id."""
        return GraphStore(nodes={**self.nodes, node.id: node}, edges=self.edges)

    def without_node(self, node_id: str) -> GraphStore:
        """Return a store without ``node_id`` and without every edge touching it."""
        if node_id not in self.nodes:
            return self
        nodes = {nid: node for nid, node in self.nodes.items() if nid != node_id}
        doomed = {edge.id for edge in self.incident_edges(node_id)}
        if not doomed:
            return GraphStore(nodes=nodes, edges=self.edges)
        logger.debug("Removing %d edge(s) incident to node %s", len(doomed), node_id)
        edges = {eid: edge for eid, edge in self.edges.items() if eid not in doomed}
        return GraphStore(nodes=nodes, edges=edges)

    def with_edge(self, edge: Edge) -> GraphStore:
        """Return a store containing ``edge``.

        An edge already feeding ``edge.target``/``edge.target_handle`` is dropped
        first, so an input port never has more than one incoming edge.
        """
        previous = self.incoming_edge(edge.target, edge.target_handle)
        edges = dict(self.edges)
        if previous is not None:
            logger.debug("Edge %s replaces edge %s on %s.%s", edge.id, previous.id, edge.target, edge.target_handle)
            del edges[previous.id]
        edges[edge.id] = edge
        return GraphStore(nodes=self.nodes, edges=edges)

    def without_edge(self, edge_id: str) -> GraphStore:
        if edge_id not in self.edges:
            return self
        return GraphStore(
            nodes=self.nodes,
            edges={eid: edge for eid, edge in self.edges.items() if eid != edge_id},
        )

    def copy_with_fresh_ids(self, new_id: Callable[[], str]) -> tuple[GraphStore, dict[str, str]]:
        """Duplicate the store, minting new ids for every node and edge.

        Args:
            new_id: Called once per node and per edge to obtain the new id.

        Returns:
            The copy, and the mapping from old node ids to new node ids.

        """
        node_ids = {old: new_id() for old in self.nodes}
        nodes = {
            node_ids[old]: Node(
                id=node_ids[old],
                type_id=node.type_id,
                position=node.position,
                input_values=dict(node.input_values),
            )
            for old, node in self.nodes.items()
        }
        edges: dict[str, Edge] = {}
        for edge in self.edges.values():
            copy = Edge(
                id=new_id(),
                source=node_ids[edge.source],
                source_handle=edge.source_handle,
                target=node_ids[edge.target],
                target_handle=edge.target_handle,
            )
            edges[copy.id] = copy
        return GraphStore(nodes=nodes, edges=edges), node_ids

    def dependency_graph(self) -> DependencyGraph[str]:
        """Node-level data-flow view of this store."""
        return DependencyGraph.from_edges(
            ((edge.source, edge.target) for edge in self.edges.values()),
            nodes=self.nodes,
        )

    def __len__(self) -> int:
        """Return the number of nodes in the store."""
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        """Check if a node with the given id is in the store."""
        return node_id in self.nodes
