"""Nodes, edges and positions: the elements stored in a graph store."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Position:
    """Canvas coordinates of a node."""

    x: float = 0.0
    y: float = 0.0

    def moved_by(self, dx: float, dy: float) -> Position:
        """Return the position shifted by a drag delta."""
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True, slots=True)
class Node:
    """An instance of a node type placed in a graph.

    Attributes:
        id: Unique identifier within the editor session.
        type_id: Id of the node's NodeType.
        position: Canvas position.
        input_values: Literal values keyed by input port name. A value on a
            connected port is kept but shadowed by the incoming edge.

    """

    id: str
    type_id: str
    position: Position = field(default_factory=Position)
    input_values: dict[str, Any] = field(default_factory=dict)

    def with_position(self, position: Position) -> Node:
        return replace(self, position=position)

    def with_input_value(self, port_name: str, value: Any) -> Node:
        return replace(self, input_values={**self.input_values, port_name: value})


@dataclass(frozen=True, slots=True)
class Edge:
    """A link from an output port of one node to an input port of another.

    Attributes:
        id: Unique identifier within the editor session.
        source: Id of the node owning the output port.
        source_handle: Name of the output port.
        target: Id of the node owning the input port.
        target_handle: Name of the input port.

    """

    id: str
    source: str
    source_handle: str
    target: str
    target_handle: str

    def touches(self, node_id: str) -> bool:
        """Whether either endpoint is ``node_id``."""
        return node_id in (self.source, self.target)
