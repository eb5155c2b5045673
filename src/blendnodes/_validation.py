"""Connection validator: may an edge be created between two ports?"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._errors import Rejection, RejectionReason
from ._types import PortSide

if TYPE_CHECKING:
    from ._graph import GraphStore
    from ._registry import TypeRegistry
    from ._state import EditorState


@dataclass(frozen=True, slots=True)
class ConnectionValidation:
    """Outcome of a connection check: valid, or rejected with a reason."""

    rejection: Rejection | None = None

    @property
    def is_valid(self) -> bool:
        return self.rejection is None

    @classmethod
    def ok(cls) -> ConnectionValidation:
        return _OK

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> ConnectionValidation:
        return cls(Rejection(reason, message))


_OK = ConnectionValidation()


def can_connect(
    state: EditorState,
    source: str,
    source_handle: str,
    target: str,
    target_handle: str,
) -> ConnectionValidation:
    """Check whether an edge may connect two ports of the active graph.

    Checks, in order:
    1. Both nodes exist in the active graph (``UnknownNode``).
    2. ``source_handle`` is an output of the source's type and ``target_handle``
       an input of the target's type (``UnknownPort``; ``UnknownTypeReference``
       if a node's type or a port's data type is not registered).
    3. The nodes differ (``SelfLoop``).
    4. Both ports carry the same data type id (``TypeMismatch``).
    5. Only with ``enable_cycle_checking``: the target does not already feed
       the source (``CycleDetected``).

    A port that already has an incoming edge is not a reason to reject: the
    reducer replaces the old edge.

    Args:
        state: The editor state.
        source: Id of the node owning the output port.
        source_handle: Name of the output port.
        target: Id of the node owning the input port.
        target_handle: Name of the input port.

    Returns:
        The validation outcome.

    """
    return check_connection(
        state.registry,
        state.active_graph,
        source,
        source_handle,
        target,
        target_handle,
        check_cycles=state.options.enable_cycle_checking,
    )


def check_connection(  # noqa: PLR0911, PLR0913
    registry: TypeRegistry,
    store: GraphStore,
    source: str,
    source_handle: str,
    target: str,
    target_handle: str,
    *,
    check_cycles: bool = False,
) -> ConnectionValidation:
    """Check a connection against an explicit registry and graph store.

    See ``can_connect`` for the rules and their order.
    """
    source_node = store.get_node(source)
    target_node = store.get_node(target)
    if source_node is None or target_node is None:
        missing = source if source_node is None else target
        return ConnectionValidation.reject(RejectionReason.UNKNOWN_NODE, f"Node '{missing}' is not in the active graph.")

    source_type = registry.get_node_type(source_node.type_id)
    target_type = registry.get_node_type(target_node.type_id)
    if source_type is None or target_type is None:
        unknown = source_node.type_id if source_type is None else target_node.type_id
        return ConnectionValidation.reject(
            RejectionReason.UNKNOWN_TYPE_REFERENCE,
            f"Node type '{unknown}' is not registered.",
        )

    source_port = source_type.port(source_handle, PortSide.OUTPUT)
    if source_port is None:
        return ConnectionValidation.reject(
            RejectionReason.UNKNOWN_PORT,
            f"Node type '{source_type.id}' has no output '{source_handle}'.",
        )
    target_port = target_type.port(target_handle, PortSide.INPUT)
    if target_port is None:
        return ConnectionValidation.reject(
            RejectionReason.UNKNOWN_PORT,
            f"Node type '{target_type.id}' has no input '{target_handle}'.",
        )

    if source == target:
        return ConnectionValidation.reject(RejectionReason.SELF_LOOP, f"Node '{source}' cannot feed itself.")

    for port in (source_port, target_port):
        if registry.get_data_type(port.data_type_id) is None:
            return ConnectionValidation.reject(
                RejectionReason.UNKNOWN_TYPE_REFERENCE,
                f"Data type '{port.data_type_id}' of port '{port.name}' is not registered.",
            )

    if source_port.data_type_id != target_port.data_type_id:
        return ConnectionValidation.reject(
            RejectionReason.TYPE_MISMATCH,
            f"Cannot connect '{source_port.data_type_id}' output '{source_handle}'"
            f" to '{target_port.data_type_id}' input '{target_handle}'.",
        )

    if check_cycles and store.dependency_graph().reaches(target, source):
        return ConnectionValidation.reject(
            RejectionReason.CYCLE_DETECTED,
            f"Node '{target}' already feeds node '{source}'.",
        )

    return ConnectionValidation.ok()
