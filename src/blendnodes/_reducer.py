"""The reducer: pure ``(state, action) -> state`` transitions.

Every handler validates first and builds the new state last, so an action is
either applied as a whole or not at all. A refused action yields the very same
state object together with a ``Rejection``; only malformed actions raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from ._actions import (
    AddNode,
    CloseNodeGroup,
    Connect,
    Disconnect,
    OpenNodeGroup,
    RegisterNodeGroupType,
    RemoveNode,
    UpdateNodeInputValue,
    UpdateNodePosition,
    ensure_action,
)
from ._errors import InvalidActionShapeError, Rejection, RejectionReason, ValueValidationError
from ._graph import Edge, GraphStore, Node
from ._ids import make_id_generator
from ._navigation import NavigationEntry
from ._types import NodeType
from ._validation import can_connect

if TYPE_CHECKING:
    from collections.abc import Callable, Container

    from ._actions import Action
    from ._ids import IdGenerator
    from ._state import EditorState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Transition:
    """Result of applying one action.

    Attributes:
        state: The new state, or the unchanged input state on rejection.
        rejection: Why the action was refused, if it was.
        created_id: Id of the node, edge or node type the action created, if any.

    """

    state: EditorState
    rejection: Rejection | None = None
    created_id: str | None = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def reduce(state: EditorState, action: Action, ids: IdGenerator | None = None) -> EditorState:
    """Apply an action and return the resulting state.

    Args:
        state: The current state. It is never mutated.
        action: One of the action dataclasses.
        ids: Identifier generator of the session. Defaults to a generator built
            from ``state.options``; hosts using counter ids should pass their own
            long-lived generator.

    Returns:
        The new state. If the action is refused, ``state`` itself.

    Raises:
        InvalidActionShapeError: If ``action`` is not an action.

    """
    return apply_action(state, action, ids).state


def apply_action(state: EditorState, action: Action, ids: IdGenerator | None = None) -> Transition:  # noqa: PLR0911
    """Apply an action and report the outcome.

    Same as ``reduce`` but also returns the rejection reason and the id of
    whatever the action created.
    """
    action = ensure_action(action)
    new_id = ids if ids is not None else make_id_generator(state.options)

    match action:
        case AddNode():
            return _add_node(state, action, new_id)
        case RemoveNode():
            return _remove_node(state, action)
        case UpdateNodePosition():
            return _update_node_position(state, action)
        case UpdateNodeInputValue():
            return _update_node_input_value(state, action)
        case Connect():
            return _connect(state, action, new_id)
        case Disconnect():
            return _disconnect(state, action)
        case OpenNodeGroup():
            return _open_node_group(state, action)
        case CloseNodeGroup():
            return _close_node_group(state, action)
        case RegisterNodeGroupType():
            return _register_node_group_type(state, action, new_id)
    msg = f"Unhandled action {action!r}"
    raise InvalidActionShapeError(msg)


def _reject(state: EditorState, reason: RejectionReason, message: str) -> Transition:
    logger.debug("Rejected (%s): %s", reason, message)
    return Transition(state=state, rejection=Rejection(reason, message))


def _fresh_id(new_id: Callable[[], str], taken: Container[str]) -> str:
    """Draw ids until one is not already in use."""
    while True:
        candidate = new_id()
        if candidate not in taken:
            return candidate


class _TakenNodeIds:
    """Node ids in use anywhere in a state, plus ids minted during this transition."""

    def __init__(self, state: EditorState) -> None:
        self._taken: set[str] = set(state.nested_graphs)
        for _, store in state.iter_graphs():
            self._taken.update(store.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._taken

    def mint(self, new_id: Callable[[], str]) -> str:
        node_id = _fresh_id(new_id, self)
        self._taken.add(node_id)
        return node_id


def _instantiate_group(
    state: EditorState,
    node_type_id: str,
    owner_id: str,
    taken: _TakenNodeIds,
    new_id: Callable[[], str],
) -> dict[str, GraphStore]:
    """Build the nested graph(s) of a new group node from its type's template.

    Group nodes inside the template get nested graphs of their own, recursively.
    Template validation guarantees the recursion ends.

    Returns:
        New graph stores keyed by owning node id, ``owner_id`` included.

    """
    template = state.group_templates.get(node_type_id)
    if template is None or not template.nodes:
        return {owner_id: GraphStore()}

    store, _ = template.copy_with_fresh_ids(lambda: taken.mint(new_id))
    created = {owner_id: store}
    for node in store.nodes.values():
        inner_type = state.registry.get_node_type(node.type_id)
        if inner_type is not None and inner_type.is_group:
            created.update(_instantiate_group(state, inner_type.id, node.id, taken, new_id))
    return created


def _add_node(state: EditorState, action: AddNode, new_id: IdGenerator) -> Transition:
    node_type = state.registry.get_node_type(action.type_id)
    if node_type is None:
        return _reject(state, RejectionReason.UNKNOWN_TYPE_REFERENCE, f"Node type '{action.type_id}' is not registered.")

    if node_type.is_group:
        brought = {node_type.id} | state.contained_group_type_ids(node_type.id)
        clashes = [type_id for type_id in state.open_group_type_ids() if type_id in brought]
        if clashes:
            return _reject(
                state,
                RejectionReason.RECURSIVE_GROUP,
                f"Cannot place group '{node_type.id}' inside an instance of '{clashes[0]}'; "
                f"'{clashes[0]}' would contain itself.",
            )

    taken = _TakenNodeIds(state)
    node = Node(
        id=taken.mint(new_id),
        type_id=node_type.id,
        position=action.position,
        input_values=node_type.default_input_values(),
    )
    owner_id = state.active_group_id
    new_state = state.with_graph(owner_id, state.active_graph.with_node(node))

    if node_type.is_group:
        created = _instantiate_group(state, node_type.id, node.id, taken, new_id)
        new_state = replace(new_state, nested_graphs={**new_state.nested_graphs, **created})

    logger.debug("Added node %s of type %s to %s", node.id, node_type.id, owner_id or "root")
    return Transition(state=new_state, created_id=node.id)


def _owned_graph_ids(state: EditorState, node_id: str) -> set[str]:
    """Ids of the nested graphs owned by ``node_id`` and by group nodes inside them."""
    owned: set[str] = set()
    pending = [node_id]
    while pending:
        owner_id = pending.pop()
        store = state.nested_graphs.get(owner_id)
        if store is None:
            continue
        owned.add(owner_id)
        pending.extend(store.nodes)
    return owned


def _remove_node(state: EditorState, action: RemoveNode) -> Transition:
    store = state.active_graph
    if action.node_id not in store:
        return _reject(state, RejectionReason.UNKNOWN_NODE, f"Node '{action.node_id}' is not in the active graph.")

    new_state = state.with_graph(state.active_group_id, store.without_node(action.node_id))

    pruned = _owned_graph_ids(state, action.node_id)
    if pruned:
        logger.debug("Dropping %d nested graph(s) owned by node %s", len(pruned), action.node_id)
        new_state = replace(
            new_state,
            nested_graphs={oid: g for oid, g in new_state.nested_graphs.items() if oid not in pruned},
            navigation_stack=new_state.navigation_stack.without_node_ids(pruned),
        )
    return Transition(state=new_state)


def _update_node_position(state: EditorState, action: UpdateNodePosition) -> Transition:
    store = state.active_graph
    node = store.get_node(action.node_id)
    if node is None:
        return _reject(state, RejectionReason.UNKNOWN_NODE, f"Node '{action.node_id}' is not in the active graph.")
    if node.position == action.position:
        return Transition(state=state)
    return Transition(state=state.with_graph(state.active_group_id, store.with_node(node.with_position(action.position))))


def _update_node_input_value(state: EditorState, action: UpdateNodeInputValue) -> Transition:  # noqa: PLR0911
    store = state.active_graph
    node = store.get_node(action.node_id)
    if node is None:
        return _reject(state, RejectionReason.UNKNOWN_NODE, f"Node '{action.node_id}' is not in the active graph.")

    node_type = state.registry.get_node_type(node.type_id)
    if node_type is None:
        return _reject(state, RejectionReason.UNKNOWN_TYPE_REFERENCE, f"Node type '{node.type_id}' is not registered.")

    port = node_type.input_port(action.port_name)
    if port is None:
        return _reject(
            state,
            RejectionReason.UNKNOWN_PORT,
            f"Node type '{node_type.id}' has no input '{action.port_name}'.",
        )
    if not port.allow_input:
        return _reject(
            state,
            RejectionReason.INPUT_NOT_ALLOWED,
            f"Input '{port.name}' of node type '{node_type.id}' takes no literal value.",
        )
    if store.is_input_connected(node.id, port.name):
        return _reject(
            state,
            RejectionReason.PORT_CONNECTED,
            f"Input '{port.name}' of node '{node.id}' is driven by an edge.",
        )

    data_type = state.registry.get_data_type(port.data_type_id)
    if data_type is None:
        return _reject(
            state,
            RejectionReason.UNKNOWN_TYPE_REFERENCE,
            f"Data type '{port.data_type_id}' is not registered.",
        )
    try:
        value = data_type.validate_value(action.value)
    except ValueValidationError as e:
        return _reject(state, RejectionReason.VALIDATION_FAILED, str(e))

    updated = node.with_input_value(port.name, value)
    return Transition(state=state.with_graph(state.active_group_id, store.with_node(updated)))


def _connect(state: EditorState, action: Connect, new_id: IdGenerator) -> Transition:
    validation = can_connect(state, action.source, action.source_handle, action.target, action.target_handle)
    if validation.rejection is not None:
        return _reject(state, validation.rejection.reason, validation.rejection.message)

    store = state.active_graph
    edge = Edge(
        id=_fresh_id(new_id, store.edges),
        source=action.source,
        source_handle=action.source_handle,
        target=action.target,
        target_handle=action.target_handle,
    )
    logger.debug("Connected %s.%s -> %s.%s as %s", edge.source, edge.source_handle, edge.target, edge.target_handle, edge.id)
    return Transition(state=state.with_graph(state.active_group_id, store.with_edge(edge)), created_id=edge.id)


def _disconnect(state: EditorState, action: Disconnect) -> Transition:
    store = state.active_graph
    if store.get_edge(action.edge_id) is None:
        return _reject(state, RejectionReason.UNKNOWN_EDGE, f"Edge '{action.edge_id}' is not in the active graph.")
    return Transition(state=state.with_graph(state.active_group_id, store.without_edge(action.edge_id)))


def _open_node_group(state: EditorState, action: OpenNodeGroup) -> Transition:
    node = state.active_graph.get_node(action.node_id)
    if node is None:
        return _reject(state, RejectionReason.UNKNOWN_NODE, f"Node '{action.node_id}' is not in the active graph.")

    node_type = state.registry.get_node_type(node.type_id)
    if node_type is None:
        return _reject(state, RejectionReason.UNKNOWN_TYPE_REFERENCE, f"Node type '{node.type_id}' is not registered.")
    if not node_type.is_group:
        return _reject(state, RejectionReason.NOT_A_GROUP, f"Node '{node.id}' of type '{node_type.id}' is not a group.")

    nested_graphs = state.nested_graphs
    if node.id not in nested_graphs:
        logger.warning("Group node %s had no nested graph; starting an empty one", node.id)
        nested_graphs = {**nested_graphs, node.id: GraphStore()}

    stack = state.navigation_stack.push(NavigationEntry(node_id=node.id, name=node_type.name))
    return Transition(state=replace(state, nested_graphs=nested_graphs, navigation_stack=stack))


def _close_node_group(state: EditorState, action: CloseNodeGroup) -> Transition:
    stack = state.navigation_stack
    if not stack:
        return _reject(state, RejectionReason.INVALID_NAVIGATION, "The root graph is already active.")

    depth = stack.depth - 1 if action.depth is None else action.depth
    if not 0 <= depth < stack.depth:
        return _reject(
            state,
            RejectionReason.INVALID_NAVIGATION,
            f"Cannot navigate back to depth {depth} from depth {stack.depth}.",
        )
    return Transition(state=replace(state, navigation_stack=stack.truncate(depth)))


def _register_node_group_type(state: EditorState, action: RegisterNodeGroupType, new_id: IdGenerator) -> Transition:
    name = action.name.strip()
    if not name:
        return _reject(state, RejectionReason.EMPTY_NAME, "A node group type needs a non-empty name.")

    node_type = NodeType(
        id=_fresh_id(new_id, state.registry.node_types),
        name=name,
        header_color=action.header_color,
        is_group=True,
    )
    logger.debug("Registered group node type %s (%s)", node_type.id, node_type.name)
    return Transition(
        state=replace(
            state,
            registry=state.registry.with_node_type(node_type),
            group_templates={**state.group_templates, node_type.id: GraphStore()},
        ),
        created_id=node_type.id,
    )
