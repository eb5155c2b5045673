"""The closed set of actions accepted by the reducer.

Every action is a frozen dataclass tagged by a literal ``type`` equal to its
``ActionType`` value. Hosts that receive actions as plain mappings (from a UI
bridge, a script, a message queue) turn them into dataclasses with
``parse_action``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, ValidationError

from ._errors import InvalidActionShapeError
from ._graph import Position


class ActionType(StrEnum):
    """Tags of the actions understood by the reducer."""

    ADD_NODE = "ADD_NODE"
    REMOVE_NODE = "REMOVE_NODE"
    UPDATE_NODE_POSITION = "UPDATE_NODE_POSITION"
    UPDATE_NODE_INPUT_VALUE = "UPDATE_NODE_INPUT_VALUE"
    CONNECT = "CONNECT"
    DISCONNECT = "DISCONNECT"
    OPEN_NODE_GROUP = "OPEN_NODE_GROUP"
    CLOSE_NODE_GROUP = "CLOSE_NODE_GROUP"
    REGISTER_NODE_GROUP_TYPE = "REGISTER_NODE_GROUP_TYPE"


@dataclass(frozen=True, slots=True, kw_only=True)
class AddNode:
    """Instantiate a node type in the active graph."""

    type: Literal["ADD_NODE"] = "ADD_NODE"
    type_id: str
    position: Position = field(default_factory=Position)


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoveNode:
    """Remove a node, its edges and, for group nodes, its nested graph."""

    type: Literal["REMOVE_NODE"] = "REMOVE_NODE"
    node_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateNodePosition:
    type: Literal["UPDATE_NODE_POSITION"] = "UPDATE_NODE_POSITION"
    node_id: str
    position: Position


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateNodeInputValue:
    """Set the literal value of an unconnected input port."""

    type: Literal["UPDATE_NODE_INPUT_VALUE"] = "UPDATE_NODE_INPUT_VALUE"
    node_id: str
    port_name: str
    value: Any


@dataclass(frozen=True, slots=True, kw_only=True)
class Connect:
    """Create an edge, replacing any edge already feeding the target port."""

    type: Literal["CONNECT"] = "CONNECT"
    source: str
    source_handle: str
    target: str
    target_handle: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Disconnect:
    type: Literal["DISCONNECT"] = "DISCONNECT"
    edge_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class OpenNodeGroup:
    """Enter the nested graph of a group node of the active graph."""

    type: Literal["OPEN_NODE_GROUP"] = "OPEN_NODE_GROUP"
    node_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class CloseNodeGroup:
    """Navigate back up.

    ``depth`` is the number of opened groups to keep: ``0`` returns to the root,
    None leaves the innermost group only.
    """

    type: Literal["CLOSE_NODE_GROUP"] = "CLOSE_NODE_GROUP"
    depth: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RegisterNodeGroupType:
    """Register a brand-new group node type with no ports and an empty template."""

    type: Literal["REGISTER_NODE_GROUP_TYPE"] = "REGISTER_NODE_GROUP_TYPE"
    name: str
    header_color: str | None = None


Action = (
    AddNode
    | RemoveNode
    | UpdateNodePosition
    | UpdateNodeInputValue
    | Connect
    | Disconnect
    | OpenNodeGroup
    | CloseNodeGroup
    | RegisterNodeGroupType
)

ACTION_CLASSES: tuple[type, ...] = (
    AddNode,
    RemoveNode,
    UpdateNodePosition,
    UpdateNodeInputValue,
    Connect,
    Disconnect,
    OpenNodeGroup,
    CloseNodeGroup,
    RegisterNodeGroupType,
)

_action_adapter: TypeAdapter[Action] = TypeAdapter(Annotated[Action, Field(discriminator="type")])


def parse_action(data: Mapping[str, Any]) -> Action:
    """Parse a mapping into an action.

    Both the flat form ``{"type": "DISCONNECT", "edge_id": "e1"}`` and the
    envelope form ``{"type": "DISCONNECT", "payload": {"edge_id": "e1"}}`` are
    accepted.

    Args:
        data: The mapping to parse.

    Returns:
        The action dataclass.

    Raises:
        InvalidActionShapeError: If the mapping is not a well-formed action.

    """
    if not isinstance(data, Mapping):
        msg = f"An action must be a mapping, got {type(data).__name__}."
        raise InvalidActionShapeError(msg)

    flat = dict(data)
    payload = flat.pop("payload", None)
    if payload is not None:
        if not isinstance(payload, Mapping):
            msg = f"Action payload must be a mapping, got {type(payload).__name__}."
            raise InvalidActionShapeError(msg)
        flat.update(payload)

    try:
        return _action_adapter.validate_python(flat)
    except ValidationError as e:
        msg = f"Malformed action {flat.get('type', '<untyped>')!r}: {e}"
        raise InvalidActionShapeError(msg) from e


def ensure_action(action: object) -> Action:
    """Return ``action`` if it is one of the action dataclasses.

    Raises:
        InvalidActionShapeError: Otherwise.

    """
    if not isinstance(action, ACTION_CLASSES):
        msg = f"Unsupported action object of type {type(action).__name__}."
        raise InvalidActionShapeError(msg)
    return action  # ty: ignore[invalid-return-type]
