"""State engine for node-based graph editors."""

__all__ = [
    "ActionType",
    "AddNode",
    "CloseNodeGroup",
    "ConfigError",
    "Connect",
    "ConnectionValidation",
    "CounterIdGenerator",
    "DataType",
    "DependencyGraph",
    "Disconnect",
    "Edge",
    "EditorOptions",
    "EditorState",
    "GraphEditor",
    "GraphEditorError",
    "GraphStore",
    "HandleShape",
    "IdGenerator",
    "IdStrategy",
    "InputPanel",
    "InvalidActionShapeError",
    "InvalidGraphError",
    "NavigationEntry",
    "NavigationStack",
    "Node",
    "NodeType",
    "OpenNodeGroup",
    "PortDefinition",
    "PortSide",
    "Position",
    "RandomIdGenerator",
    "RegisterNodeGroupType",
    "Rejection",
    "RejectionReason",
    "RemoveNode",
    "Transition",
    "TypeRegistry",
    "UnderlyingType",
    "UnknownTypeReferenceError",
    "UpdateNodeInputValue",
    "UpdateNodePosition",
    "ValueValidationError",
    "apply_action",
    "can_connect",
    "create_state",
    "get_config",
    "load_config",
    "parse_action",
    "reduce",
]

from ._actions import (
    ActionType,
    AddNode,
    CloseNodeGroup,
    Connect,
    Disconnect,
    OpenNodeGroup,
    RegisterNodeGroupType,
    RemoveNode,
    UpdateNodeInputValue,
    UpdateNodePosition,
    parse_action,
)
from ._config import EditorOptions, IdStrategy, get_config, load_config
from ._editor import GraphEditor
from ._errors import (
    ConfigError,
    GraphEditorError,
    InvalidActionShapeError,
    InvalidGraphError,
    Rejection,
    RejectionReason,
    UnknownTypeReferenceError,
    ValueValidationError,
)
from ._graph import DependencyGraph, Edge, GraphStore, Node, Position
from ._ids import CounterIdGenerator, IdGenerator, RandomIdGenerator
from ._navigation import NavigationEntry, NavigationStack
from ._reducer import Transition, apply_action, reduce
from ._registry import TypeRegistry
from ._state import EditorState, create_state
from ._types import DataType, HandleShape, InputPanel, NodeType, PortDefinition, PortSide, UnderlyingType
from ._validation import ConnectionValidation, can_connect
