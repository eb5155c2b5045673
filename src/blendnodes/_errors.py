"""Rejection taxonomy and exceptions of the graph state engine.

Two kinds of failure exist:

- Rejections: a user-triggered action that does not satisfy its precondition.
  The reducer returns the prior state unchanged and reports a ``Rejection``.
- Exceptions: programmer errors (malformed actions, inconsistent registries,
  invalid initial graphs, bad configuration). These are raised.
"""

from dataclasses import dataclass

from ._doc_enum import StrEnumWithDoc


class RejectionReason(StrEnumWithDoc):
    """Why the reducer refused an action."""

    UNKNOWN_TYPE_REFERENCE = (
        "UnknownTypeReference",
        "The action references a data type or node type id that is not registered.",
    )
    UNKNOWN_NODE = "UnknownNode", "The node id does not exist in the active graph."
    UNKNOWN_EDGE = "UnknownEdge", "The edge id does not exist in the active graph."
    UNKNOWN_PORT = "UnknownPort", "The port name is not defined on the node's type."
    SELF_LOOP = "SelfLoop", "An edge may not connect a node to itself."
    TYPE_MISMATCH = "TypeMismatch", "The data types of the two ports differ."
    VALIDATION_FAILED = "ValidationFailed", "The literal value was rejected by the port's data type."
    PORT_CONNECTED = "PortConnected", "The input port is driven by an edge, so its literal value cannot be edited."
    INPUT_NOT_ALLOWED = "InputNotAllowed", "The input port does not accept literal values."
    NOT_A_GROUP = "NotAGroup", "The node's type is not a node group."
    INVALID_NAVIGATION = "InvalidNavigation", "The requested navigation depth is not reachable."
    EMPTY_NAME = "EmptyName", "A name must contain at least one non-blank character."
    RECURSIVE_GROUP = "RecursiveGroup", "A node group may not be placed inside an instance of itself."
    CYCLE_DETECTED = "CycleDetected", "The edge would close a cycle while cycle checking is enabled."


@dataclass(frozen=True, slots=True)
class Rejection:
    """A recoverable refusal of an action.

    Attributes:
        reason: Machine-readable category.
        message: Human-readable detail naming the offending ids.

    """

    reason: RejectionReason
    message: str

    def __str__(self) -> str:
        return f"{self.reason}: {self.message}"


class GraphEditorError(Exception):
    """Base class for programmer errors raised by the engine."""


class InvalidActionShapeError(GraphEditorError, TypeError):
    """The dispatched object is not a well-formed action."""


class UnknownTypeReferenceError(GraphEditorError, LookupError):
    """A registry definition references an id that is not registered."""


class InvalidGraphError(GraphEditorError, ValueError):
    """Caller-supplied nodes, edges or group templates break a graph invariant."""


class ValueValidationError(GraphEditorError, ValueError):
    """A literal value does not conform to a data type."""


class ConfigError(GraphEditorError):
    """Error in blendnodes configuration."""
