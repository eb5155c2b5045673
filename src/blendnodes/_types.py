"""Data types, port definitions and node types.

These are the immutable building blocks of the type registries. A graph only
ever refers to them by id; compatibility between ports is decided by comparing
data type ids (nominal typing), never by comparing underlying representations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from ._errors import ValueValidationError

if TYPE_CHECKING:
    from collections.abc import Iterator


class UnderlyingType(StrEnum):
    """Primitive kind behind a data type."""

    STRING = auto()
    NUMBER = auto()
    COMPLEX = auto()  # Structured value validated by a schema


class HandleShape(StrEnum):
    """Shape hint for the handle drawn for a port of a data type."""

    CIRCLE = auto()
    SQUARE = auto()
    RECTANGLE = auto()
    LIST = auto()
    GRID = auto()
    DIAMOND = auto()
    TRAPEZIUM = auto()
    HEXAGON = auto()
    STAR = auto()
    CROSS = auto()
    ZIGZAG = auto()
    SPARKLE = auto()
    PARALLELOGRAM = auto()


class PortSide(StrEnum):
    """Which side of a node a port sits on."""

    INPUT = auto()
    OUTPUT = auto()


@dataclass(frozen=True, slots=True)
class DataType:
    """A named, colored type tag governing which ports may be connected.

    Attributes:
        id: Unique identifier within the registry.
        name: Display name.
        underlying_type: Primitive kind of literal values of this type.
        color: Color used by rendering collaborators.
        schema: Any type pydantic can validate against (a ``BaseModel`` subclass,
            an ``Annotated`` type, ...). Required for ``COMPLEX`` data types and
            forbidden otherwise.
        shape: Handle shape hint.

    Example:
        >>> class Vector(BaseModel):
        ...     x: float
        ...     y: float
        >>> vector = DataType("vec", "Vector", UnderlyingType.COMPLEX, "#8e44ad", schema=Vector)
        >>> vector.validate_value({"x": 1, "y": 2})
        Vector(x=1.0, y=2.0)

    """

    id: str
    name: str
    underlying_type: UnderlyingType
    color: str
    schema: Any = None
    shape: HandleShape = HandleShape.CIRCLE
    _adapter: TypeAdapter[Any] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        underlying_type = UnderlyingType(self.underlying_type)
        object.__setattr__(self, "underlying_type", underlying_type)
        object.__setattr__(self, "shape", HandleShape(self.shape))

        if underlying_type is UnderlyingType.COMPLEX:
            if self.schema is None:
                msg = f"Data type '{self.id}' is complex and requires a schema."
                raise ValueError(msg)
            object.__setattr__(self, "_adapter", TypeAdapter(self.schema))
        elif self.schema is not None:
            msg = f"Data type '{self.id}' has underlying type '{underlying_type}' and must not define a schema."
            raise ValueError(msg)

    @property
    def is_complex(self) -> bool:
        """Whether literal values are validated by a schema."""
        return self.underlying_type is UnderlyingType.COMPLEX

    def validate_value(self, value: Any) -> Any:
        """Validate a literal value for a port of this data type.

        Args:
            value: The candidate literal.

        Returns:
            The value to store. Complex values are returned as parsed by the schema.

        Raises:
            ValueValidationError: If the value does not conform.

        """
        match self.underlying_type:
            case UnderlyingType.STRING:
                if not isinstance(value, str):
                    msg = f"Data type '{self.id}' expects a string, got {type(value).__name__}."
                    raise ValueValidationError(msg)
                return value
            case UnderlyingType.NUMBER:
                # bool is an int subclass but never a valid number literal
                if isinstance(value, bool) or not isinstance(value, int | float):
                    msg = f"Data type '{self.id}' expects a number, got {type(value).__name__}."
                    raise ValueValidationError(msg)
                return value
            case UnderlyingType.COMPLEX:
                assert self._adapter is not None
                try:
                    return self._adapter.validate_python(value)
                except ValidationError as e:
                    msg = f"Value rejected by the schema of data type '{self.id}': {e.error_count()} error(s)."
                    raise ValueValidationError(msg) from e


@dataclass(frozen=True, slots=True)
class PortDefinition:
    """An input or output port of a node type.

    Attributes:
        name: Port name, unique among the inputs (or outputs) of its node type.
        data_type_id: Id of the data type carried by the port.
        allow_input: For input ports, whether a literal may be typed in when
            the port is not connected.
        default_value: Literal used to seed new nodes.

    """

    name: str
    data_type_id: str
    allow_input: bool = False
    default_value: Any = None


@dataclass(frozen=True, slots=True)
class InputPanel:
    """A named, collapsible group of input ports."""

    name: str
    inputs: tuple[PortDefinition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))


@dataclass(frozen=True, slots=True)
class NodeType:
    """Template for nodes: its ports and whether it is a node group.

    Attributes:
        id: Unique identifier within the registry.
        name: Display name, also used for navigation breadcrumbs.
        header_color: Color of the node header, if any.
        inputs: Input ports, optionally grouped into panels.
        outputs: Output ports.
        is_group: Instances own a nested graph.

    """

    id: str
    name: str
    header_color: str | None = None
    inputs: tuple[PortDefinition | InputPanel, ...] = ()
    outputs: tuple[PortDefinition, ...] = ()
    is_group: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        _ensure_unique_names(self.id, "input", [port.name for port in self.iter_inputs()])
        _ensure_unique_names(self.id, "output", [port.name for port in self.outputs])

    def iter_inputs(self) -> Iterator[PortDefinition]:
        """Iterate over input ports, flattening panels in declaration order."""
        for item in self.inputs:
            if isinstance(item, InputPanel):
                yield from item.inputs
            else:
                yield item

    def input_port(self, name: str) -> PortDefinition | None:
        return next((port for port in self.iter_inputs() if port.name == name), None)

    def output_port(self, name: str) -> PortDefinition | None:
        return next((port for port in self.outputs if port.name == name), None)

    def port(self, name: str, side: PortSide) -> PortDefinition | None:
        """Look up a port by name on the given side."""
        if side is PortSide.INPUT:
            return self.input_port(name)
        return self.output_port(name)

    def default_input_values(self) -> dict[str, Any]:
        """Literal values a freshly created node starts with.

        Only ports that accept literal input and declare a default contribute.
        """
        return {
            port.name: port.default_value
            for port in self.iter_inputs()
            if port.allow_input and port.default_value is not None
        }


def _ensure_unique_names(type_id: str, side: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            msg = f"Node type '{type_id}' declares the {side} port '{name}' more than once."
            raise ValueError(msg)
        seen.add(name)
