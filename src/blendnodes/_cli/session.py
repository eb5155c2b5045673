"""Session documents: registries plus a script of actions, stored as TOML.

A session file looks like::

    [options]
    id_strategy = "counter"

    [[data_types]]
    id = "number"
    name = "Number"
    underlying_type = "number"
    color = "#a1a1a1"

    [[node_types]]
    id = "math"
    name = "Math"
    inputs = [{ name = "a", data_type = "number", allow_input = true, default = 0 }]
    outputs = [{ name = "result", data_type = "number" }]

    [[actions]]
    type = "ADD_NODE"
    type_id = "math"
    as = "m1"

``as`` names the id created by an action; later actions refer to it as ``"$m1"``.
"""

from __future__ import annotations

import importlib
import logging
import sys
import tomllib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from blendnodes._actions import parse_action
from blendnodes._config import options_from_mapping
from blendnodes._editor import GraphEditor
from blendnodes._errors import ConfigError, GraphEditorError
from blendnodes._types import DataType, HandleShape, InputPanel, NodeType, PortDefinition, UnderlyingType

if TYPE_CHECKING:
    from pathlib import Path

    from blendnodes._config import EditorOptions
    from blendnodes._errors import Rejection

logger = logging.getLogger(__name__)

# Action fields that may hold a "$alias" reference to a previously created id
_REFERENCE_FIELDS = ("node_id", "source", "target", "edge_id", "type_id")


class SessionError(GraphEditorError):
    """The session document cannot be loaded."""


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class PortSpec(_Strict):
    name: str
    data_type: str
    allow_input: bool = False
    default: Any = None

    def to_port(self) -> PortDefinition:
        return PortDefinition(
            name=self.name,
            data_type_id=self.data_type,
            allow_input=self.allow_input,
            default_value=self.default,
        )


class PanelSpec(_Strict):
    panel: str
    inputs: list[PortSpec]

    def to_panel(self) -> InputPanel:
        return InputPanel(name=self.panel, inputs=tuple(port.to_port() for port in self.inputs))


class DataTypeSpec(_Strict):
    id: str
    name: str
    underlying_type: UnderlyingType
    color: str
    shape: HandleShape = HandleShape.CIRCLE
    schema_ref: str | None = Field(default=None, alias="schema")


class NodeTypeSpec(_Strict):
    id: str
    name: str
    header_color: str | None = None
    is_group: bool = False
    inputs: list[PortSpec | PanelSpec] = Field(default_factory=list)
    outputs: list[PortSpec] = Field(default_factory=list)

    def to_node_type(self) -> NodeType:
        inputs = tuple(item.to_port() if isinstance(item, PortSpec) else item.to_panel() for item in self.inputs)
        return NodeType(
            id=self.id,
            name=self.name,
            header_color=self.header_color,
            inputs=inputs,
            outputs=tuple(port.to_port() for port in self.outputs),
            is_group=self.is_group,
        )


class SessionDocument(_Strict):
    """Parsed contents of a session file."""

    options: dict[str, Any] | None = None
    data_types: list[DataTypeSpec] = Field(default_factory=list)
    node_types: list[NodeTypeSpec] = Field(default_factory=list)
    actions: list[dict[str, Any]] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ReplayStep:
    """Outcome of one scripted action."""

    index: int
    action_type: str
    rejection: Rejection | None
    created_id: str | None


def load_session(path: Path) -> SessionDocument:
    """Read and validate a session file.

    Raises:
        SessionError: If the file is not valid TOML or not a valid session.

    """
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise SessionError(msg) from e
    try:
        return SessionDocument.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid session file {path}:\n{e}"
        raise SessionError(msg) from e


def resolve_schema(reference: str) -> Any:
    """Import a schema given as ``'module.path:attribute'``.

    Raises:
        SessionError: If the reference is malformed or cannot be imported.

    """
    if ":" not in reference:
        msg = f"Schema reference must be in format 'module.path:attribute', got '{reference}'"
        raise SessionError(msg)
    module_name, attr = reference.split(":", 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Cannot import schema module '{module_name}': {e}"
        raise SessionError(msg) from e
    if not hasattr(module, attr):
        msg = f"Could not find '{attr}' in module '{module_name}'"
        raise SessionError(msg)
    return getattr(module, attr)


def build_data_types(document: SessionDocument, base_dir: Path) -> list[DataType]:
    """Turn data type specs into DataTypes, importing complex schemas.

    Modules next to the session file are importable while schemas are resolved.
    """
    extra_path = str(base_dir.resolve())
    if extra_path not in sys.path:
        sys.path.insert(0, extra_path)

    data_types: list[DataType] = []
    for spec in document.data_types:
        schema = resolve_schema(spec.schema_ref) if spec.schema_ref is not None else None
        try:
            data_types.append(
                DataType(
                    id=spec.id,
                    name=spec.name,
                    underlying_type=spec.underlying_type,
                    color=spec.color,
                    schema=schema,
                    shape=spec.shape,
                ),
            )
        except ValueError as e:
            raise SessionError(str(e)) from e
    return data_types


def session_options(document: SessionDocument, fallback: EditorOptions) -> EditorOptions:
    """Options from the session's ``[options]`` table, or ``fallback`` without one."""
    if document.options is None:
        return fallback
    try:
        return options_from_mapping(document.options)
    except ConfigError as e:
        msg = f"Invalid [options] table: {e}"
        raise SessionError(msg) from e


def build_editor(document: SessionDocument, base_dir: Path, options: EditorOptions) -> GraphEditor:
    """Create an editor from the registries of a session document."""
    data_types = build_data_types(document, base_dir)
    node_types = [spec.to_node_type() for spec in document.node_types]
    return GraphEditor.create(data_types, node_types, options=options)


def _substitute(value: Any, aliases: dict[str, str], index: int) -> Any:
    if not isinstance(value, str) or not value.startswith("$"):
        return value
    alias = value[1:]
    if alias not in aliases:
        msg = f"Action #{index} refers to unknown alias '${alias}'"
        raise SessionError(msg)
    return aliases[alias]


def _resolve_references(fields: dict[str, Any], aliases: dict[str, str], index: int) -> dict[str, Any]:
    return {
        key: _substitute(value, aliases, index) if key in _REFERENCE_FIELDS else value
        for key, value in fields.items()
    }


def replay(document: SessionDocument, editor: GraphEditor) -> list[ReplayStep]:
    """Dispatch every scripted action in order.

    Rejected actions are recorded and the replay goes on, just like an editor
    ignoring an invalid gesture.

    Raises:
        SessionError: If an action is malformed or refers to an unknown alias.

    """
    aliases: dict[str, str] = {}
    steps: list[ReplayStep] = []
    for index, raw in enumerate(document.actions, start=1):
        data = dict(raw)
        alias = data.pop("as", None)
        if isinstance(data.get("payload"), dict):
            data["payload"] = _resolve_references(data["payload"], aliases, index)
        data = _resolve_references(data, aliases, index)

        try:
            action = parse_action(data)
        except GraphEditorError as e:
            msg = f"Action #{index} is malformed: {e}"
            raise SessionError(msg) from e

        editor.dispatch(action)
        created_id = editor.last_created_id
        if alias is not None and created_id is not None:
            aliases[str(alias)] = created_id
        logger.debug("Action #%d %s -> %s", index, action.type, editor.last_rejection or "applied")
        steps.append(
            ReplayStep(
                index=index,
                action_type=action.type,
                rejection=editor.last_rejection,
                created_id=created_id,
            ),
        )
    return steps
