"""GraphEditor: the single dispatch path of an editor session."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ._actions import parse_action
from ._config import EditorOptions
from ._ids import make_id_generator
from ._reducer import Transition, apply_action
from ._state import create_state

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._actions import Action
    from ._errors import Rejection
    from ._graph import Edge, GraphStore, Node
    from ._ids import IdGenerator
    from ._navigation import NavigationStack
    from ._state import EditorState
    from ._types import DataType, NodeType

logger = logging.getLogger(__name__)

type Listener = Callable[[EditorState, EditorState], None]


class GraphEditor:
    """Holds the current state of a session and routes every action through the reducer.

    The editor is the only writer: it owns the identifier generator, serializes
    dispatches and notifies listeners after each state change. Rejected actions
    and no-op actions leave ``state`` untouched and notify nobody.

    Example:
        >>> editor = GraphEditor.create(data_types, node_types)
        >>> editor.dispatch({"type": "ADD_NODE", "type_id": "math"})
        >>> node_id = editor.last_created_id

    """

    def __init__(self, state: EditorState, *, ids: IdGenerator | None = None) -> None:
        self._state = state
        self._ids = ids if ids is not None else make_id_generator(state.options)
        self._last_transition: Transition | None = None
        self._listeners: list[Listener] = []

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        data_types: Iterable[DataType],
        node_types: Iterable[NodeType],
        *,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
        options: EditorOptions | None = None,
        ids: IdGenerator | None = None,
    ) -> GraphEditor:
        """Build the initial state and an editor around it. See ``create_state``."""
        state = create_state(data_types, node_types, nodes, edges, options=options or EditorOptions())
        return cls(state, ids=ids)

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def last_transition(self) -> Transition | None:
        return self._last_transition

    @property
    def last_rejection(self) -> Rejection | None:
        """Why the most recent action was refused, or None if it was applied."""
        if self._last_transition is None:
            return None
        return self._last_transition.rejection

    @property
    def last_created_id(self) -> str | None:
        """Id of the node, edge or node type created by the most recent action."""
        if self._last_transition is None:
            return None
        return self._last_transition.created_id

    @property
    def active_graph(self) -> GraphStore:
        return self._state.active_graph

    @property
    def navigation_stack(self) -> NavigationStack:
        return self._state.navigation_stack

    def dispatch(self, action: Action | Mapping[str, Any]) -> None:
        """Apply an action to the current state.

        Args:
            action: An action dataclass, or a mapping parsed with ``parse_action``.

        Raises:
            InvalidActionShapeError: If the action is malformed. The state is
                left unchanged.

        """
        self._last_transition = None
        if isinstance(action, Mapping):
            action = parse_action(action)

        previous = self._state
        transition = apply_action(previous, action, self._ids)
        self._last_transition = transition
        if transition.rejection is not None:
            logger.info("Action %s rejected: %s", action.type, transition.rejection)
            return
        if transition.state is previous:
            return

        self._state = transition.state
        for listener in tuple(self._listeners):
            listener(previous, transition.state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback run as ``listener(previous, current)`` after each state change.

        Returns:
            A function that removes the listener. Calling it twice is harmless.

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
