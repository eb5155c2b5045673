"""Editor state and its construction from caller-supplied definitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ._config import EditorOptions
from ._errors import InvalidGraphError, ValueValidationError
from ._graph import DependencyGraph, GraphStore
from ._navigation import NavigationStack
from ._registry import TypeRegistry
from ._types import PortSide
from ._validation import check_connection

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from ._graph import Edge, Node
    from ._types import DataType, NodeType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EditorState:
    """Complete, immutable state of one editor session.

    Transitions never mutate a state; they build a new one that reuses every
    untouched part by reference.

    Attributes:
        registry: Data type and node type catalogs.
        root_graph: The top-level graph store.
        nested_graphs: Graph stores owned by group nodes, keyed by the owning node's id.
        navigation_stack: Opened groups, innermost last.
        group_templates: Contents copied into the nested graph of every new
            instance of a group node type, keyed by node type id.
        options: Session options.

    """

    registry: TypeRegistry
    root_graph: GraphStore = field(default_factory=GraphStore)
    nested_graphs: dict[str, GraphStore] = field(default_factory=dict)
    navigation_stack: NavigationStack = field(default_factory=NavigationStack)
    group_templates: dict[str, GraphStore] = field(default_factory=dict)
    options: EditorOptions = field(default_factory=EditorOptions)

    @property
    def data_types(self) -> dict[str, DataType]:
        return self.registry.data_types

    @property
    def type_of_nodes(self) -> dict[str, NodeType]:
        return self.registry.node_types

    @property
    def active_group_id(self) -> str | None:
        """Id of the group node whose graph is displayed, or None for the root."""
        top = self.navigation_stack.top
        return top.node_id if top is not None else None

    @property
    def active_graph(self) -> GraphStore:
        """The graph store currently displayed."""
        return self.graph_for(self.active_group_id)

    def graph_for(self, owner_id: str | None) -> GraphStore:
        """Graph store owned by a group node (None for the root graph).

        Raises:
            KeyError: If ``owner_id`` owns no nested graph.

        """
        if owner_id is None:
            return self.root_graph
        return self.nested_graphs[owner_id]

    def with_graph(self, owner_id: str | None, store: GraphStore) -> EditorState:
        """Return a state where the store owned by ``owner_id`` is replaced."""
        if owner_id is None:
            return replace(self, root_graph=store)
        return replace(self, nested_graphs={**self.nested_graphs, owner_id: store})

    def iter_graphs(self) -> Iterator[tuple[str | None, GraphStore]]:
        """Every graph store with its owner id, root first."""
        yield None, self.root_graph
        yield from self.nested_graphs.items()

    def find_node(self, node_id: str) -> tuple[str | None, Node] | None:
        """Locate a node in any graph store.

        Returns:
            ``(owner_id, node)``, or None if no store holds the node.

        """
        for owner_id, store in self.iter_graphs():
            node = store.get_node(node_id)
            if node is not None:
                return owner_id, node
        return None

    def open_group_type_ids(self) -> list[str]:
        """Node type ids of the opened groups, outermost first."""
        type_ids: list[str] = []
        owner_id: str | None = None
        for entry in self.navigation_stack:
            node = self.graph_for(owner_id).get_node(entry.node_id)
            if node is not None:
                type_ids.append(node.type_id)
            owner_id = entry.node_id
        return type_ids

    def contained_group_type_ids(self, node_type_id: str) -> frozenset[str]:
        """Group types a new ``node_type_id`` node brings along through templates, transitively."""
        return _template_containment(self.registry, self.group_templates).downstream(node_type_id)

    def port_data_type(self, node_id: str, port_name: str, side: PortSide) -> DataType | None:
        """Resolve the data type of a port of a node in the active graph.

        Rendering collaborators use this for handle color and shape.
        """
        node = self.active_graph.get_node(node_id)
        if node is None:
            return None
        resolved = self.registry.resolve_port(node.type_id, port_name, PortSide(side))
        return resolved[1] if resolved is not None else None

    def unconnected_input_values(self, node_id: str) -> dict[str, Any]:
        """Literal values of a node in the active graph, minus ports driven by an edge."""
        store = self.active_graph
        node = store.get_node(node_id)
        if node is None:
            return {}
        return {
            port: value for port, value in node.input_values.items() if not store.is_input_connected(node_id, port)
        }

    def execution_order(self) -> list[str]:
        """Node ids of the active graph, each after every node feeding it.

        This is a structural ordering only; nothing is evaluated.

        Raises:
            ValueError: If the active graph contains a cycle.

        """
        return self.active_graph.dependency_graph().topological_order()

    def group_instance_count(self, node_type_id: str) -> int:
        """Number of nodes of a given type across every graph store."""
        return sum(
            1 for _, store in self.iter_graphs() for node in store.nodes.values() if node.type_id == node_type_id
        )


def create_state(  # noqa: PLR0913
    data_types: Iterable[DataType],
    node_types: Iterable[NodeType],
    nodes: Iterable[Node] = (),
    edges: Iterable[Edge] = (),
    *,
    nested_graphs: Mapping[str, GraphStore] | None = None,
    group_templates: Mapping[str, GraphStore] | None = None,
    options: EditorOptions | None = None,
) -> EditorState:
    """Build the initial state of an editor session.

    Caller-supplied graphs are held to the same invariants the reducer keeps:
    registered types, allowed literal inputs, valid and type-safe edges, at most
    one edge per input port, globally unique node ids. Every group node ends up
    owning a nested graph; the ones without a supplied graph get an empty one.

    Args:
        data_types: Data type definitions.
        node_types: Node type definitions.
        nodes: Nodes of the root graph.
        edges: Edges of the root graph.
        nested_graphs: Pre-existing nested graphs keyed by owning group node id.
        group_templates: Template contents for group node types, keyed by type id.
        options: Session options.

    Returns:
        A new EditorState with the root graph active.

    Raises:
        ValueError, UnknownTypeReferenceError: If the registries are inconsistent.
        InvalidGraphError: If a supplied graph or template breaks an invariant.

    """
    options = options or EditorOptions()
    registry = TypeRegistry.build(data_types, node_types)

    templates = dict(group_templates or {})
    _validate_templates(registry, templates, options)

    root = GraphStore.from_elements(nodes, edges)
    _validate_store(registry, root, "root graph", options)

    nested = dict(nested_graphs or {})
    for owner_id, store in nested.items():
        _validate_store(registry, store, f"nested graph of '{owner_id}'", options)

    owners = _collect_group_owners(registry, root, nested)
    orphans = set(nested) - owners
    if orphans:
        msg = f"Nested graphs without a group node owning them: {', '.join(sorted(orphans))}"
        raise InvalidGraphError(msg)

    logger.debug(
        "Created state with %d data type(s), %d node type(s), %d root node(s), %d nested graph(s)",
        len(registry.data_types),
        len(registry.node_types),
        len(root),
        len(nested),
    )
    return EditorState(
        registry=registry,
        root_graph=root,
        nested_graphs=nested,
        group_templates=templates,
        options=options,
    )


def _collect_group_owners(registry: TypeRegistry, root: GraphStore, nested: dict[str, GraphStore]) -> set[str]:
    """Walk root and nested graphs, adding empty stores for group nodes that lack one.

    Returns:
        Ids of all group nodes found. ``nested`` is completed in place.

    Raises:
        InvalidGraphError: If a node id appears in more than one graph, or a
            group node sits inside an instance of its own type.

    """
    seen: set[str] = set()
    owners: set[str] = set()
    # Each pending store comes with the group types of the nodes enclosing it
    pending: list[tuple[GraphStore, frozenset[str]]] = [(root, frozenset())]
    while pending:
        store, enclosing = pending.pop()
        for node in store.nodes.values():
            if node.id in seen:
                msg = f"Node id '{node.id}' appears in more than one graph."
                raise InvalidGraphError(msg)
            seen.add(node.id)
            node_type = registry.get_node_type(node.type_id)
            if node_type is None or not node_type.is_group:
                continue
            if node_type.id in enclosing:
                msg = f"Group node '{node.id}' sits inside an instance of its own type '{node_type.id}'."
                raise InvalidGraphError(msg)
            owners.add(node.id)
            pending.append((nested.setdefault(node.id, GraphStore()), enclosing | {node_type.id}))
    return owners


def _validate_store(registry: TypeRegistry, store: GraphStore, label: str, options: EditorOptions) -> None:
    for node in store.nodes.values():
        node_type = registry.get_node_type(node.type_id)
        if node_type is None:
            msg = f"Node '{node.id}' in the {label} has unknown node type '{node.type_id}'."
            raise InvalidGraphError(msg)
        for port_name, value in node.input_values.items():
            port = node_type.input_port(port_name)
            if port is None or not port.allow_input:
                msg = f"Node '{node.id}' in the {label} holds a literal for '{port_name}', which takes no literal input."
                raise InvalidGraphError(msg)
            data_type = registry.get_data_type(port.data_type_id)
            assert data_type is not None  # guaranteed by TypeRegistry.build
            try:
                data_type.validate_value(value)
            except ValueValidationError as e:
                msg = f"Node '{node.id}' in the {label} holds an invalid literal for '{port_name}': {e}"
                raise InvalidGraphError(msg) from e

    fed_ports: set[tuple[str, str]] = set()
    for edge in store.edges.values():
        validation = check_connection(
            registry,
            store,
            edge.source,
            edge.source_handle,
            edge.target,
            edge.target_handle,
        )
        if validation.rejection is not None:
            msg = f"Edge '{edge.id}' in the {label} is invalid: {validation.rejection}"
            raise InvalidGraphError(msg)
        port_key = (edge.target, edge.target_handle)
        if port_key in fed_ports:
            msg = f"Input '{edge.target_handle}' of node '{edge.target}' in the {label} has more than one incoming edge."
            raise InvalidGraphError(msg)
        fed_ports.add(port_key)

    if options.enable_cycle_checking and store.dependency_graph().has_cycle():
        msg = f"The {label} contains a cycle while cycle checking is enabled."
        raise InvalidGraphError(msg)


def _template_containment(registry: TypeRegistry, templates: Mapping[str, GraphStore]) -> DependencyGraph[str]:
    """Containment view over group types: ``a -> b`` when a's template holds a ``b`` node."""
    containment: list[tuple[str, str]] = []
    for type_id, template in templates.items():
        for node in template.nodes.values():
            inner = registry.get_node_type(node.type_id)
            if inner is not None and inner.is_group:
                containment.append((type_id, inner.id))
    return DependencyGraph.from_edges(containment)


def _validate_templates(registry: TypeRegistry, templates: dict[str, GraphStore], options: EditorOptions) -> None:
    """Check group templates are well-formed and never contain themselves.

    A template "contains" every group type instantiated inside it, and that
    type's own template, and so on. Any containment cycle would make
    instantiating the group unbounded.
    """
    for type_id, template in templates.items():
        node_type = registry.get_node_type(type_id)
        if node_type is None or not node_type.is_group:
            msg = f"Template registered for '{type_id}', which is not a group node type."
            raise InvalidGraphError(msg)
        _validate_store(registry, template, f"template of '{type_id}'", options)

    if _template_containment(registry, templates).has_cycle():
        msg = "Group templates contain an instance of themselves, directly or transitively."
        raise InvalidGraphError(msg)
