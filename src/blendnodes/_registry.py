"""Type registries: catalogs of data types and node types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._errors import UnknownTypeReferenceError
from ._types import PortSide

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._types import DataType, NodeType, PortDefinition


@dataclass(frozen=True, slots=True)
class TypeRegistry:
    """Read-only lookup of data types and node types by id.

    The registry is fixed at editor construction time. The only way to extend
    it is ``with_node_type``, which returns a new registry sharing the data type
    mapping with this one.

    Attributes:
        data_types: Mapping from data type id to DataType.
        node_types: Mapping from node type id to NodeType.

    """

    data_types: dict[str, DataType] = field(default_factory=dict)
    node_types: dict[str, NodeType] = field(default_factory=dict)

    @classmethod
    def build(cls, data_types: Iterable[DataType], node_types: Iterable[NodeType]) -> TypeRegistry:
        """Build a registry, checking ids are unique and every port resolves.

        Args:
            data_types: Data type definitions.
            node_types: Node type definitions.

        Returns:
            A new TypeRegistry.

        Raises:
            ValueError: If an id is registered twice.
            UnknownTypeReferenceError: If a port references an unregistered data type.

        """
        data_type_map: dict[str, DataType] = {}
        for data_type in data_types:
            if data_type.id in data_type_map:
                msg = f"Data type '{data_type.id}' is registered more than once."
                raise ValueError(msg)
            data_type_map[data_type.id] = data_type

        node_type_map: dict[str, NodeType] = {}
        for node_type in node_types:
            if node_type.id in node_type_map:
                msg = f"Node type '{node_type.id}' is registered more than once."
                raise ValueError(msg)
            node_type_map[node_type.id] = node_type

        registry = cls(data_types=data_type_map, node_types=node_type_map)
        for node_type in node_type_map.values():
            registry.check_node_type(node_type)
        return registry

    def check_node_type(self, node_type: NodeType) -> None:
        """Ensure every port of a node type references a registered data type.

        Raises:
            UnknownTypeReferenceError: On the first unresolved data type id.

        """
        for port in (*node_type.iter_inputs(), *node_type.outputs):
            if port.data_type_id not in self.data_types:
                msg = (
                    f"Port '{port.name}' of node type '{node_type.id}' references"
                    f" unknown data type '{port.data_type_id}'."
                )
                raise UnknownTypeReferenceError(msg)

    def get_data_type(self, data_type_id: str) -> DataType | None:
        return self.data_types.get(data_type_id)

    def get_node_type(self, node_type_id: str) -> NodeType | None:
        return self.node_types.get(node_type_id)

    def resolve_port(
        self,
        node_type_id: str,
        port_name: str,
        side: PortSide,
    ) -> tuple[PortDefinition, DataType] | None:
        """Resolve a port of a node type together with its data type.

        Returns:
            ``(port, data_type)``, or None if the node type, the port or the
            data type is unknown.

        """
        node_type = self.get_node_type(node_type_id)
        if node_type is None:
            return None
        port = node_type.port(port_name, PortSide(side))
        if port is None:
            return None
        data_type = self.get_data_type(port.data_type_id)
        if data_type is None:
            return None
        return port, data_type

    def with_node_type(self, node_type: NodeType) -> TypeRegistry:
        """Return a new registry that also contains ``node_type``.

        Raises:
            ValueError: If the id is already registered.
            UnknownTypeReferenceError: If one of its ports does not resolve.

        """
        if node_type.id in self.node_types:
            msg = f"Node type '{node_type.id}' is already registered."
            raise ValueError(msg)
        self.check_node_type(node_type)
        return TypeRegistry(
            data_types=self.data_types,
            node_types={**self.node_types, node_type.id: node_type},
        )
