import pytest

import blendnodes as bn

from ._catalog import ADD, COMBINE, FRAME, GROUP, LABEL, NUMBER, TEXT, VECTOR


@pytest.fixture
def data_types() -> list[bn.DataType]:
    return [NUMBER, TEXT, VECTOR]


@pytest.fixture
def node_types() -> list[bn.NodeType]:
    return [ADD, LABEL, COMBINE, GROUP, FRAME]


@pytest.fixture
def state(data_types: list[bn.DataType], node_types: list[bn.NodeType]) -> bn.EditorState:
    return bn.create_state(data_types, node_types)


@pytest.fixture
def ids() -> bn.CounterIdGenerator:
    return bn.CounterIdGenerator(prefix="id")


@pytest.fixture
def editor(data_types: list[bn.DataType], node_types: list[bn.NodeType]) -> bn.GraphEditor:
    return bn.GraphEditor.create(data_types, node_types, ids=bn.CounterIdGenerator(prefix="id"))
