"""Tests for node groups: navigation, nested graphs, templates and registration."""

from typing import Any

import pytest

import blendnodes as bn
from blendnodes import RejectionReason as R


def _created(state: bn.EditorState, action: Any, ids: bn.CounterIdGenerator) -> tuple[bn.EditorState, str]:
    transition = bn.apply_action(state, action, ids)
    assert transition.accepted, transition.rejection
    assert transition.created_id is not None
    return transition.state, transition.created_id


class TestOpenNodeGroup:
    """Tests for OPEN_NODE_GROUP."""

    def test_switches_active_graph(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, group_id = _created(state, bn.AddNode(type_id="group"), ids)
        opened = bn.reduce(state, bn.OpenNodeGroup(node_id=group_id), ids)

        assert opened.navigation_stack.depth == 1
        assert opened.navigation_stack.top == bn.NavigationEntry(group_id, "Group")
        assert opened.active_group_id == group_id
        assert opened.active_graph is opened.nested_graphs[group_id]
        assert opened.navigation_stack.breadcrumbs() == ["Root", "Group"]

    def test_non_group_node(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, node_id = _created(state, bn.AddNode(type_id="add"), ids)
        transition = bn.apply_action(state, bn.OpenNodeGroup(node_id=node_id), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.NOT_A_GROUP
        assert transition.state is state

    def test_unknown_node(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        transition = bn.apply_action(state, bn.OpenNodeGroup(node_id="nope"), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.UNKNOWN_NODE

    def test_actions_apply_to_nested_graph(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, group_id = _created(state, bn.AddNode(type_id="group"), ids)
        root_before = state.root_graph
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=group_id), ids)
        state, inner_id = _created(state, bn.AddNode(type_id="add"), ids)

        assert inner_id in state.nested_graphs[group_id]
        assert state.root_graph is root_before
        assert state.find_node(inner_id) == (group_id, state.nested_graphs[group_id].nodes[inner_id])

    def test_root_nodes_are_not_visible_inside_group(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, root_node = _created(state, bn.AddNode(type_id="add"), ids)
        state, group_id = _created(state, bn.AddNode(type_id="group"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=group_id), ids)

        transition = bn.apply_action(state, bn.RemoveNode(node_id=root_node), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.UNKNOWN_NODE


class TestCloseNodeGroup:
    """Tests for CLOSE_NODE_GROUP."""

    @pytest.fixture
    def nested(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> bn.EditorState:
        state, outer = _created(state, bn.AddNode(type_id="group"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=outer), ids)
        state, inner = _created(state, bn.AddNode(type_id="frame"), ids)
        return bn.reduce(state, bn.OpenNodeGroup(node_id=inner), ids)

    def test_pops_one_level(self, nested: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        result = bn.reduce(nested, bn.CloseNodeGroup(), ids)
        assert result.navigation_stack.depth == 1
        assert result.nested_graphs is nested.nested_graphs

    @pytest.mark.parametrize(("depth", "expected"), [(0, 0), (1, 1)])
    def test_back_to_depth(self, nested: bn.EditorState, ids: bn.CounterIdGenerator, depth: int, expected: int) -> None:
        result = bn.reduce(nested, bn.CloseNodeGroup(depth=depth), ids)
        assert result.navigation_stack.depth == expected

    def test_back_to_root_activates_root_graph(self, nested: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        result = bn.reduce(nested, bn.CloseNodeGroup(depth=0), ids)
        assert result.active_graph is result.root_graph

    @pytest.mark.parametrize("depth", [-1, 2, 5])
    def test_unreachable_depth(self, nested: bn.EditorState, ids: bn.CounterIdGenerator, depth: int) -> None:
        transition = bn.apply_action(nested, bn.CloseNodeGroup(depth=depth), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.INVALID_NAVIGATION
        assert transition.state is nested

    def test_at_root(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        transition = bn.apply_action(state, bn.CloseNodeGroup(), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.INVALID_NAVIGATION


class TestRemovingGroups:
    """Removing a group node prunes its nested graphs and navigation entries."""

    def test_removing_nested_groups_prunes_graphs(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, outer = _created(state, bn.AddNode(type_id="group"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=outer), ids)
        state, inner = _created(state, bn.AddNode(type_id="frame"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=inner), ids)
        state, leaf = _created(state, bn.AddNode(type_id="add"), ids)

        # Back in the outer group
        state = bn.reduce(state, bn.CloseNodeGroup(), ids)
        state = bn.reduce(state, bn.RemoveNode(node_id=inner), ids)
        assert set(state.nested_graphs) == {outer}
        assert state.find_node(leaf) is None

        state = bn.reduce(state, bn.CloseNodeGroup(depth=0), ids)
        state = bn.reduce(state, bn.RemoveNode(node_id=outer), ids)
        assert state.nested_graphs == {}
        assert state.navigation_stack.depth == 0


class TestRegisterNodeGroupType:
    """Tests for REGISTER_NODE_GROUP_TYPE."""

    def test_registers_group_type(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, type_id = _created(state, bn.RegisterNodeGroupType(name="  Noise Mix ", header_color="#3c3c83"), ids)

        node_type = state.registry.node_types[type_id]
        assert node_type.name == "Noise Mix"
        assert node_type.is_group
        assert node_type.header_color == "#3c3c83"
        assert node_type.inputs == ()
        assert node_type.outputs == ()
        assert state.group_templates[type_id] == bn.GraphStore()

    def test_registered_type_can_be_instantiated(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, type_id = _created(state, bn.RegisterNodeGroupType(name="Mix"), ids)
        state, node_id = _created(state, bn.AddNode(type_id=type_id), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=node_id), ids)
        assert state.navigation_stack.breadcrumbs() == ["Root", "Mix"]

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, state: bn.EditorState, ids: bn.CounterIdGenerator, name: str) -> None:
        transition = bn.apply_action(state, bn.RegisterNodeGroupType(name=name), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.EMPTY_NAME
        assert transition.state is state


class TestTemplates:
    """New group instances copy their type's template with fresh ids."""

    @pytest.fixture
    def templated(self, data_types: list[bn.DataType], node_types: list[bn.NodeType]) -> bn.EditorState:
        shader = bn.NodeType("shader", "Shader Group", is_group=True)
        template = bn.GraphStore.from_elements(
            [bn.Node("t1", "add", input_values={"a": 1}), bn.Node("t2", "add"), bn.Node("tg", "group")],
            [bn.Edge("te", "t1", "sum", "t2", "a")],
        )
        return bn.create_state(
            data_types,
            [*node_types, shader],
            group_templates={"shader": template},
        )

    def test_instances_get_independent_copies(self, templated: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, first = _created(templated, bn.AddNode(type_id="shader"), ids)
        state, second = _created(state, bn.AddNode(type_id="shader"), ids)

        first_graph = state.nested_graphs[first]
        second_graph = state.nested_graphs[second]
        assert len(first_graph) == len(second_graph) == 3
        assert not set(first_graph.nodes) & set(second_graph.nodes)
        assert not {"t1", "t2", "tg"} & set(first_graph.nodes)
        assert [e.target_handle for e in first_graph.edges.values()] == ["a"]

    def test_inner_group_nodes_get_nested_graphs(self, templated: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, outer = _created(templated, bn.AddNode(type_id="shader"), ids)
        inner_groups = [n.id for n in state.nested_graphs[outer].nodes.values() if n.type_id == "group"]
        assert len(inner_groups) == 1
        assert state.nested_graphs[inner_groups[0]] == bn.GraphStore()

        pruned = bn.reduce(state, bn.RemoveNode(node_id=outer), ids)
        assert pruned.nested_graphs == {}

    def test_group_cannot_be_placed_inside_itself(self, state: bn.EditorState, ids: bn.CounterIdGenerator) -> None:
        state, group_id = _created(state, bn.AddNode(type_id="group"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=group_id), ids)

        transition = bn.apply_action(state, bn.AddNode(type_id="group"), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.RECURSIVE_GROUP
        assert transition.state is state

    def test_group_whose_template_holds_an_open_group_type(
        self,
        data_types: list[bn.DataType],
        node_types: list[bn.NodeType],
        ids: bn.CounterIdGenerator,
    ) -> None:
        wrapper = bn.NodeType("wrapper", "Wrapper", is_group=True)
        state = bn.create_state(
            data_types,
            [*node_types, wrapper],
            group_templates={"wrapper": bn.GraphStore.from_elements([bn.Node("w1", "group")])},
        )
        state, group_id = _created(state, bn.AddNode(type_id="group"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=group_id), ids)

        transition = bn.apply_action(state, bn.AddNode(type_id="wrapper"), ids)
        assert transition.rejection is not None
        assert transition.rejection.reason is R.RECURSIVE_GROUP
        assert "'group'" in transition.rejection.message
        assert transition.state is state

        state, frame_id = _created(state, bn.AddNode(type_id="frame"), ids)
        state = bn.reduce(state, bn.OpenNodeGroup(node_id=frame_id), ids)
        assert bn.apply_action(state, bn.AddNode(type_id="wrapper"), ids).rejection is not None

    def test_contained_group_types_follow_templates(
        self,
        data_types: list[bn.DataType],
        node_types: list[bn.NodeType],
    ) -> None:
        wrapper = bn.NodeType("wrapper", "Wrapper", is_group=True)
        state = bn.create_state(
            data_types,
            [*node_types, wrapper],
            group_templates={
                "wrapper": bn.GraphStore.from_elements([bn.Node("w1", "group")]),
                "group": bn.GraphStore.from_elements([bn.Node("g1", "frame")]),
            },
        )
        assert state.contained_group_type_ids("wrapper") == frozenset({"group", "frame"})
        assert state.contained_group_type_ids("frame") == frozenset()

    def test_copies_skip_ids_used_in_nested_graphs(
        self,
        data_types: list[bn.DataType],
        node_types: list[bn.NodeType],
    ) -> None:
        shader = bn.NodeType("shader", "Shader Group", is_group=True)
        state = bn.create_state(
            data_types,
            [*node_types, shader],
            nodes=[bn.Node("g", "group")],
            nested_graphs={"g": bn.GraphStore.from_elements([bn.Node("id2", "add"), bn.Node("id4", "add")])},
            group_templates={"shader": bn.GraphStore.from_elements([bn.Node("t1", "add"), bn.Node("t2", "add")])},
        )
        state, outer = _created(state, bn.AddNode(type_id="shader"), bn.CounterIdGenerator(prefix="id"))

        assert outer == "id1"
        assert set(state.nested_graphs[outer].nodes) == {"id3", "id5"}
