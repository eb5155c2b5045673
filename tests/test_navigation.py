"""Tests for NavigationStack."""

import pytest

from blendnodes import NavigationEntry, NavigationStack

OUTER = NavigationEntry("g1", "Outer")
INNER = NavigationEntry("g2", "Inner")


class TestNavigationStack:
    """Tests for pushing, truncating and pruning."""

    def test_empty_stack_is_root(self) -> None:
        stack = NavigationStack()
        assert stack.depth == 0
        assert stack.top is None
        assert not stack
        assert stack.breadcrumbs() == ["Root"]

    def test_push_is_persistent(self) -> None:
        stack = NavigationStack()
        pushed = stack.push(OUTER).push(INNER)
        assert pushed.top == INNER
        assert list(pushed) == [OUTER, INNER]
        assert stack.depth == 0
        assert pushed.breadcrumbs("Shader") == ["Shader", "Outer", "Inner"]

    def test_truncate(self) -> None:
        stack = NavigationStack((OUTER, INNER))
        assert stack.truncate(0) == NavigationStack()
        assert stack.truncate(1).top == OUTER
        assert stack.truncate(2) is stack

    @pytest.mark.parametrize("depth", [-1, 3])
    def test_truncate_out_of_range(self, depth: int) -> None:
        with pytest.raises(ValueError, match="Cannot truncate"):
            NavigationStack((OUTER, INNER)).truncate(depth)

    def test_without_node_ids_truncates_at_first_match(self) -> None:
        stack = NavigationStack((OUTER, INNER))
        assert stack.without_node_ids({"g2"}).entries == (OUTER,)
        assert stack.without_node_ids({"g1", "g2"}).entries == ()
        assert stack.without_node_ids({"other"}) is stack

    def test_contains_node(self) -> None:
        stack = NavigationStack((OUTER,))
        assert stack.contains_node("g1")
        assert not stack.contains_node("g2")
