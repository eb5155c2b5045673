"""Traversal algorithms over successor mappings."""

from collections import deque
from collections.abc import Collection, Hashable, Iterable, Mapping


def reachable[T: Hashable](successors: Mapping[T, Collection[T]], start: Iterable[T]) -> set[T]:
    """Collect every node reachable from ``start`` by following successor links.

    The start nodes themselves are only included if they can be reached again
    through at least one link (i.e. they sit on a cycle).

    Args:
        successors: Mapping from node to the nodes it links to.
        start: Nodes to start walking from.

    Returns:
        The set of reachable nodes.

    Example:
        >>> sorted(reachable({"a": ["b"], "b": ["c"], "c": []}, ["a"]))
        ['b', 'c']

    """
    seen: set[T] = set()
    pending = deque(nxt for node in start for nxt in successors.get(node, ()))
    while pending:
        node = pending.popleft()
        if node in seen:
            continue
        seen.add(node)
        pending.extend(successors.get(node, ()))
    return seen


def topological_sort[T: Hashable](successors: Mapping[T, Collection[T]]) -> list[T]:
    """Order nodes so that every node comes before the nodes it links to.

    Ties are broken by the iteration order of ``successors``, so the result is
    deterministic for insertion-ordered mappings.

    Args:
        successors: Mapping from node to the nodes it links to. Nodes that only
            appear as link targets are included in the result as well.

    Returns:
        Nodes in topological order.

    Raises:
        ValueError: If the links contain a cycle.

    Example:
        >>> topological_sort({"a": ["b"], "b": ["c"], "c": []})
        ['a', 'b', 'c']

    """
    incoming: dict[T, int] = {}
    for node, targets in successors.items():
        incoming.setdefault(node, 0)
        for target in targets:
            incoming[target] = incoming.get(target, 0) + 1

    ready = deque(node for node, count in incoming.items() if count == 0)
    order: list[T] = []
    while ready:
        node = ready.popleft()
        order.append(node)
        for target in successors.get(node, ()):
            incoming[target] -= 1
            if incoming[target] == 0:
                ready.append(target)

    if len(order) != len(incoming):
        msg = "Cycle detected in graph"
        raise ValueError(msg)
    return order
