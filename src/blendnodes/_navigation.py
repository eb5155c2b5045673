"""Navigation stack: the path from the root graph to the open node group."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator


@dataclass(frozen=True, slots=True)
class NavigationEntry:
    """An opened node group.

    Attributes:
        node_id: Id of the group node whose nested graph was opened.
        name: Display name shown in breadcrumbs.

    """

    node_id: str
    name: str


@dataclass(frozen=True, slots=True)
class NavigationStack:
    """Opened node groups, root excluded, innermost last.

    An empty stack means the root graph is active.
    """

    entries: tuple[NavigationEntry, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.entries)

    @property
    def top(self) -> NavigationEntry | None:
        """The innermost opened group, or None at the root."""
        return self.entries[-1] if self.entries else None

    def push(self, entry: NavigationEntry) -> NavigationStack:
        return NavigationStack((*self.entries, entry))

    def truncate(self, depth: int) -> NavigationStack:
        """Keep only the first ``depth`` entries (``0`` returns to the root).

        Raises:
            ValueError: If ``depth`` is negative or deeper than the stack.

        """
        if not 0 <= depth <= len(self.entries):
            msg = f"Cannot truncate a navigation stack of depth {len(self.entries)} to {depth}."
            raise ValueError(msg)
        if depth == len(self.entries):
            return self
        return NavigationStack(self.entries[:depth])

    def without_node_ids(self, node_ids: Collection[str]) -> NavigationStack:
        """Truncate at the first entry whose group node is in ``node_ids``.

        Everything opened inside a removed group goes with it, so the result is
        the deepest surviving ancestor path.
        """
        for index, entry in enumerate(self.entries):
            if entry.node_id in node_ids:
                return NavigationStack(self.entries[:index])
        return self

    def contains_node(self, node_id: str) -> bool:
        return any(entry.node_id == node_id for entry in self.entries)

    def breadcrumbs(self, root_name: str = "Root") -> list[str]:
        """Names from the root to the innermost open group."""
        return [root_name, *(entry.name for entry in self.entries)]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[NavigationEntry]:
        return iter(self.entries)
