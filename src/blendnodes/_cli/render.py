"""Rich rendering utilities for sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from blendnodes._types import InputPanel

if TYPE_CHECKING:
    from rich.console import Console

    from blendnodes._graph import GraphStore
    from blendnodes._registry import TypeRegistry
    from blendnodes._state import EditorState

    from .session import ReplayStep


def _swatch(color: str) -> str:
    # Rich only understands hex colors here
    if color.startswith("#"):
        return f"[{color}]■[/] {color}"
    return escape(color)


def render_data_types(registry: TypeRegistry, console: Console) -> None:
    """Render the data type registry as a Rich table."""
    table = Table(show_header=True, header_style="bold cyan", title="Data types")
    table.add_column("Id", style="bold")
    table.add_column("Name")
    table.add_column("Underlying")
    table.add_column("Shape")
    table.add_column("Color")

    for data_type in registry.data_types.values():
        table.add_row(
            escape(data_type.id),
            escape(data_type.name),
            str(data_type.underlying_type),
            str(data_type.shape),
            _swatch(data_type.color),
        )

    console.print(table)


def render_node_types(registry: TypeRegistry, console: Console) -> None:
    """Render the node type registry as a Rich table."""
    table = Table(show_header=True, header_style="bold cyan", title="Node types")
    table.add_column("Id", style="bold")
    table.add_column("Name")
    table.add_column("Inputs")
    table.add_column("Outputs")
    table.add_column("Group", justify="center")

    for node_type in registry.node_types.values():
        inputs: list[str] = []
        for item in node_type.inputs:
            if isinstance(item, InputPanel):
                inner = ", ".join(f"{p.name}: {p.data_type_id}" for p in item.inputs)
                inputs.append(f"[{item.name}] {inner}")
            else:
                inputs.append(f"{item.name}: {item.data_type_id}")
        outputs = [f"{p.name}: {p.data_type_id}" for p in node_type.outputs]
        table.add_row(
            escape(node_type.id),
            escape(node_type.name),
            escape("\n".join(inputs)),
            escape("\n".join(outputs)),
            "✓" if node_type.is_group else "",
        )

    console.print(table)


def _add_store(tree: Tree, state: EditorState, store: GraphStore) -> None:
    for node in store.nodes.values():
        node_type = state.registry.get_node_type(node.type_id)
        type_name = node_type.name if node_type is not None else node.type_id
        where = f"({node.position.x:g}, {node.position.y:g})"
        label = f"[bold]{escape(node.id)}[/bold] [dim]{escape(type_name)} @ {where}[/dim]"
        branch = tree.add(label)
        for port_name, value in node.input_values.items():
            shadowed = store.is_input_connected(node.id, port_name)
            text = f"{escape(port_name)} = {escape(repr(value))}"
            branch.add(f"[dim strike]{text}[/dim strike]" if shadowed else text)
        nested = state.nested_graphs.get(node.id)
        if nested is not None:
            _add_store(branch.add("[magenta]nested graph[/magenta]"), state, nested)

    for edge in store.edges.values():
        tree.add(
            f"[cyan]{escape(edge.source)}.{escape(edge.source_handle)}"
            f" → {escape(edge.target)}.{escape(edge.target_handle)}[/cyan] [dim]({escape(edge.id)})[/dim]",
        )


def render_graph_tree(state: EditorState, console: Console) -> None:
    """Render the root graph with every nested graph below its group node."""
    tree = Tree("[bold]Root[/bold]")
    _add_store(tree, state, state.root_graph)
    console.print(tree)


def render_breadcrumbs(state: EditorState, console: Console) -> None:
    crumbs = " › ".join(escape(name) for name in state.navigation_stack.breadcrumbs())
    console.print(f"[cyan]Active graph:[/cyan] {crumbs}")


def render_replay_log(steps: list[ReplayStep], console: Console) -> None:
    """Render the rejected actions of a replay, if any."""
    rejected = [step for step in steps if step.rejection is not None]
    if not rejected:
        console.print(f"[green]✓ All {len(steps)} action(s) applied[/green]")
        return

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Reason", style="yellow", no_wrap=True)
    table.add_column("Detail")
    for step in rejected:
        assert step.rejection is not None
        table.add_row(str(step.index), step.action_type, str(step.rejection.reason), escape(step.rejection.message))

    console.print(table)
    console.print(f"[yellow]⚠ {len(rejected)} of {len(steps)} action(s) rejected[/yellow]")
