import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from blendnodes._config import get_config, load_config
from blendnodes._errors import GraphEditorError

from .render import (
    render_breadcrumbs,
    render_data_types,
    render_graph_tree,
    render_node_types,
    render_replay_log,
)
from .session import build_editor, load_session, replay, session_options

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Blendnodes CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _exit_with_error(message: str) -> typer.Exit:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    return typer.Exit(code=1)


@app.command(name="replay")
def replay_command(
    session: Annotated[
        Path,
        typer.Argument(help="Path to the session TOML file"),
    ],
    *,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="pyproject.toml to read [tool.blendnodes] from (default: search upwards)"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit non-zero if any action is rejected"),
    ] = False,
) -> None:
    """Replay the actions of a session and show the resulting graphs."""
    if not session.is_file():
        raise _exit_with_error(f"Session file not found: {session}")

    err_console.print(f"[cyan]Loading session from:[/cyan] {session}")
    try:
        fallback = load_config(config) if config is not None else get_config()
        document = load_session(session)
        editor = build_editor(document, session.parent, session_options(document, fallback))
        err_console.print(f"[cyan]Replaying {len(document.actions)} action(s)...[/cyan]")
        steps = replay(document, editor)
    except (GraphEditorError, ValueError) as e:
        raise _exit_with_error(str(e)) from e

    err_console.print()
    render_graph_tree(editor.state, out_console)
    render_breadcrumbs(editor.state, out_console)
    err_console.print()
    render_replay_log(steps, err_console)

    if strict and any(step.rejection is not None for step in steps):
        raise typer.Exit(code=1)


@app.command(name="types")
def types_command(
    session: Annotated[
        Path,
        typer.Argument(help="Path to the session TOML file"),
    ],
) -> None:
    """Show the data types and node types declared by a session."""
    if not session.is_file():
        raise _exit_with_error(f"Session file not found: {session}")

    try:
        document = load_session(session)
        editor = build_editor(document, session.parent, session_options(document, get_config()))
    except (GraphEditorError, ValueError) as e:
        raise _exit_with_error(str(e)) from e

    render_data_types(editor.state.registry, out_console)
    render_node_types(editor.state.registry, out_console)


def main() -> None:
    app()
