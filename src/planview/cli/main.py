"""
planview CLI - Annotated trees for PostgreSQL EXPLAIN ANALYZE output.

Usage:
    psql -qAtc "EXPLAIN (ANALYZE, VERBOSE, FORMAT JSON) SELECT ..." > explain.json
    planview visualize explain.json
    planview visualize - < explain.json
    planview describe "Hash Join"
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.text import Text

from planview import __version__
from planview.config import LEGACY_SECONDS_DIVISOR, get_config
from planview.exceptions import ConfigurationError, ParseError
from planview.output.descriptions import describe as describe_node
from planview.output.renderers import render_json
from planview.output.styles import PLAIN_STYLES
from planview.parser.models import NodeType
from planview.visualizer import derive_all, visualize as visualize_source

app = typer.Typer(
    name="planview",
    help="Annotated terminal trees for PostgreSQL EXPLAIN ANALYZE output",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"planview version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output to stderr."),
    ] = False,
) -> None:
    """planview - Annotated trees for PostgreSQL EXPLAIN ANALYZE output."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


@app.command()
def visualize(
    explain_file: Annotated[
        Optional[Path],
        typer.Argument(
            help="EXPLAIN (ANALYZE, FORMAT JSON) output file, or '-' for stdin",
        ),
    ] = None,
    no_color: Annotated[
        bool,
        typer.Option("--no-color", help="Print plain text without colours"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output the derived plans as JSON"),
    ] = False,
    legacy_seconds: Annotated[
        bool,
        typer.Option(
            "--legacy-seconds",
            help="Divide by 2000 for second-range durations, as early releases did",
        ),
    ] = False,
    wrap_width: Annotated[
        Optional[int],
        typer.Option("--wrap-width", "-w", min=1, help="Wrap descriptions at this column"),
    ] = None,
) -> None:
    """
    Print every plan in an EXPLAIN JSON file as an annotated tree.

    Each node shows its own (exclusive) duration and cost, row count, planner
    estimate accuracy and tags for the slowest, costliest and largest nodes.

    Examples:

        $ psql -qAtc "EXPLAIN (ANALYZE, FORMAT JSON) SELECT 1" > explain.json
        $ planview visualize explain.json
    """
    try:
        config = get_config()
        overrides: dict[str, object] = {}
        if no_color:
            overrides["color"] = False
        if legacy_seconds:
            overrides["seconds_divisor"] = LEGACY_SECONDS_DIVISOR
        if wrap_width is not None:
            overrides["wrap_width"] = wrap_width
        if overrides:
            config = config.model_copy(update=overrides)

        source: bytes | Path
        if explain_file is None or str(explain_file) == "-":
            source = sys.stdin.buffer.read()
        else:
            source = explain_file

        if json_output:
            typer.echo(render_json(derive_all(source, config=config)))
            return

        visualize_source(
            source,
            console,
            config=config,
            styles=None if config.color else PLAIN_STYLES,
        )

    except ParseError as e:
        error_console.print(Text.assemble(("Error:", "red"), f" {e.message}"))
        if e.detail:
            error_console.print(Text(f"\n{e.detail}", style="dim"))
        raise typer.Exit(code=1)
    except ConfigurationError as e:
        error_console.print(Text.assemble(("Configuration error:", "red"), f" {e.message}"))
        raise typer.Exit(code=2)


@app.command()
def describe(
    node_type: Annotated[
        str,
        typer.Argument(help="Operator name as EXPLAIN prints it, e.g. 'Hash Join'"),
    ],
) -> None:
    """
    Explain what a plan operator does.
    """
    description = describe_node(node_type)
    if not description:
        known = ", ".join(t.value for t in NodeType)
        error_console.print(Text.assemble(("Unknown operator:", "red"), f" {node_type}"))
        error_console.print(f"[dim]Known operators: {known}[/dim]", highlight=False)
        raise typer.Exit(code=1)

    console.print(description, highlight=False, markup=False)


if __name__ == "__main__":
    app()
