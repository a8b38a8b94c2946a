"""export — print the full-graph description for offline rendering."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from meetgraph.commands._base import MeetCommand

if TYPE_CHECKING:
    from meetgraph.commands._context import AppContext


@click.command(
    cls=MeetCommand,
    examples="""\
  meetgraph export
  meetgraph export --output graph.dot
  meetgraph export | dot -Tsvg -o graph.svg""",
)
@click.option(
    "--output",
    "output_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file (omit to print to stdout).",
)
@click.pass_obj
def export(app: AppContext, output_file: str | None) -> None:
    """Export every MET edge as a graph description."""
    result = app.graph_service().export_description()

    if not result.ok:
        app.emit(result)
        return

    if output_file:
        Path(output_file).write_text(result.data["content"], encoding="utf-8")
        app.emit(result.with_data(drop=("content",), output_file=output_file))
    else:
        # Pipe-friendly: raw content to stdout
        click.echo(result.data["content"])
