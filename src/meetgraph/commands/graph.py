"""graph / graphquery — render a subgraph as an image."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from meetgraph.commands._base import MeetCommand

if TYPE_CHECKING:
    from meetgraph.commands._context import AppContext
    from meetgraph.services.result import ServiceResult

_extra_args_option = click.option(
    "--extra-args",
    default=None,
    help="Additional renderer flags, whitespace separated (e.g. '-Gdpi=150').",
)
_output_option = click.option(
    "--output",
    "output_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Image file to write (omit to write raw bytes to stdout).",
)


def _write_image(app: AppContext, result: ServiceResult, output_file: str | None) -> None:
    if not result.ok:
        app.emit(result)
        return

    image: bytes = result.data["image"]
    if output_file is None:
        stdout = click.get_binary_stream("stdout")
        stdout.write(image)
        stdout.flush()
        return

    Path(output_file).write_bytes(image)
    app.emit(result.with_data(drop=("image",), output_file=output_file))


@click.command(
    cls=MeetCommand,
    examples="""\
  meetgraph graph Alice --output alice.png
  meetgraph graph "Bob" --extra-args "-Gdpi=200" > bob.png""",
)
@click.argument("who")
@_extra_args_option
@_output_option
@click.pass_obj
def graph(app: AppContext, who: str, extra_args: str | None, output_file: str | None) -> None:
    """Render everyone WHO has met."""
    _write_image(app, app.graph_service().render_person(who, extra_args), output_file)


@click.command(
    cls=MeetCommand,
    examples="""\
  meetgraph graphquery "MATCH (n)-[:MET]->(m) RETURN n, m LIMIT 50" --output sample.png
  meetgraph graphquery "MATCH p=(a {name:'alice'})-[:MET*2]-(c) RETURN a, c" > two-hops.png""",
)
@click.argument("query")
@_extra_args_option
@_output_option
@click.pass_obj
def graphquery(
    app: AppContext,
    query: str,
    extra_args: str | None,
    output_file: str | None,
) -> None:
    """Render the nodes returned by an arbitrary QUERY."""
    _write_image(app, app.graph_service().render_query(query, extra_args), output_file)
