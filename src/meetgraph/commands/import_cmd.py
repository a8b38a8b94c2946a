"""import — load attendance CSV rows into the graph store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from meetgraph.commands._base import MeetCommand

if TYPE_CHECKING:
    from meetgraph.commands._context import AppContext


@click.command(
    "import",
    cls=MeetCommand,
    examples="""\
  meetgraph import meetups.csv
  meetgraph import --no-header --keep-existing extra.csv
  cat meetups.csv | meetgraph --json import -""",
)
@click.argument(
    "source",
    default="-",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
)
@click.option(
    "--header/--no-header",
    default=None,
    help="Whether the first row is a header (default from [ingest] has_header).",
)
@click.option("--keep-existing", is_flag=True, help="Do not wipe the graph before importing.")
@click.pass_obj
def import_cmd(app: AppContext, source: str, header: bool | None, keep_existing: bool) -> None:
    """Import attendance rows (CSV) from SOURCE, or stdin when omitted."""
    from meetgraph.services.importer import ImportService

    has_header = app.settings.ingest.has_header if header is None else header
    reset = app.settings.ingest.reset and not keep_existing
    service = ImportService(app.store)

    if source == "-":
        result = service.import_csv(
            click.get_text_stream("stdin"), has_header=has_header, reset=reset
        )
    else:
        with open(source, encoding="utf-8", newline="") as stream:
            result = service.import_csv(stream, has_header=has_header, reset=reset)
    app.emit(result)
