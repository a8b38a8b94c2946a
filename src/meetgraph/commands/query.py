"""query — run a query and print its rows as text."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from meetgraph.commands._base import MeetCommand

if TYPE_CHECKING:
    from meetgraph.commands._context import AppContext


@click.command(
    cls=MeetCommand,
    examples="""\
  meetgraph query "MATCH (n) RETURN count(n) AS people"
  meetgraph --json query "MATCH (n {name:'bob'})-[:MET]-(m) RETURN m.name" """,
)
@click.argument("query")
@click.pass_obj
def query(app: AppContext, query: str) -> None:
    """Run QUERY and print the result rows."""
    app.emit(app.graph_service().run_query(query))
