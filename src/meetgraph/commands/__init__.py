"""Subcommand modules for meetgraph.

Provides register_commands() which uses deferred imports to keep
``meetgraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from meetgraph.commands.export import export
    from meetgraph.commands.graph import graph, graphquery
    from meetgraph.commands.import_cmd import import_cmd
    from meetgraph.commands.query import query
    from meetgraph.commands.serve import serve

    cli.add_command(import_cmd)
    cli.add_command(export)
    cli.add_command(graph)
    cli.add_command(graphquery)
    cli.add_command(query)
    cli.add_command(serve)
