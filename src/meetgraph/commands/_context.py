"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns the process-wide graph store handle and renderer,
builds services on demand, and centralizes result emission (stdout/stderr
routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from meetgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from meetgraph.config.settings import MeetSettings
    from meetgraph.infrastructure.renderer import Renderer
    from meetgraph.infrastructure.store import GraphStore
    from meetgraph.services.chat import ChatCommands
    from meetgraph.services.graph import GraphService
    from meetgraph.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created lazily on first use so ``--help`` and
    ``--version`` never touch the database.
    """

    def __init__(self, settings: MeetSettings) -> None:
        self.settings = settings
        self._store: GraphStore | None = None
        self._renderer: Renderer | None = None

        from meetgraph.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from meetgraph.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> GraphStore:
        """The shared graph store (created lazily on first access)."""
        if self._store is None:
            from meetgraph.infrastructure.store import GraphStore

            self._store = GraphStore(self.settings.store)
        return self._store

    @property
    def renderer(self) -> Renderer:
        if self._renderer is None:
            from meetgraph.infrastructure.renderer import Renderer

            cfg = self.settings.render
            self._renderer = Renderer(
                cfg.binary,
                output_format=cfg.output_format,
                timeout=cfg.timeout,
                strict=cfg.strict,
            )
        return self._renderer

    def graph_service(self) -> GraphService:
        from meetgraph.domain.description import DescriptionOptions
        from meetgraph.services.graph import GraphService

        cfg = self.settings.render
        options = DescriptionOptions(graph_name=cfg.graph_name, layout=cfg.layout, size=cfg.size)
        return GraphService(self.store, self.renderer, options)

    def chat_commands(self) -> ChatCommands:
        from meetgraph.services.chat import ChatCommands

        return ChatCommands(
            self.graph_service(),
            max_message_length=self.settings.chat.max_message_length,
        )

    def close(self) -> None:
        """Release the store's connection pool."""
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
