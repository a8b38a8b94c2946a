"""serve — run the Discord gateway (requires meetgraph[bot] extra)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from meetgraph.commands._base import MeetCommand

if TYPE_CHECKING:
    from meetgraph.commands._context import AppContext


@click.command(
    cls=MeetCommand,
    examples="""\
  # Token from the environment
  DISCORD_TOKEN=... meetgraph serve

  # Register commands on one guild only (instant update)
  meetgraph serve --token ... --guild-id 123456789012345678""",
)
@click.option(
    "--token",
    envvar="DISCORD_TOKEN",
    default=None,
    help="Bot token (default: $DISCORD_TOKEN, then [chat] token).",
)
@click.option("--guild-id", type=int, default=None, help="Register commands on this guild only.")
@click.pass_obj
def serve(app: AppContext, token: str | None, guild_id: int | None) -> None:
    """Start the chat bot serving graph, graphquery, and query."""
    from meetgraph.gateway.discord_bot import create_client, discord_available

    if not discord_available:
        click.echo("discord.py not installed. Install with: pip install meetgraph[bot]", err=True)
        raise SystemExit(1)

    chat = app.settings.chat
    secret = token or (chat.token.get_secret_value() if chat.token else None)
    if not secret:
        click.echo(
            "Missing chat token: pass --token, set DISCORD_TOKEN, or MEETGRAPH_CHAT__TOKEN",
            err=True,
        )
        raise SystemExit(1)

    client = create_client(app.chat_commands(), guild_id=guild_id or chat.guild_id)
    client.run(secret, log_handler=None)
