"""Discord gateway for the chat commands.

Optional extra — guarded behind try/except ImportError.
Registers the ``graph``, ``graphquery`` and ``query`` slash commands. Each
interaction is deferred, the blocking command runs in a worker thread so
concurrent interactions never stall the event loop, and the reply is sent
as a follow-up.
"""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable
from typing import Any

from meetgraph.services.chat import ChatCommands, ChatReply

logger = logging.getLogger(__name__)

discord_available = False

try:
    import discord
    from discord import app_commands

    discord_available = True
except ImportError:
    pass

__all__ = ["create_client", "discord_available", "register_commands"]


def create_client(commands: ChatCommands, *, guild_id: int | None = None) -> Any:
    """Create a ``discord.Client`` with the chat commands attached.

    Commands are synced on startup, to one guild when *guild_id* is given
    and globally otherwise.

    Raises RuntimeError if the bot extra is not installed.
    """
    if not discord_available:
        msg = "discord.py not installed. Install with: pip install meetgraph[bot]"
        raise RuntimeError(msg)

    client = discord.Client(intents=discord.Intents.default())
    tree = app_commands.CommandTree(client)
    guild = discord.Object(id=guild_id) if guild_id else None
    register_commands(tree, commands, guild=guild)

    @client.event
    async def setup_hook() -> None:
        synced = await tree.sync(guild=guild)
        logger.info("Synced %d commands", len(synced))

    @client.event
    async def on_ready() -> None:
        logger.info("%s is connected", client.user)

    client.tree = tree  # type: ignore[attr-defined]
    return client


def register_commands(tree: Any, commands: ChatCommands, *, guild: Any = None) -> None:
    """Attach the three slash commands to *tree*."""

    @tree.command(name="graph", description="Render everyone a person has met", guild=guild)
    @app_commands.describe(who="Person name", extra_args="Extra renderer flags")
    async def graph(
        interaction: discord.Interaction,
        who: str,
        extra_args: str | None = None,
    ) -> None:
        await _respond(interaction, commands.graph, who, extra_args)

    @tree.command(
        name="graphquery",
        description="Query and render a subset of the graph",
        guild=guild,
    )
    @app_commands.describe(query="Cypher query", extra_args="Extra renderer flags")
    async def graphquery(
        interaction: discord.Interaction,
        query: str,
        extra_args: str | None = None,
    ) -> None:
        await _respond(interaction, commands.graphquery, query, extra_args)

    @tree.command(name="query", description="Run a query and show the raw result", guild=guild)
    @app_commands.describe(query="Cypher query")
    async def query(interaction: discord.Interaction, query: str) -> None:
        await _respond(interaction, commands.query, query)


async def _respond(
    interaction: discord.Interaction,
    handler: Callable[..., ChatReply],
    *args: Any,
) -> None:
    await interaction.response.defer(thinking=True)
    try:
        reply = await asyncio.to_thread(handler, *args)
    except Exception:
        logger.exception("Command %s crashed", getattr(handler, "__name__", handler))
        reply = ChatReply(content="Error: internal error")

    kwargs: dict[str, Any] = {}
    if reply.content:
        kwargs["content"] = reply.content
    if reply.attachment:
        kwargs["file"] = discord.File(
            io.BytesIO(reply.attachment.data), filename=reply.attachment.filename
        )
    try:
        await interaction.followup.send(**kwargs)
    except discord.HTTPException as exc:
        logger.warning("Cannot respond to slash command: %s", exc)
