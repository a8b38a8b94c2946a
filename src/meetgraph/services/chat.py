"""ChatCommands — platform-independent handlers for the chat slash commands.

Gateways resolve the command arguments and call one of :meth:`graph`,
:meth:`graphquery`, or :meth:`query`. Each returns a :class:`ChatReply`;
failures become a user-facing message and never raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meetgraph.services.graph import GraphService
    from meetgraph.services.result import ServiceResult

logger = logging.getLogger(__name__)

IMAGE_FILENAME = "graph"
TEXT_FILENAME = "result.txt"


@dataclass(frozen=True)
class Attachment:
    filename: str
    data: bytes


@dataclass(frozen=True)
class ChatReply:
    """What the gateway should post back: text, a file, or both."""

    content: str | None = None
    attachment: Attachment | None = None

    @property
    def is_error(self) -> bool:
        return self.attachment is None and (self.content or "").startswith("Error:")


class ChatCommands:
    """The ``graph``, ``graphquery`` and ``query`` commands."""

    def __init__(self, service: GraphService, *, max_message_length: int = 1990) -> None:
        self._service = service
        self._max_message_length = max_message_length

    def graph(self, who: str | None, extra_args: str | None = None) -> ChatReply:
        """Render one person's connections."""
        if who is None:
            return self._error_reply("missing who argument")
        return self._image_reply(self._service.render_person(who, extra_args))

    def graphquery(self, query: str | None, extra_args: str | None = None) -> ChatReply:
        """Render the nodes returned by an arbitrary query."""
        if query is None:
            return self._error_reply("missing query argument")
        return self._image_reply(self._service.render_query(query, extra_args))

    def query(self, query: str | None) -> ChatReply:
        """Run a query and reply with its rows as text."""
        if query is None:
            return self._error_reply("missing query argument")
        result = self._service.run_query(query)
        if not result.ok:
            return self._failure_reply(result)

        text = result.data["text"] or "(no rows)"
        if len(text) > self._max_message_length:
            return ChatReply(
                content=f"{result.data['row_count']} rows",
                attachment=Attachment(TEXT_FILENAME, text.encode("utf-8")),
            )
        return ChatReply(content=text)

    def _image_reply(self, result: ServiceResult) -> ChatReply:
        if not result.ok:
            return self._failure_reply(result)
        filename = f"{IMAGE_FILENAME}.{result.data['format']}"
        return ChatReply(attachment=Attachment(filename, result.data["image"]))

    def _error_reply(self, message: str) -> ChatReply:
        content = f"Error: {message}"
        if len(content) > self._max_message_length:
            content = content[: self._max_message_length - 1] + "…"
        return ChatReply(content=content)

    def _failure_reply(self, result: ServiceResult) -> ChatReply:
        message = result.error.message if result.error else "Unknown error"
        logger.info("Command %s failed: %s", result.op, message)
        return self._error_reply(message)
