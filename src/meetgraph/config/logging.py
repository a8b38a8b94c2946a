"""Logging setup: structlog rendering on top of stdlib logging, to stderr.

Both structlog loggers and plain ``logging.getLogger(__name__)`` loggers
(used throughout the package) pass through the same processor chain, so
``--log-json`` turns every line into one JSON object. stdout is left to
command output.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Library loggers and their level when -v is given / omitted.
_LIBRARY_LEVELS: dict[str, tuple[int, int]] = {
    "neo4j": (logging.WARNING, logging.WARNING),
    "discord": (logging.INFO, logging.WARNING),
}

_HANDLER_NAME = "meetgraph-stderr"


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all logging to stderr; DEBUG for meetgraph with *verbose*, else WARNING.

    Safe to call repeatedly: the previous meetgraph handler is replaced.
    """
    structlog.configure(
        processors=[*_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)
    root.addHandler(_stderr_handler(log_json))
    root.setLevel(logging.WARNING)

    logging.getLogger("meetgraph").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name, (loud, quiet) in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(loud if verbose else quiet)
