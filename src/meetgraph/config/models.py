"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, meetgraph.toml only contains
overrides. A fresh install needs only ``[store] password``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr


class StoreConfig(BaseModel):
    """[store] section — Neo4j connection and pool sizing."""

    model_config = {"frozen": True}

    uri: str = "bolt://127.0.0.1:7687"
    user: str = "neo4j"
    password: SecretStr = SecretStr("")
    database: str | None = "meetups"
    fetch_size: int = Field(default=500, ge=1)
    max_connections: int = Field(default=10, ge=1)
    acquisition_timeout: float = Field(default=60.0, gt=0)


class RenderConfig(BaseModel):
    """[render] section — Graphviz invocation and description directives."""

    model_config = {"frozen": True}

    binary: str = "dot"
    output_format: str = "png"
    timeout: float = Field(default=30.0, gt=0)
    strict: bool = True
    graph_name: str = "meetup_graph"
    layout: str = "circo"
    size: str = "60,60"


class ChatConfig(BaseModel):
    """[chat] section."""

    model_config = {"frozen": True}

    token: SecretStr | None = None
    guild_id: int | None = None
    max_message_length: int = Field(default=1990, ge=1)


class IngestConfig(BaseModel):
    """[ingest] section."""

    model_config = {"frozen": True}

    has_header: bool = True
    reset: bool = True
