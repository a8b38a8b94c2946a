"""Settings resolution for the CLI and the chat gateway.

Sources, strongest first: CLI flags, ``MEETGRAPH_*`` environment variables
(``__`` separates sections, e.g. ``MEETGRAPH_STORE__URI``), the TOML file,
then the defaults in :mod:`meetgraph.config.models`.

The TOML file is ``$MEETGRAPH_CONFIG`` when set, else the nearest
``meetgraph.toml`` in the working directory or one of its parents.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, TomlConfigSettingsSource

from meetgraph.config.models import ChatConfig, IngestConfig, RenderConfig, StoreConfig

CONFIG_FILENAME = "meetgraph.toml"
CONFIG_ENV_VAR = "MEETGRAPH_CONFIG"

# The file chosen by from_cli(), read by settings_customise_sources().
_pending = threading.local()


def find_config(start: Path | None = None) -> Path | None:
    """Locate the config file, or None when there is none."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class MeetSettings(BaseSettings):
    """Everything a command needs to know, frozen once resolved."""

    model_config = {
        "frozen": True,
        "env_prefix": "MEETGRAPH_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    store: StoreConfig = Field(default_factory=StoreConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        toml_file = getattr(_pending, "toml_file", None)
        if toml_file is not None:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))
        return tuple(sources)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **flags: Any,
    ) -> MeetSettings:
        """Resolve settings for one CLI invocation.

        An explicit *config_path* that does not exist is ignored rather than
        searched around.

        Raises:
            click.ClickException: The TOML file does not parse.
        """
        if config_path:
            explicit = Path(config_path)
            toml_file = explicit if explicit.is_file() else None
        else:
            toml_file = find_config(start)

        _pending.toml_file = toml_file
        try:
            return cls(config_path=toml_file, **flags)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {toml_file}: {exc}") from exc
        finally:
            _pending.toml_file = None
