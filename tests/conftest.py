"""Shared pytest fixtures and test helpers for meetgraph tests."""

from __future__ import annotations

import logging
import stat
from collections.abc import Callable, Generator, Mapping
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from meetgraph.domain.rows import NodeValue, ResultRow
from meetgraph.infrastructure.store import (
    ALL_EDGES_QUERY,
    MERGE_GROUP_QUERY,
    PERSON_CONNECTIONS_QUERY,
)
from meetgraph.services.telemetry import _active, disable_telemetry


def person(name: str) -> NodeValue:
    """A person node as the store returns it."""
    return NodeValue(labels=frozenset(), properties={"name": name})


class FakeStore:
    """In-memory stand-in for :class:`GraphStore`.

    Understands the import merge, person-connections, and all-edges queries;
    any other query returns the rows registered in ``canned``.
    """

    def __init__(self) -> None:
        self.edges: list[tuple[str, str]] = []
        self.canned: dict[str, list[ResultRow]] = {}
        self.reads: list[tuple[str, dict[str, Any]]] = []
        self.writes: list[tuple[str, dict[str, Any]]] = []
        self.fail: Exception | None = None
        self.cleared = 0
        self.closed = False

    @property
    def people(self) -> set[str]:
        return {name for edge in self.edges for name in edge}

    def edge_set(self) -> set[frozenset[str]]:
        return {frozenset(edge) for edge in self.edges}

    def run(self, query: str, params: Mapping[str, Any] | None = None) -> list[ResultRow]:
        if self.fail is not None:
            raise self.fail
        payload = dict(params or {})
        self.reads.append((query, payload))
        if query in self.canned:
            return self.canned[query]
        if query == PERSON_CONNECTIONS_QUERY:
            who = payload["who"].lower()
            rows = []
            for a, b in self.edges:
                if who in (a, b):
                    other = b if a == who else a
                    rows.append(ResultRow.of({"n": person(who), "m": person(other)}))
            return rows
        if query == ALL_EDGES_QUERY:
            return [ResultRow.of({"n": person(a), "m": person(b)}) for a, b in self.edges]
        return []

    def write(self, query: str, params: Mapping[str, Any] | None = None) -> None:
        if self.fail is not None:
            raise self.fail
        payload = dict(params or {})
        self.writes.append((query, payload))
        if query == MERGE_GROUP_QUERY:
            names = [n.lower() for n in payload["names"]]
            for n1 in names:
                for n2 in names:
                    if n1 != n2 and frozenset((n1, n2)) not in self.edge_set():
                        self.edges.append((n1, n2))

    def clear(self) -> int:
        if self.fail is not None:
            raise self.fail
        deleted = len(self.people)
        self.edges.clear()
        self.cleared += 1
        return deleted

    def close(self) -> None:
        self.closed = True


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script standing in for the renderer."""
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """`-v` enables telemetry for the whole process; switch it back off."""
    yield
    disable_telemetry()
    _active.set(None)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state; commands reconfigure logging on every run."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_renderer(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory for stub renderer scripts: ``make_renderer(name, body)``."""

    def _make(name: str, body: str) -> Path:
        return write_script(tmp_path / name, body)

    return _make


@pytest.fixture
def echo_renderer(tmp_path: Path) -> Path:
    """Renderer that drains stdin and prints a fixed byte sequence."""
    return write_script(tmp_path / "echo-render", "cat > /dev/null\nprintf 'PNGDATA'")


@pytest.fixture
def capture_renderer(tmp_path: Path) -> Path:
    """Renderer that records its stdin and argv next to itself."""
    return write_script(
        tmp_path / "capture-render",
        f'cat > "{tmp_path}/stdin.txt"\n'
        f'printf "%s\\n" "$@" > "{tmp_path}/argv.txt"\n'
        "printf 'IMG'",
    )


@pytest.fixture
def cli_env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    fake_store: FakeStore,
    capture_renderer: Path,
) -> FakeStore:
    """Isolated CLI environment: fake store, capturing renderer, no config file.

    Returns the fake store shared by every command invoked in the test.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MEETGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    monkeypatch.delenv("MEETGRAPH_CHAT__TOKEN", raising=False)
    monkeypatch.setenv("MEETGRAPH_RENDER__BINARY", str(capture_renderer))
    monkeypatch.setattr(
        "meetgraph.infrastructure.store.GraphStore",
        lambda config: fake_store,
    )
    return fake_store
