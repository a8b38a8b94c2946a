"""Tests for GraphService — query, describe, render."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from meetgraph.domain.description import DescriptionOptions
from meetgraph.domain.rows import NodeValue, ResultRow
from meetgraph.infrastructure.renderer import Renderer
from meetgraph.infrastructure.store import PERSON_CONNECTIONS_QUERY, StoreError
from meetgraph.services.graph import GraphService
from meetgraph.services.importer import ImportService


def _person(name: str) -> NodeValue:
    return NodeValue(properties={"name": name})


@pytest.fixture
def service(fake_store: Any, capture_renderer: Path) -> GraphService:
    return GraphService(fake_store, Renderer(str(capture_renderer)))


@pytest.fixture
def seeded(fake_store: Any) -> Any:
    ImportService(fake_store).import_rows(
        [["", "", "", "E", "Alice", "Bob", "Carol"], ["", "", "", "F", "Bob", "Dana"]],
        has_header=False,
    )
    return fake_store


class TestRenderPerson:
    def test_renders_connections(
        self, service: GraphService, seeded: Any, tmp_path: Path
    ) -> None:
        result = service.render_person("Bob")
        assert result.ok
        assert result.data["image"] == b"IMG"
        assert result.data["format"] == "png"
        assert result.data["edge_count"] == 3
        assert result.data["byte_count"] == 3

        description = (tmp_path / "stdin.txt").read_text()
        edges = description.splitlines()[4:-1]
        assert len(edges) == 3
        assert all(line.startswith('"BOB" -- ') for line in edges)

    def test_who_is_passed_as_parameter(self, service: GraphService, seeded: Any) -> None:
        service.render_person("  Bob ")
        assert seeded.reads[-1] == (PERSON_CONNECTIONS_QUERY, {"who": "Bob"})

    @pytest.mark.parametrize("who", ["", "   "])
    def test_missing_who(self, service: GraphService, who: str) -> None:
        result = service.render_person(who)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "MISSING_ARGUMENT"
        assert result.error.message == "missing who argument"

    def test_unknown_person_renders_empty_graph(
        self, service: GraphService, seeded: Any, tmp_path: Path
    ) -> None:
        result = service.render_person("nobody")
        assert result.ok
        assert result.warnings == ["Query returned no rows"]
        assert (tmp_path / "stdin.txt").read_text().endswith('oneblock=true\n}')


class TestRenderQuery:
    def test_groups_follow_row_order(
        self, service: GraphService, fake_store: Any, tmp_path: Path
    ) -> None:
        fake_store.canned["Q"] = [
            ResultRow.of({"a": _person("x"), "b": _person("y"), "c": _person("z")}),
            ResultRow.of({"a": _person("w"), "n": 1}),
        ]
        result = service.render_query("Q")
        assert result.ok
        edges = (tmp_path / "stdin.txt").read_text().splitlines()[4:-1]
        assert edges == ['"X" -- "Y" -- "Z"', '"W"']

    def test_custom_description_options(
        self, fake_store: Any, capture_renderer: Path, tmp_path: Path
    ) -> None:
        svc = GraphService(
            fake_store,
            Renderer(str(capture_renderer)),
            DescriptionOptions(graph_name="g", layout="neato"),
        )
        svc.render_query("MATCH (n) RETURN n")
        text = (tmp_path / "stdin.txt").read_text()
        assert text.startswith("strict graph g {\nlayout=neato\n")

    def test_missing_name_property(self, service: GraphService, fake_store: Any) -> None:
        fake_store.canned["Q"] = [ResultRow.of({"n": NodeValue(properties={"age": 3})})]
        result = service.render_query("Q")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "MISSING_PROPERTY"
        assert result.error.detail == {"column": "n", "property": "name"}

    def test_store_error(self, service: GraphService, fake_store: Any) -> None:
        fake_store.fail = StoreError("Invalid input 'MATCHX'")
        result = service.render_query("MATCHX")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "STORE_ERROR"
        assert "MATCHX" in result.error.message

    def test_refused_extra_args(self, service: GraphService, tmp_path: Path) -> None:
        result = service.render_query("MATCH (n) RETURN n", "-o/etc/passwd")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_ARGUMENT"
        assert not (tmp_path / "argv.txt").exists()

    def test_extra_args_reach_renderer(self, service: GraphService, tmp_path: Path) -> None:
        service.render_query("MATCH (n) RETURN n", "-Gdpi=72")
        assert (tmp_path / "argv.txt").read_text().splitlines() == ["-Tpng", "-Gdpi=72"]


class TestRenderFailures:
    def test_spawn_failure(self, fake_store: Any, tmp_path: Path) -> None:
        svc = GraphService(fake_store, Renderer(str(tmp_path / "missing")))
        result = svc.render_query("Q")
        assert result.error is not None
        assert result.error.code == "RENDER_SPAWN_FAILED"

    def test_nonzero_exit(
        self, fake_store: Any, make_renderer: Callable[[str, str], Path]
    ) -> None:
        script = make_renderer("bad", "cat >/dev/null\necho 'bad graph' >&2\nexit 3")
        result = GraphService(fake_store, Renderer(str(script))).render_query("Q")
        assert result.error is not None
        assert result.error.code == "RENDER_FAILED"
        assert result.error.detail["returncode"] == 3
        assert "bad graph" in result.error.detail["stderr"]

    def test_timeout(self, fake_store: Any, make_renderer: Callable[[str, str], Path]) -> None:
        script = make_renderer("slow", "exec sleep 10")
        result = GraphService(fake_store, Renderer(str(script), timeout=0.2)).render_query("Q")
        assert result.error is not None
        assert result.error.code == "RENDER_TIMEOUT"


class TestExportDescription:
    def test_whole_graph(self, service: GraphService, seeded: Any) -> None:
        result = service.export_description()
        assert result.ok
        assert result.data["edge_count"] == 4
        assert '"ALICE" -- "BOB"' in result.data["content"]
        assert result.data["content"].endswith("}")


class TestRunQuery:
    def test_rows_as_text(self, service: GraphService, fake_store: Any) -> None:
        fake_store.canned["Q"] = [
            ResultRow.of({"name": "bob", "n": 2}),
            ResultRow.of({"name": "dana", "n": 1}),
        ]
        result = service.run_query("Q")
        assert result.ok
        assert result.data["columns"] == ["name", "n"]
        assert result.data["row_count"] == 2
        assert result.data["text"] == "name: 'bob' | n: 2\nname: 'dana' | n: 1"

    def test_empty_result(self, service: GraphService) -> None:
        result = service.run_query("MATCH (n) RETURN n")
        assert result.ok
        assert result.data == {"columns": [], "row_count": 0, "text": ""}

    def test_missing_query(self, service: GraphService) -> None:
        result = service.run_query("")
        assert result.error is not None
        assert result.error.code == "MISSING_ARGUMENT"


class TestPipeline:
    """Import then render, end to end against the fake store."""

    def test_import_then_render_person(
        self, fake_store: Any, echo_renderer: Path
    ) -> None:
        imported = ImportService(fake_store).import_rows(
            [["", "", "", "E", "Alice", "Bob", "Carol"], ["", "", "", "F", "Bob", "Dana"]],
            has_header=False,
        )
        assert imported.data["pairs"] == 4

        rendered = GraphService(fake_store, Renderer(str(echo_renderer))).render_person("bob")
        assert rendered.ok
        assert rendered.data["image"] == b"PNGDATA"
        assert rendered.data["edge_count"] == 3
