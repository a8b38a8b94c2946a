"""Tests for result rows, node-name extraction and text formatting."""

from __future__ import annotations

import pytest

from meetgraph.domain.rows import (
    MissingPropertyError,
    NodeValue,
    PathValue,
    RelationshipValue,
    ResultRow,
    extract_node_names,
    format_row,
    format_value,
)


def _node(name: object = None, **props: object) -> NodeValue:
    if name is not None:
        props["name"] = name
    return NodeValue(labels=frozenset({"Person"}), properties=props)


class TestResultRow:
    def test_of_mapping_keeps_order(self) -> None:
        row = ResultRow.of({"b": 1, "a": 2})
        assert row.keys() == ["b", "a"]
        assert row.values() == [1, 2]
        assert len(row) == 2

    def test_of_pairs(self) -> None:
        row = ResultRow.of([("x", "y")])
        assert list(row.items()) == [("x", "y")]


class TestExtractNodeNames:
    def test_names_in_column_order(self) -> None:
        row = ResultRow.of({"n": _node("alice"), "m": _node("bob")})
        assert extract_node_names(row) == ["alice", "bob"]

    def test_non_node_cells_skipped(self) -> None:
        row = ResultRow.of(
            {
                "n": _node("alice"),
                "r": RelationshipValue(type="MET"),
                "count": 3,
                "tags": ["a"],
                "m": _node("bob"),
            }
        )
        assert extract_node_names(row) == ["alice", "bob"]

    def test_scalar_only_row_gives_empty_group(self) -> None:
        assert extract_node_names(ResultRow.of({"c": 1})) == []

    def test_missing_name_raises(self) -> None:
        row = ResultRow.of({"n": _node("alice"), "m": _node(age=3)})
        with pytest.raises(MissingPropertyError) as excinfo:
            extract_node_names(row)
        assert excinfo.value.label == "m"
        assert excinfo.value.prop == "name"

    def test_non_string_name_raises(self) -> None:
        with pytest.raises(MissingPropertyError):
            extract_node_names(ResultRow.of({"n": _node(42)}))


class TestFormatValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("bob", "'bob'"),
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            ([1, "a"], "[1, 'a']"),
            ({"k": 1}, "{k: 1}"),
            ({}, "{}"),
        ],
    )
    def test_scalars(self, value: object, expected: str) -> None:
        assert format_value(value) == expected

    def test_node(self) -> None:
        assert format_value(_node("alice")) == "(:Person {name: 'alice'})"

    def test_node_without_labels_or_props(self) -> None:
        assert format_value(NodeValue()) == "()"

    def test_relationship(self) -> None:
        assert format_value(RelationshipValue(type="MET")) == "[:MET]"

    def test_path(self) -> None:
        path = PathValue(
            nodes=(_node("a"), _node("b")),
            relationships=(RelationshipValue(type="MET"),),
        )
        assert format_value(path) == "(:Person {name: 'a'})-[:MET]-(:Person {name: 'b'})"

    def test_format_row(self) -> None:
        row = ResultRow.of({"name": "bob", "n": 2})
        assert format_row(row) == "name: 'bob' | n: 2"
