"""Schema-less query result rows and node-name extraction.

A :class:`ResultRow` is the store-independent view of one query result
record: ordered ``(label, value)`` cells where a value is a
:class:`NodeValue`, :class:`RelationshipValue`, :class:`PathValue`, or any
plain Python value. Store adapters build rows through their client's public
iteration API; everything downstream only sees these types.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

NAME_PROPERTY = "name"


class MissingPropertyError(LookupError):
    """A node in a result row has no usable ``name`` property."""

    def __init__(self, label: str, node: NodeValue, prop: str = NAME_PROPERTY) -> None:
        self.label = label
        self.node = node
        self.prop = prop
        super().__init__(f"Node in column '{label}' has no string '{prop}' property")


@dataclass(frozen=True)
class NodeValue:
    """A graph node: labels plus a property map."""

    labels: frozenset[str] = frozenset()
    properties: Mapping[str, Any] = field(default_factory=dict)
    element_id: str | None = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@dataclass(frozen=True)
class RelationshipValue:
    """A graph relationship: type plus a property map."""

    type: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    element_id: str | None = None


@dataclass(frozen=True)
class PathValue:
    """A path: alternating nodes and relationships."""

    nodes: tuple[NodeValue, ...] = ()
    relationships: tuple[RelationshipValue, ...] = ()


@dataclass(frozen=True)
class ResultRow:
    """One result record with caller-unknown column labels."""

    cells: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, items: Iterable[tuple[str, Any]] | Mapping[str, Any]) -> ResultRow:
        pairs = items.items() if isinstance(items, Mapping) else items
        return cls(cells=tuple((str(k), v) for k, v in pairs))

    def keys(self) -> list[str]:
        return [k for k, _ in self.cells]

    def values(self) -> list[Any]:
        return [v for _, v in self.cells]

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)


def extract_node_names(row: ResultRow) -> list[str]:
    """Return the ``name`` of every node-typed cell, in column order.

    Non-node cells (relationships, paths, scalars, lists) are skipped.

    Raises:
        MissingPropertyError: A node lacks a string ``name`` property.
    """
    names: list[str] = []
    for label, value in row.items():
        if not isinstance(value, NodeValue):
            continue
        name = value.get(NAME_PROPERTY)
        if not isinstance(name, str):
            raise MissingPropertyError(label, value)
        names.append(name)
    return names


def format_value(value: Any) -> str:
    """Cypher-shell style text for one cell value."""
    if isinstance(value, NodeValue):
        labels = "".join(f":{lbl}" for lbl in sorted(value.labels))
        return f"({labels}{_format_props(value.properties)})"
    if isinstance(value, RelationshipValue):
        return f"[:{value.type}{_format_props(value.properties)}]"
    if isinstance(value, PathValue):
        parts = [format_value(n) for n in value.nodes]
        rels = [format_value(r) for r in value.relationships]
        out = parts[0] if parts else ""
        for rel, node in zip(rels, parts[1:], strict=False):
            out += f"-{rel}-{node}"
        return out
    if isinstance(value, str):
        return repr(value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    if isinstance(value, Mapping):
        return _format_props(value).strip() or "{}"
    return str(value)


def format_row(row: ResultRow) -> str:
    """One text line for a result row: ``label: value | label: value``."""
    return " | ".join(f"{label}: {format_value(value)}" for label, value in row.items())


def _format_props(props: Mapping[str, Any]) -> str:
    if not props:
        return ""
    inner = ", ".join(f"{k}: {format_value(v)}" for k, v in props.items())
    return " {" + inner + "}"
