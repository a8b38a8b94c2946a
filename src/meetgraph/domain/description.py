"""Graph description text consumed by the Graphviz renderer.

The output is a ``strict graph`` document with fixed layout directives and
one edge statement per relation group::

    strict graph meetup_graph {
    layout=circo
    size="60,60"
    oneblock=true
    "ALICE" -- "BOB"
    }

Names are upper-cased and quoted but never escaped; a name containing a
double quote produces an invalid document. Groups are emitted in order,
without sorting or de-duplication, and groups of zero or one name still
produce a line. ``strict`` lets Graphviz collapse duplicate edges.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from meetgraph.domain.attendance import display_name

EDGE_OP = " -- "


@dataclass(frozen=True)
class DescriptionOptions:
    """Document-level directives."""

    graph_name: str = "meetup_graph"
    layout: str = "circo"
    size: str = "60,60"


def format_group(group: Sequence[str]) -> str:
    """One edge statement: ``"A" -- "B" -- "C"``."""
    return EDGE_OP.join(f'"{display_name(name)}"' for name in group)


def serialize_description(
    groups: Iterable[Sequence[str]],
    options: DescriptionOptions | None = None,
) -> str:
    """Serialize relation groups into a graph description document."""
    opts = options or DescriptionOptions()
    lines = [
        f"strict graph {opts.graph_name} {{",
        f"layout={opts.layout}",
        f'size="{opts.size}"',
        "oneblock=true",
    ]
    lines.extend(format_group(group) for group in groups)
    lines.append("}")
    return "\n".join(lines)
