"""Human-readable rendering of ServiceResult with Rich.

``run_query`` prints its rows verbatim; every other operation prints a
status line and a key/value grid. Binary payloads are never shown. With
``-v`` the telemetry span tree follows as a Rich tree.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme
from rich.tree import Tree

if TYPE_CHECKING:
    from meetgraph.services.result import ServiceResult

THEME = Theme(
    {
        "meet.ok": "bold green",
        "meet.error": "bold red",
        "meet.op": "bold cyan",
        "meet.key": "dim",
        "meet.count": "magenta",
        "meet.path": "underline",
    }
)

# data keys holding bytes or bulk text that belongs elsewhere
_HIDDEN_KEYS = frozenset({"image", "content", "text"})


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    console = Console(file=io.StringIO(), record=True, theme=THEME, highlight=False, width=120)
    if result.ok:
        _RENDERERS.get(result.op, _render_fields)(console, result)
        telemetry = (result.meta or {}).get("telemetry")
        if verbose and telemetry:
            console.print(_span_tree(telemetry))
    else:
        _render_error(console, result, verbose=verbose)
    return console.export_text(styles=False).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """One line for ``--quiet``; query text is printed as is."""
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {message}"
    if result.op == "run_query":
        return str(result.data.get("text", ""))
    return f"OK: {result.op}"


def _styled(key: str, value: Any) -> Text:
    if isinstance(value, int) and not isinstance(value, bool):
        return Text(str(value), style="meet.count")
    if key.endswith("file"):
        return Text(str(value), style="meet.path")
    return Text(str(value))


def _grid(values: Mapping[str, Any]) -> Table:
    grid = Table.grid(padding=(0, 1))
    grid.add_column(style="meet.key")
    grid.add_column()
    for key, value in values.items():
        grid.add_row(f"  {key}:", _styled(key, value))
    return grid


def _render_fields(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "meet.ok"), "  ", (result.op, "meet.op")))
    shown = {k: v for k, v in result.data.items() if k not in _HIDDEN_KEYS}
    if shown:
        console.print(_grid(shown))


def _render_query(console: Console, result: ServiceResult) -> None:
    text = result.data.get("text", "")
    if text:
        console.print(text, markup=False, soft_wrap=True)
    console.print(Text(f"({result.data.get('row_count', 0)} rows)", style="meet.key"))


def _render_error(console: Console, result: ServiceResult, *, verbose: bool) -> None:
    err = result.error
    console.print(
        Text.assemble(
            ("ERROR", "meet.error"),
            "  ",
            (result.op, "meet.op"),
            " — ",
            err.message if err else "Unknown error",
        )
    )
    if verbose and err and err.detail:
        console.print(_grid(err.detail))


def _span_label(span: Mapping[str, Any]) -> Text:
    ms = float(span.get("duration_ms", 0.0))
    style = "bold red" if ms > 1000 else "yellow" if ms > 100 else "dim"
    label = Text.assemble((f"{ms:.2f}ms", style), "  ", str(span.get("name", "?")))
    notes = span.get("annotations") or {}
    if notes:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in notes.items()) + ")")
    return label


def _span_tree(span: Mapping[str, Any], tree: Tree | None = None) -> Tree:
    node = Tree(_span_label(span)) if tree is None else tree.add(_span_label(span))
    for child in span.get("children", []):
        _span_tree(child, node)
    return node


_RENDERERS: dict[str, Callable[[Console, ServiceResult], None]] = {
    "run_query": _render_query,
}
