"""GraphService — query the store, describe the result, render it.

Every request runs its stages strictly in sequence: the store result is
fully drained, then serialized, then handed to the renderer. Any failure
aborts the whole request and is returned as an error result; no partial
image is ever produced.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from meetgraph.domain.description import DescriptionOptions, serialize_description
from meetgraph.domain.rows import MissingPropertyError, extract_node_names, format_row
from meetgraph.infrastructure.renderer import (
    RendererArgumentError,
    RenderError,
    RenderFailedError,
    RenderSpawnError,
    RenderTimeoutError,
)
from meetgraph.infrastructure.store import (
    ALL_EDGES_QUERY,
    PERSON_CONNECTIONS_QUERY,
    StoreError,
)
from meetgraph.services.base import BaseService
from meetgraph.services.result import ServiceResult
from meetgraph.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from meetgraph.infrastructure.renderer import Renderer
    from meetgraph.infrastructure.store import GraphStore

logger = logging.getLogger(__name__)

_RENDER_ERROR_CODES: dict[type[RenderError], str] = {
    RendererArgumentError: "INVALID_ARGUMENT",
    RenderSpawnError: "RENDER_SPAWN_FAILED",
    RenderTimeoutError: "RENDER_TIMEOUT",
    RenderFailedError: "RENDER_FAILED",
}


class GraphService(BaseService):
    """Render subgraphs of the who-met-whom graph."""

    def __init__(
        self,
        store: GraphStore,
        renderer: Renderer,
        options: DescriptionOptions | None = None,
    ) -> None:
        super().__init__(store)
        self._renderer = renderer
        self._options = options or DescriptionOptions()

    # ── Public operations ─────────────────────────────────────────────

    @traced
    def render_person(
        self,
        who: str,
        extra_args: str | Sequence[str] | None = None,
    ) -> ServiceResult:
        """Render everyone *who* has met."""
        op = "render_person"
        if not who or not who.strip():
            return ServiceResult.failure(op, "MISSING_ARGUMENT", "missing who argument")
        return self._render(op, PERSON_CONNECTIONS_QUERY, {"who": who.strip()}, extra_args)

    @traced
    def render_query(
        self,
        query: str,
        extra_args: str | Sequence[str] | None = None,
    ) -> ServiceResult:
        """Render the nodes returned by an arbitrary query."""
        op = "render_query"
        if not query or not query.strip():
            return ServiceResult.failure(op, "MISSING_ARGUMENT", "missing query argument")
        return self._render(op, query, None, extra_args)

    @traced
    def export_description(self) -> ServiceResult:
        """Describe the whole graph without rendering it."""
        op = "export_description"
        try:
            groups = self._collect_groups(ALL_EDGES_QUERY, None)
        except StoreError as exc:
            return self._store_failure(op, exc)
        except MissingPropertyError as exc:
            return _missing_property(op, exc)

        with trace_span("serialize"):
            content = serialize_description(groups, self._options)
        return ServiceResult(
            ok=True,
            op=op,
            data={"content": content, "edge_count": len(groups)},
        )

    @traced
    def run_query(self, query: str) -> ServiceResult:
        """Run a query and return its rows as text."""
        op = "run_query"
        if not query or not query.strip():
            return ServiceResult.failure(op, "MISSING_ARGUMENT", "missing query argument")
        try:
            with trace_span("store.read") as span:
                rows = self._store.run(query)
                if span:
                    span.annotate("rows", len(rows))
        except StoreError as exc:
            return self._store_failure(op, exc)

        lines = [format_row(row) for row in rows]
        columns = rows[0].keys() if rows else []
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "columns": columns,
                "row_count": len(rows),
                "text": "\n".join(lines),
            },
        )

    # ── Pipeline stages ───────────────────────────────────────────────

    def _collect_groups(
        self,
        query: str,
        params: Mapping[str, Any] | None,
    ) -> list[list[str]]:
        with trace_span("store.read") as span:
            rows = self._store.run(query, params)
            if span:
                span.annotate("rows", len(rows))
        with trace_span("extract"):
            return [extract_node_names(row) for row in rows]

    def _render(
        self,
        op: str,
        query: str,
        params: Mapping[str, Any] | None,
        extra_args: str | Sequence[str] | None,
    ) -> ServiceResult:
        try:
            groups = self._collect_groups(query, params)
        except StoreError as exc:
            return self._store_failure(op, exc)
        except MissingPropertyError as exc:
            return _missing_property(op, exc)

        with trace_span("serialize"):
            description = serialize_description(groups, self._options)

        try:
            with trace_span("render") as span:
                image = self._renderer.render(description, extra_args)
                if span:
                    span.annotate("bytes", len(image))
        except RenderError as exc:
            code = _RENDER_ERROR_CODES.get(type(exc), "RENDER_FAILED")
            logger.info("Render failed (%s): %s", code, exc)
            detail: dict[str, Any] = {}
            if isinstance(exc, RenderFailedError):
                detail = {"returncode": exc.returncode, "stderr": exc.stderr}
            return ServiceResult.failure(op, code, str(exc), **detail)

        warnings: list[str] = []
        if not groups:
            warnings.append("Query returned no rows")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "image": image,
                "format": self._renderer.output_format,
                "edge_count": len(groups),
                "byte_count": len(image),
            },
            warnings=warnings,
        )


def _missing_property(op: str, exc: MissingPropertyError) -> ServiceResult:
    return ServiceResult.failure(
        op,
        "MISSING_PROPERTY",
        str(exc),
        column=exc.label,
        property=exc.prop,
    )
