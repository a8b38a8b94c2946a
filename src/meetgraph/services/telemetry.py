"""Request timing for ``-v``: a span tree per traced service call.

With telemetry off (the default) :func:`traced` and :func:`trace_span`
cost one ContextVar lookup. With it on, each traced call records its
pipeline stages (store read, extract, serialize, render) as child spans
and returns the tree in ``ServiceResult.meta["telemetry"]``.

State lives in ContextVars, so worker threads started with
``asyncio.to_thread`` inherit the caller's setting.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from meetgraph.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("meetgraph_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("meetgraph_active_span", default=None)

_log = structlog.get_logger("meetgraph.telemetry")


@dataclass
class Span:
    """One timed stage."""

    name: str
    started: float = field(default_factory=time.perf_counter)
    elapsed: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)

    @property
    def duration_ms(self) -> float:
        return 0.0 if self.elapsed is None else self.elapsed * 1000

    def end(self) -> None:
        if self.elapsed is None:
            self.elapsed = time.perf_counter() - self.started

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.end()
        _active.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a stage inside the current traced call.

    Yields None when telemetry is off or no traced call is running.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    child = Span(name)
    parent.children.append(child)
    with _activate(child):
        yield child


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Root a span tree at a service method and attach it to the result."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        with _activate(Span(func.__qualname__)) as span:
            result = func(*args, **kwargs)

        _log.debug(
            "span.complete",
            span_name=span.name,
            duration_ms=round(span.duration_ms, 2),
            ok=result.ok if isinstance(result, ServiceResult) else True,
            children=len(span.children),
        )
        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
