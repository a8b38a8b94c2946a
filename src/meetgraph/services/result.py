"""ServiceResult: what every service operation returns.

Services never raise for per-request failures (bad query, store down,
renderer crash); they return ``ok=False`` with a :class:`ServiceError`
whose ``code`` is one of::

    STORE_ERROR  MISSING_PROPERTY  MISSING_ARGUMENT  INVALID_ARGUMENT
    MALFORMED_RECORD  RENDER_SPAWN_FAILED  RENDER_TIMEOUT  RENDER_FAILED

The CLI maps failures to exit code 1, the chat layer to an ``Error:`` reply.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name, e.g. ``"render_person"``.
        data: Operation payload; may hold raw bytes (rendered images).
        warnings: Non-fatal notes, e.g. an empty query result.
        error: Set exactly when ``ok`` is False.
        meta: Telemetry and other diagnostics.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))

    def with_data(self, *, drop: Iterable[str] = (), **extra: Any) -> ServiceResult:
        """Copy with *drop* keys removed from ``data`` and *extra* put first."""
        removed = set(drop)
        kept = {k: v for k, v in self.data.items() if k not in removed}
        return self.model_copy(update={"data": {**extra, **kept}})
