"""BaseService — shared foundation for meetgraph services.

Every service receives the shared :class:`GraphStore` at construction time.
The store is process-wide and thread-safe; services are cheap and may be
created per request.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from meetgraph.infrastructure.store import StoreError
from meetgraph.services.result import ServiceResult

if TYPE_CHECKING:
    from meetgraph.infrastructure.store import GraphStore

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ImportService(BaseService):
            def import_rows(self, rows) -> ServiceResult:
                self._store.write(...)
    """

    def __init__(self, store: GraphStore) -> None:
        self._store = store

    @staticmethod
    def _store_failure(op: str, exc: StoreError) -> ServiceResult:
        """Convert a store exception into a reported error."""
        logger.info("Store failure during %s: %s", op, exc)
        return ServiceResult.failure(op, "STORE_ERROR", f"Graph store error: {exc}")
