"""GraphStore — Neo4j driver wrapper producing schema-less result rows.

One :class:`GraphStore` owns one ``neo4j.Driver``. The driver is thread-safe
and keeps a bounded connection pool, so a single store is shared by every
concurrent request; each call opens its own short-lived session. Requests
beyond the pool size block for up to ``acquisition_timeout`` seconds.

Records are enumerated through the driver's public ``Record.items()`` and
converted into :mod:`meetgraph.domain.rows` values, so callers never depend
on driver types. The driver is imported lazily: constructing a store does
not connect, and modules that only need the query constants work without it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from meetgraph.domain.rows import NodeValue, PathValue, RelationshipValue, ResultRow

if TYPE_CHECKING:
    from meetgraph.config.models import StoreConfig

logger = logging.getLogger(__name__)

MERGE_GROUP_QUERY = (
    "UNWIND $names AS n1 UNWIND $names AS n2 WITH n1, n2 WHERE n1 <> n2 "
    "MERGE (p1 {name: toLower(n1)}) MERGE (p2 {name: toLower(n2)}) "
    "MERGE (p1)-[:MET]-(p2)"
)
PERSON_CONNECTIONS_QUERY = "MATCH (n {name: toLower($who)})-[:MET]-(m) RETURN n, m"
ALL_EDGES_QUERY = "MATCH (n)-[:MET]->(m) RETURN n, m"
CLEAR_QUERY = "MATCH (n) DETACH DELETE n"


class StoreError(Exception):
    """Connection or query failure in the graph store."""


def _driver_errors() -> tuple[type[BaseException], ...]:
    """Exception types raised by the driver for connection and query failures."""
    try:
        from neo4j.exceptions import DriverError, Neo4jError
    except ImportError:
        return (OSError,)
    return (Neo4jError, DriverError, OSError)


class GraphStore:
    """Shared handle to the Neo4j database.

    Usage::

        store = GraphStore(settings.store)
        rows = store.run("MATCH (n) RETURN n LIMIT $k", {"k": 5})
        store.close()
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._driver: Any = None

    @property
    def driver(self) -> Any:
        """The ``neo4j.Driver`` (created on first access)."""
        if self._driver is None:
            self._driver = self._connect()
        return self._driver

    def _connect(self) -> Any:
        try:
            from neo4j import GraphDatabase
        except ImportError as exc:
            msg = "neo4j driver is not installed. Install with: pip install neo4j"
            raise StoreError(msg) from exc

        cfg = self._config
        logger.debug("Connecting to %s (pool=%d)", cfg.uri, cfg.max_connections)
        try:
            return GraphDatabase.driver(
                cfg.uri,
                auth=(cfg.user, cfg.password.get_secret_value()),
                max_connection_pool_size=cfg.max_connections,
                connection_acquisition_timeout=cfg.acquisition_timeout,
            )
        except (ValueError, *_driver_errors()) as exc:
            raise StoreError(f"Cannot create driver for '{cfg.uri}': {exc}") from exc

    def _session(self) -> Any:
        kwargs: dict[str, Any] = {"fetch_size": self._config.fetch_size}
        if self._config.database:
            kwargs["database"] = self._config.database
        return self.driver.session(**kwargs)

    def run(self, query: str, params: Mapping[str, Any] | None = None) -> list[ResultRow]:
        """Execute *query* and drain every record into :class:`ResultRow` values.

        Raises:
            StoreError: Connection, authentication, or query failure.
        """
        try:
            with self._session() as session:
                result = session.run(query, dict(params or {}))
                return [to_result_row(record) for record in result]
        except _driver_errors() as exc:
            raise StoreError(str(exc) or type(exc).__name__) from exc

    def write(self, query: str, params: Mapping[str, Any] | None = None) -> None:
        """Execute *query* in a managed write transaction.

        Raises:
            StoreError: Connection, authentication, or query failure.
        """
        payload = dict(params or {})
        try:
            with self._session() as session:
                session.execute_write(lambda tx: tx.run(query, payload).consume())
        except _driver_errors() as exc:
            raise StoreError(str(exc) or type(exc).__name__) from exc

    def clear(self) -> int:
        """Delete every node and relationship. Returns the deleted node count."""
        try:
            with self._session() as session:
                summary = session.execute_write(lambda tx: tx.run(CLEAR_QUERY).consume())
        except _driver_errors() as exc:
            raise StoreError(str(exc) or type(exc).__name__) from exc
        deleted = summary.counters.nodes_deleted
        logger.info("Cleared graph store (%d nodes)", deleted)
        return deleted

    def close(self) -> None:
        if self._driver is not None:
            self._driver.close()
            self._driver = None


# ---------------------------------------------------------------------------
# Driver value conversion
# ---------------------------------------------------------------------------


def to_result_row(record: Any) -> ResultRow:
    """Convert a ``neo4j.Record`` into a :class:`ResultRow`."""
    return ResultRow.of((key, to_value(value)) for key, value in record.items())


def to_value(value: Any) -> Any:
    """Convert one driver value; graph types become domain values."""
    from neo4j.graph import Node, Path, Relationship

    if isinstance(value, Node):
        return _to_node(value)
    if isinstance(value, Relationship):
        return RelationshipValue(
            type=value.type,
            properties=dict(value.items()),
            element_id=value.element_id,
        )
    if isinstance(value, Path):
        return PathValue(
            nodes=tuple(_to_node(n) for n in value.nodes),
            relationships=tuple(to_value(r) for r in value.relationships),
        )
    if isinstance(value, list):
        return [to_value(v) for v in value]
    if isinstance(value, dict):
        return {k: to_value(v) for k, v in value.items()}
    return value


def _to_node(node: Any) -> NodeValue:
    return NodeValue(
        labels=frozenset(node.labels),
        properties=dict(node.items()),
        element_id=node.element_id,
    )
