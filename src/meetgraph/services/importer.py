"""ImportService — load attendance rows into the graph store.

Each row becomes one batched ``UNWIND`` merge, which leaves the store in the
same state as merging every attendee pair individually. By default the store
is wiped first so a reimport reflects exactly the input file.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Sequence
from typing import TextIO

from meetgraph.domain.attendance import (
    MalformedRecordError,
    expand_pairs,
    normalize_name,
    parse_row,
)
from meetgraph.infrastructure.store import MERGE_GROUP_QUERY, StoreError
from meetgraph.services.base import BaseService
from meetgraph.services.result import ServiceResult
from meetgraph.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class ImportService(BaseService):
    """Import attendance CSV data."""

    def import_csv(
        self,
        stream: TextIO,
        *,
        has_header: bool = True,
        reset: bool = True,
    ) -> ServiceResult:
        """Read CSV rows from *stream* and import them."""
        return self.import_rows(csv.reader(stream), has_header=has_header, reset=reset)

    @traced
    def import_rows(
        self,
        rows: Iterable[Sequence[str]],
        *,
        has_header: bool = True,
        reset: bool = True,
    ) -> ServiceResult:
        """Import attendance rows.

        Blank rows are ignored. A malformed row aborts the import; rows
        before it stay written.
        """
        op = "import_attendance"
        cleared: int | None = None
        rows_read = 0
        groups = 0
        pairs = 0
        skipped = 0
        events: set[str] = set()

        try:
            if reset:
                with trace_span("clear"):
                    cleared = self._store.clear()

            with trace_span("merge") as span:
                header_pending = has_header
                for line, cells in enumerate(rows, start=1):
                    if not cells:
                        continue
                    if header_pending:
                        header_pending = False
                        continue
                    rows_read += 1
                    record = parse_row(cells, line=line)
                    if record.event:
                        events.add(record.event)

                    met = expand_pairs(record.attendees)
                    if not met:
                        skipped += 1
                        continue
                    names = list(dict.fromkeys(normalize_name(n) for n in record.attendees))
                    self._store.write(MERGE_GROUP_QUERY, {"names": names})
                    groups += 1
                    pairs += len(met)
                if span:
                    span.annotate("groups", groups)
        except MalformedRecordError as exc:
            logger.info("Import aborted: %s", exc)
            return ServiceResult.failure(
                op,
                "MALFORMED_RECORD",
                str(exc),
                line=exc.line,
                rows_imported=groups,
            )
        except StoreError as exc:
            return self._store_failure(op, exc)

        warnings: list[str] = []
        if skipped:
            warnings.append(f"{skipped} row(s) had fewer than two attendees")

        data: dict[str, object] = {
            "rows": rows_read,
            "groups": groups,
            "pairs": pairs,
            "events": len(events),
        }
        if cleared is not None:
            data["cleared_nodes"] = cleared
        logger.info("Imported %d groups (%d pairs) from %d rows", groups, pairs, rows_read)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
