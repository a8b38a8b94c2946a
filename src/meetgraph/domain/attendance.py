"""Attendance rows — parsing and pairwise "met" expansion.

Row layout (CSV):

- columns 1-3: ignored
- column 4: event name, empty means no event
- columns 5+: attendee names, read until the first empty cell
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import combinations

EVENT_COLUMN = 3
FIRST_ATTENDEE_COLUMN = 4


class MalformedRecordError(ValueError):
    """Raised when a row is too short to carry an event column."""

    def __init__(self, cells: Sequence[str], line: int | None = None) -> None:
        self.cells = list(cells)
        self.line = line
        where = f"line {line}" if line is not None else "row"
        super().__init__(
            f"{where}: expected at least {EVENT_COLUMN + 1} columns, got {len(self.cells)}"
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """One parsed attendance row."""

    event: str | None
    attendees: tuple[str, ...]


@dataclass(frozen=True)
class MetPair:
    """An unordered pair of normalized person keys."""

    a: str
    b: str

    def as_tuple(self) -> tuple[str, str]:
        return (self.a, self.b)


def normalize_name(name: str) -> str:
    """Store key for a person: lower-cased, idempotent."""
    return name.lower()


def display_name(name: str) -> str:
    """Rendered form of a person name."""
    return name.upper()


def parse_row(cells: Sequence[str], *, line: int | None = None) -> AttendanceRecord:
    """Parse one CSV row into an :class:`AttendanceRecord`.

    Raises:
        MalformedRecordError: The row has fewer than four columns.
    """
    if len(cells) <= EVENT_COLUMN:
        raise MalformedRecordError(cells, line)

    event = cells[EVENT_COLUMN].strip() or None
    attendees: list[str] = []
    for cell in cells[FIRST_ATTENDEE_COLUMN:]:
        name = cell.strip()
        if not name:
            break
        attendees.append(name)
    return AttendanceRecord(event=event, attendees=tuple(attendees))


def expand_pairs(attendees: Iterable[str]) -> list[MetPair]:
    """Expand a group of attendees into unordered "met" pairs.

    Fewer than two attendees yield nothing. Both endpoints are normalized;
    pairs that collapse onto one person are dropped and each pair appears once.
    """
    seen: set[frozenset[str]] = set()
    pairs: list[MetPair] = []
    for first, second in combinations(attendees, 2):
        a, b = normalize_name(first), normalize_name(second)
        if a == b:
            continue
        key = frozenset((a, b))
        if key in seen:
            continue
        seen.add(key)
        pairs.append(MetPair(a, b))
    return pairs
