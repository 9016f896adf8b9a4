from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from floorops.domain.common.ids import TableId

MIN_CAPACITY = 1
MAX_CAPACITY = 20


class TableStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"
    MAINTENANCE = "MAINTENANCE"


# Administrative status changes. Engines use their own fixed pairs.
TABLE_TRANSITIONS: dict[TableStatus, frozenset[TableStatus]] = {
    TableStatus.AVAILABLE: frozenset(
        {TableStatus.OCCUPIED, TableStatus.RESERVED, TableStatus.MAINTENANCE}
    ),
    TableStatus.OCCUPIED: frozenset({TableStatus.AVAILABLE, TableStatus.MAINTENANCE}),
    TableStatus.RESERVED: frozenset(
        {TableStatus.AVAILABLE, TableStatus.OCCUPIED, TableStatus.MAINTENANCE}
    ),
    TableStatus.MAINTENANCE: frozenset({TableStatus.AVAILABLE}),
}


@dataclass(frozen=True)
class Table:
    table_id: TableId
    number: int
    capacity: int
    location: str | None
    status: TableStatus
    created_at: datetime

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("number must be >= 1")
        if not MIN_CAPACITY <= self.capacity <= MAX_CAPACITY:
            raise ValueError(f"capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}")

    def fits(self, party_size: int) -> bool:
        return self.capacity >= party_size

    def allowed_transitions(self) -> frozenset[TableStatus]:
        return TABLE_TRANSITIONS[self.status]

    def ensure_can_transition(self, target: TableStatus) -> None:
        if target not in self.allowed_transitions():
            raise TableTransitionError(current=self.status, requested=target)

    def with_status(self, status: TableStatus) -> Table:
        return replace(self, status=status)

    def edited(
        self,
        number: int | None = None,
        capacity: int | None = None,
        location: str | None = None,
    ) -> Table:
        return replace(
            self,
            number=self.number if number is None else number,
            capacity=self.capacity if capacity is None else capacity,
            location=self.location if location is None else location,
        )


def sort_for_seating(tables: list[Table]) -> list[Table]:
    return sorted(tables, key=lambda table: (table.capacity, table.number))


class TableTransitionError(Exception):
    def __init__(self, current: TableStatus, requested: TableStatus) -> None:
        super().__init__(
            f"cannot change table status from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested
        self.allowed = TABLE_TRANSITIONS[current]
