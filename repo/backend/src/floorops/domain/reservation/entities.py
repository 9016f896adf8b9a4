from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum

from floorops.domain.common.ids import ReservationId, TableId

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20
MAX_NOTES_LENGTH = 500


class ReservationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


RESERVATION_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.ACTIVE: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}

# Statuses that hold a (table, date, time) slot.
SLOT_HOLDING_STATUSES = frozenset({ReservationStatus.ACTIVE, ReservationStatus.CONFIRMED})


@dataclass(frozen=True)
class Reservation:
    reservation_id: ReservationId
    table_id: TableId
    customer_name: str
    phone: str | None
    email: str | None
    party_size: int
    reservation_date: date
    reservation_time: time
    status: ReservationStatus
    notes: str | None
    created_at: datetime

    def __post_init__(self) -> None:
        if not MIN_PARTY_SIZE <= self.party_size <= MAX_PARTY_SIZE:
            raise ValueError(
                f"party_size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}"
            )
        if not 2 <= len(self.customer_name.strip()) <= 100:
            raise ValueError("customer_name must be between 2 and 100 characters")
        if self.reservation_time.second or self.reservation_time.microsecond:
            raise ValueError("reservation_time must be a whole minute")

    @property
    def allowed_transitions(self) -> frozenset[ReservationStatus]:
        return RESERVATION_TRANSITIONS[self.status]

    def holds_slot(self) -> bool:
        return self.status in SLOT_HOLDING_STATUSES

    def transition_to(self, target: ReservationStatus) -> Reservation:
        if target not in self.allowed_transitions:
            raise ReservationTransitionError(current=self.status, requested=target)
        return replace(self, status=target)

    def cancel(self, reason: str) -> Reservation:
        if not reason.strip():
            raise ValueError("a reason is required to cancel a reservation")
        cancelled = self.transition_to(ReservationStatus.CANCELLED)
        entry = f"CANCELLED: {reason.strip()}"
        notes = f"{self.notes}\n{entry}" if self.notes else entry
        return replace(cancelled, notes=notes)

    def edited(self, **changes: object) -> Reservation:
        if self.status != ReservationStatus.ACTIVE:
            raise ReservationNotModifiableError(self.status)
        return replace(self, **changes)


class ReservationTransitionError(Exception):
    def __init__(self, current: ReservationStatus, requested: ReservationStatus) -> None:
        super().__init__(
            f"cannot change reservation status from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested
        self.allowed = RESERVATION_TRANSITIONS[current]


class ReservationNotModifiableError(Exception):
    def __init__(self, status: ReservationStatus) -> None:
        super().__init__(f"reservation can only be edited while ACTIVE, status={status.value}")
        self.status = status
