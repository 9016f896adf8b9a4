from __future__ import annotations

from contextlib import contextmanager
from datetime import time
from typing import Iterator

from floorops.application import errors
from floorops.application.metrics.floor_state import record_slot_conflict
from floorops.application.ports.repositories import UnitOfWork
from floorops.domain.common.ids import ReservationId
from floorops.domain.reservation import entities as reservation_entities
from floorops.domain.reservation.entities import Reservation


def parse_slot_time(raw: str) -> time:
    try:
        parsed = time.fromisoformat(raw)
    except ValueError as exc:
        raise errors.ValidationFailedError(
            f"invalid reservation time {raw!r}, expected HH:MM",
            details={"field": "reservationTime"},
        ) from exc
    return parsed.replace(second=0, microsecond=0)


def load_reservation_for_update(uow: UnitOfWork, reservation_id: ReservationId) -> Reservation:
    reservation = uow.reservations.get(reservation_id, for_update=True)
    if reservation is None:
        raise errors.ReservationNotFoundError(f"reservation {reservation_id} not found")
    return reservation


def slot_conflict(reservation: Reservation) -> errors.ReservationSlotConflictError:
    record_slot_conflict()
    return errors.ReservationSlotConflictError(
        f"table {reservation.table_id} is already booked at "
        f"{reservation.reservation_date.isoformat()} {reservation.reservation_time:%H:%M}",
        details={
            "tableId": str(reservation.table_id),
            "reservationDate": reservation.reservation_date.isoformat(),
            "reservationTime": f"{reservation.reservation_time:%H:%M}",
        },
    )


@contextmanager
def reservation_rules() -> Iterator[None]:
    """Translate reservation domain rule violations into application errors."""
    try:
        yield
    except reservation_entities.ReservationTransitionError as exc:
        raise errors.InvalidTransitionError(
            str(exc),
            current=exc.current.value,
            requested=exc.requested.value,
            allowed=[status.value for status in exc.allowed],
        ) from exc
    except reservation_entities.ReservationNotModifiableError as exc:
        raise errors.ReservationNotModifiableError(
            str(exc),
            details={"currentStatus": exc.status.value},
        ) from exc
    except ValueError as exc:
        raise errors.ValidationFailedError(str(exc)) from exc
