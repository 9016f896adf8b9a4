from __future__ import annotations

import logging
from typing import Any

from floorops.application.dto.requests import UpdateReservationRequest
from floorops.application.dto.responses import ReservationResponse
from floorops.application.errors import (
    TableCapacityError,
    TableNotFoundError,
    TableStatusConflictError,
)
from floorops.application.mappers.reservation_mapper import to_reservation_response
from floorops.application.ports.repositories import DuplicateKeyError, UnitOfWork
from floorops.application.use_cases.reservation_support import (
    load_reservation_for_update,
    parse_slot_time,
    reservation_rules,
    slot_conflict,
)
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.table.entities import TableStatus

logger = logging.getLogger(__name__)

_PLAIN_FIELDS = ("customer_name", "phone", "email", "party_size", "reservation_date", "notes")


class UpdateReservation:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(
        self,
        reservation_id: ReservationId,
        request_dto: UpdateReservationRequest,
    ) -> ReservationResponse:
        changes: dict[str, Any] = {
            name: getattr(request_dto, name)
            for name in _PLAIN_FIELDS
            if getattr(request_dto, name) is not None
        }
        if request_dto.reservation_time is not None:
            changes["reservation_time"] = parse_slot_time(request_dto.reservation_time)
        if request_dto.table_id is not None:
            changes["table_id"] = TableId(request_dto.table_id)

        with self._unit_of_work as uow, reservation_rules():
            reservation = load_reservation_for_update(uow, reservation_id)
            updated = reservation.edited(**changes)

            table_changed = updated.table_id != reservation.table_id
            if table_changed or updated.party_size != reservation.party_size:
                table = uow.tables.get(updated.table_id)
                if table is None:
                    raise TableNotFoundError(f"table {updated.table_id} not found")
                if table_changed and table.status != TableStatus.AVAILABLE:
                    raise TableStatusConflictError(
                        f"table {table.table_id} is {table.status.value}",
                        current_status=table.status.value,
                    )
                if not table.fits(updated.party_size):
                    raise TableCapacityError(
                        f"table {table.table_id} seats {table.capacity}, "
                        f"party size is {updated.party_size}",
                        details={"capacity": table.capacity, "partySize": updated.party_size},
                    )

            slot_changed = (
                updated.table_id,
                updated.reservation_date,
                updated.reservation_time,
            ) != (reservation.table_id, reservation.reservation_date, reservation.reservation_time)
            if slot_changed and uow.reservations.find_conflict(
                updated.table_id,
                updated.reservation_date,
                updated.reservation_time,
                exclude_id=reservation.reservation_id,
            ):
                raise slot_conflict(updated)

            try:
                uow.reservations.save(updated)
                uow.commit()
            except DuplicateKeyError as exc:
                raise slot_conflict(updated) from exc

        logger.info("reservation_updated", extra={"reservation_id": str(reservation_id)})
        return to_reservation_response(updated)
