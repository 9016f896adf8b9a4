from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from floorops.application.dto.requests import CreateReservationRequest
from floorops.application.dto.responses import ReservationResponse
from floorops.application.errors import NoTableAvailableError
from floorops.application.mappers.event_envelope import serialize_reservation_event
from floorops.application.mappers.reservation_mapper import to_reservation_response
from floorops.application.metrics.floor_state import record_reservation_transition
from floorops.application.ports.publisher import EventPublisher, publish_quietly
from floorops.application.ports.repositories import DuplicateKeyError, UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.reservation_support import (
    parse_slot_time,
    reservation_rules,
    slot_conflict,
)
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.table.entities import Table

logger = logging.getLogger(__name__)


def choose_table(candidates: list[Table], preferred_table_id: TableId | None) -> Table | None:
    """Candidates arrive smallest first; a qualifying preferred table wins."""
    if preferred_table_id is not None:
        for table in candidates:
            if table.table_id == preferred_table_id:
                return table
    return candidates[0] if candidates else None


class CreateReservation:
    def __init__(self, unit_of_work: UnitOfWork, publisher: EventPublisher) -> None:
        self._unit_of_work = unit_of_work
        self._publisher = publisher

    def execute(
        self,
        request_dto: CreateReservationRequest,
        trace_ctx: TraceContext,
    ) -> ReservationResponse:
        slot_time = parse_slot_time(request_dto.reservation_time)
        preferred: TableId | None = None
        if request_dto.preferred_table_id:
            preferred = TableId(request_dto.preferred_table_id)

        with self._unit_of_work as uow, reservation_rules():
            candidates = uow.tables.list_available(min_capacity=request_dto.party_size)
            table = choose_table(candidates, preferred)
            if table is None:
                raise NoTableAvailableError(
                    f"no available table seats a party of {request_dto.party_size}",
                    details={"partySize": request_dto.party_size},
                )

            reservation = Reservation(
                reservation_id=ReservationId(f"res_{uuid4().hex[:12]}"),
                table_id=table.table_id,
                customer_name=request_dto.customer_name.strip(),
                phone=request_dto.phone,
                email=request_dto.email,
                party_size=request_dto.party_size,
                reservation_date=request_dto.reservation_date,
                reservation_time=slot_time,
                status=ReservationStatus.ACTIVE,
                notes=request_dto.notes,
                created_at=datetime.now(timezone.utc),
            )

            existing = uow.reservations.find_conflict(
                table.table_id,
                reservation.reservation_date,
                reservation.reservation_time,
            )
            if existing is not None:
                raise slot_conflict(reservation)

            try:
                uow.reservations.add(reservation)
                uow.commit()
            except DuplicateKeyError as exc:
                raise slot_conflict(reservation) from exc

        record_reservation_transition(from_status=None, to_status=ReservationStatus.ACTIVE)
        logger.info(
            "reservation_created",
            extra={
                "reservation_id": str(reservation.reservation_id),
                "table_id": str(reservation.table_id),
            },
        )
        publish_quietly(
            self._publisher,
            serialize_reservation_event(
                event_type="reservation.created",
                occurred_at=reservation.created_at,
                reservation=reservation,
                trace_ctx=trace_ctx,
            ),
        )
        return to_reservation_response(reservation)
