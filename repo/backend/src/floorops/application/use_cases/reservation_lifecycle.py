from __future__ import annotations

import logging
from datetime import datetime, timezone

from floorops.application.dto.responses import ReservationResponse
from floorops.application.errors import (
    CancelReasonRequiredError,
    NotFoundError,
    ReservationStatusConflictError,
    TableStatusConflictError,
)
from floorops.application.mappers.event_envelope import serialize_reservation_event
from floorops.application.mappers.reservation_mapper import to_reservation_response
from floorops.application.metrics.floor_state import record_reservation_transition
from floorops.application.ports.publisher import EventPublisher, publish_quietly
from floorops.application.ports.repositories import StaleStatusError, UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.reservation_support import (
    load_reservation_for_update,
    reservation_rules,
)
from floorops.application.use_cases.table_lifecycle import transition_table
from floorops.domain.common.ids import ReservationId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.table.entities import TableStatus

logger = logging.getLogger(__name__)


def _persist_status(
    uow: UnitOfWork,
    updated: Reservation,
    expected_status: ReservationStatus,
) -> Reservation:
    try:
        return uow.reservations.update_status(updated, expected_status=expected_status)
    except StaleStatusError as exc:
        raise ReservationStatusConflictError(
            f"reservation {updated.reservation_id} changed concurrently",
            current_status=exc.current_status,
        ) from exc


class _ReservationTransitionUseCase:
    def __init__(self, unit_of_work: UnitOfWork, publisher: EventPublisher) -> None:
        self._unit_of_work = unit_of_work
        self._publisher = publisher

    def _announce(
        self,
        previous: ReservationStatus,
        reservation: Reservation,
        trace_ctx: TraceContext,
    ) -> ReservationResponse:
        record_reservation_transition(from_status=previous, to_status=reservation.status)
        logger.info(
            "reservation_transition_applied",
            extra={
                "reservation_id": str(reservation.reservation_id),
                "table_id": str(reservation.table_id),
                "from_status": previous.value,
                "to_status": reservation.status.value,
            },
        )
        publish_quietly(
            self._publisher,
            serialize_reservation_event(
                event_type="reservation.status_changed",
                occurred_at=datetime.now(timezone.utc),
                reservation=reservation,
                trace_ctx=trace_ctx,
            ),
        )
        return to_reservation_response(reservation)


class ConfirmReservation(_ReservationTransitionUseCase):
    def execute(
        self,
        reservation_id: ReservationId,
        trace_ctx: TraceContext,
    ) -> ReservationResponse:
        with self._unit_of_work as uow, reservation_rules():
            reservation = load_reservation_for_update(uow, reservation_id)
            confirmed = _persist_status(
                uow,
                reservation.transition_to(ReservationStatus.CONFIRMED),
                expected_status=ReservationStatus.ACTIVE,
            )
            transition_table(
                uow,
                reservation.table_id,
                from_status=TableStatus.AVAILABLE,
                to_status=TableStatus.RESERVED,
                operation="reservation_confirm",
            )
            uow.commit()
        return self._announce(reservation.status, confirmed, trace_ctx)


class CompleteReservation(_ReservationTransitionUseCase):
    def execute(
        self,
        reservation_id: ReservationId,
        trace_ctx: TraceContext,
    ) -> ReservationResponse:
        with self._unit_of_work as uow, reservation_rules():
            reservation = load_reservation_for_update(uow, reservation_id)
            completed = _persist_status(
                uow,
                reservation.transition_to(ReservationStatus.COMPLETED),
                expected_status=ReservationStatus.CONFIRMED,
            )
            transition_table(
                uow,
                reservation.table_id,
                from_status=TableStatus.RESERVED,
                to_status=TableStatus.AVAILABLE,
                operation="reservation_complete",
            )
            uow.commit()
        return self._announce(reservation.status, completed, trace_ctx)


class CancelReservation(_ReservationTransitionUseCase):
    def execute(
        self,
        reservation_id: ReservationId,
        reason: str,
        trace_ctx: TraceContext,
    ) -> ReservationResponse:
        if not reason.strip():
            raise CancelReasonRequiredError(
                "a reason is required to cancel a reservation",
                details={"field": "reason"},
            )

        with self._unit_of_work as uow, reservation_rules():
            reservation = load_reservation_for_update(uow, reservation_id)
            cancelled = _persist_status(
                uow,
                reservation.cancel(reason),
                expected_status=reservation.status,
            )
            if reservation.status == ReservationStatus.CONFIRMED:
                self._release_reserved_table(uow, reservation)
            uow.commit()
        return self._announce(reservation.status, cancelled, trace_ctx)

    def _release_reserved_table(self, uow: UnitOfWork, reservation: Reservation) -> None:
        # A confirmed reservation holds its table RESERVED; give it back if it still does.
        try:
            transition_table(
                uow,
                reservation.table_id,
                from_status=TableStatus.RESERVED,
                to_status=TableStatus.AVAILABLE,
                operation="reservation_cancel",
            )
        except (TableStatusConflictError, NotFoundError):
            logger.info(
                "reservation_cancel_table_left_unchanged",
                extra={
                    "reservation_id": str(reservation.reservation_id),
                    "table_id": str(reservation.table_id),
                },
            )
