from __future__ import annotations

from datetime import date, datetime, timezone

from floorops.application.dto.responses import (
    ReservationListResponse,
    ReservationResponse,
    TodayReservationsResponse,
)
from floorops.application.errors import ReservationNotFoundError
from floorops.application.mappers.reservation_mapper import to_reservation_response
from floorops.application.ports.repositories import ReservationFilters, UnitOfWork
from floorops.application.use_cases.pagination import parse_page_request, to_pagination_response
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import ReservationStatus


class GetReservation:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, reservation_id: ReservationId) -> ReservationResponse:
        with self._unit_of_work as uow:
            reservation = uow.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(f"reservation {reservation_id} not found")
        return to_reservation_response(reservation)


class ListReservations:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        status: ReservationStatus | None = None,
        table_id: TableId | None = None,
        customer: str | None = None,
        page: str | int | None = None,
        page_size: str | int | None = None,
    ) -> ReservationListResponse:
        page_request = parse_page_request(page, page_size)
        filters = ReservationFilters(
            date_from=date_from,
            date_to=date_to,
            status=status,
            table_id=table_id,
            customer=customer.strip() if customer and customer.strip() else None,
        )
        with self._unit_of_work as uow:
            reservations, total = uow.reservations.list(
                filters,
                offset=page_request.offset,
                limit=page_request.page_size,
            )
        return ReservationListResponse(
            reservations=[to_reservation_response(item) for item in reservations],
            pagination=to_pagination_response(page_request, total),
        )


class TodayReservations:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, today: date | None = None) -> TodayReservationsResponse:
        day = today or datetime.now(timezone.utc).date()
        with self._unit_of_work as uow:
            reservations = uow.reservations.list_for_date(day)

        counts = {status.value: 0 for status in ReservationStatus}
        for reservation in reservations:
            counts[reservation.status.value] += 1
        return TodayReservationsResponse(
            day=day,
            reservations=[to_reservation_response(item) for item in reservations],
            counts=counts,
        )
