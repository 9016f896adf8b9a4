from __future__ import annotations

from floorops.application.dto.requests import CheckAvailabilityRequest
from floorops.application.dto.responses import AvailabilityResponse
from floorops.application.mappers.table_mapper import to_table_response
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.reservation_support import parse_slot_time


class CheckAvailability:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, request_dto: CheckAvailabilityRequest) -> AvailabilityResponse:
        slot_time = parse_slot_time(request_dto.reservation_time)
        with self._unit_of_work as uow:
            candidates = uow.tables.list_available(min_capacity=request_dto.party_size)
            booked = uow.reservations.booked_table_ids(request_dto.reservation_date, slot_time)

        tables = [table for table in candidates if table.table_id not in booked]
        return AvailabilityResponse(
            available=bool(tables),
            reservationDate=request_dto.reservation_date,
            reservationTime=f"{slot_time:%H:%M}",
            partySize=request_dto.party_size,
            tables=[to_table_response(table) for table in tables],
        )
