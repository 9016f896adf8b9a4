from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Path, Query, status

from floorops.api.dependencies import (
    ID_PATTERN,
    current_trace_context,
    get_publisher,
    get_unit_of_work,
)
from floorops.application.dto.requests import (
    CancelReservationRequest,
    CheckAvailabilityRequest,
    CreateReservationRequest,
    UpdateReservationRequest,
)
from floorops.application.dto.responses import (
    AvailabilityResponse,
    ReservationListResponse,
    ReservationResponse,
    TodayReservationsResponse,
)
from floorops.application.ports.publisher import EventPublisher
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.check_availability import CheckAvailability
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.create_reservation import CreateReservation
from floorops.application.use_cases.list_reservations import (
    GetReservation,
    ListReservations,
    TodayReservations,
)
from floorops.application.use_cases.reservation_lifecycle import (
    CancelReservation,
    CompleteReservation,
    ConfirmReservation,
)
from floorops.application.use_cases.update_reservation import UpdateReservation
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import ReservationStatus

router = APIRouter(prefix="/v1/reservations")


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def create_reservation(
    request_dto: CreateReservationRequest,
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> ReservationResponse:
    return CreateReservation(unit_of_work, publisher).execute(
        request_dto=request_dto,
        trace_ctx=trace_ctx,
    )


@router.get("", response_model=ReservationListResponse)
def list_reservations(
    date_from: date | None = Query(default=None, alias="dateFrom"),
    date_to: date | None = Query(default=None, alias="dateTo"),
    reservation_status: ReservationStatus | None = Query(default=None, alias="status"),
    table_id: str | None = Query(default=None, alias="tableId", pattern=ID_PATTERN),
    customer: str | None = Query(default=None, max_length=100),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> ReservationListResponse:
    return ListReservations(unit_of_work).execute(
        date_from=date_from,
        date_to=date_to,
        status=reservation_status,
        table_id=TableId(table_id) if table_id else None,
        customer=customer,
        page=page,
        page_size=page_size,
    )


@router.get("/today", response_model=TodayReservationsResponse)
def today_reservations(
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TodayReservationsResponse:
    return TodayReservations(unit_of_work).execute()


@router.post("/check-availability", response_model=AvailabilityResponse)
def check_availability(
    request_dto: CheckAvailabilityRequest,
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> AvailabilityResponse:
    return CheckAvailability(unit_of_work).execute(request_dto)


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> ReservationResponse:
    return GetReservation(unit_of_work).execute(ReservationId(reservation_id))


@router.put("/{reservation_id}", response_model=ReservationResponse)
def update_reservation(
    request_dto: UpdateReservationRequest,
    reservation_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> ReservationResponse:
    return UpdateReservation(unit_of_work).execute(ReservationId(reservation_id), request_dto)


@router.put("/{reservation_id}/confirm", response_model=ReservationResponse)
def confirm_reservation(
    reservation_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> ReservationResponse:
    return ConfirmReservation(unit_of_work, publisher).execute(
        ReservationId(reservation_id),
        trace_ctx=trace_ctx,
    )


@router.put("/{reservation_id}/complete", response_model=ReservationResponse)
def complete_reservation(
    reservation_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> ReservationResponse:
    return CompleteReservation(unit_of_work, publisher).execute(
        ReservationId(reservation_id),
        trace_ctx=trace_ctx,
    )


@router.put("/{reservation_id}/cancel", response_model=ReservationResponse)
def cancel_reservation(
    request_dto: CancelReservationRequest,
    reservation_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> ReservationResponse:
    return CancelReservation(unit_of_work, publisher).execute(
        ReservationId(reservation_id),
        reason=request_dto.reason,
        trace_ctx=trace_ctx,
    )
