from __future__ import annotations

from floorops.application.dto.responses import ReservationResponse
from floorops.domain.reservation.entities import Reservation


def to_reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        reservationId=str(reservation.reservation_id),
        tableId=str(reservation.table_id),
        customerName=reservation.customer_name,
        phone=reservation.phone,
        email=reservation.email,
        partySize=reservation.party_size,
        reservationDate=reservation.reservation_date,
        reservationTime=reservation.reservation_time.strftime("%H:%M"),
        status=reservation.status.value,
        allowedTransitions=sorted(status.value for status in reservation.allowed_transitions),
        notes=reservation.notes,
        createdAt=reservation.created_at,
    )
