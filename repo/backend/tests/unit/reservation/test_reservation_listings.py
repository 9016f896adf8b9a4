from __future__ import annotations

from datetime import date, time, timedelta

from floor_fakes import NOW, FakeUnitOfWork, InMemoryStore

from floorops.application.use_cases.list_reservations import ListReservations, TodayReservations
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus


def _reservation(
    number: int,
    on: date,
    at: time,
    status: ReservationStatus = ReservationStatus.ACTIVE,
    customer: str = "Ada Lovelace",
) -> Reservation:
    return Reservation(
        reservation_id=ReservationId(f"res_{number}"),
        table_id=TableId("tbl_001"),
        customer_name=customer,
        phone=None,
        email=None,
        party_size=2,
        reservation_date=on,
        reservation_time=at,
        status=status,
        notes=None,
        created_at=NOW,
    )


def _put(store: InMemoryStore, *reservations: Reservation) -> None:
    for reservation in reservations:
        store.reservations[reservation.reservation_id] = reservation


def test_today_reservations_counts(store: InMemoryStore, uow: FakeUnitOfWork) -> None:
    today = NOW.date()
    _put(
        store,
        _reservation(1, today, time(20, 0)),
        _reservation(2, today, time(12, 30), status=ReservationStatus.CANCELLED),
        _reservation(3, today + timedelta(days=1), time(19, 0)),
    )

    response = TodayReservations(uow).execute(today=today)

    assert [item.reservationId for item in response.reservations] == ["res_2", "res_1"]
    assert response.counts == {"ACTIVE": 1, "CONFIRMED": 0, "CANCELLED": 1, "COMPLETED": 0}


def test_list_reservations_filters_by_range_and_customer(
    store: InMemoryStore,
    uow: FakeUnitOfWork,
) -> None:
    _put(
        store,
        _reservation(1, date(2027, 1, 5), time(19, 0)),
        _reservation(2, date(2027, 1, 6), time(19, 0), customer="Grace Hopper"),
        _reservation(3, date(2027, 2, 1), time(19, 0)),
    )
    use_case = ListReservations(uow)

    january = use_case.execute(date_from=date(2027, 1, 1), date_to=date(2027, 1, 31))
    by_customer = use_case.execute(customer=" hopper ")

    assert [item.reservationId for item in january.reservations] == ["res_1", "res_2"]
    assert [item.reservationId for item in by_customer.reservations] == ["res_2"]
    assert january.pagination.totalItems == 2
