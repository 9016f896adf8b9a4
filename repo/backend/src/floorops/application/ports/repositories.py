from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from types import TracebackType
from typing import Iterable, Protocol

from floorops.domain.common.ids import MenuItemId, OrderId, ReservationId, TableId, WaiterId
from floorops.domain.menu.entities import MenuItem
from floorops.domain.order.entities import Order, OrderStatus
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.table.entities import Table, TableStatus


@dataclass(frozen=True)
class OrderFilters:
    status: OrderStatus | None = None
    table_id: TableId | None = None
    waiter_id: WaiterId | None = None
    on_date: date | None = None


@dataclass(frozen=True)
class ReservationFilters:
    date_from: date | None = None
    date_to: date | None = None
    status: ReservationStatus | None = None
    table_id: TableId | None = None
    customer: str | None = None


class MenuCatalog(Protocol):
    def get_items(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]: ...

    def list_items(self, available_only: bool) -> list[MenuItem]: ...


class TableRepository(Protocol):
    def get(self, table_id: TableId, for_update: bool = False) -> Table | None: ...

    def get_by_number(self, number: int) -> Table | None: ...

    def list_all(self, status: TableStatus | None, location: str | None) -> list[Table]: ...

    def list_available(self, min_capacity: int | None) -> list[Table]: ...

    def add(self, table: Table) -> None: ...

    def update(self, table: Table) -> None: ...

    def delete(self, table_id: TableId) -> None: ...

    def transition(
        self,
        table_id: TableId,
        from_status: TableStatus,
        to_status: TableStatus,
    ) -> Table: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId, for_update: bool = False) -> Order | None: ...

    def order_number_exists(self, order_number: str) -> bool: ...

    def save(self, order: Order, expected_version: int) -> Order: ...

    def list(
        self,
        filters: OrderFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Order], int]: ...

    def list_by_statuses(self, statuses: Iterable[OrderStatus]) -> list[Order]: ...

    def list_active_for_waiter(self, waiter_id: WaiterId) -> list[Order]: ...

    def count_for_table(
        self,
        table_id: TableId,
        statuses: Iterable[OrderStatus] | None = None,
    ) -> int: ...


class ReservationRepository(Protocol):
    def add(self, reservation: Reservation) -> None: ...

    def get(
        self,
        reservation_id: ReservationId,
        for_update: bool = False,
    ) -> Reservation | None: ...

    def save(self, reservation: Reservation) -> None: ...

    def update_status(
        self,
        reservation: Reservation,
        expected_status: ReservationStatus,
    ) -> Reservation: ...

    def find_conflict(
        self,
        table_id: TableId,
        reservation_date: date,
        reservation_time: time,
        exclude_id: ReservationId | None = None,
    ) -> Reservation | None: ...

    def booked_table_ids(self, reservation_date: date, reservation_time: time) -> set[TableId]: ...

    def list(
        self,
        filters: ReservationFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Reservation], int]: ...

    def list_for_date(self, reservation_date: date) -> list[Reservation]: ...

    def count_for_table(
        self,
        table_id: TableId,
        statuses: Iterable[ReservationStatus] | None = None,
        from_date: date | None = None,
    ) -> int: ...


class UnitOfWork(Protocol):
    tables: TableRepository
    orders: OrderRepository
    reservations: ReservationRepository
    menu: MenuCatalog

    def __enter__(self) -> UnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class OptimisticConcurrencyError(Exception):
    pass


class StaleStatusError(Exception):
    def __init__(self, message: str, current_status: str | None) -> None:
        super().__init__(message)
        self.current_status = current_status


class DuplicateKeyError(Exception):
    pass
