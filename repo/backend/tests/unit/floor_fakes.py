from __future__ import annotations

import sys
import threading
from dataclasses import replace
from datetime import date, datetime, time, timezone
from pathlib import Path
from types import TracebackType
from typing import Iterable

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from floorops.application.ports.repositories import (
    OptimisticConcurrencyError,
    OrderFilters,
    ReservationFilters,
    StaleStatusError,
)
from floorops.domain.common.ids import MenuItemId, OrderId, ReservationId, TableId, WaiterId
from floorops.domain.common.money import Money
from floorops.domain.menu.entities import MenuItem
from floorops.domain.order.entities import ACTIVE_ORDER_STATUSES, Order, OrderStatus
from floorops.domain.reservation.entities import (
    SLOT_HOLDING_STATUSES,
    Reservation,
    ReservationStatus,
)
from floorops.domain.table.entities import Table, TableStatus, sort_for_seating


class InMemoryStore:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.menu: dict[MenuItemId, MenuItem] = {}
        self.tables: dict[TableId, Table] = {}
        self.orders: dict[OrderId, Order] = {}
        self.reservations: dict[ReservationId, Reservation] = {}

    def snapshot(self) -> tuple[dict, dict, dict]:
        return dict(self.tables), dict(self.orders), dict(self.reservations)

    def restore(self, snapshot: tuple[dict, dict, dict]) -> None:
        self.tables, self.orders, self.reservations = (dict(part) for part in snapshot)


class FakeMenuCatalog:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def get_items(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        menu = self._store.menu
        return {item_id: menu[item_id] for item_id in item_ids if item_id in menu}

    def list_items(self, available_only: bool) -> list[MenuItem]:
        items = [
            item for item in self._store.menu.values() if item.is_available or not available_only
        ]
        return sorted(items, key=lambda item: (item.category, item.name))


class FakeTableRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def get(self, table_id: TableId, for_update: bool = False) -> Table | None:
        return self._store.tables.get(table_id)

    def get_by_number(self, number: int) -> Table | None:
        return next((t for t in self._store.tables.values() if t.number == number), None)

    def list_all(self, status: TableStatus | None, location: str | None) -> list[Table]:
        tables = [
            table
            for table in self._store.tables.values()
            if (status is None or table.status == status)
            and (not location or table.location == location)
        ]
        return sorted(tables, key=lambda table: table.number)

    def list_available(self, min_capacity: int | None) -> list[Table]:
        tables = [
            table
            for table in self._store.tables.values()
            if table.status == TableStatus.AVAILABLE
            and (min_capacity is None or table.capacity >= min_capacity)
        ]
        return sort_for_seating(tables)

    def add(self, table: Table) -> None:
        self._store.tables[table.table_id] = table

    def update(self, table: Table) -> None:
        self._store.tables[table.table_id] = table

    def delete(self, table_id: TableId) -> None:
        self._store.tables.pop(table_id, None)

    def transition(
        self,
        table_id: TableId,
        from_status: TableStatus,
        to_status: TableStatus,
    ) -> Table:
        current = self._store.tables.get(table_id)
        if current is None or current.status != from_status:
            raise StaleStatusError(
                f"table {table_id} is not {from_status.value}",
                current_status=current.status.value if current else None,
            )
        updated = current.with_status(to_status)
        self._store.tables[table_id] = updated
        return updated


class FakeOrderRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def add(self, order: Order) -> None:
        self._store.orders[order.order_id] = order

    def get(self, order_id: OrderId, for_update: bool = False) -> Order | None:
        return self._store.orders.get(order_id)

    def order_number_exists(self, order_number: str) -> bool:
        return any(order.order_number == order_number for order in self._store.orders.values())

    def save(self, order: Order, expected_version: int) -> Order:
        current = self._store.orders.get(order.order_id)
        if current is None or current.version != expected_version:
            raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
        saved = replace(order, version=expected_version + 1)
        self._store.orders[order.order_id] = saved
        return saved

    def list(self, filters: OrderFilters, offset: int, limit: int) -> tuple[list[Order], int]:
        orders = [
            order
            for order in self._store.orders.values()
            if (filters.status is None or order.status == filters.status)
            and (filters.table_id is None or order.table_id == filters.table_id)
            and (filters.waiter_id is None or order.waiter_id == filters.waiter_id)
            and (filters.on_date is None or order.created_at.date() == filters.on_date)
        ]
        orders.sort(key=lambda order: order.created_at, reverse=True)
        return orders[offset : offset + limit], len(orders)

    def list_by_statuses(self, statuses: Iterable[OrderStatus]) -> list[Order]:
        wanted = set(statuses)
        orders = [order for order in self._store.orders.values() if order.status in wanted]
        return sorted(orders, key=lambda order: order.created_at)

    def list_active_for_waiter(self, waiter_id: WaiterId) -> list[Order]:
        orders = [
            order
            for order in self._store.orders.values()
            if order.waiter_id == waiter_id and order.status in ACTIVE_ORDER_STATUSES
        ]
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def count_for_table(
        self,
        table_id: TableId,
        statuses: Iterable[OrderStatus] | None = None,
    ) -> int:
        wanted = set(statuses) if statuses is not None else None
        return sum(
            1
            for order in self._store.orders.values()
            if order.table_id == table_id and (wanted is None or order.status in wanted)
        )


class FakeReservationRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def add(self, reservation: Reservation) -> None:
        self._store.reservations[reservation.reservation_id] = reservation

    def get(self, reservation_id: ReservationId, for_update: bool = False) -> Reservation | None:
        return self._store.reservations.get(reservation_id)

    def save(self, reservation: Reservation) -> None:
        self._store.reservations[reservation.reservation_id] = reservation

    def update_status(
        self,
        reservation: Reservation,
        expected_status: ReservationStatus,
    ) -> Reservation:
        current = self._store.reservations.get(reservation.reservation_id)
        if current is None or current.status != expected_status:
            raise StaleStatusError(
                f"reservation {reservation.reservation_id} is not {expected_status.value}",
                current_status=current.status.value if current else None,
            )
        self._store.reservations[reservation.reservation_id] = reservation
        return reservation

    def find_conflict(
        self,
        table_id: TableId,
        reservation_date: date,
        reservation_time: time,
        exclude_id: ReservationId | None = None,
    ) -> Reservation | None:
        for reservation in self._store.reservations.values():
            if (
                reservation.table_id == table_id
                and reservation.reservation_date == reservation_date
                and reservation.reservation_time == reservation_time
                and reservation.status in SLOT_HOLDING_STATUSES
                and reservation.reservation_id != exclude_id
            ):
                return reservation
        return None

    def booked_table_ids(self, reservation_date: date, reservation_time: time) -> set[TableId]:
        return {
            reservation.table_id
            for reservation in self._store.reservations.values()
            if reservation.reservation_date == reservation_date
            and reservation.reservation_time == reservation_time
            and reservation.status in SLOT_HOLDING_STATUSES
        }

    def list(
        self,
        filters: ReservationFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Reservation], int]:
        customer = (filters.customer or "").lower()
        reservations = [
            item
            for item in self._store.reservations.values()
            if (filters.date_from is None or item.reservation_date >= filters.date_from)
            and (filters.date_to is None or item.reservation_date <= filters.date_to)
            and (filters.status is None or item.status == filters.status)
            and (filters.table_id is None or item.table_id == filters.table_id)
            and customer in item.customer_name.lower()
        ]
        reservations.sort(key=lambda item: (item.reservation_date, item.reservation_time))
        return reservations[offset : offset + limit], len(reservations)

    def list_for_date(self, reservation_date: date) -> list[Reservation]:
        reservations = [
            item
            for item in self._store.reservations.values()
            if item.reservation_date == reservation_date
        ]
        return sorted(reservations, key=lambda item: item.reservation_time)

    def count_for_table(
        self,
        table_id: TableId,
        statuses: Iterable[ReservationStatus] | None = None,
        from_date: date | None = None,
    ) -> int:
        wanted = set(statuses) if statuses is not None else None
        return sum(
            1
            for item in self._store.reservations.values()
            if item.table_id == table_id
            and (wanted is None or item.status in wanted)
            and (from_date is None or item.reservation_date >= from_date)
        )


class FakeUnitOfWork:
    """Serialises blocks on the store lock; uncommitted writes are restored on exit."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.tables = FakeTableRepository(store)
        self.orders = FakeOrderRepository(store)
        self.reservations = FakeReservationRepository(store)
        self.menu = FakeMenuCatalog(store)
        self.commits = 0
        self._local = threading.local()

    def __enter__(self) -> FakeUnitOfWork:
        self.store.lock.acquire()
        self._local.snapshot = self.store.snapshot()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.store.restore(self._local.snapshot)
        finally:
            self._local.snapshot = None
            self.store.lock.release()

    def commit(self) -> None:
        self._local.snapshot = self.store.snapshot()
        self.commits += 1

    def rollback(self) -> None:
        self.store.restore(self._local.snapshot)


class FakePublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def publish(self, channel: str, message: str) -> None:
        self.messages.append((channel, message))


class FailingPublisher:
    def publish(self, channel: str, message: str) -> None:
        raise ConnectionError("redis unavailable")


NOW = datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)


def make_table(
    table_id: str = "tbl_001",
    number: int = 1,
    capacity: int = 4,
    status: TableStatus = TableStatus.AVAILABLE,
    location: str | None = "main",
) -> Table:
    return Table(
        table_id=TableId(table_id),
        number=number,
        capacity=capacity,
        location=location,
        status=status,
        created_at=NOW,
    )


def make_item(
    item_id: str,
    name: str,
    price_cents: int,
    category: str = "mains",
    is_available: bool = True,
) -> MenuItem:
    return MenuItem(
        item_id=MenuItemId(item_id),
        name=name,
        description=None,
        price=Money(amount_cents=price_cents, currency="USD"),
        category=category,
        is_available=is_available,
    )

