from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from floorops.application.dto.requests import CreateTableRequest, UpdateTableRequest
from floorops.application.dto.responses import TableListResponse, TableResponse
from floorops.application.errors import (
    DuplicateTableNumberError,
    TableDeletionBlockedError,
    TableNotFoundError,
)
from floorops.application.mappers.table_mapper import to_table_list_response, to_table_response
from floorops.application.ports.repositories import DuplicateKeyError, UnitOfWork
from floorops.domain.common.ids import TableId
from floorops.domain.order.entities import ACTIVE_ORDER_STATUSES
from floorops.domain.reservation.entities import SLOT_HOLDING_STATUSES
from floorops.domain.table.entities import Table, TableStatus

logger = logging.getLogger(__name__)


class GetTable:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, table_id: TableId) -> TableResponse:
        with self._unit_of_work as uow:
            table = uow.tables.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        return to_table_response(table)


class ListTables:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(
        self,
        status: TableStatus | None = None,
        location: str | None = None,
    ) -> TableListResponse:
        with self._unit_of_work as uow:
            tables = uow.tables.list_all(status=status, location=location)
        return to_table_list_response(tables)


class ListAvailableTables:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, min_capacity: int | None = None) -> TableListResponse:
        with self._unit_of_work as uow:
            tables = uow.tables.list_available(min_capacity=min_capacity)
        return to_table_list_response(tables)


class CreateTable:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, request_dto: CreateTableRequest) -> TableResponse:
        table = Table(
            table_id=TableId(f"tbl_{uuid4().hex[:12]}"),
            number=request_dto.number,
            capacity=request_dto.capacity,
            location=request_dto.location,
            status=TableStatus.AVAILABLE,
            created_at=datetime.now(timezone.utc),
        )
        with self._unit_of_work as uow:
            if uow.tables.get_by_number(table.number) is not None:
                raise _duplicate_number(table.number)
            try:
                uow.tables.add(table)
                uow.commit()
            except DuplicateKeyError as exc:
                raise _duplicate_number(table.number) from exc

        logger.info("table_created", extra={"table_id": str(table.table_id)})
        return to_table_response(table)


class UpdateTable:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, table_id: TableId, request_dto: UpdateTableRequest) -> TableResponse:
        with self._unit_of_work as uow:
            table = uow.tables.get(table_id, for_update=True)
            if table is None:
                raise TableNotFoundError(f"table {table_id} not found")

            if request_dto.number is not None and request_dto.number != table.number:
                if uow.tables.get_by_number(request_dto.number) is not None:
                    raise _duplicate_number(request_dto.number)

            updated = table.edited(
                number=request_dto.number,
                capacity=request_dto.capacity,
                location=request_dto.location,
            )
            try:
                uow.tables.update(updated)
                uow.commit()
            except DuplicateKeyError as exc:
                raise _duplicate_number(updated.number) from exc

        return to_table_response(updated)


class DeleteTable:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, table_id: TableId) -> TableResponse:
        with self._unit_of_work as uow:
            table = uow.tables.get(table_id, for_update=True)
            if table is None:
                raise TableNotFoundError(f"table {table_id} not found")

            if table.status == TableStatus.OCCUPIED:
                raise _blocked(table, "TABLE_OCCUPIED", 1)

            active_orders = uow.orders.count_for_table(table_id, statuses=ACTIVE_ORDER_STATUSES)
            if active_orders:
                raise _blocked(table, "ACTIVE_ORDERS", active_orders)

            upcoming = uow.reservations.count_for_table(
                table_id,
                statuses=SLOT_HOLDING_STATUSES,
                from_date=datetime.now(timezone.utc).date(),
            )
            if upcoming:
                raise _blocked(table, "UPCOMING_RESERVATIONS", upcoming)

            history = uow.orders.count_for_table(table_id) + uow.reservations.count_for_table(
                table_id
            )
            if history:
                raise _blocked(table, "HAS_HISTORY", history)

            uow.tables.delete(table_id)
            uow.commit()

        logger.info("table_deleted", extra={"table_id": str(table_id)})
        return to_table_response(table)


def _duplicate_number(number: int) -> DuplicateTableNumberError:
    return DuplicateTableNumberError(
        f"table number {number} already exists",
        details={"number": number},
    )


def _blocked(table: Table, reason: str, count: int) -> TableDeletionBlockedError:
    return TableDeletionBlockedError(
        f"table {table.table_id} cannot be deleted: {reason}",
        details={"reason": reason, "count": count, "currentStatus": table.status.value},
    )
