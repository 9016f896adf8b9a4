from __future__ import annotations

from datetime import timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from floorops.application.ports.repositories import (
    DuplicateKeyError,
    StaleStatusError,
    TableRepository,
)
from floorops.domain.common.ids import TableId
from floorops.domain.table.entities import Table, TableStatus
from floorops.infrastructure.db.models.table import TableModel


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, table_id: TableId, for_update: bool = False) -> Table | None:
        model = self._load(table_id, for_update=for_update)
        if model is None:
            return None
        return self._to_domain(model)

    def get_by_number(self, number: int) -> Table | None:
        statement = select(TableModel).where(TableModel.number == number)
        model = self._session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def list_all(self, status: TableStatus | None, location: str | None) -> list[Table]:
        statement = select(TableModel)
        if status is not None:
            statement = statement.where(TableModel.status == status.value)
        if location:
            statement = statement.where(TableModel.location == location)
        statement = statement.order_by(TableModel.number)
        return [self._to_domain(model) for model in self._session.execute(statement).scalars()]

    def list_available(self, min_capacity: int | None) -> list[Table]:
        statement = select(TableModel).where(TableModel.status == TableStatus.AVAILABLE.value)
        if min_capacity is not None:
            statement = statement.where(TableModel.capacity >= min_capacity)
        statement = statement.order_by(TableModel.capacity, TableModel.number)
        return [self._to_domain(model) for model in self._session.execute(statement).scalars()]

    def add(self, table: Table) -> None:
        self._session.add(
            TableModel(
                id=str(table.table_id),
                number=table.number,
                capacity=table.capacity,
                location=table.location,
                status=table.status.value,
                created_at=table.created_at,
            )
        )
        self._flush(f"table number {table.number} already exists")

    def update(self, table: Table) -> None:
        model = self._load(table.table_id, for_update=False)
        if model is None:
            raise RuntimeError(f"table {table.table_id} not found for update")
        model.number = table.number
        model.capacity = table.capacity
        model.location = table.location
        self._flush(f"table number {table.number} already exists")

    def delete(self, table_id: TableId) -> None:
        self._session.execute(delete(TableModel).where(TableModel.id == str(table_id)))

    def transition(
        self,
        table_id: TableId,
        from_status: TableStatus,
        to_status: TableStatus,
    ) -> Table:
        statement = (
            update(TableModel)
            .where(
                TableModel.id == str(table_id),
                TableModel.status == from_status.value,
            )
            .values(status=to_status.value)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(statement)
        if result.rowcount != 1:
            current = self._session.execute(
                select(TableModel.status).where(TableModel.id == str(table_id))
            ).scalar_one_or_none()
            raise StaleStatusError(
                f"table {table_id} status is {current}, expected {from_status.value}",
                current_status=current,
            )

        model = self._load(table_id, for_update=False)
        if model is None:
            raise RuntimeError(f"table {table_id} not found after status update")
        return self._to_domain(model)

    def _load(self, table_id: TableId, for_update: bool) -> TableModel | None:
        statement = (
            select(TableModel)
            .where(TableModel.id == str(table_id))
            .execution_options(populate_existing=True)
        )
        if for_update:
            statement = statement.with_for_update()
        return self._session.execute(statement).scalar_one_or_none()

    def _flush(self, message: str) -> None:
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(message) from exc

    def _to_domain(self, model: TableModel) -> Table:
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Table(
            table_id=TableId(model.id),
            number=model.number,
            capacity=model.capacity,
            location=model.location,
            status=TableStatus(model.status),
            created_at=created_at,
        )
