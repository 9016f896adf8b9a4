from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time, timedelta, timezone
from typing import Iterable

from sqlalchemy import Select, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from floorops.application.ports.repositories import (
    DuplicateKeyError,
    OptimisticConcurrencyError,
    OrderFilters,
    OrderRepository,
)
from floorops.domain.common.ids import MenuItemId, OrderId, OrderLineId, TableId, WaiterId
from floorops.domain.common.money import Money
from floorops.domain.order.entities import ACTIVE_ORDER_STATUSES, Order, OrderLine, OrderStatus
from floorops.infrastructure.db.models.order import OrderLineModel, OrderModel


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, order: Order) -> None:
        self._session.add(self._to_model(order))
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(f"order number {order.order_number} already exists") from exc

    def get(self, order_id: OrderId, for_update: bool = False) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.id == str(order_id))
            .execution_options(populate_existing=True)
        )
        if for_update:
            statement = statement.with_for_update()
        model = self._session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def order_number_exists(self, order_number: str) -> bool:
        statement = select(OrderModel.id).where(OrderModel.order_number == order_number).limit(1)
        return self._session.execute(statement).scalar_one_or_none() is not None

    def save(self, order: Order, expected_version: int) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.version == expected_version,
            )
            .values(
                status=order.status.value,
                total_cents=order.total.amount_cents,
                currency=order.total.currency,
                notes=order.notes,
                cancel_reason=order.cancel_reason,
                updated_at=order.updated_at,
                version=OrderModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(statement)
        if result.rowcount != 1:
            raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")

        self._sync_lines(order)
        self._session.flush()
        return replace(order, version=expected_version + 1)

    def list(
        self,
        filters: OrderFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Order], int]:
        statement = self._filtered(select(OrderModel), filters)
        count_statement = self._filtered(select(func.count(OrderModel.id)), filters)

        total = int(self._session.execute(count_statement).scalar_one())
        statement = (
            statement.options(selectinload(OrderModel.lines))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        models = self._session.execute(statement).scalars().all()
        return [self._to_domain(model) for model in models], total

    def list_by_statuses(self, statuses: Iterable[OrderStatus]) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.status.in_([status.value for status in statuses]))
            .order_by(OrderModel.created_at.asc(), OrderModel.id.asc())
        )
        return [self._to_domain(model) for model in self._session.execute(statement).scalars()]

    def list_active_for_waiter(self, waiter_id: WaiterId) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(
                OrderModel.waiter_id == str(waiter_id),
                OrderModel.status.in_([status.value for status in ACTIVE_ORDER_STATUSES]),
            )
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return [self._to_domain(model) for model in self._session.execute(statement).scalars()]

    def count_for_table(
        self,
        table_id: TableId,
        statuses: Iterable[OrderStatus] | None = None,
    ) -> int:
        statement = select(func.count(OrderModel.id)).where(OrderModel.table_id == str(table_id))
        if statuses is not None:
            values = [status.value for status in statuses]
            statement = statement.where(OrderModel.status.in_(values))
        return int(self._session.execute(statement).scalar_one())

    def _filtered(self, statement: Select, filters: OrderFilters) -> Select:
        if filters.status is not None:
            statement = statement.where(OrderModel.status == filters.status.value)
        if filters.table_id is not None:
            statement = statement.where(OrderModel.table_id == str(filters.table_id))
        if filters.waiter_id is not None:
            statement = statement.where(OrderModel.waiter_id == str(filters.waiter_id))
        if filters.on_date is not None:
            day_start = datetime.combine(filters.on_date, time.min, tzinfo=timezone.utc)
            statement = statement.where(
                OrderModel.created_at >= day_start,
                OrderModel.created_at < day_start + timedelta(days=1),
            )
        return statement

    def _sync_lines(self, order: Order) -> None:
        existing = {
            model.id: model
            for model in self._session.execute(
                select(OrderLineModel).where(OrderLineModel.order_id == str(order.order_id))
            ).scalars()
        }
        for position, line in enumerate(order.lines):
            model = existing.pop(str(line.line_id), None)
            if model is None:
                self._session.add(self._line_to_model(order, line, position))
                continue
            model.position = position
            model.quantity = line.quantity
            model.line_total_cents = line.line_total.amount_cents
            model.notes = line.notes
            model.status = line.status.value

        for removed in existing.values():
            self._session.delete(removed)

    def _line_to_model(self, order: Order, line: OrderLine, position: int) -> OrderLineModel:
        return OrderLineModel(
            id=str(line.line_id),
            order_id=str(order.order_id),
            position=position,
            item_id=str(line.item_id),
            name=line.name,
            quantity=line.quantity,
            unit_price_cents=line.unit_price.amount_cents,
            currency=line.unit_price.currency,
            line_total_cents=line.line_total.amount_cents,
            notes=line.notes,
            status=line.status.value,
        )

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            order_number=order.order_number,
            waiter_id=str(order.waiter_id),
            table_id=str(order.table_id),
            status=order.status.value,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
            notes=order.notes,
            cancel_reason=order.cancel_reason,
            version=order.version,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        order_model.lines = [
            self._line_to_model(order, line, position) for position, line in enumerate(order.lines)
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        lines = [
            OrderLine(
                line_id=OrderLineId(line.id),
                item_id=MenuItemId(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unit_price=Money(amount_cents=line.unit_price_cents, currency=line.currency),
                line_total=Money(amount_cents=line.line_total_cents, currency=line.currency),
                notes=line.notes,
                status=OrderStatus(line.status),
            )
            for line in model.lines
        ]
        return Order(
            order_id=OrderId(model.id),
            order_number=model.order_number,
            waiter_id=WaiterId(model.waiter_id),
            table_id=TableId(model.table_id),
            status=OrderStatus(model.status),
            lines=lines,
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            notes=model.notes,
            cancel_reason=model.cancel_reason,
            version=model.version,
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at) if model.updated_at else None,
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
