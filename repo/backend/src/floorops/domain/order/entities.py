from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from floorops.domain.common.ids import MenuItemId, OrderId, OrderLineId, TableId, WaiterId
from floorops.domain.common.money import Money, sum_money


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

ACTIVE_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY})
KITCHEN_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING)


@dataclass(frozen=True)
class OrderLine:
    line_id: OrderLineId
    item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money
    line_total: Money
    notes: str | None
    status: OrderStatus = OrderStatus.PENDING

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price.currency != self.line_total.currency:
            raise ValueError("line_total currency must match unit_price currency")
        if self.line_total != self.unit_price.times(self.quantity):
            raise ValueError("line_total must equal unit_price * quantity")

    def with_quantity(self, quantity: int) -> OrderLine:
        return replace(self, quantity=quantity, line_total=self.unit_price.times(quantity))


def build_line(
    line_id: OrderLineId,
    item_id: MenuItemId,
    name: str,
    quantity: int,
    unit_price: Money,
    notes: str | None,
) -> OrderLine:
    return OrderLine(
        line_id=line_id,
        item_id=item_id,
        name=name,
        quantity=quantity,
        unit_price=unit_price,
        line_total=unit_price.times(quantity),
        notes=notes,
    )


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    order_number: str
    waiter_id: WaiterId
    table_id: TableId
    status: OrderStatus
    lines: list[OrderLine]
    total: Money
    notes: str | None
    created_at: datetime
    cancel_reason: str | None = None
    version: int = 1
    updated_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("order must contain at least one line")
        if self.version < 1:
            raise ValueError("version must be >= 1")
        expected_total = sum_money([line.line_total for line in self.lines], self.total.currency)
        if self.total != expected_total:
            raise ValueError("order total must equal sum of line totals")

    @property
    def allowed_transitions(self) -> frozenset[OrderStatus]:
        return ORDER_TRANSITIONS[self.status]

    def line(self, line_id: OrderLineId) -> OrderLine:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        raise OrderLineNotFoundError(f"line {line_id} not found in order {self.order_id}")

    def transition_to(self, target: OrderStatus, reason: str | None, now: datetime) -> Order:
        if target not in self.allowed_transitions:
            raise OrderTransitionError(current=self.status, requested=target)
        if target == OrderStatus.CANCELLED and not (reason and reason.strip()):
            raise ValueError("a reason is required to cancel an order")

        notes = self.notes
        cancel_reason = self.cancel_reason
        if target == OrderStatus.CANCELLED and reason:
            cancel_reason = reason.strip()
        if reason and reason.strip():
            entry = f"[{now.isoformat()}] Status changed to {target.value}: {reason.strip()}"
            notes = f"{notes}\n{entry}" if notes else entry

        return replace(
            self,
            status=target,
            lines=[replace(line, status=target) for line in self.lines],
            notes=notes,
            cancel_reason=cancel_reason,
            updated_at=now,
        )

    def add_line(self, line: OrderLine, now: datetime) -> Order:
        self._ensure_pending()
        return self._with_lines([*self.lines, line], now)

    def update_line(
        self,
        line_id: OrderLineId,
        quantity: int | None,
        notes: str | None,
        now: datetime,
    ) -> Order:
        self._ensure_pending()
        current = self.line(line_id)
        if current.status != OrderStatus.PENDING:
            raise OrderNotModifiableError(current.status)
        updated = current.with_quantity(quantity) if quantity is not None else current
        if notes is not None:
            updated = replace(updated, notes=notes)
        lines = [updated if line.line_id == line_id else line for line in self.lines]
        return self._with_lines(lines, now)

    def remove_line(self, line_id: OrderLineId, now: datetime) -> Order:
        self._ensure_pending()
        current = self.line(line_id)
        if current.status != OrderStatus.PENDING:
            raise OrderNotModifiableError(current.status)
        if len(self.lines) <= 1:
            raise LastOrderLineError(f"line {line_id} is the last line of order {self.order_id}")
        return self._with_lines([line for line in self.lines if line.line_id != line_id], now)

    def _ensure_pending(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise OrderNotModifiableError(self.status)

    def _with_lines(self, lines: list[OrderLine], now: datetime) -> Order:
        total = sum_money([line.line_total for line in lines], self.total.currency)
        return replace(self, lines=lines, total=total, updated_at=now)


def create_pending_order(
    order_id: OrderId,
    order_number: str,
    waiter_id: WaiterId,
    table_id: TableId,
    lines: list[OrderLine],
    notes: str | None,
    now: datetime,
) -> Order:
    if not lines:
        raise ValueError("order must contain at least one line")

    currency = lines[0].line_total.currency
    return Order(
        order_id=order_id,
        order_number=order_number,
        waiter_id=waiter_id,
        table_id=table_id,
        status=OrderStatus.PENDING,
        lines=lines,
        total=sum_money([line.line_total for line in lines], currency),
        notes=notes,
        created_at=now,
        updated_at=now,
    )


class OrderTransitionError(Exception):
    def __init__(self, current: OrderStatus, requested: OrderStatus) -> None:
        super().__init__(f"cannot change order status from {current.value} to {requested.value}")
        self.current = current
        self.requested = requested
        self.allowed = ORDER_TRANSITIONS[current]


class OrderNotModifiableError(Exception):
    def __init__(self, status: OrderStatus) -> None:
        super().__init__(f"order lines can only change while PENDING, status={status.value}")
        self.status = status


class OrderLineNotFoundError(Exception):
    pass


class LastOrderLineError(Exception):
    pass
