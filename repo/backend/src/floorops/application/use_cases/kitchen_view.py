from __future__ import annotations

from datetime import datetime, timezone

from floorops.application.dto.responses import (
    KitchenOrderResponse,
    KitchenSummaryResponse,
    KitchenViewResponse,
)
from floorops.application.mappers.order_mapper import to_order_response
from floorops.application.metrics.floor_state import record_kitchen_queue_size
from floorops.application.ports.repositories import UnitOfWork
from floorops.domain.order.entities import KITCHEN_STATUSES, Order, OrderStatus

HIGH_PRIORITY_MINUTES = 30
MEDIUM_PRIORITY_MINUTES = 15


def priority_for(elapsed_minutes: int) -> str:
    if elapsed_minutes > HIGH_PRIORITY_MINUTES:
        return "HIGH"
    if elapsed_minutes > MEDIUM_PRIORITY_MINUTES:
        return "MEDIUM"
    return "NORMAL"


def _kitchen_order(order: Order, now: datetime) -> KitchenOrderResponse:
    elapsed_minutes = max(int((now - order.created_at).total_seconds() // 60), 0)
    return KitchenOrderResponse(
        **to_order_response(order).model_dump(),
        elapsedMinutes=elapsed_minutes,
        priority=priority_for(elapsed_minutes),
    )


class KitchenView:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, now: datetime | None = None) -> KitchenViewResponse:
        current = now or datetime.now(timezone.utc)
        with self._unit_of_work as uow:
            orders = uow.orders.list_by_statuses(KITCHEN_STATUSES)

        ordered = sorted(orders, key=lambda order: order.created_at)
        pending = [_kitchen_order(o, current) for o in ordered if o.status == OrderStatus.PENDING]
        preparing = [
            _kitchen_order(o, current) for o in ordered if o.status == OrderStatus.PREPARING
        ]

        record_kitchen_queue_size(OrderStatus.PENDING, len(pending))
        record_kitchen_queue_size(OrderStatus.PREPARING, len(preparing))

        return KitchenViewResponse(
            pending=pending,
            preparing=preparing,
            summary=KitchenSummaryResponse(
                pending=len(pending),
                preparing=len(preparing),
                totalLines=sum(len(order.lines) for order in ordered),
            ),
        )
