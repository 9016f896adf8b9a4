from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, Iterable
from uuid import uuid4

from floorops.application.dto.requests import CreateOrderRequest, OrderLineRequest
from floorops.application.dto.responses import OrderResponse
from floorops.application.errors import (
    ItemsUnavailableError,
    MenuItemNotFoundError,
    OrderNumberExhaustedError,
    TableNotFoundError,
    TableNotOccupiedError,
)
from floorops.application.mappers.event_envelope import serialize_order_event
from floorops.application.mappers.order_mapper import to_order_response
from floorops.application.metrics.floor_state import record_order_created
from floorops.application.ports.publisher import EventPublisher, publish_quietly
from floorops.application.ports.repositories import DuplicateKeyError, UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.domain.common.ids import MenuItemId, OrderId, OrderLineId, TableId, WaiterId
from floorops.domain.menu.entities import MenuItem
from floorops.domain.order.entities import Order, OrderLine, build_line, create_pending_order
from floorops.domain.table.entities import TableStatus

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


def generate_order_number(now: datetime) -> str:
    return f"PED-{now:%Y%m%d}-{secrets.randbelow(10000):04d}"


def new_line_id() -> OrderLineId:
    return OrderLineId(f"orl_{uuid4().hex[:12]}")


def resolve_items(
    catalog_items: dict[MenuItemId, MenuItem],
    requested_ids: Iterable[MenuItemId],
) -> None:
    requested = set(requested_ids)
    if not requested.issubset(catalog_items):
        raise MenuItemNotFoundError("one or more menu items do not exist")
    if not all(catalog_items[item_id].is_available for item_id in requested):
        raise ItemsUnavailableError("one or more menu items are unavailable")


def build_lines(
    catalog_items: dict[MenuItemId, MenuItem],
    request_lines: list[OrderLineRequest],
) -> list[OrderLine]:
    lines: list[OrderLine] = []
    for request_line in request_lines:
        menu_item = catalog_items[MenuItemId(request_line.item_id)]
        lines.append(
            build_line(
                line_id=new_line_id(),
                item_id=menu_item.item_id,
                name=menu_item.name,
                quantity=request_line.quantity,
                unit_price=menu_item.price,
                notes=request_line.notes,
            )
        )
    return lines


class CreateOrder:
    def __init__(
        self,
        unit_of_work: UnitOfWork,
        publisher: EventPublisher,
        order_number_generator: Callable[[datetime], str] = generate_order_number,
    ) -> None:
        self._unit_of_work = unit_of_work
        self._publisher = publisher
        self._order_number_generator = order_number_generator

    def execute(
        self,
        request_dto: CreateOrderRequest,
        waiter_id: WaiterId,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        order: Order | None = None
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            try:
                order = self._create(request_dto, waiter_id)
                break
            except DuplicateKeyError:
                logger.info("order_number_collision_retry")
        if order is None:
            raise OrderNumberExhaustedError("could not allocate a unique order number")

        record_order_created()
        logger.info(
            "order_created",
            extra={"order_id": str(order.order_id), "table_id": str(order.table_id)},
        )
        publish_quietly(
            self._publisher,
            serialize_order_event(
                event_type="order.created",
                occurred_at=order.created_at,
                order=order,
                trace_ctx=trace_ctx,
            ),
        )
        return to_order_response(order)

    def _create(self, request_dto: CreateOrderRequest, waiter_id: WaiterId) -> Order:
        table_id = TableId(request_dto.table_id)
        now = datetime.now(timezone.utc)

        with self._unit_of_work as uow:
            table = uow.tables.get(table_id, for_update=True)
            if table is None:
                raise TableNotFoundError(f"table {table_id} not found")
            if table.status != TableStatus.OCCUPIED:
                raise TableNotOccupiedError(
                    f"table {table_id} is {table.status.value}, orders need an OCCUPIED table",
                    current_status=table.status.value,
                )

            requested_ids = [MenuItemId(line.item_id) for line in request_dto.lines]
            catalog_items = uow.menu.get_items(requested_ids)
            resolve_items(catalog_items, requested_ids)

            order_number = self._allocate_order_number(uow, now)
            order = create_pending_order(
                order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
                order_number=order_number,
                waiter_id=waiter_id,
                table_id=table_id,
                lines=build_lines(catalog_items, request_dto.lines),
                notes=request_dto.notes,
                now=now,
            )
            uow.orders.add(order)
            uow.commit()
        return order

    def _allocate_order_number(self, uow: UnitOfWork, now: datetime) -> str:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            candidate = self._order_number_generator(now)
            if not uow.orders.order_number_exists(candidate):
                return candidate
        raise OrderNumberExhaustedError("could not allocate a unique order number")
