from __future__ import annotations

import logging
from datetime import datetime, timezone

from floorops.application.dto.requests import OrderLineRequest, UpdateOrderLineRequest
from floorops.application.dto.responses import OrderLineMutationResponse, OrderResponse
from floorops.application.mappers.event_envelope import serialize_order_event
from floorops.application.mappers.order_mapper import to_order_response
from floorops.application.ports.publisher import EventPublisher, publish_quietly
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.order_mutation import (
    load_order_for_update,
    order_rules,
    save_order,
)
from floorops.application.use_cases.place_order import build_lines, resolve_items
from floorops.domain.common.ids import MenuItemId, OrderId, OrderLineId
from floorops.domain.order.entities import Order, OrderNotModifiableError, OrderStatus

logger = logging.getLogger(__name__)


class _OrderLineUseCase:
    def __init__(self, unit_of_work: UnitOfWork, publisher: EventPublisher) -> None:
        self._unit_of_work = unit_of_work
        self._publisher = publisher

    def _announce(self, order: Order, trace_ctx: TraceContext) -> None:
        logger.info(
            "order_lines_changed",
            extra={"order_id": str(order.order_id), "table_id": str(order.table_id)},
        )
        publish_quietly(
            self._publisher,
            serialize_order_event(
                event_type="order.lines_changed",
                occurred_at=order.updated_at or datetime.now(timezone.utc),
                order=order,
                trace_ctx=trace_ctx,
            ),
        )


def _line_response(order: Order, line_id: OrderLineId) -> OrderLineMutationResponse:
    order_response = to_order_response(order)
    line_response = next(line for line in order_response.lines if line.lineId == str(line_id))
    return OrderLineMutationResponse(line=line_response, order=order_response)


class AddOrderLine(_OrderLineUseCase):
    def execute(
        self,
        order_id: OrderId,
        request_dto: OrderLineRequest,
        trace_ctx: TraceContext,
    ) -> OrderLineMutationResponse:
        now = datetime.now(timezone.utc)
        with self._unit_of_work as uow, order_rules():
            order = load_order_for_update(uow, order_id)
            if order.status != OrderStatus.PENDING:
                raise OrderNotModifiableError(order.status)

            item_id = MenuItemId(request_dto.item_id)
            catalog_items = uow.menu.get_items([item_id])
            resolve_items(catalog_items, [item_id])
            line = build_lines(catalog_items, [request_dto])[0]

            updated = save_order(uow, order, order.add_line(line, now))
            uow.commit()

        self._announce(updated, trace_ctx)
        return _line_response(updated, line.line_id)


class UpdateOrderLine(_OrderLineUseCase):
    def execute(
        self,
        order_id: OrderId,
        line_id: OrderLineId,
        request_dto: UpdateOrderLineRequest,
        trace_ctx: TraceContext,
    ) -> OrderLineMutationResponse:
        now = datetime.now(timezone.utc)
        with self._unit_of_work as uow, order_rules():
            order = load_order_for_update(uow, order_id)
            changed = order.update_line(
                line_id,
                quantity=request_dto.quantity,
                notes=request_dto.notes,
                now=now,
            )
            updated = save_order(uow, order, changed)
            uow.commit()

        self._announce(updated, trace_ctx)
        return _line_response(updated, line_id)


class RemoveOrderLine(_OrderLineUseCase):
    def execute(
        self,
        order_id: OrderId,
        line_id: OrderLineId,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        now = datetime.now(timezone.utc)
        with self._unit_of_work as uow, order_rules():
            order = load_order_for_update(uow, order_id)
            updated = save_order(uow, order, order.remove_line(line_id, now))
            uow.commit()

        self._announce(updated, trace_ctx)
        return to_order_response(updated)
