from __future__ import annotations

from floorops.application.dto.responses import OrderLineResponse, OrderResponse
from floorops.application.mappers.money_mapper import to_money_response
from floorops.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        orderNumber=order.order_number,
        waiterId=str(order.waiter_id),
        tableId=str(order.table_id),
        status=order.status.value,
        allowedTransitions=sorted(status.value for status in order.allowed_transitions),
        lines=[
            OrderLineResponse(
                lineId=str(line.line_id),
                itemId=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unitPrice=to_money_response(line.unit_price),
                lineTotal=to_money_response(line.line_total),
                notes=line.notes,
                status=line.status.value,
            )
            for line in order.lines
        ],
        total=to_money_response(order.total),
        notes=order.notes,
        cancelReason=order.cancel_reason,
        version=order.version,
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )
