from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from floorops.application.use_cases.context import TraceContext
from floorops.domain.common.money import Money
from floorops.domain.order.entities import Order, OrderLine
from floorops.domain.reservation.entities import Reservation
from floorops.domain.table.entities import Table

EVENT_SCHEMA_VERSION = 1
EVENT_SOURCE = "floorops"


def _encode(event_type: str, occurred_at: datetime, trace_ctx: TraceContext, payload: Any) -> str:
    return json.dumps(
        {
            "event_id": uuid4().hex,
            "event_type": event_type,
            "schema_version": EVENT_SCHEMA_VERSION,
            "source": EVENT_SOURCE,
            "occurred_at": occurred_at.isoformat(),
            "request_id": trace_ctx.request_id,
            "trace_id": trace_ctx.trace_id,
            "payload": payload,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )


def _money(money: Money) -> dict[str, Any]:
    return {"amountCents": money.amount_cents, "currency": money.currency}


def _line(line: OrderLine) -> dict[str, Any]:
    return {
        "lineId": str(line.line_id),
        "itemId": str(line.item_id),
        "name": line.name,
        "quantity": line.quantity,
        "lineTotalCents": line.line_total.amount_cents,
        "notes": line.notes,
    }


def serialize_table_event(
    *,
    occurred_at: datetime,
    table: Table,
    previous_status: str,
    trace_ctx: TraceContext,
    reason: str | None = None,
) -> str:
    payload = {
        "tableId": str(table.table_id),
        "number": table.number,
        "previousStatus": previous_status,
        "status": table.status.value,
        "reason": reason,
    }
    return _encode("table.status_changed", occurred_at, trace_ctx, payload)


def serialize_order_event(
    *,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_ctx: TraceContext,
) -> str:
    payload = {
        "orderId": str(order.order_id),
        "orderNumber": order.order_number,
        "tableId": str(order.table_id),
        "waiterId": str(order.waiter_id),
        "status": order.status.value,
        "version": order.version,
        "totalMoney": _money(order.total),
        "lines": [_line(line) for line in order.lines],
    }
    return _encode(event_type, occurred_at, trace_ctx, payload)


def serialize_reservation_event(
    *,
    event_type: str,
    occurred_at: datetime,
    reservation: Reservation,
    trace_ctx: TraceContext,
) -> str:
    payload = {
        "reservationId": str(reservation.reservation_id),
        "tableId": str(reservation.table_id),
        "status": reservation.status.value,
        "partySize": reservation.party_size,
        "reservationDate": reservation.reservation_date.isoformat(),
        "reservationTime": reservation.reservation_time.strftime("%H:%M"),
    }
    return _encode(event_type, occurred_at, trace_ctx, payload)
