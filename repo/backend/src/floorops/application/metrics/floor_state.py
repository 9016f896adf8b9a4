from __future__ import annotations

from prometheus_client import Counter, Gauge

from floorops.domain.order.entities import OrderStatus
from floorops.domain.reservation.entities import ReservationStatus
from floorops.domain.table.entities import TableStatus

ORDERS_CREATED_TOTAL = Counter(
    "floorops_orders_created_total",
    "Total number of orders created.",
)

ORDER_TRANSITION_TOTAL = Counter(
    "floorops_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

TABLE_TRANSITION_TOTAL = Counter(
    "floorops_table_transition_total",
    "Total number of accepted table status transitions.",
    ["from", "to"],
)

TABLE_CONFLICTS_TOTAL = Counter(
    "floorops_table_conflicts_total",
    "Total number of table compare-and-swap transitions rejected.",
    ["operation"],
)

RESERVATION_TRANSITION_TOTAL = Counter(
    "floorops_reservation_transition_total",
    "Total number of reservation lifecycle transitions.",
    ["from", "to"],
)

RESERVATION_SLOT_CONFLICTS_TOTAL = Counter(
    "floorops_reservation_slot_conflicts_total",
    "Total number of reservation requests rejected for a taken slot.",
)

KITCHEN_QUEUE_SIZE = Gauge(
    "floorops_kitchen_queue_size",
    "Current number of orders in the kitchen view.",
    ["status"],
)


def record_order_created() -> None:
    ORDERS_CREATED_TOTAL.inc()


def record_order_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_table_transition(from_status: TableStatus, to_status: TableStatus) -> None:
    TABLE_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_table_conflict(operation: str) -> None:
    TABLE_CONFLICTS_TOTAL.labels(operation=operation).inc()


def record_reservation_transition(
    from_status: ReservationStatus | None,
    to_status: ReservationStatus,
) -> None:
    source = from_status.value if from_status is not None else "NEW"
    RESERVATION_TRANSITION_TOTAL.labels(**{"from": source, "to": to_status.value}).inc()


def record_slot_conflict() -> None:
    RESERVATION_SLOT_CONFLICTS_TOTAL.inc()


def record_kitchen_queue_size(status: OrderStatus, size: int) -> None:
    KITCHEN_QUEUE_SIZE.labels(status=status.value).set(size)
