from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from floorops.application import errors
from floorops.application.ports.repositories import OptimisticConcurrencyError, UnitOfWork
from floorops.domain.common.ids import OrderId
from floorops.domain.order import entities as order_entities
from floorops.domain.order.entities import Order


def load_order_for_update(uow: UnitOfWork, order_id: OrderId) -> Order:
    order = uow.orders.get(order_id, for_update=True)
    if order is None:
        raise errors.OrderNotFoundError(f"order {order_id} not found")
    return order


def save_order(uow: UnitOfWork, original: Order, updated: Order) -> Order:
    try:
        return uow.orders.save(updated, expected_version=original.version)
    except OptimisticConcurrencyError as exc:
        raise errors.ConcurrentModificationError(
            f"order {original.order_id} was modified concurrently, reload and retry",
            details={"expectedVersion": original.version},
        ) from exc


@contextmanager
def order_rules() -> Iterator[None]:
    """Translate order domain rule violations into application errors."""
    try:
        yield
    except order_entities.OrderTransitionError as exc:
        raise errors.InvalidTransitionError(
            str(exc),
            current=exc.current.value,
            requested=exc.requested.value,
            allowed=[status.value for status in exc.allowed],
        ) from exc
    except order_entities.OrderNotModifiableError as exc:
        raise errors.OrderNotModifiableError(
            str(exc),
            details={"currentStatus": exc.status.value},
        ) from exc
    except order_entities.OrderLineNotFoundError as exc:
        raise errors.OrderLineNotFoundError(str(exc)) from exc
    except order_entities.LastOrderLineError as exc:
        raise errors.LastOrderLineError(str(exc), details={"remainingLines": 1}) from exc
