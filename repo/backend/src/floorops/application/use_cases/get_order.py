from __future__ import annotations

from floorops.application.dto.responses import OrderResponse
from floorops.application.errors import OrderNotFoundError
from floorops.application.mappers.order_mapper import to_order_response
from floorops.application.ports.repositories import UnitOfWork
from floorops.domain.common.ids import OrderId


class GetOrder:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, order_id: OrderId) -> OrderResponse:
        with self._unit_of_work as uow:
            order = uow.orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return to_order_response(order)
