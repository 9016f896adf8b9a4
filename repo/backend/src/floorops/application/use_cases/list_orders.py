from __future__ import annotations

from datetime import date

from floorops.application.dto.responses import OrderListResponse, WaiterOrdersResponse
from floorops.application.mappers.order_mapper import to_order_response
from floorops.application.ports.repositories import OrderFilters, UnitOfWork
from floorops.application.use_cases.pagination import parse_page_request, to_pagination_response
from floorops.domain.common.ids import TableId, WaiterId
from floorops.domain.order.entities import ACTIVE_ORDER_STATUSES, OrderStatus


class ListOrders:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(
        self,
        status: OrderStatus | None = None,
        table_id: TableId | None = None,
        waiter_id: WaiterId | None = None,
        on_date: date | None = None,
        page: str | int | None = None,
        page_size: str | int | None = None,
    ) -> OrderListResponse:
        page_request = parse_page_request(page, page_size)
        filters = OrderFilters(
            status=status,
            table_id=table_id,
            waiter_id=waiter_id,
            on_date=on_date,
        )
        with self._unit_of_work as uow:
            orders, total = uow.orders.list(
                filters,
                offset=page_request.offset,
                limit=page_request.page_size,
            )
        return OrderListResponse(
            orders=[to_order_response(order) for order in orders],
            pagination=to_pagination_response(page_request, total),
        )


class WaiterOrders:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, waiter_id: WaiterId) -> WaiterOrdersResponse:
        with self._unit_of_work as uow:
            orders = uow.orders.list_active_for_waiter(waiter_id)

        counts = {status.value: 0 for status in sorted(ACTIVE_ORDER_STATUSES)}
        for order in orders:
            counts[order.status.value] += 1
        return WaiterOrdersResponse(
            waiterId=str(waiter_id),
            orders=[to_order_response(order) for order in orders],
            counts=counts,
        )
