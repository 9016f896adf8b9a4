from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Path, Query, status

from floorops.api.dependencies import (
    ID_PATTERN,
    current_trace_context,
    current_waiter,
    get_publisher,
    get_unit_of_work,
)
from floorops.application.dto.requests import (
    ChangeOrderStatusRequest,
    CreateOrderRequest,
    OrderLineRequest,
    UpdateOrderLineRequest,
)
from floorops.application.dto.responses import (
    OrderLineMutationResponse,
    OrderListResponse,
    OrderResponse,
)
from floorops.application.ports.publisher import EventPublisher
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.change_order_status import (
    ChangeOrderStatus,
    ChangeOrderStatusCommand,
)
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.get_order import GetOrder
from floorops.application.use_cases.list_orders import ListOrders
from floorops.application.use_cases.order_lines import (
    AddOrderLine,
    RemoveOrderLine,
    UpdateOrderLine,
)
from floorops.application.use_cases.place_order import CreateOrder
from floorops.domain.common.ids import OrderId, OrderLineId, TableId, WaiterId
from floorops.domain.order.entities import OrderStatus

router = APIRouter(prefix="/v1/orders")


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    request_dto: CreateOrderRequest,
    waiter_id: WaiterId = Depends(current_waiter),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> OrderResponse:
    return CreateOrder(unit_of_work, publisher).execute(
        request_dto=request_dto,
        waiter_id=waiter_id,
        trace_ctx=trace_ctx,
    )


@router.get("", response_model=OrderListResponse)
def list_orders(
    order_status: OrderStatus | None = Query(default=None, alias="status"),
    table_id: str | None = Query(default=None, alias="tableId", pattern=ID_PATTERN),
    waiter_id: str | None = Query(default=None, alias="waiterId", max_length=50),
    on_date: date | None = Query(default=None, alias="date"),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> OrderListResponse:
    return ListOrders(unit_of_work).execute(
        status=order_status,
        table_id=TableId(table_id) if table_id else None,
        waiter_id=WaiterId(waiter_id) if waiter_id else None,
        on_date=on_date,
        page=page,
        page_size=page_size,
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> OrderResponse:
    return GetOrder(unit_of_work).execute(order_id=OrderId(order_id))


@router.put("/{order_id}/status", response_model=OrderResponse)
def change_order_status(
    request_dto: ChangeOrderStatusRequest,
    order_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> OrderResponse:
    return ChangeOrderStatus(unit_of_work, publisher).execute(
        order_id=OrderId(order_id),
        command=ChangeOrderStatusCommand.from_request(request_dto),
        trace_ctx=trace_ctx,
    )


@router.post(
    "/{order_id}/items",
    response_model=OrderLineMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_order_line(
    request_dto: OrderLineRequest,
    order_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> OrderLineMutationResponse:
    return AddOrderLine(unit_of_work, publisher).execute(
        order_id=OrderId(order_id),
        request_dto=request_dto,
        trace_ctx=trace_ctx,
    )


@router.put("/{order_id}/items/{line_id}", response_model=OrderLineMutationResponse)
def update_order_line(
    request_dto: UpdateOrderLineRequest,
    order_id: str = Path(pattern=ID_PATTERN),
    line_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> OrderLineMutationResponse:
    return UpdateOrderLine(unit_of_work, publisher).execute(
        order_id=OrderId(order_id),
        line_id=OrderLineId(line_id),
        request_dto=request_dto,
        trace_ctx=trace_ctx,
    )


@router.delete("/{order_id}/items/{line_id}", response_model=OrderResponse)
def remove_order_line(
    order_id: str = Path(pattern=ID_PATTERN),
    line_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> OrderResponse:
    return RemoveOrderLine(unit_of_work, publisher).execute(
        order_id=OrderId(order_id),
        line_id=OrderLineId(line_id),
        trace_ctx=trace_ctx,
    )
