from __future__ import annotations

import json
from itertools import count

import pytest
from floor_fakes import (
    NOW,
    FailingPublisher,
    FakePublisher,
    FakeUnitOfWork,
    InMemoryStore,
    make_table,
)

from floorops.application.dto.requests import (
    ChangeOrderStatusRequest,
    CreateOrderRequest,
    OrderLineRequest,
    UpdateOrderLineRequest,
)
from floorops.application.errors import (
    CancelReasonRequiredError,
    ConflictError,
    InvalidTransitionError,
    ItemsUnavailableError,
    LastOrderLineError,
    MenuItemNotFoundError,
    OrderNotModifiableError,
    TableNotOccupiedError,
    ValidationFailedError,
)
from floorops.application.use_cases.change_order_status import (
    ChangeOrderStatus,
    ChangeOrderStatusCommand,
)
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.get_order import GetOrder
from floorops.application.use_cases.order_lines import (
    AddOrderLine,
    RemoveOrderLine,
    UpdateOrderLine,
)
from floorops.application.use_cases.place_order import CreateOrder, generate_order_number
from floorops.domain.common.ids import OrderId, OrderLineId, TableId, WaiterId
from floorops.domain.order.entities import OrderStatus
from floorops.domain.table.entities import TableStatus

TRACE = TraceContext.empty()
WAITER = WaiterId("w_01")


@pytest.fixture
def occupied_table(store: InMemoryStore) -> None:
    table = make_table(status=TableStatus.OCCUPIED)
    store.tables[table.table_id] = table


def _create_request(*lines: tuple[str, int]) -> CreateOrderRequest:
    return CreateOrderRequest(
        table_id="tbl_001",
        lines=[OrderLineRequest(item_id=item_id, quantity=quantity) for item_id, quantity in lines],
    )


def _place(uow: FakeUnitOfWork, publisher: FakePublisher) -> str:
    response = CreateOrder(uow, publisher).execute(
        request_dto=_create_request(("itm_001", 2), ("itm_002", 1)),
        waiter_id=WAITER,
        trace_ctx=TRACE,
    )
    return response.orderId


def _advance(uow: FakeUnitOfWork, order_id: str, status: OrderStatus, reason: str | None = None):
    return ChangeOrderStatus(uow, FakePublisher()).execute(
        OrderId(order_id),
        command=ChangeOrderStatusCommand(status=status, reason=reason),
        trace_ctx=TRACE,
    )


@pytest.mark.usefixtures("occupied_table")
def test_create_order_snapshots_prices_and_totals(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    response = CreateOrder(uow, publisher).execute(
        request_dto=_create_request(("itm_001", 2), ("itm_002", 1)),
        waiter_id=WAITER,
        trace_ctx=TRACE,
    )

    assert response.total.amount == "34.50"
    assert response.total.amountCents == 3450
    assert [line.lineTotal.amount for line in response.lines] == ["31.00", "3.50"]
    assert response.status == "PENDING"
    assert response.waiterId == "w_01"
    assert response.orderNumber.startswith("PED-")
    assert json.loads(publisher.messages[0][1])["event_type"] == "order.created"


@pytest.mark.usefixtures("occupied_table")
def test_identical_create_requests_produce_distinct_orders(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    first = _place(uow, publisher)
    second = _place(uow, publisher)

    orders = uow.store.orders
    assert first != second
    assert orders[OrderId(first)].order_number != orders[OrderId(second)].order_number


@pytest.mark.usefixtures("occupied_table")
def test_order_number_collisions_are_retried(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    numbers = count(1)
    fixed = ["PED-20261019-0001", "PED-20261019-0001", "PED-20261019-0002"]

    def _generator(_now) -> str:
        return fixed[min(next(numbers) - 1, len(fixed) - 1)]

    use_case = CreateOrder(uow, publisher, order_number_generator=_generator)
    first = use_case.execute(_create_request(("itm_001", 1)), waiter_id=WAITER, trace_ctx=TRACE)
    second = use_case.execute(_create_request(("itm_001", 1)), waiter_id=WAITER, trace_ctx=TRACE)

    assert first.orderNumber == "PED-20261019-0001"
    assert second.orderNumber == "PED-20261019-0002"


def test_generated_order_numbers_follow_format() -> None:
    number = generate_order_number(NOW)

    assert number.startswith("PED-20261019-")
    assert len(number) == len("PED-20261019-0000")


def test_create_order_requires_occupied_table(
    store: InMemoryStore,
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    store.tables[TableId("tbl_001")] = make_table(status=TableStatus.AVAILABLE)

    with pytest.raises(TableNotOccupiedError) as exc_info:
        _place(uow, publisher)

    assert exc_info.value.details == {"currentStatus": "AVAILABLE"}
    assert store.orders == {}


@pytest.mark.usefixtures("occupied_table")
def test_unavailable_item_rejects_whole_order(
    store: InMemoryStore,
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    with pytest.raises(ItemsUnavailableError) as exc_info:
        CreateOrder(uow, publisher).execute(
            _create_request(("itm_001", 1), ("itm_004", 1)), waiter_id=WAITER, trace_ctx=TRACE
        )

    assert isinstance(exc_info.value, ValidationFailedError)
    assert exc_info.value.details == {}
    assert store.orders == {}


@pytest.mark.usefixtures("occupied_table")
def test_unknown_item_is_not_found(uow: FakeUnitOfWork, publisher: FakePublisher) -> None:
    with pytest.raises(MenuItemNotFoundError):
        CreateOrder(uow, publisher).execute(
            _create_request(("itm_404", 1)), waiter_id=WAITER, trace_ctx=TRACE
        )


@pytest.mark.usefixtures("occupied_table")
def test_publish_failure_does_not_fail_the_command(uow: FakeUnitOfWork) -> None:
    order_id = _place(uow, FailingPublisher())

    assert OrderId(order_id) in uow.store.orders


@pytest.mark.usefixtures("occupied_table")
def test_full_lifecycle_bumps_version(uow: FakeUnitOfWork, publisher: FakePublisher) -> None:
    order_id = _place(uow, publisher)

    _advance(uow, order_id, OrderStatus.PREPARING)
    _advance(uow, order_id, OrderStatus.READY, reason="pass")
    delivered = _advance(uow, order_id, OrderStatus.DELIVERED)

    assert delivered.status == "DELIVERED"
    assert delivered.version == 4
    assert delivered.allowedTransitions == []
    assert "Status changed to READY: pass" in (delivered.notes or "")
    assert {line.status for line in delivered.lines} == {"DELIVERED"}


@pytest.mark.usefixtures("occupied_table")
def test_preparing_to_delivered_is_invalid_transition(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    order_id = _place(uow, publisher)
    _advance(uow, order_id, OrderStatus.PREPARING)

    with pytest.raises(InvalidTransitionError) as exc_info:
        _advance(uow, order_id, OrderStatus.DELIVERED)

    assert isinstance(exc_info.value, ConflictError)
    assert exc_info.value.details == {
        "currentStatus": "PREPARING",
        "requestedStatus": "DELIVERED",
        "allowedStatuses": ["READY"],
    }
    assert GetOrder(uow).execute(OrderId(order_id)).status == "PREPARING"


@pytest.mark.usefixtures("occupied_table")
def test_cancel_without_reason_is_validation_error(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    order_id = _place(uow, publisher)
    command = ChangeOrderStatusCommand.from_request(
        ChangeOrderStatusRequest(status=OrderStatus.CANCELLED, reason="   ")
    )

    with pytest.raises(CancelReasonRequiredError):
        ChangeOrderStatus(uow, publisher).execute(OrderId(order_id), command, trace_ctx=TRACE)

    cancelled = _advance(uow, order_id, OrderStatus.CANCELLED, reason="guest left")
    assert cancelled.cancelReason == "guest left"


@pytest.mark.usefixtures("occupied_table")
def test_cancel_without_reason_on_terminal_order_is_still_validation_error(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    order_id = _place(uow, publisher)
    _advance(uow, order_id, OrderStatus.CANCELLED, reason="duplicate")

    with pytest.raises(CancelReasonRequiredError):
        _advance(uow, order_id, OrderStatus.CANCELLED)


@pytest.mark.usefixtures("occupied_table")
def test_line_edits_recompute_total(uow: FakeUnitOfWork, publisher: FakePublisher) -> None:
    order_id = OrderId(_place(uow, publisher))

    added = AddOrderLine(uow, publisher).execute(
        order_id, OrderLineRequest(item_id="itm_002", quantity=2, notes="lemon"), trace_ctx=TRACE
    )
    assert added.line.lineTotal.amount == "7.00"
    assert added.order.total.amount == "41.50"

    line_id = OrderLineId(added.line.lineId)
    updated = UpdateOrderLine(uow, publisher).execute(
        order_id, line_id, UpdateOrderLineRequest(quantity=1), trace_ctx=TRACE
    )
    assert updated.order.total.amount == "38.00"
    assert updated.line.notes == "lemon"

    removed = RemoveOrderLine(uow, publisher).execute(order_id, line_id, trace_ctx=TRACE)
    assert removed.total.amount == "34.50"
    assert len(removed.lines) == 2


@pytest.mark.usefixtures("occupied_table")
def test_last_line_cannot_be_removed(uow: FakeUnitOfWork, publisher: FakePublisher) -> None:
    response = CreateOrder(uow, publisher).execute(
        _create_request(("itm_001", 1)), waiter_id=WAITER, trace_ctx=TRACE
    )

    with pytest.raises(LastOrderLineError) as exc_info:
        RemoveOrderLine(uow, publisher).execute(
            OrderId(response.orderId), OrderLineId(response.lines[0].lineId), trace_ctx=TRACE
        )

    assert exc_info.value.code == "LAST_LINE_UNDELETABLE"
    assert len(uow.store.orders[OrderId(response.orderId)].lines) == 1


@pytest.mark.usefixtures("occupied_table")
def test_lines_cannot_change_after_kitchen_accepts(
    uow: FakeUnitOfWork,
    publisher: FakePublisher,
) -> None:
    order_id = _place(uow, publisher)
    _advance(uow, order_id, OrderStatus.PREPARING)

    with pytest.raises(OrderNotModifiableError) as exc_info:
        AddOrderLine(uow, publisher).execute(
            OrderId(order_id), OrderLineRequest(item_id="itm_002", quantity=1), trace_ctx=TRACE
        )

    assert exc_info.value.details == {"currentStatus": "PREPARING"}


@pytest.mark.usefixtures("occupied_table")
def test_adding_unavailable_item_is_rejected(uow: FakeUnitOfWork, publisher: FakePublisher) -> None:
    order_id = _place(uow, publisher)

    with pytest.raises(ItemsUnavailableError):
        AddOrderLine(uow, publisher).execute(
            OrderId(order_id), OrderLineRequest(item_id="itm_004", quantity=1), trace_ctx=TRACE
        )

    assert uow.store.orders[OrderId(order_id)].total.amount_cents == 3450
