from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from floorops.application.dto.requests import ChangeOrderStatusRequest
from floorops.application.dto.responses import OrderResponse
from floorops.application.errors import CancelReasonRequiredError
from floorops.application.mappers.event_envelope import serialize_order_event
from floorops.application.mappers.order_mapper import to_order_response
from floorops.application.metrics.floor_state import record_order_transition
from floorops.application.ports.publisher import EventPublisher, publish_quietly
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.order_mutation import (
    load_order_for_update,
    order_rules,
    save_order,
)
from floorops.domain.common.ids import OrderId
from floorops.domain.order.entities import OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeOrderStatusCommand:
    status: OrderStatus
    reason: str | None = None

    @classmethod
    def from_request(cls, request_dto: ChangeOrderStatusRequest) -> ChangeOrderStatusCommand:
        reason = request_dto.reason.strip() if request_dto.reason else None
        return cls(status=request_dto.status, reason=reason or None)

    def validate(self) -> None:
        if self.status == OrderStatus.CANCELLED and not self.reason:
            raise CancelReasonRequiredError(
                "a reason is required to cancel an order",
                details={"field": "reason"},
            )


class ChangeOrderStatus:
    def __init__(self, unit_of_work: UnitOfWork, publisher: EventPublisher) -> None:
        self._unit_of_work = unit_of_work
        self._publisher = publisher

    def execute(
        self,
        order_id: OrderId,
        command: ChangeOrderStatusCommand,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        command.validate()
        now = datetime.now(timezone.utc)

        with self._unit_of_work as uow, order_rules():
            order = load_order_for_update(uow, order_id)
            changed = order.transition_to(command.status, reason=command.reason, now=now)
            updated = save_order(uow, order, changed)
            uow.commit()

        record_order_transition(from_status=order.status, to_status=updated.status)
        logger.info(
            "order_transition_applied",
            extra={
                "order_id": str(order_id),
                "from_status": order.status.value,
                "to_status": updated.status.value,
            },
        )
        publish_quietly(
            self._publisher,
            serialize_order_event(
                event_type="order.status_changed",
                occurred_at=now,
                order=updated,
                trace_ctx=trace_ctx,
            ),
        )
        return to_order_response(updated)
