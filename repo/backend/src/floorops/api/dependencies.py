from __future__ import annotations

from fastapi import Header
from opentelemetry import trace

from floorops.api.middleware.request_id import get_request_id
from floorops.application.ports.publisher import EventPublisher
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.domain.common.ids import WaiterId
from floorops.infrastructure.db.unit_of_work import SqlAlchemyUnitOfWork
from floorops.infrastructure.messaging.redis_publisher import RedisEventPublisher

DEFAULT_WAITER_ID = "unassigned"
ID_PATTERN = r"^[A-Za-z0-9_-]{1,50}$"


def get_unit_of_work() -> UnitOfWork:
    return SqlAlchemyUnitOfWork()


def get_publisher() -> EventPublisher:
    return RedisEventPublisher()


def _current_trace_id() -> str | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def current_trace_context() -> TraceContext:
    return TraceContext(trace_id=_current_trace_id(), request_id=get_request_id())


def current_waiter(
    x_waiter_id: str | None = Header(default=None, alias="X-Waiter-Id", max_length=50),
) -> WaiterId:
    waiter = (x_waiter_id or "").strip()
    return WaiterId(waiter or DEFAULT_WAITER_ID)
