from __future__ import annotations

import logging
from datetime import datetime, timezone

from floorops.application.dto.responses import TableResponse
from floorops.application.errors import (
    InvalidTransitionError,
    TableNotFoundError,
    TableNotOccupiedError,
    TableStatusConflictError,
)
from floorops.application.mappers.event_envelope import serialize_table_event
from floorops.application.mappers.table_mapper import to_table_response
from floorops.application.metrics.floor_state import record_table_conflict, record_table_transition
from floorops.application.ports.publisher import EventPublisher, publish_quietly
from floorops.application.ports.repositories import StaleStatusError, UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.domain.common.ids import TableId
from floorops.domain.table.entities import Table, TableStatus, TableTransitionError

logger = logging.getLogger(__name__)


def transition_table(
    uow: UnitOfWork,
    table_id: TableId,
    from_status: TableStatus,
    to_status: TableStatus,
    operation: str,
    conflict_error: type[TableStatusConflictError] = TableStatusConflictError,
) -> Table:
    try:
        updated = uow.tables.transition(table_id, from_status=from_status, to_status=to_status)
    except StaleStatusError as exc:
        record_table_conflict(operation)
        logger.info(
            "table_transition_rejected",
            extra={
                "table_id": str(table_id),
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        if exc.current_status is None:
            raise TableNotFoundError(f"table {table_id} not found") from exc
        raise conflict_error(
            f"table {table_id} is {exc.current_status}, expected {from_status.value}",
            current_status=exc.current_status,
        ) from exc
    return updated


class _TableTransitionUseCase:
    operation = "transition"

    def __init__(self, unit_of_work: UnitOfWork, publisher: EventPublisher) -> None:
        self._unit_of_work = unit_of_work
        self._publisher = publisher

    def _apply(
        self,
        table_id: TableId,
        from_status: TableStatus,
        to_status: TableStatus,
        trace_ctx: TraceContext,
        conflict_error: type[TableStatusConflictError] = TableStatusConflictError,
        reason: str | None = None,
    ) -> TableResponse:
        with self._unit_of_work as uow:
            updated = transition_table(
                uow,
                table_id,
                from_status=from_status,
                to_status=to_status,
                operation=self.operation,
                conflict_error=conflict_error,
            )
            uow.commit()

        record_table_transition(from_status=from_status, to_status=to_status)
        logger.info(
            "table_transition_applied",
            extra={
                "table_id": str(table_id),
                "from_status": from_status.value,
                "to_status": to_status.value,
                "reason": reason,
            },
        )
        publish_quietly(
            self._publisher,
            serialize_table_event(
                occurred_at=datetime.now(timezone.utc),
                table=updated,
                previous_status=from_status.value,
                trace_ctx=trace_ctx,
                reason=reason,
            ),
        )
        return to_table_response(updated)


class AssignTable(_TableTransitionUseCase):
    operation = "assign"

    def execute(self, table_id: TableId, trace_ctx: TraceContext) -> TableResponse:
        return self._apply(
            table_id,
            from_status=TableStatus.AVAILABLE,
            to_status=TableStatus.OCCUPIED,
            trace_ctx=trace_ctx,
        )


class ReleaseTable(_TableTransitionUseCase):
    operation = "release"

    def execute(self, table_id: TableId, trace_ctx: TraceContext) -> TableResponse:
        return self._apply(
            table_id,
            from_status=TableStatus.OCCUPIED,
            to_status=TableStatus.AVAILABLE,
            trace_ctx=trace_ctx,
            conflict_error=TableNotOccupiedError,
        )


class ChangeTableStatus(_TableTransitionUseCase):
    operation = "change_status"

    def execute(
        self,
        table_id: TableId,
        target: TableStatus,
        trace_ctx: TraceContext,
        reason: str | None = None,
    ) -> TableResponse:
        with self._unit_of_work as uow:
            table = uow.tables.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")

        try:
            table.ensure_can_transition(target)
        except TableTransitionError as exc:
            raise InvalidTransitionError(
                str(exc),
                current=exc.current.value,
                requested=exc.requested.value,
                allowed=[status.value for status in exc.allowed],
            ) from exc

        # The status read above is only a hint; the swap below re-checks it.
        return self._apply(
            table_id,
            from_status=table.status,
            to_status=target,
            trace_ctx=trace_ctx,
            reason=(reason or "").strip() or None,
        )
