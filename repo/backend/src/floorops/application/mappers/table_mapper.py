from __future__ import annotations

from floorops.application.dto.responses import TableListResponse, TableResponse
from floorops.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=str(table.table_id),
        number=table.number,
        capacity=table.capacity,
        location=table.location,
        status=table.status.value,
        allowedTransitions=sorted(status.value for status in table.allowed_transitions()),
        createdAt=table.created_at,
    )


def to_table_list_response(tables: list[Table]) -> TableListResponse:
    return TableListResponse(tables=[to_table_response(table) for table in tables])
