from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

from floorops.api.dependencies import (
    ID_PATTERN,
    current_trace_context,
    get_publisher,
    get_unit_of_work,
)
from floorops.application.dto.requests import (
    ChangeTableStatusRequest,
    CreateTableRequest,
    UpdateTableRequest,
)
from floorops.application.dto.responses import TableListResponse, TableResponse
from floorops.application.ports.publisher import EventPublisher
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.table_lifecycle import (
    AssignTable,
    ChangeTableStatus,
    ReleaseTable,
)
from floorops.application.use_cases.table_registry import (
    CreateTable,
    DeleteTable,
    GetTable,
    ListAvailableTables,
    ListTables,
    UpdateTable,
)
from floorops.domain.common.ids import TableId
from floorops.domain.table.entities import TableStatus

router = APIRouter(prefix="/v1/tables")


@router.get("", response_model=TableListResponse)
def list_tables(
    table_status: TableStatus | None = Query(default=None, alias="status"),
    location: str | None = Query(default=None, max_length=50),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TableListResponse:
    return ListTables(unit_of_work).execute(status=table_status, location=location)


@router.get("/available", response_model=TableListResponse)
def list_available_tables(
    min_capacity: int | None = Query(default=None, alias="minCapacity", ge=1, le=20),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TableListResponse:
    return ListAvailableTables(unit_of_work).execute(min_capacity=min_capacity)


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def create_table(
    request_dto: CreateTableRequest,
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TableResponse:
    return CreateTable(unit_of_work).execute(request_dto)


@router.get("/{table_id}", response_model=TableResponse)
def get_table(
    table_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TableResponse:
    return GetTable(unit_of_work).execute(TableId(table_id))


@router.put("/{table_id}", response_model=TableResponse)
def update_table(
    request_dto: UpdateTableRequest,
    table_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TableResponse:
    return UpdateTable(unit_of_work).execute(TableId(table_id), request_dto)


@router.delete("/{table_id}", response_model=TableResponse)
def delete_table(
    table_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> TableResponse:
    return DeleteTable(unit_of_work).execute(TableId(table_id))


@router.post("/{table_id}/assign", response_model=TableResponse)
def assign_table(
    table_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> TableResponse:
    return AssignTable(unit_of_work, publisher).execute(TableId(table_id), trace_ctx=trace_ctx)


@router.post("/{table_id}/release", response_model=TableResponse)
def release_table(
    table_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> TableResponse:
    return ReleaseTable(unit_of_work, publisher).execute(TableId(table_id), trace_ctx=trace_ctx)


@router.put("/{table_id}/status", response_model=TableResponse)
def change_table_status(
    request_dto: ChangeTableStatusRequest,
    table_id: str = Path(pattern=ID_PATTERN),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
    publisher: EventPublisher = Depends(get_publisher),
    trace_ctx: TraceContext = Depends(current_trace_context),
) -> TableResponse:
    return ChangeTableStatus(unit_of_work, publisher).execute(
        TableId(table_id),
        target=request_dto.status,
        trace_ctx=trace_ctx,
        reason=request_dto.reason,
    )
