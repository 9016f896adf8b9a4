from __future__ import annotations

from datetime import date
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from floorops.domain.order.entities import OrderStatus
from floorops.domain.table.entities import TableStatus

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Length is checked after stripping, matching the domain rule.
CustomerName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)
]


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class CreateTableRequest(CamelBaseModel):
    number: int = Field(ge=1)
    capacity: int = Field(ge=1, le=20)
    location: str | None = Field(default=None, max_length=50)


class UpdateTableRequest(CamelBaseModel):
    number: int | None = Field(default=None, ge=1)
    capacity: int | None = Field(default=None, ge=1, le=20)
    location: str | None = Field(default=None, max_length=50)

    @model_validator(mode="after")
    def _require_change(self) -> UpdateTableRequest:
        if self.number is None and self.capacity is None and self.location is None:
            raise ValueError("at least one of number, capacity, location is required")
        return self


class ChangeTableStatusRequest(CamelBaseModel):
    status: TableStatus
    reason: str | None = Field(default=None, max_length=500)


class OrderLineRequest(CamelBaseModel):
    item_id: str = Field(min_length=1)
    quantity: int = Field(ge=1, le=100)
    notes: str | None = Field(default=None, max_length=500)


class CreateOrderRequest(CamelBaseModel):
    table_id: str = Field(min_length=1)
    lines: list[OrderLineRequest] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=500)


class UpdateOrderLineRequest(CamelBaseModel):
    quantity: int | None = Field(default=None, ge=1, le=100)
    notes: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _require_change(self) -> UpdateOrderLineRequest:
        if self.quantity is None and self.notes is None:
            raise ValueError("at least one of quantity, notes is required")
        return self


class ChangeOrderStatusRequest(CamelBaseModel):
    status: OrderStatus
    reason: str | None = Field(default=None, max_length=500)


class CreateReservationRequest(CamelBaseModel):
    customer_name: CustomerName
    phone: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    party_size: int = Field(ge=1, le=20)
    reservation_date: date
    reservation_time: str = Field(pattern=HHMM_PATTERN)
    preferred_table_id: str | None = None
    notes: str | None = Field(default=None, max_length=500)


class UpdateReservationRequest(CamelBaseModel):
    customer_name: CustomerName | None = None
    phone: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    party_size: int | None = Field(default=None, ge=1, le=20)
    reservation_date: date | None = None
    reservation_time: str | None = Field(default=None, pattern=HHMM_PATTERN)
    table_id: str | None = None
    notes: str | None = Field(default=None, max_length=500)


class CancelReservationRequest(CamelBaseModel):
    reason: str = Field(min_length=1, max_length=500)


class CheckAvailabilityRequest(CamelBaseModel):
    reservation_date: date
    reservation_time: str = Field(pattern=HHMM_PATTERN)
    party_size: int = Field(ge=1, le=20)
