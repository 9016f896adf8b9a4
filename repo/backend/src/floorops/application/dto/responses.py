from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str
    amount: str


class MenuItemResponse(BaseModel):
    itemId: str
    name: str
    description: str | None = None
    category: str
    price: MoneyResponse
    isAvailable: bool


class MenuItemListResponse(BaseModel):
    items: list[MenuItemResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: str
    number: int
    capacity: int
    location: str | None = None
    status: str
    allowedTransitions: list[str] = Field(default_factory=list)
    createdAt: datetime


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class PaginationResponse(BaseModel):
    page: int
    pageSize: int
    totalItems: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class OrderLineResponse(BaseModel):
    lineId: str
    itemId: str
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse
    notes: str | None = None
    status: str


class OrderResponse(BaseModel):
    orderId: str
    orderNumber: str
    waiterId: str
    tableId: str
    status: str
    allowedTransitions: list[str] = Field(default_factory=list)
    lines: list[OrderLineResponse] = Field(default_factory=list)
    total: MoneyResponse
    notes: str | None = None
    cancelReason: str | None = None
    version: int
    createdAt: datetime
    updatedAt: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    pagination: PaginationResponse


class KitchenOrderResponse(OrderResponse):
    elapsedMinutes: int
    priority: str


class KitchenSummaryResponse(BaseModel):
    pending: int
    preparing: int
    totalLines: int


class KitchenViewResponse(BaseModel):
    pending: list[KitchenOrderResponse] = Field(default_factory=list)
    preparing: list[KitchenOrderResponse] = Field(default_factory=list)
    summary: KitchenSummaryResponse


class WaiterOrdersResponse(BaseModel):
    waiterId: str
    orders: list[OrderResponse] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict)


class ReservationResponse(BaseModel):
    reservationId: str
    tableId: str
    customerName: str
    phone: str | None = None
    email: str | None = None
    partySize: int
    reservationDate: date
    reservationTime: str
    status: str
    allowedTransitions: list[str] = Field(default_factory=list)
    notes: str | None = None
    createdAt: datetime


class ReservationListResponse(BaseModel):
    reservations: list[ReservationResponse] = Field(default_factory=list)
    pagination: PaginationResponse


class TodayReservationsResponse(BaseModel):
    day: date
    reservations: list[ReservationResponse] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict)


class AvailabilityResponse(BaseModel):
    available: bool
    reservationDate: date
    reservationTime: str
    partySize: int
    tables: list[TableResponse] = Field(default_factory=list)


class OrderLineMutationResponse(BaseModel):
    line: OrderLineResponse
    order: OrderResponse
