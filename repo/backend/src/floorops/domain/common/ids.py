from __future__ import annotations

from typing import NewType

MenuItemId = NewType("MenuItemId", str)
TableId = NewType("TableId", str)
OrderId = NewType("OrderId", str)
OrderLineId = NewType("OrderLineId", str)
ReservationId = NewType("ReservationId", str)
WaiterId = NewType("WaiterId", str)
