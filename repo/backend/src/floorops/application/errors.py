from __future__ import annotations

from typing import Any, Iterable


class FloorOpsError(Exception):
    code = "FLOOROPS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class ValidationFailedError(FloorOpsError):
    code = "VALIDATION_FAILED"


class NotFoundError(FloorOpsError):
    code = "NOT_FOUND"


class ConflictError(FloorOpsError):
    code = "CONFLICT"


class InvalidTransitionError(ConflictError):
    code = "INVALID_TRANSITION"

    def __init__(self, message: str, current: str, requested: str, allowed: Iterable[str]) -> None:
        super().__init__(
            message,
            details={
                "currentStatus": current,
                "requestedStatus": requested,
                "allowedStatuses": sorted(allowed),
            },
        )


class TableNotFoundError(NotFoundError):
    code = "TABLE_NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"


class OrderLineNotFoundError(NotFoundError):
    code = "ORDER_LINE_NOT_FOUND"


class ReservationNotFoundError(NotFoundError):
    code = "RESERVATION_NOT_FOUND"


class MenuItemNotFoundError(NotFoundError):
    code = "MENU_ITEM_NOT_FOUND"


class NoTableAvailableError(NotFoundError):
    code = "NO_TABLE_AVAILABLE"


class TableStatusConflictError(ConflictError):
    code = "TABLE_NOT_AVAILABLE"

    def __init__(self, message: str, current_status: str | None) -> None:
        super().__init__(message, details={"currentStatus": current_status})
        self.current_status = current_status


class TableNotOccupiedError(TableStatusConflictError):
    code = "TABLE_NOT_OCCUPIED"


class DuplicateTableNumberError(ConflictError):
    code = "DUPLICATE_TABLE_NUMBER"


class TableDeletionBlockedError(ConflictError):
    code = "TABLE_DELETION_BLOCKED"


class ItemsUnavailableError(ValidationFailedError):
    code = "ITEMS_UNAVAILABLE"


class OrderNotModifiableError(ConflictError):
    code = "ORDER_NOT_MODIFIABLE"


class LastOrderLineError(ConflictError):
    code = "LAST_LINE_UNDELETABLE"


class CancelReasonRequiredError(ValidationFailedError):
    code = "CANCEL_REASON_REQUIRED"


class ConcurrentModificationError(ConflictError):
    code = "CONCURRENT_MODIFICATION"


class OrderNumberExhaustedError(ConflictError):
    code = "ORDER_NUMBER_UNAVAILABLE"


class ReservationSlotConflictError(ConflictError):
    code = "RESERVATION_SLOT_TAKEN"


class ReservationNotModifiableError(ConflictError):
    code = "RESERVATION_NOT_MODIFIABLE"


class ReservationStatusConflictError(ConflictError):
    code = "RESERVATION_STATUS_CONFLICT"

    def __init__(self, message: str, current_status: str | None) -> None:
        super().__init__(message, details={"currentStatus": current_status})
        self.current_status = current_status


class TableCapacityError(ValidationFailedError):
    code = "TABLE_CAPACITY_EXCEEDED"
