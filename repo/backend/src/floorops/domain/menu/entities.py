from __future__ import annotations

from dataclasses import dataclass

from floorops.domain.common.ids import MenuItemId
from floorops.domain.common.money import Money

MAX_NAME_LENGTH = 255


@dataclass(frozen=True)
class MenuItem:
    """A catalog entry. Orders copy name and price when a line is built."""

    item_id: MenuItemId
    name: str
    description: str | None
    price: Money
    category: str
    is_available: bool

    def __post_init__(self) -> None:
        if not self.name.strip() or len(self.name) > MAX_NAME_LENGTH:
            raise ValueError(f"name must be 1..{MAX_NAME_LENGTH} characters")
        if not self.category.strip():
            raise ValueError("category must be non-empty")
