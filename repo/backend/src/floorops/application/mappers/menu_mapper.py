from __future__ import annotations

from floorops.application.dto.responses import MenuItemListResponse, MenuItemResponse
from floorops.application.mappers.money_mapper import to_money_response
from floorops.domain.menu.entities import MenuItem


def to_menu_item_list_response(items: list[MenuItem]) -> MenuItemListResponse:
    return MenuItemListResponse(
        items=[
            MenuItemResponse(
                itemId=str(item.item_id),
                name=item.name,
                description=item.description,
                category=item.category,
                price=to_money_response(item.price),
                isAvailable=item.is_available,
            )
            for item in items
        ]
    )
