from __future__ import annotations

from floorops.application.dto.responses import MenuItemListResponse
from floorops.application.mappers.menu_mapper import to_menu_item_list_response
from floorops.application.ports.repositories import UnitOfWork


class ListMenuItems:
    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def execute(self, available_only: bool = False) -> MenuItemListResponse:
        with self._unit_of_work as uow:
            items = uow.menu.list_items(available_only=available_only)
        return to_menu_item_list_response(items)
