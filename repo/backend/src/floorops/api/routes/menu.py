from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from floorops.api.dependencies import get_unit_of_work
from floorops.application.dto.responses import MenuItemListResponse
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.list_menu import ListMenuItems

router = APIRouter()


@router.get("/v1/menu/items", response_model=MenuItemListResponse)
def list_menu_items(
    available_only: bool = Query(default=False, alias="availableOnly"),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> MenuItemListResponse:
    return ListMenuItems(unit_of_work).execute(available_only=available_only)
