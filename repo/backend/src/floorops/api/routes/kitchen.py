from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from floorops.api.dependencies import get_unit_of_work
from floorops.application.dto.responses import KitchenViewResponse, WaiterOrdersResponse
from floorops.application.ports.repositories import UnitOfWork
from floorops.application.use_cases.kitchen_view import KitchenView
from floorops.application.use_cases.list_orders import WaiterOrders
from floorops.domain.common.ids import WaiterId

router = APIRouter()


@router.get("/v1/kitchen/orders", response_model=KitchenViewResponse)
def kitchen_orders(unit_of_work: UnitOfWork = Depends(get_unit_of_work)) -> KitchenViewResponse:
    return KitchenView(unit_of_work).execute()


@router.get("/v1/waiters/{waiter_id}/orders", response_model=WaiterOrdersResponse)
def waiter_orders(
    waiter_id: str = Path(min_length=1, max_length=50),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
) -> WaiterOrdersResponse:
    return WaiterOrders(unit_of_work).execute(WaiterId(waiter_id))
