from __future__ import annotations

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from floorops.application.ports.repositories import MenuCatalog
from floorops.domain.common.ids import MenuItemId
from floorops.domain.common.money import Money
from floorops.domain.menu.entities import MenuItem
from floorops.infrastructure.db.models.menu import MenuItemModel


class SqlAlchemyMenuCatalog(MenuCatalog):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_items(self, item_ids: Iterable[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        ids = sorted({str(item_id) for item_id in item_ids})
        if not ids:
            return {}
        statement = select(MenuItemModel).where(MenuItemModel.id.in_(ids))
        models = self._session.execute(statement).scalars().all()
        return {MenuItemId(model.id): self._to_domain(model) for model in models}

    def list_items(self, available_only: bool) -> list[MenuItem]:
        statement = select(MenuItemModel)
        if available_only:
            statement = statement.where(MenuItemModel.is_available.is_(True))
        statement = statement.order_by(MenuItemModel.category, MenuItemModel.name)
        return [self._to_domain(model) for model in self._session.execute(statement).scalars()]

    def _to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            name=model.name,
            description=model.description,
            price=Money(amount_cents=model.price_cents, currency=model.currency),
            category=model.category,
            is_available=model.is_available,
        )
