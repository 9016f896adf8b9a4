from __future__ import annotations

import logging
import os

from sqlalchemy import Engine, inspect
from sqlalchemy.orm import Session

from floorops.domain.table.entities import TableStatus
from floorops.infrastructure.db.models.menu import MenuItemModel
from floorops.infrastructure.db.models.table import TableModel
from floorops.infrastructure.db.session import get_engine
from floorops.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger(__name__)

REQUIRED_TABLES = {"menu_items", "tables", "orders", "order_lines", "reservations"}

TABLES = [
    {"id": "tbl_001", "number": 1, "capacity": 2, "location": "window"},
    {"id": "tbl_002", "number": 2, "capacity": 4, "location": "main"},
    {"id": "tbl_003", "number": 3, "capacity": 4, "location": "main"},
    {"id": "tbl_004", "number": 4, "capacity": 6, "location": "terrace"},
    {"id": "tbl_005", "number": 5, "capacity": 8, "location": "private"},
    {"id": "tbl_006", "number": 6, "capacity": 2, "location": "bar"},
]

MENU_ITEMS = [
    {
        "id": "itm_001",
        "name": "Grilled Salmon",
        "description": "Lemon butter, seasonal greens",
        "category": "mains",
        "price_cents": 1550,
        "is_available": True,
    },
    {
        "id": "itm_002",
        "name": "Iced Tea",
        "description": "House brewed, unsweetened",
        "category": "drinks",
        "price_cents": 350,
        "is_available": True,
    },
    {
        "id": "itm_003",
        "name": "Caesar Salad",
        "description": "Romaine, croutons, parmesan",
        "category": "starters",
        "price_cents": 990,
        "is_available": True,
    },
    {
        "id": "itm_004",
        "name": "Tiramisu",
        "description": "Espresso-soaked ladyfingers",
        "category": "desserts",
        "price_cents": 850,
        "is_available": False,
    },
    {
        "id": "itm_005",
        "name": "Margherita Pizza",
        "description": "Tomato, mozzarella, basil",
        "category": "mains",
        "price_cents": 1450,
        "is_available": True,
    },
]


def seed(engine: Engine, currency: str = "USD") -> bool:
    if not REQUIRED_TABLES.issubset(set(inspect(engine).get_table_names())):
        logger.warning("seed_skipped_no_schema")
        return False

    with Session(engine) as session:
        # Existing tables keep their live status; only missing ones are created.
        for table in TABLES:
            if session.get(TableModel, table["id"]) is None:
                session.add(TableModel(status=TableStatus.AVAILABLE.value, **table))

        for item in MENU_ITEMS:
            session.merge(MenuItemModel(currency=currency, **item))

        session.commit()

    logger.info("seed_complete")
    return True


def main() -> None:
    configure_logging()
    currency = os.getenv("FLOOROPS_CURRENCY", "USD").upper()
    if not seed(get_engine(timeout_seconds=2.0), currency=currency):
        raise SystemExit("no schema yet, run alembic upgrade head first")


if __name__ == "__main__":
    main()
