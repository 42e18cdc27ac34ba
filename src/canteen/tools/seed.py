from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from canteen.infrastructure.db.models.menu import CanteenModel, MenuItemModel
from canteen.infrastructure.db.models.table import TableModel
from canteen.infrastructure.db.session import get_engine
from canteen.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger(__name__)

CANTEENS = [
    {"id": "cnt_main", "name": "Main Canteen", "location": "Ground floor, Block A"},
    {"id": "cnt_annex", "name": "Annex Canteen", "location": "First floor, Block C"},
]

TABLES = [
    {
        "id": "tbl_001",
        "table_number": "T1",
        "qr_code": "qr-main-t1",
        "location": "Window",
        "canteen_location": "Main Canteen",
        "capacity": 4,
        "is_active": True,
    },
    {
        "id": "tbl_002",
        "table_number": "T2",
        "qr_code": "qr-main-t2",
        "location": "Centre",
        "canteen_location": "Main Canteen",
        "capacity": 6,
        "is_active": True,
    },
    {
        "id": "tbl_003",
        "table_number": "A1",
        "qr_code": "qr-annex-a1",
        "location": "Patio",
        "canteen_location": "Annex Canteen",
        "capacity": 2,
        "is_active": True,
    },
    {
        "id": "tbl_004",
        "table_number": "A2",
        "qr_code": "qr-annex-a2",
        "location": "Patio",
        "canteen_location": "Annex Canteen",
        "capacity": 2,
        "is_active": False,
    },
]

MENU_ITEMS = [
    {
        "id": "itm_001",
        "name": "Masala Dosa",
        "description": "Crisp rice crepe with spiced potato filling",
        "category": "main-course",
        "is_veg": True,
        "is_available": True,
        "preparation_time": 12,
        "tags": ["south-indian", "popular"],
    },
    {
        "id": "itm_002",
        "name": "Paneer Tikka",
        "description": "Char-grilled cottage cheese with peppers",
        "category": "starters",
        "is_veg": True,
        "is_available": True,
        "preparation_time": 15,
        "tags": ["grill"],
    },
    {
        "id": "itm_003",
        "name": "Chicken Biryani",
        "description": "Dum-cooked basmati rice with chicken",
        "category": "main-course",
        "is_veg": False,
        "is_available": True,
        "preparation_time": 20,
        "tags": ["popular", "spicy"],
    },
    {
        "id": "itm_004",
        "name": "Masala Chai",
        "description": "Spiced milk tea",
        "category": "beverages",
        "is_veg": True,
        "is_available": True,
        "preparation_time": 5,
        "tags": [],
    },
    {
        "id": "itm_005",
        "name": "Gulab Jamun",
        "description": "Milk dumplings in rose syrup",
        "category": "desserts",
        "is_veg": True,
        "is_available": False,
        "preparation_time": 5,
        "tags": ["sweet"],
    },
]


def _upsert(session: Session, model: type, rows: list[dict[str, object]]) -> None:
    for row in rows:
        session.execute(
            insert(model)
            .values(**row)
            .on_conflict_do_update(
                index_elements=[model.id],
                set_={key: value for key, value in row.items() if key != "id"},
            )
        )


def main() -> None:
    configure_logging()
    engine = get_engine(timeout_seconds=2.0)
    required_tables = {"canteens", "tables", "menu_items"}
    if not required_tables.issubset(set(inspect(engine).get_table_names(schema="public"))):
        logger.warning("seed_skipped", extra={"reason": "schema not migrated"})
        return

    with Session(engine) as session:
        _upsert(session, CanteenModel, CANTEENS)
        _upsert(session, TableModel, TABLES)
        _upsert(session, MenuItemModel, MENU_ITEMS)
        session.commit()

    logger.info(
        "seed_complete",
        extra={
            "canteens": len(CANTEENS),
            "tables": len(TABLES),
            "menu_items": len(MENU_ITEMS),
        },
    )


if __name__ == "__main__":
    main()
