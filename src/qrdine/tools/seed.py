from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from qrdine.infrastructure.db.models.menu import CategoryModel, ItemPriceModel, MenuItemModel
from qrdine.infrastructure.db.models.quick_action import QuickActionModel
from qrdine.infrastructure.db.session import get_engine

REQUIRED_TABLES = {"categories", "menu_items", "item_prices", "quick_actions"}

CATEGORIES = [
    {"id": "cat_drinks", "name_en": "Drinks", "name_ar": "مشروبات", "display_order": 1},
    {"id": "cat_mains", "name_en": "Mains", "name_ar": "أطباق رئيسية", "display_order": 2},
    {"id": "cat_desserts", "name_en": "Desserts", "name_ar": "حلويات", "display_order": 3},
]

MENU_ITEMS = [
    {
        "id": "itm_water",
        "category_id": "cat_drinks",
        "name_en": "Mineral Water",
        "name_ar": "ماء معدني",
        "display_order": 1,
        "prep_time_minutes": 1,
        "prices": [("prc_water", "Bottle", "زجاجة", 0.5)],
    },
    {
        "id": "itm_juice",
        "category_id": "cat_drinks",
        "name_en": "Orange Juice",
        "name_ar": "عصير برتقال",
        "display_order": 2,
        "prep_time_minutes": 5,
        "prices": [("prc_juice_s", "Small", "صغير", 2.0), ("prc_juice_l", "Large", "كبير", 3.5)],
    },
    {
        "id": "itm_grill",
        "category_id": "cat_mains",
        "name_en": "Mixed Grill",
        "name_ar": "مشاوي مشكلة",
        "display_order": 3,
        "prep_time_minutes": 25,
        "prices": [("prc_grill", "Plate", "طبق", 12.0)],
    },
    {
        "id": "itm_kunafa",
        "category_id": "cat_desserts",
        "name_en": "Kunafa",
        "name_ar": "كنافة",
        "display_order": 4,
        "prep_time_minutes": 10,
        "prices": [("prc_kunafa", "Piece", "قطعة", 4.0)],
    },
]

QUICK_ACTIONS = [
    {"id": "qa_call_waiter", "label_en": "Call waiter", "label_ar": "طلب النادل", "display_order": 1},
    {"id": "qa_bill", "label_en": "Request bill", "label_ar": "طلب الفاتورة", "display_order": 2},
]


def seed(engine: Engine) -> bool:
    """Upsert the demo menu; returns False when the schema is missing."""
    if not REQUIRED_TABLES.issubset(set(inspect(engine).get_table_names())):
        return False

    with Session(engine) as session:
        for category in CATEGORIES:
            session.merge(CategoryModel(**category, is_active=True))

        for item in MENU_ITEMS:
            fields = {key: value for key, value in item.items() if key != "prices"}
            session.merge(MenuItemModel(**fields, is_available=True))
            for order, (price_id, size_en, size_ar, price) in enumerate(item["prices"]):
                session.merge(
                    ItemPriceModel(
                        id=price_id,
                        item_id=item["id"],
                        size_en=size_en,
                        size_ar=size_ar,
                        price=price,
                        display_order=order,
                    )
                )

        for action in QUICK_ACTIONS:
            session.merge(QuickActionModel(**action, is_active=True))

        session.commit()
    return True


def main() -> None:
    if not seed(get_engine(timeout_seconds=2.0)):
        print("no schema yet")
        return
    print("seed complete")


if __name__ == "__main__":
    main()
