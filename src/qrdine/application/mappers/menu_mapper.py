from __future__ import annotations

from qrdine.application.dto.responses import (
    CategoryResponse,
    LocalizedTextResponse,
    MenuItemResponse,
    MenuResponse,
    PriceVariantResponse,
    QuickActionResponse,
)
from qrdine.application.use_cases.get_menu import MenuCatalog
from qrdine.domain.menu.entities import LocalizedText, MenuItem
from qrdine.domain.order.totals import format_money
from qrdine.domain.quick_action.entities import QuickAction


def to_text_response(text: LocalizedText | None) -> LocalizedTextResponse | None:
    if text is None:
        return None
    return LocalizedTextResponse(en=text.en, ar=text.ar)


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        itemId=str(item.item_id),
        name=LocalizedTextResponse(en=item.name.en, ar=item.name.ar),
        description=to_text_response(item.description),
        categoryId=str(item.category_id) if item.category_id is not None else None,
        isAvailable=item.is_available,
        prepTimeMinutes=item.prep_time_minutes,
        imageUrl=item.image_url,
        variants=[
            PriceVariantResponse(
                priceId=str(variant.price_id),
                size=LocalizedTextResponse(en=variant.size.en, ar=variant.size.ar),
                price=format_money(variant.price),
            )
            for variant in item.variants
        ],
    )


def to_quick_action_response(action: QuickAction) -> QuickActionResponse:
    return QuickActionResponse(
        actionId=str(action.action_id),
        label=LocalizedTextResponse(en=action.label.en, ar=action.label.ar),
        displayOrder=action.display_order,
    )


def to_menu_response(catalog: MenuCatalog) -> MenuResponse:
    return MenuResponse(
        categories=[
            CategoryResponse(
                categoryId=str(category.category_id),
                name=LocalizedTextResponse(en=category.name.en, ar=category.name.ar),
                displayOrder=category.display_order,
            )
            for category in catalog.categories
        ],
        items=[to_menu_item_response(item) for item in catalog.items],
        quickActions=[to_quick_action_response(action) for action in catalog.quick_actions],
    )
