from __future__ import annotations

from qrdine.application.dto.requests import PlaceOrderRequest
from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.application.use_cases.submit_order import SubmitOrder, SubmittedOrder
from qrdine.domain.cart.builder import CartBuilder
from qrdine.domain.common.ids import TableNumber
from qrdine.domain.menu.entities import find_water_item


class MenuItemNotFoundError(Exception):
    pass


class VariantRequiredError(Exception):
    pass


class PlaceTableOrder:
    """Rebuilds a table's cart from the menu client's selections and submits it."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        submit_order: SubmitOrder,
        tax_rate: float,
    ) -> None:
        self._gateway = gateway
        self._submit_order = submit_order
        self._tax_rate = tax_rate

    async def execute(
        self,
        table_number: TableNumber,
        request_dto: PlaceOrderRequest,
    ) -> SubmittedOrder:
        cart = CartBuilder(tax_rate=self._tax_rate)
        if not request_dto.lines and request_dto.diner_count is None:
            return await self._submit_order.execute(cart, table_number)

        menu_items = await self._gateway.get_menu_items()
        by_id = {str(item.item_id): item for item in menu_items}

        if request_dto.diner_count is not None:
            cart.confirm_diners(request_dto.diner_count, find_water_item(menu_items))

        for request_line in request_dto.lines:
            menu_item = by_id.get(request_line.item_id)
            if menu_item is None:
                raise MenuItemNotFoundError(f"menu item {request_line.item_id} does not exist")

            variant = menu_item.variant(request_line.price_id)
            if request_line.price_id is not None and variant is None:
                raise MenuItemNotFoundError(
                    f"price {request_line.price_id} does not belong to item {menu_item.item_id}"
                )
            if variant is None and menu_item.is_priced:
                raise VariantRequiredError(f"menu item {menu_item.item_id} requires a size")

            cart.add_line(
                menu_item,
                variant=variant,
                quantity=request_line.quantity,
                note=request_line.notes or "",
            )

        return await self._submit_order.execute(cart, table_number)
