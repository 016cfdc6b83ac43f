from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from qrdine.domain.common.ids import (
    CategoryId,
    MenuItemId,
    OrderId,
    OrderItemId,
    PriceVariantId,
    QuickActionId,
    QuickActionRequestId,
    TableNumber,
)
from qrdine.domain.menu.entities import Category, LocalizedText, MenuItem
from qrdine.domain.order.entities import Order, OrderStatus
from qrdine.domain.quick_action.entities import (
    QuickAction,
    QuickActionRequest,
    QuickActionRequestStatus,
)


@dataclass(frozen=True)
class NewOrder:
    table_number: TableNumber
    subtotal: float
    tax: float
    total: float
    diner_count: int | None = None


@dataclass(frozen=True)
class NewOrderItem:
    order_id: OrderId
    item_id: MenuItemId
    price_id: PriceVariantId | None
    quantity: int
    notes: str | None = None


@dataclass(frozen=True)
class NewItemPrice:
    item_id: MenuItemId
    size: LocalizedText
    price: float
    display_order: int = 0


@dataclass(frozen=True)
class NewQuickActionRequest:
    table_number: TableNumber
    action_id: QuickActionId


class PersistenceGateway(Protocol):
    async def get_categories(self) -> list[Category]: ...

    async def get_menu_items(self) -> list[MenuItem]: ...

    async def get_quick_actions(self) -> list[QuickAction]: ...

    async def get_orders(
        self,
        status: OrderStatus | None = None,
        hours_limit: float | None = None,
    ) -> list[Order]: ...

    async def get_quick_action_requests(self) -> list[QuickActionRequest]: ...

    async def create_order(self, fields: NewOrder) -> OrderId: ...

    async def create_order_item(self, fields: NewOrderItem) -> OrderItemId: ...

    async def create_item_price(self, fields: NewItemPrice) -> PriceVariantId: ...

    async def delete_item_price(self, price_id: PriceVariantId) -> None: ...

    async def create_quick_action_request(
        self, fields: NewQuickActionRequest
    ) -> QuickActionRequestId: ...

    async def update_order_status(self, order_id: OrderId, status: OrderStatus) -> None: ...

    async def update_quick_action_request_status(
        self,
        request_id: QuickActionRequestId,
        status: QuickActionRequestStatus,
    ) -> None: ...

    async def delete_order(self, order_id: OrderId) -> None: ...

    async def delete_all_orders(self) -> int: ...

    async def delete_category(self, category_id: CategoryId) -> None: ...

    async def delete_menu_item(self, item_id: MenuItemId) -> None: ...

    async def delete_quick_action(self, action_id: QuickActionId) -> None: ...


class GatewayError(Exception):
    def __init__(self, operation: str, message: str | None = None) -> None:
        super().__init__(message or f"gateway operation failed: {operation}")
        self.operation = operation


class RowShapeError(GatewayError):
    pass


class RecordNotFoundError(GatewayError):
    pass
