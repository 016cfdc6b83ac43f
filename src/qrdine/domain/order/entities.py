from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from qrdine.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderItemId,
    PriceVariantId,
    TableNumber,
)
from qrdine.domain.menu.entities import LocalizedText

UNKNOWN_ITEM_NAME = LocalizedText(en="Unknown", ar="غير معروف")


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses the cashier and admin clients can set and filter by.
CASHIER_STATUSES: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
)

CLOSED_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)


@dataclass(frozen=True)
class OrderItem:
    order_item_id: OrderItemId
    order_id: OrderId
    item_id: MenuItemId | None
    price_id: PriceVariantId | None
    quantity: int
    notes: str | None = None
    item_name: LocalizedText | None = None
    size: LocalizedText | None = None
    unit_price: float | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")

    @property
    def display_name(self) -> LocalizedText:
        return self.item_name or UNKNOWN_ITEM_NAME


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    table_number: TableNumber
    status: OrderStatus
    placed_at: datetime
    items: list[OrderItem] = field(default_factory=list)
    diner_count: int | None = None
    total: float | None = None

    @property
    def is_open(self) -> bool:
        return self.status not in CLOSED_STATUSES

    @property
    def short_id(self) -> str:
        return str(self.order_id)[:8]
