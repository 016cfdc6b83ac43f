from __future__ import annotations

from typing import NewType

CategoryId = NewType("CategoryId", str)
MenuItemId = NewType("MenuItemId", str)
PriceVariantId = NewType("PriceVariantId", str)
OrderId = NewType("OrderId", str)
OrderItemId = NewType("OrderItemId", str)
QuickActionId = NewType("QuickActionId", str)
QuickActionRequestId = NewType("QuickActionRequestId", str)
CartLineId = NewType("CartLineId", str)
TableNumber = NewType("TableNumber", str)
