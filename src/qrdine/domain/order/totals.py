"""Order money arithmetic shared by every place an order total is shown.

Values accumulate as floats and are only rounded to two decimals by
:func:`round_money` / :func:`format_money` when displayed or exported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from qrdine.domain.order.entities import Order

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = 0.10
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    tax: float
    total: float


def line_amount(unit_price: float | None, quantity: int) -> float:
    if unit_price is None:
        return 0.0
    return unit_price * quantity


def compute_totals(
    lines: Iterable[tuple[float | None, int]],
    tax_rate: float = DEFAULT_TAX_RATE,
) -> OrderTotals:
    subtotal = 0.0
    for unit_price, quantity in lines:
        subtotal += line_amount(unit_price, quantity)
    tax = subtotal * tax_rate
    return OrderTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def order_totals(order: Order, tax_rate: float = DEFAULT_TAX_RATE) -> OrderTotals:
    """Totals recomputed from the order's items.

    Items whose price cannot be resolved contribute nothing and are logged.
    """
    for item in order.items:
        if item.unit_price is None:
            logger.warning(
                "order_item_price_missing",
                extra={"order_id": str(order.order_id), "order_item_id": str(item.order_item_id)},
            )
    return compute_totals(((item.unit_price, item.quantity) for item in order.items), tax_rate)


def order_total(order: Order, tax_rate: float = DEFAULT_TAX_RATE) -> float:
    """The persisted total when present, otherwise subtotal * (1 + tax_rate)."""
    if order.total is not None:
        return order.total
    return order_totals(order, tax_rate).total


def round_money(value: float) -> Decimal:
    # Rounds the shortest decimal form of the float, not its binary value:
    # 2.675 becomes 2.68 here, while round(2.675, 2) gives 2.67.
    return Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_money(value: float) -> str:
    return str(round_money(value))
