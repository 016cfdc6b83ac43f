from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from uuid import uuid4

from qrdine.domain.common.ids import CartLineId
from qrdine.domain.menu.entities import MenuItem, PriceVariant
from qrdine.domain.order.totals import DEFAULT_TAX_RATE, OrderTotals, compute_totals

AUTO_WATER_NOTE = "Auto-added water"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class CartLine:
    line_id: CartLineId
    item: MenuItem
    variant: PriceVariant | None
    quantity: int
    note: str = ""
    auto_added: bool = False

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.variant is not None and self.variant.item_id != self.item.item_id:
            raise ValueError("variant must belong to the line's menu item")

    @property
    def unit_price(self) -> float | None:
        return self.variant.price if self.variant is not None else None


class CartLineNotFoundError(Exception):
    pass


class CartBuilder:
    """Ordered, client-local cart for one table session.

    Nothing here is persisted; the submission pipeline turns the lines into
    an order and then calls :meth:`clear`.
    """

    def __init__(self, tax_rate: float = DEFAULT_TAX_RATE) -> None:
        self._tax_rate = tax_rate
        self._lines: list[CartLine] = []
        self.diner_count: int | None = None

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def add_line(
        self,
        item: MenuItem,
        variant: PriceVariant | None = None,
        quantity: int = 1,
        note: str = "",
        auto_added: bool = False,
    ) -> CartLine:
        line = CartLine(
            line_id=CartLineId(f"crt_{uuid4().hex[:12]}"),
            item=item,
            variant=variant,
            quantity=max(1, quantity),
            note=note,
            auto_added=auto_added,
        )
        self._lines.append(line)
        return line

    def adjust_quantity(self, line_id: CartLineId | str, delta: int) -> CartLine:
        index, line = self._find(line_id)
        updated = replace(line, quantity=max(1, line.quantity + delta))
        self._lines[index] = updated
        return updated

    def set_quantity(self, line_id: CartLineId | str, value: object) -> CartLine:
        index, line = self._find(line_id)
        updated = replace(line, quantity=max(1, _parse_quantity(value)))
        self._lines[index] = updated
        return updated

    def remove_line(self, line_id: CartLineId | str) -> None:
        index, _ = self._find(line_id)
        del self._lines[index]

    def clear(self) -> None:
        self._lines.clear()

    def totals(self) -> OrderTotals:
        return compute_totals(
            ((line.unit_price, line.quantity) for line in self._lines),
            self._tax_rate,
        )

    def confirm_diners(self, diner_count: int, water_item: MenuItem | None) -> CartLine | None:
        """Record the table's diner count and add one water per diner.

        Every confirmation adds its own water line; a second confirmation
        does not replace the first.
        """
        if diner_count < 1:
            raise ValueError("diner count must be >= 1")
        self.diner_count = diner_count
        if water_item is None:
            return None
        return self.add_line(
            water_item,
            variant=water_item.default_variant,
            quantity=diner_count,
            note=AUTO_WATER_NOTE,
            auto_added=True,
        )

    def _find(self, line_id: CartLineId | str) -> tuple[int, CartLine]:
        for index, line in enumerate(self._lines):
            if line.line_id == line_id:
                return index, line
        raise CartLineNotFoundError(f"cart line {line_id} not found")


def _parse_quantity(value: object) -> int:
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 1
    match = _LEADING_INT.match(str(value))
    if match is None:
        return 1
    return int(match.group(1))
