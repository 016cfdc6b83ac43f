from __future__ import annotations

import csv
import io
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.domain.order.entities import Order
from qrdine.domain.order.totals import compute_totals, format_money

CSV_COLUMNS = (
    "Order ID",
    "Table",
    "Date",
    "Time",
    "Item",
    "Quantity",
    "Price",
    "Subtotal",
    "Tax",
    "Total",
    "Status",
)
NO_ITEMS_LABEL = "No items"
DEFAULT_RANGE_DAYS = 30


class InvalidDateRangeError(Exception):
    pass


def default_range(today: date) -> tuple[date, date]:
    return today - timedelta(days=DEFAULT_RANGE_DAYS), today


def export_filename(start: date, end: date) -> str:
    return f"analytics_{start.isoformat()}_to_{end.isoformat()}.csv"


def orders_in_range(orders: Iterable[Order], start: date, end: date) -> list[Order]:
    return [order for order in orders if start <= order.placed_at.date() <= end]


def render_orders_csv(orders: Iterable[Order], tax_rate: float) -> str:
    """One row per order item, or a single placeholder row for an empty order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for order in orders:
        placed_at = order.placed_at
        leading = [
            order.short_id,
            str(order.table_number),
            placed_at.date().isoformat(),
            placed_at.strftime("%H:%M:%S"),
        ]
        if not order.items:
            writer.writerow([*leading, NO_ITEMS_LABEL, 0, 0, 0, 0, 0, order.status.value])
            continue
        for item in order.items:
            totals = compute_totals([(item.unit_price, item.quantity)], tax_rate)
            writer.writerow(
                [
                    *leading,
                    item.display_name.en,
                    item.quantity,
                    format_money(item.unit_price or 0.0),
                    format_money(totals.subtotal),
                    format_money(totals.tax),
                    format_money(totals.total),
                    order.status.value,
                ]
            )
    return buffer.getvalue()


class ExportOrdersCsv:
    def __init__(self, gateway: PersistenceGateway, tax_rate: float) -> None:
        self._gateway = gateway
        self._tax_rate = tax_rate

    async def execute(self, start: date | None = None, end: date | None = None) -> str:
        default_start, default_end = default_range(datetime.now(timezone.utc).date())
        start = start or default_start
        end = end or default_end
        if start > end:
            raise InvalidDateRangeError(f"start {start} is after end {end}")

        orders = await self._gateway.get_orders()
        return render_orders_csv(orders_in_range(orders, start, end), self._tax_rate)
