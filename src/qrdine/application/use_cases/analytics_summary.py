from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable

from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.application.use_cases.analytics_export import (
    InvalidDateRangeError,
    default_range,
    orders_in_range,
)
from qrdine.domain.menu.entities import LocalizedText
from qrdine.domain.order.entities import Order
from qrdine.domain.order.totals import compute_totals, order_total

logger = logging.getLogger(__name__)

TOP_ITEMS_LIMIT = 10


@dataclass(frozen=True)
class DailyRevenue:
    day: date
    revenue: float


@dataclass(frozen=True)
class ItemPerformance:
    name: LocalizedText
    quantity: int
    revenue: float


@dataclass(frozen=True)
class AnalyticsSummary:
    start: date
    end: date
    order_count: int
    daily_revenue: list[DailyRevenue] = field(default_factory=list)
    most_ordered: list[ItemPerformance] = field(default_factory=list)
    top_revenue: list[ItemPerformance] = field(default_factory=list)


def daily_revenue(orders: Iterable[Order], tax_rate: float) -> list[DailyRevenue]:
    """Revenue per calendar day, oldest first. Uses the persisted total when present."""
    by_day: dict[date, float] = {}
    for order in orders:
        day = order.placed_at.date()
        by_day[day] = by_day.get(day, 0.0) + order_total(order, tax_rate)
    return [DailyRevenue(day=day, revenue=by_day[day]) for day in sorted(by_day)]


def item_performance(orders: Iterable[Order], tax_rate: float) -> list[ItemPerformance]:
    """Quantity and taxed revenue per item name, in first-seen order."""
    quantities: dict[LocalizedText, int] = {}
    revenues: dict[LocalizedText, float] = {}
    for order in orders:
        for item in order.items:
            name = item.display_name
            line = compute_totals([(item.unit_price, item.quantity)], tax_rate)
            quantities[name] = quantities.get(name, 0) + item.quantity
            revenues[name] = revenues.get(name, 0.0) + line.total
    return [
        ItemPerformance(name=name, quantity=quantity, revenue=revenues[name])
        for name, quantity in quantities.items()
    ]


def summarize(
    orders: Iterable[Order],
    start: date,
    end: date,
    tax_rate: float,
    limit: int = TOP_ITEMS_LIMIT,
) -> AnalyticsSummary:
    selected = orders_in_range(orders, start, end)
    performance = item_performance(selected, tax_rate)
    return AnalyticsSummary(
        start=start,
        end=end,
        order_count=len(selected),
        daily_revenue=daily_revenue(selected, tax_rate),
        most_ordered=sorted(performance, key=lambda entry: -entry.quantity)[:limit],
        top_revenue=sorted(performance, key=lambda entry: -entry.revenue)[:limit],
    )


class OrderAnalytics:
    def __init__(self, gateway: PersistenceGateway, tax_rate: float) -> None:
        self._gateway = gateway
        self._tax_rate = tax_rate

    async def execute(self, start: date | None = None, end: date | None = None) -> AnalyticsSummary:
        default_start, default_end = default_range(datetime.now(timezone.utc).date())
        start = start or default_start
        end = end or default_end
        if start > end:
            raise InvalidDateRangeError(f"start {start} is after end {end}")

        orders = await self._gateway.get_orders()
        summary = summarize(orders, start, end, self._tax_rate)
        logger.info(
            "analytics_summarized",
            extra={
                "start": start.isoformat(),
                "end": end.isoformat(),
                "order_count": summary.order_count,
            },
        )
        return summary
