from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence

from qrdine.domain.order.entities import Order, OrderStatus
from qrdine.domain.order.totals import order_total
from qrdine.domain.quick_action.entities import QuickActionRequest


class TableStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


@dataclass(frozen=True)
class PendingCounts:
    orders: int = 0
    quick_actions: int = 0

    @property
    def has_pending(self) -> bool:
        return self.orders > 0 or self.quick_actions > 0


@dataclass(frozen=True)
class OrderStatistics:
    total_orders: int = 0
    completed_orders: int = 0
    pending_orders: int = 0
    revenue: float = 0.0


@dataclass(frozen=True)
class MonitorSnapshot:
    orders: list[Order] = field(default_factory=list)
    quick_action_requests: list[QuickActionRequest] = field(default_factory=list)
    tables: dict[str, TableStatus] = field(default_factory=dict)
    statistics: OrderStatistics = field(default_factory=OrderStatistics)
    pending: PendingCounts = field(default_factory=PendingCounts)
    loaded_at: datetime | None = None


def filter_orders(orders: Iterable[Order], status: OrderStatus | None) -> list[Order]:
    if status is None:
        return list(orders)
    return [order for order in orders if order.status == status]


def occupied_tables(orders: Iterable[Order]) -> set[str]:
    return {str(order.table_number) for order in orders if order.is_open}


def table_occupancy(
    orders: Iterable[Order],
    table_numbers: Sequence[str],
) -> dict[str, TableStatus]:
    occupied = occupied_tables(orders)
    return {
        table: TableStatus.OCCUPIED if table in occupied else TableStatus.AVAILABLE
        for table in table_numbers
    }


def active_order_for_table(orders: Iterable[Order], table_number: str) -> Order | None:
    for order in orders:
        if str(order.table_number) == table_number and order.is_open:
            return order
    return None


def order_statistics(
    orders: Iterable[Order],
    now: datetime,
    tax_rate: float,
) -> OrderStatistics:
    """Counts and revenue for orders placed on ``now``'s calendar day."""
    today = now.date()
    todays = [
        order
        for order in orders
        if order.placed_at.astimezone(now.tzinfo).date() == today
    ]
    return OrderStatistics(
        total_orders=len(todays),
        completed_orders=sum(1 for order in todays if order.status == OrderStatus.COMPLETED),
        pending_orders=sum(1 for order in todays if order.status == OrderStatus.PENDING),
        revenue=sum(order_total(order, tax_rate) for order in todays),
    )


def pending_counts(
    orders: Iterable[Order],
    requests: Iterable[QuickActionRequest],
) -> PendingCounts:
    return PendingCounts(
        orders=sum(1 for order in orders if order.status == OrderStatus.PENDING),
        quick_actions=sum(1 for request in requests if request.is_pending),
    )
