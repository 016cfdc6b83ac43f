from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.use_cases.analytics_export import InvalidDateRangeError
from qrdine.application.use_cases.analytics_summary import (
    OrderAnalytics,
    daily_revenue,
    item_performance,
    summarize,
)
from qrdine.domain.common.ids import OrderId, OrderItemId
from qrdine.domain.order.entities import UNKNOWN_ITEM_NAME, OrderItem
from unit_support import NOW, FakeGateway, make_order

TODAY = NOW.date()


def test_daily_revenue_prefers_persisted_total() -> None:
    orders = [
        make_order("ord_1", lines=[(10.0, 1)], total=50.0),
        make_order("ord_2", lines=[(10.0, 2)]),
        make_order("ord_3", placed_at=NOW - timedelta(days=1), lines=[(5.0, 1)]),
    ]

    days = daily_revenue(orders, tax_rate=0.10)

    assert [entry.day for entry in days] == [TODAY - timedelta(days=1), TODAY]
    assert days[0].revenue == pytest.approx(5.5)
    assert days[1].revenue == pytest.approx(72.0)


def test_item_performance_groups_by_name_and_adds_tax() -> None:
    orders = [
        make_order("ord_1", lines=[(10.0, 2), (3.0, 1)]),
        make_order("ord_2", lines=[(10.0, 1)]),
    ]

    performance = {entry.name.en: entry for entry in item_performance(orders, tax_rate=0.10)}

    assert performance["Item 0"].quantity == 3
    assert performance["Item 0"].revenue == pytest.approx(33.0)
    assert performance["Item 1"].quantity == 1
    assert performance["Item 1"].revenue == pytest.approx(3.3)


def test_unpriced_and_deleted_items_count_without_revenue() -> None:
    order = make_order("ord_1", lines=[(None, 4)])
    deleted = OrderItem(
        order_item_id=OrderItemId("ord_1_gone"),
        order_id=OrderId("ord_1"),
        item_id=None,
        price_id=None,
        quantity=2,
    )
    order.items.append(deleted)

    performance = {entry.name: entry for entry in item_performance([order], tax_rate=0.10)}

    assert performance[UNKNOWN_ITEM_NAME].quantity == 2
    assert performance[UNKNOWN_ITEM_NAME].revenue == 0.0
    assert len(performance) == 2


def test_summarize_ranks_and_limits_top_items() -> None:
    lines = [(float(price), 13 - price) for price in range(1, 13)]
    orders = [
        make_order("ord_1", lines=lines),
        make_order("ord_old", placed_at=NOW - timedelta(days=40), lines=[(99.0, 99)]),
    ]

    summary = summarize(orders, TODAY - timedelta(days=30), TODAY, tax_rate=0.10)

    assert summary.order_count == 1
    assert len(summary.most_ordered) == 10
    assert len(summary.top_revenue) == 10
    assert [entry.quantity for entry in summary.most_ordered][:3] == [12, 11, 10]
    assert [entry.name.en for entry in summary.top_revenue][:2] == ["Item 5", "Item 6"]
    assert all(entry.quantity != 99 for entry in summary.most_ordered)


def test_summarize_empty_range() -> None:
    summary = summarize([], date(2026, 1, 1), date(2026, 1, 31), tax_rate=0.10)

    assert summary.order_count == 0
    assert summary.daily_revenue == []
    assert summary.most_ordered == []
    assert summary.top_revenue == []


@pytest.mark.asyncio
async def test_order_analytics_rejects_inverted_range(gateway: FakeGateway) -> None:
    with pytest.raises(InvalidDateRangeError):
        await OrderAnalytics(gateway, 0.10).execute(date(2026, 3, 10), date(2026, 3, 1))

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_order_analytics_reads_orders_in_range(gateway: FakeGateway) -> None:
    gateway.orders = [make_order("ord_1", lines=[(10.0, 1)])]

    summary = await OrderAnalytics(gateway, 0.10).execute(TODAY, TODAY)

    assert gateway.calls == ["get_orders"]
    assert summary.order_count == 1
    assert summary.daily_revenue[0].revenue == pytest.approx(11.0)
