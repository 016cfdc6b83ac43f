from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.mappers.snapshot_mapper import to_snapshot_response
from qrdine.application.monitor.view import (
    MonitorSnapshot,
    TableStatus,
    active_order_for_table,
    filter_orders,
    order_statistics,
    pending_counts,
    table_occupancy,
)
from qrdine.domain.order.entities import OrderStatus
from qrdine.domain.quick_action.entities import QuickActionRequestStatus
from unit_support import NOW, make_order, make_request


@pytest.fixture
def orders():
    return [
        make_order("ord_1", table="20", status=OrderStatus.PENDING, lines=[(10.0, 1)]),
        make_order("ord_2", table="21", status=OrderStatus.PENDING, lines=[(5.0, 2)]),
        make_order("ord_3", table="22", status=OrderStatus.PREPARING, lines=[(8.0, 1)]),
        make_order("ord_4", table="23", status=OrderStatus.COMPLETED, total=30.0),
        make_order(
            "ord_5",
            table="20",
            status=OrderStatus.PENDING,
            placed_at=NOW - timedelta(days=1),
            lines=[(100.0, 1)],
        ),
    ]


def test_filter_orders_by_status(orders) -> None:
    assert [order.order_id for order in filter_orders(orders, OrderStatus.PENDING)] == [
        "ord_1",
        "ord_2",
        "ord_5",
    ]
    assert len(filter_orders(orders, None)) == 5


def test_table_occupancy_ignores_closed_orders(orders) -> None:
    occupancy = table_occupancy(orders, ["20", "21", "22", "23", "24"])

    assert occupancy == {
        "20": TableStatus.OCCUPIED,
        "21": TableStatus.OCCUPIED,
        "22": TableStatus.OCCUPIED,
        "23": TableStatus.AVAILABLE,
        "24": TableStatus.AVAILABLE,
    }


def test_active_order_for_table_returns_first_open_order(orders) -> None:
    assert active_order_for_table(orders, "20").order_id == "ord_1"
    assert active_order_for_table(orders, "23") is None


def test_order_statistics_count_only_today(orders) -> None:
    statistics = order_statistics(orders, NOW, tax_rate=0.10)

    assert statistics.total_orders == 4
    assert statistics.pending_orders == 2
    assert statistics.completed_orders == 1
    assert statistics.revenue == pytest.approx(11.0 + 11.0 + 8.8 + 30.0)


def test_pending_counts(orders) -> None:
    requests = [
        make_request("qar_1"),
        make_request("qar_2", status=QuickActionRequestStatus.COMPLETED),
    ]

    counts = pending_counts(orders, requests)

    assert counts.orders == 3
    assert counts.quick_actions == 1
    assert counts.has_pending


def test_snapshot_response_applies_status_filter(orders) -> None:
    snapshot = MonitorSnapshot(
        orders=orders,
        tables=table_occupancy(orders, ["20"]),
        statistics=order_statistics(orders, NOW, tax_rate=0.10),
        pending=pending_counts(orders, []),
        loaded_at=NOW,
    )

    response = to_snapshot_response(
        snapshot,
        tax_rate=0.10,
        sound_enabled=True,
        alert_loop_active=False,
        status=OrderStatus.PREPARING,
    )

    assert [order.orderId for order in response.orders] == ["ord_3"]
    assert response.orders[0].total == "8.80"
    assert response.tables == {"20": "occupied"}
    assert response.statistics.revenue == "60.80"
    assert response.pending.orders == 3
