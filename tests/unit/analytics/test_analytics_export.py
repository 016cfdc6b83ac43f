from __future__ import annotations

import csv
import io
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.use_cases.analytics_export import (
    CSV_COLUMNS,
    ExportOrdersCsv,
    InvalidDateRangeError,
    default_range,
    export_filename,
    orders_in_range,
    render_orders_csv,
)
from qrdine.domain.order.entities import OrderStatus
from unit_support import NOW, FakeGateway, make_order


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_one_row_per_item_with_header() -> None:
    order = make_order(
        "3f2a9c1b-0000-4000-8000-000000000000",
        table="27",
        status=OrderStatus.COMPLETED,
        lines=[(10.0, 2), (4.5, 1)],
    )

    text = render_orders_csv([order], tax_rate=0.10)
    rows = _rows(text)

    assert text.splitlines()[0] == ",".join(f'"{column}"' for column in CSV_COLUMNS)
    assert len(rows) == 3
    assert rows[1] == [
        "3f2a9c1b",
        "27",
        "2026-03-14",
        "12:00:00",
        "Item 0",
        "2",
        "10.00",
        "20.00",
        "2.00",
        "22.00",
        "completed",
    ]
    assert rows[2][6:10] == ["4.50", "4.50", "0.45", "4.95"]


def test_order_without_items_gets_placeholder_row() -> None:
    rows = _rows(render_orders_csv([make_order("ord_empty1")], tax_rate=0.10))

    assert rows[1][4:] == ["No items", "0", "0", "0", "0", "0", "pending"]


def test_orders_in_range_is_inclusive() -> None:
    orders = [
        make_order("ord_1", placed_at=NOW),
        make_order("ord_2", placed_at=NOW - timedelta(days=2)),
        make_order("ord_3", placed_at=NOW + timedelta(days=1)),
    ]

    selected = orders_in_range(orders, date(2026, 3, 12), date(2026, 3, 14))

    assert [order.order_id for order in selected] == ["ord_1", "ord_2"]


def test_default_range_and_filename() -> None:
    start, end = default_range(date(2026, 3, 31))

    assert (start, end) == (date(2026, 3, 1), date(2026, 3, 31))
    assert export_filename(start, end) == "analytics_2026-03-01_to_2026-03-31.csv"


@pytest.mark.asyncio
async def test_export_rejects_inverted_range(gateway: FakeGateway) -> None:
    with pytest.raises(InvalidDateRangeError):
        await ExportOrdersCsv(gateway, tax_rate=0.10).execute(date(2026, 3, 14), date(2026, 3, 1))

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_export_reads_all_orders_in_range(gateway: FakeGateway) -> None:
    gateway.orders = [make_order("ord_1", lines=[(3.0, 1)])]

    text = await ExportOrdersCsv(gateway, tax_rate=0.10).execute(
        date(2026, 3, 14), date(2026, 3, 14)
    )

    assert gateway.calls == ["get_orders"]
    assert len(_rows(text)) == 2
