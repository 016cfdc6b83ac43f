from __future__ import annotations

import logging
import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.domain.order.totals import (
    compute_totals,
    format_money,
    order_total,
    order_totals,
    round_money,
)
from unit_support import make_order


def test_compute_totals_applies_tax_rate() -> None:
    totals = compute_totals([(10.0, 2)], tax_rate=0.10)

    assert totals.subtotal == pytest.approx(20.0)
    assert totals.tax == pytest.approx(2.0)
    assert totals.total == pytest.approx(22.0)


def test_compute_totals_of_nothing_is_zero() -> None:
    totals = compute_totals([], tax_rate=0.10)

    assert (totals.subtotal, totals.tax, totals.total) == (0.0, 0.0, 0.0)


def test_missing_price_contributes_zero_and_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    order = make_order("ord_001", lines=[(5.0, 2), (None, 3)])

    with caplog.at_level(logging.WARNING):
        totals = order_totals(order, tax_rate=0.10)

    assert totals.subtotal == pytest.approx(10.0)
    assert totals.total == pytest.approx(11.0)
    assert any(record.getMessage() == "order_item_price_missing" for record in caplog.records)


def test_persisted_total_is_authoritative() -> None:
    order = make_order("ord_001", lines=[(10.0, 1)], total=99.5)

    assert order_total(order, tax_rate=0.10) == 99.5


def test_total_is_recomputed_without_persisted_value() -> None:
    order = make_order("ord_001", lines=[(12.5, 2)])

    assert order_total(order, tax_rate=0.10) == pytest.approx(27.5)


def test_rounding_happens_only_at_display() -> None:
    totals = compute_totals([(0.1, 1), (0.2, 1)], tax_rate=0.0)

    assert totals.subtotal != 0.3
    assert format_money(totals.subtotal) == "0.30"


def test_round_money_rounds_half_up_on_decimal_form() -> None:
    assert round_money(2.675) == Decimal("2.68")
    assert round(2.675, 2) == 2.67
    assert round_money(1.005) == Decimal("1.01")
    assert format_money(22) == "22.00"
