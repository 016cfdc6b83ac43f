from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.monitor.live_orders import LiveOrderMonitor
from qrdine.application.monitor.view import TableStatus
from qrdine.application.ports.alerts import Cue
from qrdine.application.ports.change_feed import (
    ORDERS_TABLE,
    QUICK_ACTION_REQUESTS_TABLE,
    ChangeEvent,
    ChangeEventType,
)
from qrdine.domain.order.entities import OrderStatus
from unit_support import NOW, FakeChangeFeed, FakeGateway, make_order, make_request


class BlockingGateway(FakeGateway):
    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def get_orders(self, status=None, hours_limit=None):
        self.calls.append("get_orders")
        self.entered.set()
        await self.release.wait()
        return list(self.orders)


def _monitor(gateway, change_feed, cue_player, notifier, **overrides) -> LiveOrderMonitor:
    options = {
        "tax_rate": 0.10,
        "table_numbers": ["20", "21", "22"],
        "reload_interval": 60.0,
        "alert_interval": 60.0,
        "alert_initial_delay": 60.0,
        "clock": lambda: NOW,
    }
    options.update(overrides)
    return LiveOrderMonitor(gateway, change_feed, cue_player, notifier, **options)


@pytest.mark.asyncio
async def test_start_subscribes_and_loads_snapshot(gateway, change_feed, cue_player, notifier) -> None:
    gateway.orders = [make_order("ord_1", table="21", lines=[(10.0, 1)])]
    gateway.requests = [make_request("qar_1")]
    monitor = _monitor(gateway, change_feed, cue_player, notifier)

    await monitor.start()
    await monitor.start()
    try:
        assert sorted(change_feed.tables) == ["order_items", "orders", "quick_action_requests"]
        snapshot = monitor.snapshot
        assert snapshot.pending.orders == 1
        assert snapshot.pending.quick_actions == 1
        assert snapshot.tables["21"] == TableStatus.OCCUPIED
        assert snapshot.tables["20"] == TableStatus.AVAILABLE
        assert snapshot.loaded_at == NOW
        assert monitor.alerts.is_active
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_quick_action_insert_plays_cue_and_starts_alert_loop(
    gateway, change_feed: FakeChangeFeed, cue_player, notifier
) -> None:
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()
    try:
        assert not monitor.alerts.is_active

        gateway.requests = [make_request("qar_1")]
        await change_feed.emit(
            ChangeEvent(table=QUICK_ACTION_REQUESTS_TABLE, event_type=ChangeEventType.INSERT)
        )

        assert cue_player.played == [Cue.QUICK_ACTION]
        assert "New quick action request!" in notifier.messages
        assert monitor.snapshot.pending.quick_actions == 1
        assert monitor.alerts.is_active
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_order_insert_with_sound_disabled_only_notifies(
    gateway, change_feed: FakeChangeFeed, cue_player, notifier
) -> None:
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()
    try:
        await monitor.set_sound_enabled(False)
        gateway.orders = [make_order("ord_1")]
        await change_feed.emit(ChangeEvent(table=ORDERS_TABLE, event_type=ChangeEventType.INSERT))

        assert cue_player.played == []
        assert notifier.messages == ["Sound alerts disabled", "New order received!"]
        assert monitor.snapshot.pending.orders == 1
        assert not monitor.alerts.is_active

        await monitor.set_sound_enabled(True)
        assert monitor.alerts.is_active
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_order_update_notifies_and_reloads(
    gateway, change_feed: FakeChangeFeed, cue_player, notifier
) -> None:
    gateway.orders = [make_order("ord_1")]
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()
    try:
        gateway.orders = [make_order("ord_1", status=OrderStatus.COMPLETED)]
        await change_feed.emit(ChangeEvent(table=ORDERS_TABLE, event_type=ChangeEventType.UPDATE))

        assert notifier.messages == ["Order status updated"]
        assert monitor.snapshot.pending.orders == 0
        assert not monitor.alerts.is_active
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_failed_reload_keeps_previous_snapshot(gateway, change_feed, cue_player, notifier) -> None:
    gateway.orders = [make_order("ord_1")]
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()
    try:
        before = monitor.snapshot
        gateway.fail("get_orders")

        assert await monitor.reload() is None
        assert monitor.snapshot is before
        assert notifier.messages == ["Failed to load data"]
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_overlapping_reloads_are_coalesced(change_feed, cue_player, notifier) -> None:
    gateway = BlockingGateway()
    monitor = _monitor(gateway, change_feed, cue_player, notifier)

    first = asyncio.create_task(monitor.reload())
    await gateway.entered.wait()
    followers = [asyncio.create_task(monitor.reload()) for _ in range(3)]
    await asyncio.sleep(0)
    gateway.release.set()
    await asyncio.gather(first, *followers)

    assert gateway.calls.count("get_orders") == 2


@pytest.mark.asyncio
async def test_listeners_receive_each_snapshot(gateway, change_feed, cue_player, notifier) -> None:
    received = []

    async def listener(snapshot) -> None:
        received.append(snapshot)

    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    monitor.add_listener(listener)

    snapshot = await monitor.reload()

    assert received == [snapshot]


@pytest.mark.asyncio
async def test_stop_is_idempotent_and_unsubscribes(
    gateway, change_feed: FakeChangeFeed, cue_player, notifier
) -> None:
    gateway.orders = [make_order("ord_1")]
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()

    await monitor.stop()
    await monitor.stop()

    assert change_feed.tables == []
    assert not monitor.is_running
    assert not monitor.alerts.is_active


@pytest.mark.asyncio
async def test_monitor_without_change_feed_still_reloads(gateway, cue_player, notifier) -> None:
    monitor = _monitor(gateway, None, cue_player, notifier)

    await monitor.start()
    try:
        assert monitor.is_running
        assert monitor.snapshot.loaded_at == NOW
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_changes_after_stop_are_ignored(
    gateway, change_feed: FakeChangeFeed, cue_player, notifier
) -> None:
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()
    await monitor.stop()
    loads = gateway.calls.count("get_orders")

    gateway.orders = [make_order("ord_1")]
    await monitor.handle_change(ChangeEvent(table=ORDERS_TABLE, event_type=ChangeEventType.INSERT))

    assert cue_player.played == []
    assert notifier.messages == []
    assert gateway.calls.count("get_orders") == loads
    assert not monitor.alerts.is_active

    await monitor.stop()
    assert not monitor.alerts.is_active


@pytest.mark.asyncio
async def test_reload_after_stop_does_not_restart_alert_loop(
    gateway, change_feed, cue_player, notifier
) -> None:
    monitor = _monitor(gateway, change_feed, cue_player, notifier)
    await monitor.start()
    await monitor.stop()

    gateway.orders = [make_order("ord_1")]
    snapshot = await monitor.reload()
    await monitor.set_sound_enabled(True)

    assert snapshot is not None
    assert snapshot.pending.orders == 1
    assert not monitor.alerts.is_active


@pytest.mark.asyncio
async def test_sound_off_stops_running_alert_loop(gateway, change_feed, cue_player, notifier) -> None:
    gateway.orders = [make_order("ord_1")]
    monitor = _monitor(
        gateway,
        change_feed,
        cue_player,
        notifier,
        alert_interval=0.05,
        alert_initial_delay=0.0,
        alert_cue_gap=0.0,
    )
    await monitor.start()
    try:
        await asyncio.sleep(0.02)
        assert monitor.alerts.is_active
        assert cue_player.played == [Cue.NEW_ORDER]

        await monitor.set_sound_enabled(False)
        played = list(cue_player.played)
        await asyncio.sleep(0.15)

        assert not monitor.alerts.is_active
        assert cue_player.played == played
        assert monitor.snapshot.pending.orders == 1
    finally:
        await monitor.stop()
