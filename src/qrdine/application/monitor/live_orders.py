from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import datetime, timezone
from typing import Awaitable, Callable, Sequence

from qrdine.application.metrics.order_lifecycle import (
    record_alert_cue,
    record_monitor_reload,
    record_pending,
)
from qrdine.application.monitor.alerts import AlertScheduler
from qrdine.application.monitor.view import (
    MonitorSnapshot,
    PendingCounts,
    order_statistics,
    pending_counts,
    table_occupancy,
)
from qrdine.application.ports.alerts import Cue, CuePlayer, Notice, NoticeLevel, Notifier
from qrdine.application.ports.change_feed import (
    ORDER_ITEMS_TABLE,
    ORDERS_TABLE,
    QUICK_ACTION_REQUESTS_TABLE,
    ChangeEvent,
    ChangeEventType,
    ChangeFeed,
    Subscription,
)
from qrdine.application.ports.gateway import GatewayError, PersistenceGateway

logger = logging.getLogger(__name__)

WATCHED_TABLES = (ORDERS_TABLE, ORDER_ITEMS_TABLE, QUICK_ACTION_REQUESTS_TABLE)

SnapshotListener = Callable[[MonitorSnapshot], Awaitable[None]]

_INSERT_NOTICES = {
    ORDERS_TABLE: (Cue.NEW_ORDER, Notice(NoticeLevel.SUCCESS, "New order received!")),
    QUICK_ACTION_REQUESTS_TABLE: (
        Cue.QUICK_ACTION,
        Notice(NoticeLevel.INFO, "New quick action request!"),
    ),
}
_UPDATE_NOTICES = {
    ORDERS_TABLE: Notice(NoticeLevel.INFO, "Order status updated"),
    QUICK_ACTION_REQUESTS_TABLE: Notice(NoticeLevel.INFO, "Quick action updated"),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LiveOrderMonitor:
    """Cashier-side view of recent orders and quick-action requests.

    State is refreshed by a full reload on a fixed period and on every change
    notification for the watched tables. Overlapping reload triggers are
    coalesced: while one reload is running, further triggers schedule exactly
    one follow-up reload. A failed reload keeps the previous snapshot.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        change_feed: ChangeFeed | None,
        cue_player: CuePlayer,
        notifier: Notifier,
        *,
        tax_rate: float,
        table_numbers: Sequence[str],
        hours_window: float = 8,
        reload_interval: float = 30.0,
        sound_enabled: bool = True,
        alert_interval: float = 10.0,
        alert_initial_delay: float = 0.5,
        alert_cue_gap: float = 1.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._gateway = gateway
        self._change_feed = change_feed
        self._cue_player = cue_player
        self._notifier = notifier
        self._tax_rate = tax_rate
        self._table_numbers = list(table_numbers)
        self._hours_window = hours_window
        self._reload_interval = reload_interval
        self._sound_enabled = sound_enabled
        self._clock = clock
        self._snapshot = MonitorSnapshot(tables=table_occupancy([], self._table_numbers))
        self._listeners: list[SnapshotListener] = []
        self._subscriptions: list[Subscription] = []
        self._periodic_task: asyncio.Task[None] | None = None
        self._reload_task: asyncio.Task[MonitorSnapshot | None] | None = None
        self._reload_again = False
        self._running = False
        self.alerts = AlertScheduler(
            cue_player,
            self._current_pending,
            interval=alert_interval,
            initial_delay=alert_initial_delay,
            cue_gap=alert_cue_gap,
        )

    @property
    def snapshot(self) -> MonitorSnapshot:
        return self._snapshot

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tax_rate(self) -> float:
        return self._tax_rate

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        if self._change_feed is not None:
            for table in WATCHED_TABLES:
                subscription = await self._change_feed.subscribe(table, self.handle_change)
                self._subscriptions.append(subscription)
        await self.reload()
        self._periodic_task = asyncio.get_running_loop().create_task(self._reload_periodically())
        logger.info(
            "monitor_started",
            extra={"hours_window": self._hours_window, "reload_interval": self._reload_interval},
        )

    async def stop(self) -> None:
        """Cancel timers, in-flight reloads and change subscriptions. Idempotent."""
        if not self._running:
            return
        self._running = False
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            await subscription.unsubscribe()
        tasks = [task for task in (self._periodic_task, self._reload_task) if task is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task
        self._periodic_task = None
        self._reload_task = None
        await self.alerts.aclose()
        logger.info("monitor_stopped")

    async def reload(self) -> MonitorSnapshot | None:
        """Reload orders and requests; joins a reload that is already running.

        Allowed while stopped, but then the alert loop is never started.
        """
        if self._reload_task is not None and not self._reload_task.done():
            self._reload_again = True
            return await asyncio.shield(self._reload_task)
        self._reload_task = asyncio.get_running_loop().create_task(self._run_reloads())
        return await asyncio.shield(self._reload_task)

    async def set_sound_enabled(self, enabled: bool) -> None:
        self._sound_enabled = enabled
        if enabled:
            await self._notifier.notify(Notice(NoticeLevel.SUCCESS, "Sound alerts enabled"))
            self._evaluate_alerts()
        else:
            await self._notifier.notify(Notice(NoticeLevel.WARNING, "Sound alerts disabled"))
            self.alerts.stop()

    async def handle_change(self, change: ChangeEvent) -> None:
        if not self._running:
            return
        logger.info(
            "monitor_change_received",
            extra={"table": change.table, "event_type": change.event_type.value},
        )
        if change.event_type == ChangeEventType.INSERT and change.table in _INSERT_NOTICES:
            cue, notice = _INSERT_NOTICES[change.table]
            if self._sound_enabled:
                await self._play_once(cue)
            await self._notifier.notify(notice)
        elif change.event_type == ChangeEventType.UPDATE and change.table in _UPDATE_NOTICES:
            await self._notifier.notify(_UPDATE_NOTICES[change.table])
        await self.reload()

    def _current_pending(self) -> PendingCounts:
        return self._snapshot.pending

    async def _run_reloads(self) -> MonitorSnapshot | None:
        snapshot: MonitorSnapshot | None = None
        while True:
            self._reload_again = False
            result = await self._reload_once()
            if result is not None:
                snapshot = result
            if not self._reload_again:
                return snapshot

    async def _reload_once(self) -> MonitorSnapshot | None:
        try:
            orders = await self._gateway.get_orders(hours_limit=self._hours_window)
            requests = await self._gateway.get_quick_action_requests()
        except GatewayError as exc:
            record_monitor_reload("failed")
            logger.warning(
                "monitor_reload_failed",
                extra={"operation": exc.operation, "error": str(exc)},
            )
            await self._notifier.notify(Notice(NoticeLevel.WARNING, "Failed to load data"))
            return None

        snapshot = MonitorSnapshot(
            orders=orders,
            quick_action_requests=requests,
            tables=table_occupancy(orders, self._table_numbers),
            statistics=order_statistics(orders, self._clock(), self._tax_rate),
            pending=pending_counts(orders, requests),
            loaded_at=self._clock(),
        )
        self._snapshot = snapshot
        record_monitor_reload("ok")
        record_pending(snapshot.pending.orders, snapshot.pending.quick_actions)
        self._evaluate_alerts()
        for listener in list(self._listeners):
            try:
                await listener(snapshot)
            except Exception:
                logger.exception("monitor_listener_failed")
        return snapshot

    def _evaluate_alerts(self) -> None:
        has_pending = self._snapshot.pending.has_pending
        if has_pending and self._running and self._sound_enabled and not self.alerts.is_active:
            self.alerts.start()
        elif not has_pending and self.alerts.is_active:
            self.alerts.stop()

    async def _play_once(self, cue: Cue) -> None:
        try:
            await self._cue_player.play(cue)
        except Exception:
            logger.exception("alert_cue_failed", extra={"cue": cue.value})
            return
        record_alert_cue(cue.value, source="change")

    async def _reload_periodically(self) -> None:
        while True:
            await asyncio.sleep(self._reload_interval)
            try:
                await self.reload()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("monitor_periodic_reload_failed")
