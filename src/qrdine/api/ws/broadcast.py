from __future__ import annotations

from qrdine.api.ws.manager import CASHIER_CHANNEL, ConnectionManager
from qrdine.application.mappers.snapshot_mapper import to_snapshot_response
from qrdine.application.monitor.live_orders import LiveOrderMonitor
from qrdine.application.monitor.view import MonitorSnapshot
from qrdine.application.ports.alerts import Cue, Notice

ALERT_CUE_EVENT = "alert.cue"
NOTICE_EVENT = "notice"
SNAPSHOT_EVENT = "monitor.snapshot"


class WebSocketCuePlayer:
    """Sends cues to cashier browsers, which play the matching sound."""

    def __init__(self, manager: ConnectionManager, channel: str = CASHIER_CHANNEL) -> None:
        self._manager = manager
        self._channel = channel

    async def play(self, cue: Cue) -> None:
        await self._manager.broadcast_json(
            self._channel,
            {"event_type": ALERT_CUE_EVENT, "cue": cue.value},
        )


class WebSocketNotifier:
    def __init__(self, manager: ConnectionManager, channel: str = CASHIER_CHANNEL) -> None:
        self._manager = manager
        self._channel = channel

    async def notify(self, notice: Notice) -> None:
        await self._manager.broadcast_json(
            self._channel,
            {"event_type": NOTICE_EVENT, "level": notice.level.value, "message": notice.message},
        )


class SnapshotBroadcaster:
    """Monitor listener pushing every fresh snapshot to cashier sockets."""

    def __init__(
        self,
        manager: ConnectionManager,
        monitor: LiveOrderMonitor,
        channel: str = CASHIER_CHANNEL,
    ) -> None:
        self._manager = manager
        self._monitor = monitor
        self._channel = channel

    async def __call__(self, snapshot: MonitorSnapshot) -> None:
        if self._manager.connection_count(self._channel) == 0:
            return
        response = to_snapshot_response(
            snapshot,
            tax_rate=self._monitor.tax_rate,
            sound_enabled=self._monitor.sound_enabled,
            alert_loop_active=self._monitor.alerts.is_active,
        )
        await self._manager.broadcast_json(
            self._channel,
            {"event_type": SNAPSHOT_EVENT, "snapshot": response.model_dump(mode="json")},
        )
