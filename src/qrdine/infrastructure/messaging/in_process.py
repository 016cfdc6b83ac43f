from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from qrdine.application.ports.change_feed import (
    ChangeCallback,
    ChangeEvent,
    ChangeEventType,
    matches_filter,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Listener:
    table: str
    callback: ChangeCallback
    row_filter: dict[str, Any]
    loop: asyncio.AbstractEventLoop


class InProcessSubscription:
    def __init__(self, bus: InProcessChangeBus, listener: _Listener) -> None:
        self._bus = bus
        self._listener = listener

    async def unsubscribe(self) -> None:
        self._bus._remove(self._listener)


class InProcessChangeBus:
    """Change publisher and feed for a single process without Redis.

    ``publish_change`` may be called from worker threads; callbacks always
    run on the event loop that subscribed them.
    """

    def __init__(self) -> None:
        self._listeners: list[_Listener] = []
        self._tasks: set[asyncio.Task[None]] = set()

    async def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        row_filter: Mapping[str, Any] | None = None,
    ) -> InProcessSubscription:
        listener = _Listener(
            table=table,
            callback=callback,
            row_filter=dict(row_filter or {}),
            loop=asyncio.get_running_loop(),
        )
        self._listeners.append(listener)
        return InProcessSubscription(self, listener)

    def publish_change(
        self,
        table: str,
        event_type: ChangeEventType,
        row: Mapping[str, Any],
    ) -> None:
        change = ChangeEvent(
            table=table,
            event_type=event_type,
            row=dict(row),
            occurred_at=datetime.now(timezone.utc),
        )
        for listener in list(self._listeners):
            if listener.table != table or not matches_filter(change.row, listener.row_filter):
                continue
            if listener.loop.is_closed():
                continue
            listener.loop.call_soon_threadsafe(self._schedule, listener, change)

    def _schedule(self, listener: _Listener, change: ChangeEvent) -> None:
        task = listener.loop.create_task(self._deliver(listener, change))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, listener: _Listener, change: ChangeEvent) -> None:
        try:
            await listener.callback(change)
        except Exception:
            logger.exception("change_callback_failed", extra={"table": change.table})

    def _remove(self, listener: _Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
