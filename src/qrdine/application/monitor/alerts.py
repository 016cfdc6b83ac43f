from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Callable

from qrdine.application.metrics.order_lifecycle import record_alert_cue
from qrdine.application.monitor.view import PendingCounts
from qrdine.application.ports.alerts import Cue, CuePlayer

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 10.0
DEFAULT_INITIAL_DELAY_SECONDS = 0.5
DEFAULT_CUE_GAP_SECONDS = 1.0


class AlertScheduler:
    """Repeats audio cues while there is something pending.

    Once started it announces after ``initial_delay`` and then on every
    ``interval`` boundary measured from the start. Each announcement plays
    the new-order cue when orders are pending and the quick-action cue
    ``cue_gap`` seconds later when quick-action requests are pending.
    ``start`` and ``stop`` are idempotent.
    """

    def __init__(
        self,
        player: CuePlayer,
        pending: Callable[[], PendingCounts],
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS,
        cue_gap: float = DEFAULT_CUE_GAP_SECONDS,
    ) -> None:
        self._player = player
        self._pending = pending
        self._interval = interval
        self._initial_delay = initial_delay
        self._cue_gap = cue_gap
        self._loop_task: asyncio.Task[None] | None = None
        self._delayed: set[asyncio.Task[None]] = set()

    @property
    def is_active(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        if self.is_active:
            return
        self._loop_task = asyncio.get_running_loop().create_task(self._run())
        logger.info("alert_loop_started")

    def stop(self) -> None:
        if self._loop_task is None and not self._delayed:
            return
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        for task in list(self._delayed):
            task.cancel()
        self._delayed.clear()
        logger.info("alert_loop_stopped")

    async def aclose(self) -> None:
        tasks = [task for task in (self._loop_task, *self._delayed) if task is not None]
        self.stop()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        await asyncio.sleep(self._initial_delay)
        await self._announce()
        tick = 1
        while True:
            await asyncio.sleep(max(started + tick * self._interval - loop.time(), 0.0))
            await self._announce()
            tick += 1

    async def _announce(self) -> None:
        counts = self._pending()
        if counts.orders > 0:
            await self._play(Cue.NEW_ORDER)
        if counts.quick_actions > 0:
            task = asyncio.get_running_loop().create_task(self._play_later(Cue.QUICK_ACTION))
            self._delayed.add(task)
            task.add_done_callback(self._delayed.discard)

    async def _play_later(self, cue: Cue) -> None:
        await asyncio.sleep(self._cue_gap)
        await self._play(cue)

    async def _play(self, cue: Cue) -> None:
        try:
            await self._player.play(cue)
        except Exception:
            logger.exception("alert_cue_failed", extra={"cue": cue.value})
            return
        record_alert_cue(cue.value, source="loop")
