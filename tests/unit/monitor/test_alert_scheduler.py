from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.monitor.alerts import AlertScheduler
from qrdine.application.monitor.view import PendingCounts
from qrdine.application.ports.alerts import Cue
from unit_support import RecordingCuePlayer


def _scheduler(player, counts: PendingCounts, interval: float = 60.0) -> AlertScheduler:
    return AlertScheduler(
        player,
        lambda: counts,
        interval=interval,
        initial_delay=0.0,
        cue_gap=0.0,
    )


@pytest.mark.asyncio
async def test_first_announcement_plays_order_then_quick_action_cue(
    cue_player: RecordingCuePlayer,
) -> None:
    scheduler = _scheduler(cue_player, PendingCounts(orders=2, quick_actions=1))

    scheduler.start()
    await asyncio.sleep(0.05)

    assert cue_player.played == [Cue.NEW_ORDER, Cue.QUICK_ACTION]
    assert scheduler.is_active
    await scheduler.aclose()
    assert not scheduler.is_active


@pytest.mark.asyncio
async def test_only_pending_kinds_are_announced(cue_player: RecordingCuePlayer) -> None:
    scheduler = _scheduler(cue_player, PendingCounts(orders=0, quick_actions=3))

    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.aclose()

    assert cue_player.played == [Cue.QUICK_ACTION]


@pytest.mark.asyncio
async def test_start_is_idempotent(cue_player: RecordingCuePlayer) -> None:
    scheduler = _scheduler(cue_player, PendingCounts(orders=1))

    scheduler.start()
    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.aclose()

    assert cue_player.played == [Cue.NEW_ORDER]


@pytest.mark.asyncio
async def test_loop_repeats_on_interval_until_stopped(cue_player: RecordingCuePlayer) -> None:
    scheduler = _scheduler(cue_player, PendingCounts(orders=1), interval=0.05)

    scheduler.start()
    await asyncio.sleep(0.13)
    scheduler.stop()
    played = len(cue_player.played)
    await asyncio.sleep(0.1)

    assert played >= 2
    assert len(cue_player.played) == played


@pytest.mark.asyncio
async def test_stop_without_start_is_a_no_op(cue_player: RecordingCuePlayer) -> None:
    scheduler = _scheduler(cue_player, PendingCounts(orders=1))

    scheduler.stop()
    await scheduler.aclose()

    assert cue_player.played == []
