from __future__ import annotations

import sys
from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.ports.gateway import GatewayError
from qrdine.infrastructure.db.retry import with_retry


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _failing(times: int, result: str = "ok"):
    state = {"calls": 0}

    async def call() -> str:
        state["calls"] += 1
        if state["calls"] <= times:
            raise SQLAlchemyError("database unavailable")
        return result

    return call, state


@pytest.mark.asyncio
async def test_retry_succeeds_after_transient_failures() -> None:
    sleep = RecordingSleep()
    call, state = _failing(2)

    assert await with_retry("get_orders", call, sleep=sleep) == "ok"
    assert state["calls"] == 3
    assert sleep.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_retry_gives_up_after_attempts() -> None:
    sleep = RecordingSleep()
    call, state = _failing(5)

    with pytest.raises(GatewayError) as exc_info:
        await with_retry("create_order", call, attempts=3, sleep=sleep)

    assert exc_info.value.operation == "create_order"
    assert state["calls"] == 3
    assert sleep.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_retry_scales_with_base_delay() -> None:
    sleep = RecordingSleep()
    call, _ = _failing(1)

    await with_retry("get_orders", call, base_delay=0.5, sleep=sleep)

    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_non_database_errors_are_not_retried() -> None:
    sleep = RecordingSleep()

    async def call() -> None:
        raise ValueError("bad row")

    with pytest.raises(ValueError):
        await with_retry("get_orders", call, sleep=sleep)
    assert sleep.delays == []
