from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrdine.application.use_cases.quick_actions import (
    CompleteQuickActionRequest,
    QuickActionNotFoundError,
    RequestQuickAction,
)
from qrdine.domain.common.ids import QuickActionId, QuickActionRequestId, TableNumber
from qrdine.domain.menu.entities import LocalizedText
from qrdine.domain.quick_action.entities import QuickAction, QuickActionRequestStatus
from unit_support import FakeGateway


@pytest.fixture
def waiter_gateway(gateway: FakeGateway) -> FakeGateway:
    gateway.quick_actions = [
        QuickAction(
            action_id=QuickActionId("qa_call_waiter"),
            label=LocalizedText(en="Call waiter", ar="نداء النادل"),
        )
    ]
    return gateway


@pytest.mark.asyncio
async def test_request_quick_action_creates_pending_request(waiter_gateway: FakeGateway) -> None:
    request_id = await RequestQuickAction(waiter_gateway).execute(
        TableNumber("25"),
        QuickActionId("qa_call_waiter"),
    )

    assert request_id == "qar_1"
    created = waiter_gateway.created_requests[0]
    assert created.table_number == "25"
    assert created.action_id == "qa_call_waiter"


@pytest.mark.asyncio
async def test_unknown_quick_action_is_rejected(waiter_gateway: FakeGateway) -> None:
    with pytest.raises(QuickActionNotFoundError):
        await RequestQuickAction(waiter_gateway).execute(TableNumber("25"), QuickActionId("qa_x"))

    assert waiter_gateway.created_requests == []


@pytest.mark.asyncio
async def test_complete_request_marks_it_completed(gateway: FakeGateway) -> None:
    await CompleteQuickActionRequest(gateway).execute(QuickActionRequestId("qar_7"))

    assert gateway.request_updates == [("qar_7", QuickActionRequestStatus.COMPLETED)]
