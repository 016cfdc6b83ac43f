from __future__ import annotations

from fastapi import APIRouter, Depends, status

from qrdine.api.container import ServiceContainer, get_container
from qrdine.application.dto.responses import QuickActionRequestCreatedResponse
from qrdine.application.use_cases.quick_actions import (
    CompleteQuickActionRequest,
    RequestQuickAction,
)
from qrdine.domain.common.ids import QuickActionId, QuickActionRequestId, TableNumber

router = APIRouter()


@router.post(
    "/v1/tables/{table_number}/quick-actions/{action_id}",
    response_model=QuickActionRequestCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_quick_action(
    table_number: str,
    action_id: str,
    container: ServiceContainer = Depends(get_container),
) -> QuickActionRequestCreatedResponse:
    request_id = await RequestQuickAction(container.gateway).execute(
        TableNumber(table_number),
        QuickActionId(action_id),
    )
    return QuickActionRequestCreatedResponse(
        requestId=str(request_id),
        tableNumber=table_number,
        actionId=action_id,
    )


@router.post(
    "/v1/quick-action-requests/{request_id}/complete",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def complete_quick_action_request(
    request_id: str,
    container: ServiceContainer = Depends(get_container),
) -> None:
    await CompleteQuickActionRequest(container.gateway).execute(QuickActionRequestId(request_id))
    await container.monitor.reload()
