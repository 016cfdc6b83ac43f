from __future__ import annotations

import logging

from qrdine.application.metrics.order_lifecycle import record_quick_action_request
from qrdine.application.ports.gateway import NewQuickActionRequest, PersistenceGateway
from qrdine.domain.common.ids import QuickActionId, QuickActionRequestId, TableNumber
from qrdine.domain.quick_action.entities import QuickActionRequestStatus

logger = logging.getLogger(__name__)


class QuickActionNotFoundError(Exception):
    pass


class RequestQuickAction:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def execute(
        self,
        table_number: TableNumber,
        action_id: QuickActionId,
    ) -> QuickActionRequestId:
        actions = await self._gateway.get_quick_actions()
        if not any(action.action_id == action_id for action in actions):
            raise QuickActionNotFoundError(f"quick action {action_id} not found")

        request_id = await self._gateway.create_quick_action_request(
            NewQuickActionRequest(table_number=table_number, action_id=action_id)
        )
        record_quick_action_request(str(action_id))
        logger.info(
            "quick_action_requested",
            extra={"table_number": table_number, "action_id": str(action_id)},
        )
        return request_id


class CompleteQuickActionRequest:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def execute(self, request_id: QuickActionRequestId) -> None:
        await self._gateway.update_quick_action_request_status(
            request_id,
            QuickActionRequestStatus.COMPLETED,
        )
        logger.info("quick_action_completed", extra={"request_id": str(request_id)})
