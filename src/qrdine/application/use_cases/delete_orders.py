from __future__ import annotations

import logging

from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.domain.common.ids import OrderId

logger = logging.getLogger(__name__)


class ConfirmationRequiredError(Exception):
    pass


class DeleteOrder:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def execute(self, order_id: OrderId, *, confirmed: bool) -> None:
        if not confirmed:
            raise ConfirmationRequiredError("Are you sure you want to delete this order?")
        await self._gateway.delete_order(order_id)
        logger.warning("order_deleted", extra={"order_id": str(order_id)})


class DeleteAllOrders:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def execute(self, *, confirmed: bool) -> int:
        if not confirmed:
            raise ConfirmationRequiredError(
                "Are you sure you want to delete ALL orders? This action cannot be undone."
            )
        deleted = await self._gateway.delete_all_orders()
        logger.warning("orders_deleted", extra={"count": deleted})
        return deleted
