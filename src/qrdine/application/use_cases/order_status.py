from __future__ import annotations

import logging

from qrdine.application.metrics.order_lifecycle import record_status_update
from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.domain.common.ids import OrderId
from qrdine.domain.order.entities import CASHIER_STATUSES, OrderStatus

logger = logging.getLogger(__name__)


class InvalidOrderStatusError(Exception):
    pass


def parse_cashier_status(value: str) -> OrderStatus:
    normalized = value.strip().lower()
    for status in CASHIER_STATUSES:
        if status.value == normalized:
            return status
    raise InvalidOrderStatusError(f"invalid order status: {value}")


class UpdateOrderStatus:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def execute(self, order_id: OrderId, status: str) -> OrderStatus:
        new_status = parse_cashier_status(status)
        await self._gateway.update_order_status(order_id, new_status)
        record_status_update(new_status)
        logger.info(
            "order_status_updated",
            extra={"order_id": str(order_id), "status": new_status.value},
        )
        return new_status
