from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from qrdine.application.metrics.order_lifecycle import (
    record_order_submitted,
    record_submission_failure,
)
from qrdine.application.ports.gateway import (
    GatewayError,
    NewOrder,
    NewOrderItem,
    PersistenceGateway,
)
from qrdine.domain.cart.builder import CartBuilder
from qrdine.domain.common.ids import MenuItemId, OrderId, PriceVariantId, TableNumber
from qrdine.domain.order.totals import OrderTotals

logger = logging.getLogger(__name__)


class EmptyCartError(Exception):
    pass


class OrderSubmissionError(Exception):
    def __init__(self, message: str, order_id: OrderId | None = None) -> None:
        super().__init__(message)
        self.order_id = order_id


class PartialOrderWriteError(OrderSubmissionError):
    """The order row exists but not every item row could be written."""

    def __init__(self, order_id: OrderId, items_written: int, items_expected: int) -> None:
        super().__init__(
            f"order {order_id} written with {items_written}/{items_expected} items",
            order_id=order_id,
        )
        self.items_written = items_written
        self.items_expected = items_expected

    @property
    def details(self) -> dict[str, object]:
        return {
            "orderId": str(self.order_id),
            "itemsWritten": self.items_written,
            "itemsExpected": self.items_expected,
        }


@dataclass(frozen=True)
class OrderItemDraft:
    item_id: MenuItemId
    price_id: PriceVariantId | None
    quantity: int
    notes: str | None = None

    def bind(self, order_id: OrderId) -> NewOrderItem:
        return NewOrderItem(
            order_id=order_id,
            item_id=self.item_id,
            price_id=self.price_id,
            quantity=self.quantity,
            notes=self.notes,
        )


class OrderWriter(Protocol):
    async def write(self, order: NewOrder, items: Sequence[OrderItemDraft]) -> OrderId: ...


class SequentialOrderWriter:
    """Writes the order row, then each item row one after another.

    There is no transaction across the writes: an item failure leaves the
    order and any earlier items persisted.
    """

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def write(self, order: NewOrder, items: Sequence[OrderItemDraft]) -> OrderId:
        try:
            order_id = await self._gateway.create_order(order)
        except GatewayError as exc:
            raise OrderSubmissionError(str(exc)) from exc

        written = 0
        for item in items:
            try:
                await self._gateway.create_order_item(item.bind(order_id))
            except GatewayError as exc:
                raise PartialOrderWriteError(order_id, written, len(items)) from exc
            written += 1
        return order_id


class CompensatingOrderWriter(SequentialOrderWriter):
    """Sequential writer that deletes the order row when an item write fails."""

    async def write(self, order: NewOrder, items: Sequence[OrderItemDraft]) -> OrderId:
        try:
            return await super().write(order, items)
        except PartialOrderWriteError as exc:
            try:
                await self._gateway.delete_order(exc.order_id)
            except GatewayError:
                logger.exception(
                    "order_compensation_failed",
                    extra={"order_id": str(exc.order_id)},
                )
            else:
                logger.warning(
                    "order_compensated",
                    extra={"order_id": str(exc.order_id), "items_written": exc.items_written},
                )
            raise


@dataclass(frozen=True)
class SubmittedOrder:
    order_id: OrderId
    table_number: TableNumber
    totals: OrderTotals

    @property
    def confirmation_code(self) -> str:
        return str(self.order_id)[:8]


class SubmitOrder:
    def __init__(self, writer: OrderWriter) -> None:
        self._writer = writer

    async def execute(self, cart: CartBuilder, table_number: TableNumber) -> SubmittedOrder:
        if cart.is_empty:
            logger.warning("order_submit_empty_cart", extra={"table_number": table_number})
            record_submission_failure("empty_cart")
            raise EmptyCartError("Your cart is empty")

        totals = cart.totals()
        new_order = NewOrder(
            table_number=table_number,
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            diner_count=cart.diner_count,
        )
        items = [
            OrderItemDraft(
                item_id=line.item.item_id,
                price_id=line.variant.price_id if line.variant is not None else None,
                quantity=line.quantity,
                notes=line.note or None,
            )
            for line in cart.lines
        ]

        try:
            order_id = await self._writer.write(new_order, items)
        except PartialOrderWriteError as exc:
            logger.error(
                "order_submit_partial",
                extra={
                    "table_number": table_number,
                    "order_id": str(exc.order_id),
                    "items_written": exc.items_written,
                    "items_expected": exc.items_expected,
                },
            )
            record_submission_failure("partial_write")
            raise
        except OrderSubmissionError:
            logger.warning("order_submit_failed", extra={"table_number": table_number})
            record_submission_failure("order_write")
            raise

        cart.clear()
        record_order_submitted(str(table_number))
        logger.info(
            "order_submitted",
            extra={
                "table_number": table_number,
                "order_id": str(order_id),
                "item_count": len(items),
            },
        )
        return SubmittedOrder(order_id=order_id, table_number=table_number, totals=totals)
