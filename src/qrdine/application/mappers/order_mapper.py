from __future__ import annotations

from qrdine.application.dto.responses import (
    LocalizedTextResponse,
    OrderItemResponse,
    OrderResponse,
    SubmittedOrderResponse,
)
from qrdine.application.mappers.menu_mapper import to_text_response
from qrdine.application.use_cases.submit_order import SubmittedOrder
from qrdine.domain.order.entities import Order, OrderItem
from qrdine.domain.order.totals import format_money, line_amount, order_total, order_totals


def _to_order_item_response(item: OrderItem) -> OrderItemResponse:
    name = item.display_name
    return OrderItemResponse(
        orderItemId=str(item.order_item_id),
        itemId=str(item.item_id) if item.item_id is not None else None,
        priceId=str(item.price_id) if item.price_id is not None else None,
        name=LocalizedTextResponse(en=name.en, ar=name.ar),
        size=to_text_response(item.size),
        quantity=item.quantity,
        unitPrice=format_money(item.unit_price) if item.unit_price is not None else None,
        lineTotal=format_money(line_amount(item.unit_price, item.quantity)),
        notes=item.notes,
    )


def to_order_response(order: Order, tax_rate: float) -> OrderResponse:
    totals = order_totals(order, tax_rate)
    return OrderResponse(
        orderId=str(order.order_id),
        shortId=order.short_id,
        tableNumber=str(order.table_number),
        status=order.status.value,
        dinerCount=order.diner_count,
        items=[_to_order_item_response(item) for item in order.items],
        subtotal=format_money(totals.subtotal),
        tax=format_money(totals.tax),
        total=format_money(order_total(order, tax_rate)),
        placedAt=order.placed_at,
    )


def to_submitted_order_response(submitted: SubmittedOrder) -> SubmittedOrderResponse:
    return SubmittedOrderResponse(
        orderId=str(submitted.order_id),
        confirmationCode=submitted.confirmation_code,
        tableNumber=str(submitted.table_number),
        subtotal=format_money(submitted.totals.subtotal),
        tax=format_money(submitted.totals.tax),
        total=format_money(submitted.totals.total),
    )
