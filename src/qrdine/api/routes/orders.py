from __future__ import annotations

from fastapi import APIRouter, Depends, status

from qrdine.api.container import ServiceContainer, get_container
from qrdine.application.dto.requests import PlaceOrderRequest, UpdateOrderStatusRequest
from qrdine.application.dto.responses import (
    DeletedOrdersResponse,
    OrderStatusResponse,
    SubmittedOrderResponse,
)
from qrdine.application.mappers.order_mapper import to_submitted_order_response
from qrdine.application.use_cases.delete_orders import DeleteAllOrders, DeleteOrder
from qrdine.application.use_cases.order_status import UpdateOrderStatus
from qrdine.application.use_cases.place_order import PlaceTableOrder
from qrdine.application.use_cases.submit_order import SubmitOrder
from qrdine.domain.common.ids import OrderId, TableNumber

router = APIRouter()


def _place_order_use_case(container: ServiceContainer) -> PlaceTableOrder:
    return PlaceTableOrder(
        gateway=container.gateway,
        submit_order=SubmitOrder(container.order_writer),
        tax_rate=container.settings.tax_rate,
    )


@router.post(
    "/v1/tables/{table_number}/orders",
    response_model=SubmittedOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def place_order(
    table_number: str,
    request_dto: PlaceOrderRequest,
    container: ServiceContainer = Depends(get_container),
) -> SubmittedOrderResponse:
    submitted = await _place_order_use_case(container).execute(
        table_number=TableNumber(table_number),
        request_dto=request_dto,
    )
    return to_submitted_order_response(submitted)


@router.post("/v1/orders/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: str,
    request_dto: UpdateOrderStatusRequest,
    container: ServiceContainer = Depends(get_container),
) -> OrderStatusResponse:
    new_status = await UpdateOrderStatus(container.gateway).execute(
        OrderId(order_id),
        request_dto.status,
    )
    await container.monitor.reload()
    return OrderStatusResponse(orderId=order_id, status=new_status.value)


@router.delete("/v1/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: str,
    confirm: bool = False,
    container: ServiceContainer = Depends(get_container),
) -> None:
    await DeleteOrder(container.gateway).execute(OrderId(order_id), confirmed=confirm)
    await container.monitor.reload()


@router.delete("/v1/orders", response_model=DeletedOrdersResponse)
async def delete_all_orders(
    confirm: bool = False,
    container: ServiceContainer = Depends(get_container),
) -> DeletedOrdersResponse:
    deleted = await DeleteAllOrders(container.gateway).execute(confirmed=confirm)
    await container.monitor.reload()
    return DeletedOrdersResponse(deleted=deleted)
