from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from qrdine.api.container import ServiceContainer, get_container
from qrdine.application.dto.requests import SoundToggleRequest
from qrdine.application.dto.responses import MonitorSnapshotResponse, OrderResponse
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.mappers.snapshot_mapper import to_snapshot_response
from qrdine.application.monitor.view import active_order_for_table
from qrdine.application.use_cases.order_status import parse_cashier_status

router = APIRouter()


def _snapshot_response(
    container: ServiceContainer,
    status: str | None = None,
) -> MonitorSnapshotResponse:
    monitor = container.monitor
    return to_snapshot_response(
        monitor.snapshot,
        tax_rate=monitor.tax_rate,
        sound_enabled=monitor.sound_enabled,
        alert_loop_active=monitor.alerts.is_active,
        status=parse_cashier_status(status) if status and status != "all" else None,
    )


@router.get("/v1/cashier/snapshot", response_model=MonitorSnapshotResponse)
async def get_snapshot(
    status: str | None = None,
    container: ServiceContainer = Depends(get_container),
) -> MonitorSnapshotResponse:
    return _snapshot_response(container, status)


@router.post("/v1/cashier/reload", response_model=MonitorSnapshotResponse)
async def reload_snapshot(
    container: ServiceContainer = Depends(get_container),
) -> MonitorSnapshotResponse:
    await container.monitor.reload()
    return _snapshot_response(container)


@router.post("/v1/cashier/sound", response_model=MonitorSnapshotResponse)
async def toggle_sound(
    request_dto: SoundToggleRequest,
    container: ServiceContainer = Depends(get_container),
) -> MonitorSnapshotResponse:
    await container.monitor.set_sound_enabled(request_dto.enabled)
    return _snapshot_response(container)


@router.get("/v1/cashier/tables/{table_number}/active-order", response_model=OrderResponse)
async def get_active_order(
    table_number: str,
    container: ServiceContainer = Depends(get_container),
) -> OrderResponse:
    monitor = container.monitor
    order = active_order_for_table(monitor.snapshot.orders, table_number)
    if order is None:
        raise HTTPException(status_code=404, detail=f"table {table_number} has no active order")
    return to_order_response(order, monitor.tax_rate)
