from __future__ import annotations

from qrdine.application.dto.responses import (
    MonitorSnapshotResponse,
    OrderStatisticsResponse,
    PendingCountsResponse,
    QuickActionRequestResponse,
)
from qrdine.application.mappers.menu_mapper import to_text_response
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.monitor.view import MonitorSnapshot, filter_orders
from qrdine.domain.order.entities import OrderStatus
from qrdine.domain.order.totals import format_money
from qrdine.domain.quick_action.entities import QuickActionRequest


def to_quick_action_request_response(request: QuickActionRequest) -> QuickActionRequestResponse:
    return QuickActionRequestResponse(
        requestId=str(request.request_id),
        tableNumber=str(request.table_number),
        actionId=str(request.action_id) if request.action_id is not None else None,
        label=to_text_response(request.action_label),
        status=request.status.value,
        requestedAt=request.requested_at,
    )


def to_snapshot_response(
    snapshot: MonitorSnapshot,
    *,
    tax_rate: float,
    sound_enabled: bool,
    alert_loop_active: bool,
    status: OrderStatus | None = None,
) -> MonitorSnapshotResponse:
    return MonitorSnapshotResponse(
        orders=[to_order_response(order, tax_rate) for order in filter_orders(snapshot.orders, status)],
        quickActionRequests=[
            to_quick_action_request_response(request) for request in snapshot.quick_action_requests
        ],
        tables={table: state.value for table, state in snapshot.tables.items()},
        statistics=OrderStatisticsResponse(
            totalOrders=snapshot.statistics.total_orders,
            completedOrders=snapshot.statistics.completed_orders,
            pendingOrders=snapshot.statistics.pending_orders,
            revenue=format_money(snapshot.statistics.revenue),
        ),
        pending=PendingCountsResponse(
            orders=snapshot.pending.orders,
            quickActions=snapshot.pending.quick_actions,
        ),
        soundEnabled=sound_enabled,
        alertLoopActive=alert_loop_active,
        loadedAt=snapshot.loaded_at,
    )
