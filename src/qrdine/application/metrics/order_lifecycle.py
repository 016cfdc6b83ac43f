from __future__ import annotations

from prometheus_client import Counter, Gauge

from qrdine.domain.order.entities import OrderStatus

ORDERS_SUBMITTED_TOTAL = Counter(
    "qrdine_orders_submitted_total",
    "Total number of orders submitted from table carts.",
    ["table_number"],
)

ORDER_SUBMISSION_FAILURES_TOTAL = Counter(
    "qrdine_order_submission_failures_total",
    "Total number of failed order submissions.",
    ["reason"],
)

ORDER_STATUS_UPDATES_TOTAL = Counter(
    "qrdine_order_status_updates_total",
    "Total number of order status changes made by staff.",
    ["to"],
)

QUICK_ACTION_REQUESTS_TOTAL = Counter(
    "qrdine_quick_action_requests_total",
    "Total number of quick action requests raised by tables.",
    ["action_id"],
)

MONITOR_RELOADS_TOTAL = Counter(
    "qrdine_monitor_reloads_total",
    "Total number of live order monitor reloads.",
    ["outcome"],
)

MONITOR_PENDING = Gauge(
    "qrdine_monitor_pending",
    "Pending items seen by the live order monitor at its last reload.",
    ["kind"],
)

ALERT_CUES_TOTAL = Counter(
    "qrdine_alert_cues_total",
    "Total number of audio cues emitted to cashier clients.",
    ["cue", "source"],
)

GATEWAY_RETRIES_TOTAL = Counter(
    "qrdine_gateway_retries_total",
    "Total number of retried persistence gateway calls.",
    ["operation"],
)


def record_order_submitted(table_number: str) -> None:
    ORDERS_SUBMITTED_TOTAL.labels(table_number=table_number).inc()


def record_submission_failure(reason: str) -> None:
    ORDER_SUBMISSION_FAILURES_TOTAL.labels(reason=reason).inc()


def record_status_update(to_status: OrderStatus) -> None:
    ORDER_STATUS_UPDATES_TOTAL.labels(to=to_status.value).inc()


def record_quick_action_request(action_id: str) -> None:
    QUICK_ACTION_REQUESTS_TOTAL.labels(action_id=action_id).inc()


def record_monitor_reload(outcome: str) -> None:
    MONITOR_RELOADS_TOTAL.labels(outcome=outcome).inc()


def record_pending(orders: int, quick_actions: int) -> None:
    MONITOR_PENDING.labels(kind="orders").set(orders)
    MONITOR_PENDING.labels(kind="quick_actions").set(quick_actions)


def record_alert_cue(cue: str, source: str) -> None:
    ALERT_CUES_TOTAL.labels(cue=cue, source=source).inc()


def record_gateway_retry(operation: str) -> None:
    GATEWAY_RETRIES_TOTAL.labels(operation=operation).inc()
