from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Gauge, Histogram

from canteen.domain.order.entities import Order, OrderStatus

ORDERS_CREATED_TOTAL = Counter(
    "canteen_orders_created_total",
    "Total number of orders placed.",
    ["canteen_location"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "canteen_order_transition_total",
    "Total number of order status transitions applied.",
    ["from", "to"],
)

ORDER_TIME_TO_ACCEPT_SECONDS = Histogram(
    "canteen_order_time_to_accept_seconds",
    "Time between order placement and first acceptance.",
)

ORDER_TIME_TO_DELIVER_SECONDS = Histogram(
    "canteen_order_time_to_deliver_seconds",
    "Time between order placement and delivery.",
)

ORDERS_DELETED_TOTAL = Counter(
    "canteen_orders_deleted_total",
    "Total number of orders removed.",
    ["reason"],
)

ORDER_LIST_SIZE = Gauge(
    "canteen_order_list_size",
    "Number of orders returned by the most recent list query.",
    ["role", "status"],
)


def _canteen_label(order: Order) -> str:
    return order.canteen_location or "unassigned"


def record_order_created(order: Order) -> None:
    ORDERS_CREATED_TOTAL.labels(canteen_location=_canteen_label(order)).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_lifecycle_timing(before: Order, after: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    elapsed = max((current - after.created_at).total_seconds(), 0.0)
    if before.accepted_at is None and after.accepted_at is not None:
        ORDER_TIME_TO_ACCEPT_SECONDS.observe(elapsed)
    if before.delivered_at is None and after.delivered_at is not None:
        ORDER_TIME_TO_DELIVER_SECONDS.observe(elapsed)


def record_orders_deleted(reason: str, count: int = 1) -> None:
    if count > 0:
        ORDERS_DELETED_TOTAL.labels(reason=reason).inc(count)


def record_order_list_size(role: str, status: str, size: int) -> None:
    ORDER_LIST_SIZE.labels(role=role, status=status).set(size)
