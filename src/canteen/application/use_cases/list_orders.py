from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from canteen.application.dto.responses import OrderListResponse
from canteen.application.mappers.order_mapper import to_order_response
from canteen.application.metrics.order_lifecycle import record_order_list_size
from canteen.application.ports.repositories import OrderFilter, OrderRepository
from canteen.application.use_cases.authorization import ensure_staff_canteen
from canteen.application.use_cases.errors import InvalidStatusError, OrderValidationError
from canteen.domain.common.ids import TableId
from canteen.domain.order.entities import OrderStatus
from canteen.domain.user.entities import Principal

_STATUS_MAP: dict[str, OrderStatus | None] = {
    "all": None,
    **{status.value: status for status in OrderStatus},
}

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_local_day(now: datetime) -> datetime:
    """Midnight of ``now``'s day in the server's local timezone, as UTC."""
    local_now = now.astimezone()
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


class ListOrders:
    def __init__(
        self,
        order_repository: OrderRepository,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._order_repository = order_repository
        self._clock = clock or _utcnow

    def execute(
        self,
        principal: Principal,
        *,
        status: str = "all",
        table_id: str | None = None,
        canteen_location: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> OrderListResponse:
        normalized_status = status.strip().lower()
        if normalized_status not in _STATUS_MAP:
            raise InvalidStatusError(f"invalid order status filter: {status}")
        if limit < 1 or limit > MAX_LIMIT:
            raise OrderValidationError(f"limit must be between 1 and {MAX_LIMIT}")

        created_after: datetime | None = None
        if principal.is_staff:
            # staff only ever see their own canteen's orders from today
            canteen_location = ensure_staff_canteen(principal)
            created_after = start_of_local_day(self._clock())

        orders = self._order_repository.list(
            OrderFilter(
                status=_STATUS_MAP[normalized_status],
                table_id=TableId(table_id) if table_id else None,
                canteen_location=canteen_location or None,
                created_after=created_after,
                limit=limit,
            )
        )

        record_order_list_size(
            role=principal.role.value,
            status=normalized_status,
            size=len(orders),
        )
        return OrderListResponse(orders=[to_order_response(order) for order in orders])
