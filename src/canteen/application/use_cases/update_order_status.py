from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from canteen.application.dto.requests import UpdateOrderRequest
from canteen.application.dto.responses import OrderResponse
from canteen.application.mappers.order_mapper import to_order_response
from canteen.application.metrics.order_lifecycle import record_lifecycle_timing, record_transition
from canteen.application.ports.repositories import OrderRepository
from canteen.application.use_cases.authorization import (
    ensure_can_manage_orders,
    ensure_order_in_scope,
)
from canteen.application.use_cases.errors import (
    InvalidStatusError,
    OrderNotFoundError,
    OrderValidationError,
)
from canteen.domain.common.ids import OrderId
from canteen.domain.order.entities import OrderStatus
from canteen.domain.user.entities import Principal

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        raise InvalidStatusError(f"invalid order status: {value}") from exc


class UpdateOrderStatus:
    """Applies staff-initiated status transitions and ETA/notes edits.

    This is the only writer of ``status`` and the lifecycle timestamps.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._order_repository = order_repository
        self._clock = clock or _utcnow

    def execute(
        self,
        order_id: OrderId,
        request_dto: UpdateOrderRequest,
        principal: Principal,
    ) -> OrderResponse:
        ensure_can_manage_orders(principal)
        new_status = (
            parse_order_status(request_dto.status) if request_dto.status is not None else None
        )

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        ensure_order_in_scope(principal, order)

        now = self._clock()
        try:
            if new_status is None:
                updated = order.edit_details(
                    now,
                    eta_minutes=request_dto.eta,
                    note=request_dto.staff_notes,
                )
            else:
                updated = order.apply_transition(
                    new_status,
                    now,
                    eta_minutes=request_dto.eta,
                    note=request_dto.staff_notes,
                )
        except ValueError as exc:
            raise OrderValidationError(str(exc)) from exc

        persisted = self._order_repository.update(updated)
        if persisted is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        if new_status is not None:
            record_transition(from_status=order.status, to_status=new_status)
            record_lifecycle_timing(order, persisted, now=now)
        logger.info(
            "order_updated",
            extra={
                "order_id": str(order_id),
                "from_status": order.status.value,
                "to_status": persisted.status.value,
                "user_id": principal.user_id,
            },
        )
        return to_order_response(persisted)
