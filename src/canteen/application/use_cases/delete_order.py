from __future__ import annotations

import logging

from canteen.application.dto.responses import DeleteOrderResponse
from canteen.application.metrics.order_lifecycle import record_orders_deleted
from canteen.application.ports.repositories import OrderRepository
from canteen.application.use_cases.authorization import ensure_admin
from canteen.application.use_cases.errors import InvalidOperationError, OrderNotFoundError
from canteen.domain.common.ids import OrderId
from canteen.domain.order.entities import TERMINAL_STATUSES, Order, OrderNotDeletableError
from canteen.domain.user.entities import Principal

logger = logging.getLogger(__name__)


class OrderNotTerminalError(InvalidOperationError):
    pass


class DeleteOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId, principal: Principal) -> DeleteOrderResponse:
        ensure_admin(principal)

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        _ensure_deletable(order)

        if not self._order_repository.delete(order_id, TERMINAL_STATUSES):
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found")
            _ensure_deletable(current)
            raise OrderNotTerminalError(f"order {order_id} changed while being deleted")

        record_orders_deleted(reason="manual")
        logger.info(
            "order_deleted",
            extra={"order_id": str(order_id), "user_id": principal.user_id},
        )
        return DeleteOrderResponse(orderId=str(order_id), deleted=True)


def _ensure_deletable(order: Order) -> None:
    try:
        order.ensure_deletable()
    except OrderNotDeletableError as exc:
        raise OrderNotTerminalError(str(exc)) from exc
