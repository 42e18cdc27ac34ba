from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from canteen.application.dto.requests import CreateOrderRequest
from canteen.application.dto.responses import OrderResponse
from canteen.application.mappers.order_mapper import to_order_response
from canteen.application.metrics.order_lifecycle import record_order_created
from canteen.application.ports.repositories import (
    DuplicateOrderNumberError,
    MenuRepository,
    OrderRepository,
    TableRepository,
)
from canteen.application.use_cases.errors import (
    MenuItemNotFoundError,
    OrderValidationError,
    TableNotFoundError,
)
from canteen.domain.common.ids import MenuItemId, OrderId, TableId
from canteen.domain.order.entities import (
    Order,
    OrderItem,
    create_pending_order,
    generate_order_number,
)
from canteen.domain.table.entities import TableInactiveError

logger = logging.getLogger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5


class TableUnavailableError(OrderValidationError):
    pass


class MenuItemUnavailableError(OrderValidationError):
    pass


class OrderNumberUnavailableError(Exception):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlaceOrder:
    def __init__(
        self,
        table_repository: TableRepository,
        menu_repository: MenuRepository,
        order_repository: OrderRepository,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._table_repository = table_repository
        self._menu_repository = menu_repository
        self._order_repository = order_repository
        self._clock = clock or _utcnow
        self._rng = rng

    def execute(self, request_dto: CreateOrderRequest) -> OrderResponse:
        if not request_dto.items:
            raise OrderValidationError("order must have at least one item")

        table_id = TableId(request_dto.table_id)
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        try:
            table.ensure_active()
        except TableInactiveError as exc:
            raise TableUnavailableError(str(exc)) from exc

        order_items: list[OrderItem] = []
        for request_item in request_dto.items:
            menu_item = self._menu_repository.get(MenuItemId(request_item.menu_item_id))
            if menu_item is None:
                raise MenuItemNotFoundError(f"menu item not found: {request_item.menu_item_id}")
            if not menu_item.is_available:
                raise MenuItemUnavailableError(f"{menu_item.name} is currently unavailable")
            try:
                order_items.append(
                    OrderItem(
                        menu_item_id=menu_item.item_id,
                        name=menu_item.name,
                        quantity=request_item.quantity,
                        special_instructions=request_item.special_instructions,
                    )
                )
            except ValueError as exc:
                raise OrderValidationError(str(exc)) from exc

        now = self._clock()
        order = self._add_with_fresh_number(
            lambda order_number: create_pending_order(
                order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
                order_number=order_number,
                customer_name=request_dto.customer_name,
                table_id=table.table_id,
                table_number=table.table_number,
                # never trust a client-supplied location
                canteen_location=table.canteen_location,
                items=order_items,
                now=now,
            ),
            now,
        )

        record_order_created(order)
        logger.info(
            "order_placed",
            extra={
                "order_id": str(order.order_id),
                "order_number": order.order_number,
                "canteen_location": order.canteen_location,
            },
        )
        return to_order_response(order)

    def _add_with_fresh_number(self, build: Callable[[str], Order], now: datetime) -> Order:
        for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
            order = build(generate_order_number(now, self._rng))
            try:
                self._order_repository.add(order)
            except DuplicateOrderNumberError:
                logger.warning(
                    "order_number_collision",
                    extra={"order_number": order.order_number, "attempt": attempt},
                )
                continue
            return order
        raise OrderNumberUnavailableError("could not allocate a unique order number")
