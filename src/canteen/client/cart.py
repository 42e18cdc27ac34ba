from __future__ import annotations

import logging
from dataclasses import dataclass

from canteen.application.dto.requests import CreateOrderItemRequest, CreateOrderRequest
from canteen.application.dto.responses import OrderResponse
from canteen.application.use_cases.errors import OrderValidationError
from canteen.client.api_client import CanteenApiClient
from canteen.domain.order.entities import normalize_customer_name

logger = logging.getLogger(__name__)


class CartEmptyError(OrderValidationError):
    pass


@dataclass
class CartLine:
    menu_item_id: str
    name: str
    quantity: int
    special_instructions: str | None = None


class Cart:
    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}
        self.table_id: str | None = None
        self.table_number: str | None = None

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def bind_table(self, table_id: str, table_number: str) -> None:
        self.table_id = table_id
        self.table_number = table_number

    def add(
        self,
        menu_item_id: str,
        name: str,
        quantity: int = 1,
        special_instructions: str | None = None,
    ) -> CartLine:
        if quantity < 1:
            raise ValueError("quantity must be >= 1")
        line = self._lines.get(menu_item_id)
        if line is None:
            line = CartLine(menu_item_id=menu_item_id, name=name, quantity=0)
            self._lines[menu_item_id] = line
        line.quantity += quantity
        if special_instructions is not None:
            line.special_instructions = special_instructions.strip() or None
        return line

    def update_quantity(self, menu_item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self._lines.pop(menu_item_id, None)
            return
        line = self._lines.get(menu_item_id)
        if line is not None:
            line.quantity = quantity

    def remove(self, menu_item_id: str) -> None:
        self._lines.pop(menu_item_id, None)

    def clear(self) -> None:
        self._lines.clear()
        self.table_id = None
        self.table_number = None


@dataclass(frozen=True)
class CheckoutResult:
    order: OrderResponse

    @property
    def tracking_path(self) -> str:
        return f"/track/{self.order.orderId}"


def build_checkout_request(cart: Cart, customer_name: str | None = None) -> CreateOrderRequest:
    if cart.is_empty or not cart.table_id:
        raise CartEmptyError("cart is empty")
    return CreateOrderRequest(
        table_id=cart.table_id,
        customer_name=normalize_customer_name(customer_name),
        items=[
            CreateOrderItemRequest(
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                special_instructions=line.special_instructions,
            )
            for line in cart.lines
        ],
    )


async def checkout(
    cart: Cart,
    api_client: CanteenApiClient,
    customer_name: str | None = None,
) -> CheckoutResult:
    request_dto = build_checkout_request(cart, customer_name)
    order = await api_client.create_order(request_dto)
    cart.clear()
    logger.info(
        "checkout_complete",
        extra={"order_id": order.orderId, "order_number": order.orderNumber},
    )
    return CheckoutResult(order=order)
