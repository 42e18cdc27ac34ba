from __future__ import annotations

from canteen.application.use_cases.errors import UnauthorizedError
from canteen.domain.order.entities import Order
from canteen.domain.user.entities import Principal


def ensure_can_manage_orders(principal: Principal) -> None:
    if not principal.can_manage_orders:
        raise UnauthorizedError("staff or admin access required")


def ensure_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise UnauthorizedError("admin access required")


def ensure_staff_canteen(principal: Principal) -> str:
    if not principal.canteen_location:
        raise UnauthorizedError("staff account has no canteen assignment")
    return principal.canteen_location


def ensure_order_in_scope(principal: Principal, order: Order) -> None:
    if not principal.is_staff:
        return
    canteen_location = ensure_staff_canteen(principal)
    if order.canteen_location != canteen_location:
        raise UnauthorizedError(f"order {order.order_id} belongs to another canteen")
