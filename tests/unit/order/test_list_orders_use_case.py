from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from canteen.application.ports.repositories import OrderFilter
from canteen.application.use_cases.errors import (
    InvalidStatusError,
    OrderValidationError,
    UnauthorizedError,
)
from canteen.application.use_cases.list_orders import ListOrders, start_of_local_day
from canteen.domain.common.ids import MenuItemId, OrderId, TableId, UserId
from canteen.domain.order.entities import Order, OrderItem, OrderStatus, create_pending_order
from canteen.domain.user.entities import Principal, Role

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

STAFF = Principal(user_id=UserId("usr_staff"), role=Role.STAFF, canteen_location="Main Canteen")
ADMIN = Principal(user_id=UserId("usr_admin"), role=Role.ADMIN)


class FakeOrderRepository:
    def __init__(self, *orders: Order) -> None:
        self._orders = list(orders)
        self.filters: list[OrderFilter] = []

    def list(self, order_filter: OrderFilter) -> list[Order]:
        self.filters.append(order_filter)
        matches = [
            order
            for order in self._orders
            if (order_filter.status is None or order.status == order_filter.status)
            and (order_filter.table_id is None or order.table_id == order_filter.table_id)
            and (
                order_filter.canteen_location is None
                or order.canteen_location == order_filter.canteen_location
            )
            and (
                order_filter.created_after is None
                or order.created_at >= order_filter.created_after
            )
        ]
        matches.sort(key=lambda order: order.created_at, reverse=True)
        return matches[: order_filter.limit]


def _order(
    order_id: str,
    canteen_location: str,
    created_at: datetime,
    table_id: str = "tbl_001",
) -> Order:
    return create_pending_order(
        order_id=OrderId(order_id),
        order_number=f"ORD-2026-{order_id[-4:]}",
        customer_name=None,
        table_id=TableId(table_id),
        table_number="T1",
        canteen_location=canteen_location,
        items=[OrderItem(menu_item_id=MenuItemId("itm_001"), name="Masala Dosa", quantity=1)],
        now=created_at,
    )


def _repository() -> FakeOrderRepository:
    today = start_of_local_day(NOW)
    return FakeOrderRepository(
        _order("ord_0001", "Main Canteen", today + timedelta(minutes=5)),
        _order("ord_0002", "Main Canteen", today - timedelta(hours=2)),
        _order("ord_0003", "Annex Canteen", today + timedelta(minutes=10), table_id="tbl_003"),
        _order("ord_0004", "Main Canteen", today + timedelta(minutes=20), table_id="tbl_002"),
    )


def test_staff_only_see_their_canteen_from_today() -> None:
    repository = _repository()
    response = ListOrders(order_repository=repository, clock=lambda: NOW).execute(
        STAFF,
        canteen_location="Annex Canteen",
        limit=100,
    )

    assert [order.orderId for order in response.orders] == ["ord_0004", "ord_0001"]
    assert all(order.canteenLocation == "Main Canteen" for order in response.orders)
    assert repository.filters[0].created_after == start_of_local_day(NOW)


def test_admin_filters_are_applied_as_given() -> None:
    repository = _repository()
    response = ListOrders(order_repository=repository, clock=lambda: NOW).execute(
        ADMIN,
        status="pending",
        canteen_location="Main Canteen",
        table_id="tbl_001",
    )

    assert [order.orderId for order in response.orders] == ["ord_0001", "ord_0002"]
    assert repository.filters[0].created_after is None
    assert repository.filters[0].status == OrderStatus.PENDING


def test_all_status_means_no_status_filter() -> None:
    repository = _repository()
    ListOrders(order_repository=repository).execute(ADMIN, status="ALL")
    assert repository.filters[0].status is None


def test_unknown_status_filter_is_rejected() -> None:
    with pytest.raises(InvalidStatusError):
        ListOrders(order_repository=_repository()).execute(ADMIN, status="served")


@pytest.mark.parametrize("limit", [0, 201])
def test_limit_must_be_in_range(limit: int) -> None:
    with pytest.raises(OrderValidationError):
        ListOrders(order_repository=_repository()).execute(ADMIN, limit=limit)


def test_staff_without_canteen_is_unauthorized() -> None:
    unassigned = Principal(user_id=UserId("usr_new"), role=Role.STAFF)
    with pytest.raises(UnauthorizedError):
        ListOrders(order_repository=_repository()).execute(unassigned)


def test_limit_is_respected() -> None:
    response = ListOrders(order_repository=_repository()).execute(ADMIN, limit=2)
    assert len(response.orders) == 2
