from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from canteen.application.dto.requests import CreateOrderItemRequest, CreateOrderRequest
from canteen.application.ports.repositories import DuplicateOrderNumberError
from canteen.application.use_cases.errors import MenuItemNotFoundError, TableNotFoundError
from canteen.application.use_cases.place_order import (
    MAX_ORDER_NUMBER_ATTEMPTS,
    MenuItemUnavailableError,
    OrderNumberUnavailableError,
    PlaceOrder,
    TableUnavailableError,
)
from canteen.domain.common.ids import MenuItemId, TableId
from canteen.domain.menu.entities import MenuCategory, MenuItem
from canteen.domain.order.entities import Order, OrderStatus
from canteen.domain.table.entities import Table

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class FakeTableRepository:
    def __init__(self, *tables: Table) -> None:
        self._tables = {str(table.table_id): table for table in tables}

    def get(self, table_id) -> Table | None:
        return self._tables.get(str(table_id))


class FakeMenuRepository:
    def __init__(self, *items: MenuItem) -> None:
        self.items = {str(item.item_id): item for item in items}

    def get(self, item_id) -> MenuItem | None:
        return self.items.get(str(item_id))


class FakeOrderRepository:
    def __init__(self, collisions: int = 0) -> None:
        self.orders: list[Order] = []
        self.attempted_numbers: list[str] = []
        self._collisions = collisions

    def add(self, order: Order) -> None:
        self.attempted_numbers.append(order.order_number)
        if self._collisions > 0:
            self._collisions -= 1
            raise DuplicateOrderNumberError(order.order_number)
        self.orders.append(order)


def _table(is_active: bool = True) -> Table:
    return Table(
        table_id=TableId("tbl_001"),
        table_number="T1",
        qr_code="qr-main-t1",
        canteen_location="Main Canteen",
        is_active=is_active,
    )


def _dosa(is_available: bool = True) -> MenuItem:
    return MenuItem(
        item_id=MenuItemId("itm_001"),
        name="Masala Dosa",
        description="Crisp rice crepe",
        category=MenuCategory.MAIN_COURSE,
        is_available=is_available,
    )


def _chai() -> MenuItem:
    return MenuItem(
        item_id=MenuItemId("itm_004"),
        name="Masala Chai",
        description="Spiced milk tea",
        category=MenuCategory.BEVERAGES,
    )


def _request(customer_name: str | None = None, item_ids: tuple[str, ...] = ("itm_001",)):
    return CreateOrderRequest(
        table_id="tbl_001",
        customer_name=customer_name,
        items=[CreateOrderItemRequest(menu_item_id=item_id, quantity=2) for item_id in item_ids],
    )


def _use_case(
    table: Table | None = None,
    menu: FakeMenuRepository | None = None,
    orders: FakeOrderRepository | None = None,
) -> PlaceOrder:
    return PlaceOrder(
        table_repository=FakeTableRepository(*([table] if table else [])),
        menu_repository=menu or FakeMenuRepository(_dosa(), _chai()),
        order_repository=orders or FakeOrderRepository(),
        clock=lambda: NOW,
    )


def test_place_order_snapshots_table_and_item_names() -> None:
    orders = FakeOrderRepository()
    response = _use_case(table=_table(), orders=orders).execute(
        _request("Meera", ("itm_001", "itm_004"))
    )

    assert response.status == OrderStatus.PENDING.value
    assert response.customerName == "Meera"
    assert response.tableNumber == "T1"
    assert response.canteenLocation == "Main Canteen"
    assert [item.name for item in response.items] == ["Masala Dosa", "Masala Chai"]
    assert response.orderNumber.startswith("ORD-2026-")
    assert len(orders.orders) == 1


def test_blank_customer_name_becomes_guest() -> None:
    response = _use_case(table=_table()).execute(_request("  "))
    assert response.customerName == "Guest"


def test_menu_edits_after_placement_do_not_change_order() -> None:
    menu = FakeMenuRepository(_dosa(), _chai())
    orders = FakeOrderRepository()
    _use_case(table=_table(), menu=menu, orders=orders).execute(_request())

    menu.items["itm_001"] = replace(_dosa(), name="Ghee Roast Dosa")

    assert orders.orders[0].items[0].name == "Masala Dosa"


def test_missing_table_is_not_found() -> None:
    with pytest.raises(TableNotFoundError):
        _use_case(table=None).execute(_request())


def test_inactive_table_is_rejected() -> None:
    with pytest.raises(TableUnavailableError):
        _use_case(table=_table(is_active=False)).execute(_request())


def test_missing_menu_item_is_not_found() -> None:
    with pytest.raises(MenuItemNotFoundError):
        _use_case(table=_table()).execute(_request(item_ids=("itm_999",)))


def test_unavailable_menu_item_is_rejected() -> None:
    menu = FakeMenuRepository(_dosa(is_available=False))
    with pytest.raises(MenuItemUnavailableError, match="Masala Dosa is currently unavailable"):
        _use_case(table=_table(), menu=menu).execute(_request())


def test_order_number_collision_is_retried() -> None:
    orders = FakeOrderRepository(collisions=2)
    _use_case(table=_table(), orders=orders).execute(_request())

    assert len(orders.attempted_numbers) == 3
    assert len(orders.orders) == 1


def test_order_number_retries_are_bounded() -> None:
    orders = FakeOrderRepository(collisions=MAX_ORDER_NUMBER_ATTEMPTS)

    with pytest.raises(OrderNumberUnavailableError):
        _use_case(table=_table(), orders=orders).execute(_request())
    assert orders.orders == []
