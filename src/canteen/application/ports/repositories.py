from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Protocol

from canteen.domain.canteen.entities import Canteen
from canteen.domain.common.ids import MenuItemId, OrderId, TableId
from canteen.domain.menu.entities import MenuCategory, MenuItem
from canteen.domain.order.entities import Order, OrderStatus
from canteen.domain.table.entities import Table


@dataclass(frozen=True)
class OrderFilter:
    status: OrderStatus | None = None
    table_id: TableId | None = None
    canteen_location: str | None = None
    created_after: datetime | None = None
    limit: int = 50


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def list(self, order_filter: OrderFilter) -> list[Order]: ...

    def update(self, order: Order) -> Order | None: ...

    def delete(self, order_id: OrderId, statuses: Iterable[OrderStatus]) -> bool: ...

    def delete_older_than(self, cutoff: datetime, statuses: Iterable[OrderStatus]) -> int: ...


class TableRepository(Protocol):
    def get(self, table_id: TableId) -> Table | None: ...

    def get_by_qr_code(self, qr_code: str) -> Table | None: ...

    def update(self, table: Table) -> None: ...

    def delete(self, table_id: TableId) -> bool: ...


class MenuRepository(Protocol):
    def get(self, item_id: MenuItemId) -> MenuItem | None: ...

    def list_items(
        self,
        category: MenuCategory | None,
        available_only: bool,
    ) -> list[MenuItem]: ...


class CanteenRepository(Protocol):
    def list_active(self) -> list[Canteen]: ...


class DuplicateOrderNumberError(Exception):
    pass
