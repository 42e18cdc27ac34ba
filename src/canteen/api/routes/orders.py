from __future__ import annotations

import os
from datetime import timedelta

from fastapi import APIRouter, Depends, Query, status

from canteen.api.deps import get_principal
from canteen.application.dto.requests import CreateOrderRequest, UpdateOrderRequest
from canteen.application.dto.responses import (
    CleanupOrdersResponse,
    DeleteOrderResponse,
    OrderListResponse,
    OrderResponse,
)
from canteen.application.use_cases.cleanup_orders import DEFAULT_RETENTION, CleanupOrders
from canteen.application.use_cases.delete_order import DeleteOrder
from canteen.application.use_cases.get_order import GetOrder
from canteen.application.use_cases.list_orders import DEFAULT_LIMIT, MAX_LIMIT, ListOrders
from canteen.application.use_cases.place_order import PlaceOrder
from canteen.application.use_cases.update_order_status import UpdateOrderStatus
from canteen.domain.common.ids import OrderId
from canteen.domain.user.entities import Principal
from canteen.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from canteen.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from canteen.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(tags=["orders"])


def order_retention() -> timedelta:
    raw = os.getenv("ORDER_RETENTION_DAYS")
    if not raw:
        return DEFAULT_RETENTION
    try:
        days = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"ORDER_RETENTION_DAYS must be an integer, got {raw!r}") from exc
    if days < 1:
        raise RuntimeError("ORDER_RETENTION_DAYS must be at least 1")
    return timedelta(days=days)


def _place_order_use_case() -> PlaceOrder:
    return PlaceOrder(
        table_repository=SqlAlchemyTableRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
        order_repository=SqlAlchemyOrderRepository(),
    )


def _get_order_use_case() -> GetOrder:
    return GetOrder(order_repository=SqlAlchemyOrderRepository())


def _list_orders_use_case() -> ListOrders:
    return ListOrders(order_repository=SqlAlchemyOrderRepository())


def _update_order_status_use_case() -> UpdateOrderStatus:
    return UpdateOrderStatus(order_repository=SqlAlchemyOrderRepository())


def _delete_order_use_case() -> DeleteOrder:
    return DeleteOrder(order_repository=SqlAlchemyOrderRepository())


def _cleanup_orders_use_case() -> CleanupOrders:
    return CleanupOrders(
        order_repository=SqlAlchemyOrderRepository(),
        retention=order_retention(),
    )


@router.post(
    "/v1/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_order(request_dto: CreateOrderRequest) -> OrderResponse:
    return _place_order_use_case().execute(request_dto)


@router.get("/v1/orders", response_model=OrderListResponse)
def list_orders(
    status_filter: str = Query(default="all", alias="status"),
    table_id: str | None = Query(default=None, alias="tableId"),
    canteen_location: str | None = Query(default=None, alias="canteenLocation"),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    principal: Principal = Depends(get_principal),
) -> OrderListResponse:
    return _list_orders_use_case().execute(
        principal,
        status=status_filter,
        table_id=table_id,
        canteen_location=canteen_location,
        limit=limit,
    )


# registered before the ``{order_id}`` routes so "cleanup" is never taken as an id
@router.post("/v1/orders/cleanup", response_model=CleanupOrdersResponse)
def cleanup_orders(principal: Principal = Depends(get_principal)) -> CleanupOrdersResponse:
    return _cleanup_orders_use_case().execute(principal)


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _get_order_use_case().execute(order_id=OrderId(order_id))


@router.patch("/v1/orders/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: str,
    request_dto: UpdateOrderRequest,
    principal: Principal = Depends(get_principal),
) -> OrderResponse:
    return _update_order_status_use_case().execute(
        order_id=OrderId(order_id),
        request_dto=request_dto,
        principal=principal,
    )


@router.delete("/v1/orders/{order_id}", response_model=DeleteOrderResponse)
def delete_order(
    order_id: str,
    principal: Principal = Depends(get_principal),
) -> DeleteOrderResponse:
    return _delete_order_use_case().execute(order_id=OrderId(order_id), principal=principal)
