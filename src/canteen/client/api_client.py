from __future__ import annotations

import logging
from typing import Any

import httpx

from canteen.application.dto.requests import CreateOrderRequest, UpdateOrderRequest
from canteen.application.dto.responses import (
    CleanupOrdersResponse,
    DeleteOrderResponse,
    MenuResponse,
    OrderListResponse,
    OrderResponse,
    TableResponse,
)
from canteen.domain.user.entities import Principal

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class ApiError(Exception):
    """A non-2xx answer from the backend; ``message`` is the server's text as sent."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


def _principal_headers(principal: Principal | None) -> dict[str, str]:
    if principal is None:
        return {}
    headers = {"X-User-Role": principal.role.value}
    if principal.user_id:
        headers["X-User-Id"] = str(principal.user_id)
    if principal.canteen_location:
        headers["X-User-Canteen"] = principal.canteen_location
    return headers


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return

    code = "HTTP_ERROR"
    message = response.reason_phrase or f"request failed with status {response.status_code}"
    try:
        body: Any = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = str(body["error"].get("code") or code)
        message = str(body["error"].get("message") or message)

    raise ApiError(status_code=response.status_code, code=code, message=message)


class CanteenApiClient:
    """Async HTTP client for the ordering backend used by the polling components."""

    def __init__(
        self,
        base_url: str,
        principal: Principal | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=_principal_headers(principal),
            timeout=timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> CanteenApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, path, **kwargs)
        _raise_for_error(response)
        return response.json()

    async def list_orders(
        self,
        status: str = "all",
        table_id: str | None = None,
        limit: int = 100,
    ) -> list[OrderResponse]:
        params: dict[str, Any] = {"status": status, "limit": limit}
        if table_id is not None:
            params["tableId"] = table_id
        payload = await self._request("GET", "/v1/orders", params=params)
        return OrderListResponse.model_validate(payload).orders

    async def get_order(self, order_id: str) -> OrderResponse:
        payload = await self._request("GET", f"/v1/orders/{order_id}")
        return OrderResponse.model_validate(payload)

    async def create_order(self, request_dto: CreateOrderRequest) -> OrderResponse:
        payload = await self._request(
            "POST",
            "/v1/orders",
            json=request_dto.model_dump(by_alias=True, exclude_none=True),
        )
        return OrderResponse.model_validate(payload)

    async def update_order(self, order_id: str, request_dto: UpdateOrderRequest) -> OrderResponse:
        payload = await self._request(
            "PATCH",
            f"/v1/orders/{order_id}",
            json=request_dto.model_dump(by_alias=True, exclude_none=True),
        )
        logger.info(
            "order_update_sent",
            extra={"order_id": order_id, "to_status": request_dto.status},
        )
        return OrderResponse.model_validate(payload)

    async def delete_order(self, order_id: str) -> DeleteOrderResponse:
        payload = await self._request("DELETE", f"/v1/orders/{order_id}")
        return DeleteOrderResponse.model_validate(payload)

    async def cleanup_orders(self) -> CleanupOrdersResponse:
        payload = await self._request("POST", "/v1/orders/cleanup")
        return CleanupOrdersResponse.model_validate(payload)

    async def get_table_by_qr_code(self, qr_code: str) -> TableResponse:
        payload = await self._request("GET", f"/v1/tables/qr/{qr_code}")
        return TableResponse.model_validate(payload)

    async def get_menu(
        self,
        category: str | None = None,
        available_only: bool = True,
    ) -> MenuResponse:
        params: dict[str, Any] = {"available": str(available_only).lower()}
        if category is not None:
            params["category"] = category
        payload = await self._request("GET", "/v1/menu", params=params)
        return MenuResponse.model_validate(payload)
