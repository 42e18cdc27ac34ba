from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from canteen.api.middleware.request_id import get_request_id
from canteen.application.use_cases.delete_order import OrderNotTerminalError
from canteen.application.use_cases.errors import (
    InvalidOperationError,
    InvalidStatusError,
    MenuItemNotFoundError,
    NotFoundError,
    OrderNotFoundError,
    OrderValidationError,
    TableNotFoundError,
    UnauthorizedError,
)
from canteen.application.use_cases.get_menu import InvalidMenuCategoryError
from canteen.application.use_cases.place_order import (
    MenuItemUnavailableError,
    OrderNumberUnavailableError,
    TableUnavailableError,
)
from canteen.application.use_cases.table_lifecycle import TableStillActiveOperationError


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = {
        400: "BAD_REQUEST",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
    }.get(http_exc.status_code, "HTTP_ERROR")
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette resolves handlers along the exception MRO, so the specific
    # subclasses win over their base class entries further down.
    mappings: list[tuple[type[Exception], int, str]] = [
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (TableNotFoundError, 404, "TABLE_NOT_FOUND"),
        (MenuItemNotFoundError, 404, "MENU_ITEM_NOT_FOUND"),
        (NotFoundError, 404, "NOT_FOUND"),
        (InvalidStatusError, 400, "INVALID_STATUS"),
        (InvalidMenuCategoryError, 400, "INVALID_MENU_CATEGORY"),
        (TableUnavailableError, 400, "TABLE_INACTIVE"),
        (MenuItemUnavailableError, 400, "MENU_ITEM_UNAVAILABLE"),
        (OrderValidationError, 400, "VALIDATION_ERROR"),
        (OrderNotTerminalError, 409, "ORDER_NOT_TERMINAL"),
        (TableStillActiveOperationError, 409, "TABLE_STILL_ACTIVE"),
        (InvalidOperationError, 409, "INVALID_OPERATION"),
        (OrderNumberUnavailableError, 409, "ORDER_NUMBER_UNAVAILABLE"),
        (UnauthorizedError, 403, "UNAUTHORIZED"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
