from __future__ import annotations


class NotFoundError(Exception):
    pass


class InvalidStatusError(Exception):
    pass


class InvalidOperationError(Exception):
    pass


class UnauthorizedError(Exception):
    pass


class OrderValidationError(Exception):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class TableNotFoundError(NotFoundError):
    pass


class MenuItemNotFoundError(NotFoundError):
    pass
