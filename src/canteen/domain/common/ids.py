from __future__ import annotations

from typing import NewType

CanteenId = NewType("CanteenId", str)
MenuItemId = NewType("MenuItemId", str)
TableId = NewType("TableId", str)
OrderId = NewType("OrderId", str)
UserId = NewType("UserId", str)
