from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class OrderItemResponse(BaseModel):
    menuItemId: str
    name: str
    quantity: int
    specialInstructions: str | None = None


class OrderResponse(BaseModel):
    orderId: str
    orderNumber: str
    customerName: str
    tableId: str
    tableNumber: str
    canteenLocation: str | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)
    status: str
    statusLabel: str
    eta: datetime | None = None
    staffNotes: str | None = None
    acceptedAt: datetime | None = None
    readyAt: datetime | None = None
    deliveredAt: datetime | None = None
    createdAt: datetime
    updatedAt: datetime


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class DeleteOrderResponse(BaseModel):
    orderId: str
    deleted: bool


class CleanupOrdersResponse(BaseModel):
    deletedCount: int
    cutoffDate: datetime


class TableResponse(BaseModel):
    tableId: str
    tableNumber: str
    qrCode: str
    location: str | None = None
    canteenLocation: str
    capacity: int
    isActive: bool


class DeleteTableResponse(BaseModel):
    tableId: str
    deleted: bool


class MenuItemResponse(BaseModel):
    itemId: str
    name: str
    description: str
    category: str
    isVeg: bool
    isAvailable: bool
    preparationTime: int
    tags: list[str] = Field(default_factory=list)


class MenuResponse(BaseModel):
    items: list[MenuItemResponse] = Field(default_factory=list)


class CanteenResponse(BaseModel):
    canteenId: str
    name: str
    location: str | None = None
    isActive: bool


class CanteenListResponse(BaseModel):
    canteens: list[CanteenResponse] = Field(default_factory=list)
