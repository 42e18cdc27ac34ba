from __future__ import annotations

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CanteenModel(Base):
    __tablename__ = "canteens"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")


class MenuItemModel(Base):
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, server_default="")
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    is_veg: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    preparation_time: Mapped[int] = mapped_column(Integer, nullable=False, server_default="15")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
