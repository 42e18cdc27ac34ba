from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from canteen.infrastructure.db.models.menu import Base


class TableModel(Base):
    __tablename__ = "tables"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    table_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    qr_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    canteen_location: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, server_default="4")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
