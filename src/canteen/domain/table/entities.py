from __future__ import annotations

from dataclasses import dataclass, replace

from canteen.domain.common.ids import TableId


@dataclass(frozen=True)
class Table:
    table_id: TableId
    table_number: str
    qr_code: str
    canteen_location: str
    location: str | None = None
    capacity: int = 4
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.table_number.strip():
            raise ValueError("table_number must be non-empty")
        if not self.qr_code.strip():
            raise ValueError("qr_code must be non-empty")
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")

    def deactivate(self) -> Table:
        if not self.is_active:
            return self
        return replace(self, is_active=False)

    def ensure_active(self) -> None:
        if not self.is_active:
            raise TableInactiveError(f"table {self.table_id} is inactive")

    def ensure_removable(self) -> None:
        if self.is_active:
            raise TableStillActiveError(
                f"table {self.table_id} must be deactivated before it can be deleted"
            )


class TableInactiveError(Exception):
    pass


class TableStillActiveError(Exception):
    pass
