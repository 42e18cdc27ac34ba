from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from canteen.domain.common.ids import UserId


class Role(str, Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """An already-authenticated caller as handed over by the session layer."""

    user_id: UserId | None
    role: Role
    canteen_location: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role == Role.STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def can_manage_orders(self) -> bool:
        return self.role in (Role.STAFF, Role.ADMIN)


ANONYMOUS = Principal(user_id=None, role=Role.CUSTOMER)
