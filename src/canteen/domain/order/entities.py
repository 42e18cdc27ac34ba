from __future__ import annotations

import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from canteen.domain.common.ids import MenuItemId, OrderId, TableId

DEFAULT_CUSTOMER_NAME = "Guest"
MAX_SPECIAL_INSTRUCTIONS_LENGTH = 200
MAX_STAFF_NOTES_LENGTH = 500
LATE_GRACE_PERIOD = timedelta(minutes=15)


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

_STATUS_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.ACCEPTED: "Accepted",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready for Pickup",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

# status entered -> timestamp field stamped once on entry
_LIFECYCLE_STAMPS = {
    OrderStatus.ACCEPTED: "accepted_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.DELIVERED: "delivered_at",
}


@dataclass(frozen=True)
class OrderItem:
    menu_item_id: MenuItemId
    name: str
    quantity: int
    special_instructions: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if not self.name.strip():
            raise ValueError("item name must be non-empty")
        if (
            self.special_instructions is not None
            and len(self.special_instructions) > MAX_SPECIAL_INSTRUCTIONS_LENGTH
        ):
            raise ValueError(
                f"special instructions cannot exceed {MAX_SPECIAL_INSTRUCTIONS_LENGTH} characters"
            )


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    order_number: str
    customer_name: str
    table_id: TableId
    table_number: str
    canteen_location: str | None
    items: list[OrderItem]
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    eta: datetime | None = None
    staff_notes: str | None = None
    accepted_at: datetime | None = None
    ready_at: datetime | None = None
    delivered_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("order must have at least one item")
        _check_staff_notes(self.staff_notes)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def apply_transition(
        self,
        new_status: OrderStatus,
        now: datetime,
        eta_minutes: int | None = None,
        note: str | None = None,
    ) -> Order:
        """Move the order to ``new_status``.

        There is no guard matrix here: any status can follow any other,
        including re-entering a terminal status. Lifecycle stamps are only
        written when they are still unset, so repeating a transition keeps
        the first timestamp. ETA is only recomputed on ``accepted``.
        """
        changes: dict[str, object] = {"status": new_status, "updated_at": now}

        stamp_field = _LIFECYCLE_STAMPS.get(new_status)
        if stamp_field is not None and getattr(self, stamp_field) is None:
            changes[stamp_field] = now

        if new_status == OrderStatus.ACCEPTED and eta_minutes is not None:
            changes["eta"] = compute_eta(now, eta_minutes)

        if note is not None:
            _check_staff_notes(note)
            changes["staff_notes"] = note

        return replace(self, **changes)

    def edit_details(
        self,
        now: datetime,
        eta_minutes: int | None = None,
        note: str | None = None,
    ) -> Order:
        changes: dict[str, object] = {"updated_at": now}
        if eta_minutes is not None:
            changes["eta"] = compute_eta(now, eta_minutes)
        if note is not None:
            _check_staff_notes(note)
            changes["staff_notes"] = note
        return replace(self, **changes)

    def ensure_deletable(self) -> None:
        if not self.is_terminal:
            raise OrderNotDeletableError(
                f"order {self.order_id} cannot be deleted while status={self.status.value}; "
                "only delivered or cancelled orders can be deleted"
            )

    def is_late(self, now: datetime, grace: timedelta = LATE_GRACE_PERIOD) -> bool:
        if self.status != OrderStatus.ACCEPTED:
            return False
        deadline = late_deadline(self.eta, self.accepted_at, grace)
        return deadline is not None and now > deadline


def compute_eta(now: datetime, eta_minutes: int) -> datetime:
    if eta_minutes < 1:
        raise ValueError("eta must be at least 1 minute")
    return now + timedelta(minutes=eta_minutes)


def late_deadline(
    eta: datetime | None,
    accepted_at: datetime | None,
    grace: timedelta = LATE_GRACE_PERIOD,
) -> datetime | None:
    if eta is not None:
        return eta
    if accepted_at is not None:
        return accepted_at + grace
    return None


def normalize_customer_name(customer_name: str | None) -> str:
    if customer_name is None or not customer_name.strip():
        return DEFAULT_CUSTOMER_NAME
    return customer_name.strip()


def generate_order_number(now: datetime, rng: random.Random | None = None) -> str:
    source = rng or random
    return f"ORD-{now.year}-{source.randint(0, 9999):04d}"


def create_pending_order(
    order_id: OrderId,
    order_number: str,
    customer_name: str | None,
    table_id: TableId,
    table_number: str,
    canteen_location: str | None,
    items: list[OrderItem],
    now: datetime,
) -> Order:
    if not items:
        raise ValueError("order must have at least one item")

    return Order(
        order_id=order_id,
        order_number=order_number,
        customer_name=normalize_customer_name(customer_name),
        table_id=table_id,
        table_number=table_number,
        canteen_location=canteen_location,
        items=items,
        status=OrderStatus.PENDING,
        created_at=now,
        updated_at=now,
    )


def _check_staff_notes(note: str | None) -> None:
    if note is not None and len(note) > MAX_STAFF_NOTES_LENGTH:
        raise ValueError(f"staff notes cannot exceed {MAX_STAFF_NOTES_LENGTH} characters")


class OrderNotDeletableError(Exception):
    pass
