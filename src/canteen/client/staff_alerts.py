"""Staff-side new-order and late-order alerting driven by order list polling.

All state lives on a per-session :class:`StaffAlertController`; a fresh
controller starts with empty throttle history, so reconnecting can only
produce redundant alerts, never lose orders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Protocol

import httpx

from canteen.application.dto.requests import UpdateOrderRequest
from canteen.application.dto.responses import OrderResponse
from canteen.application.use_cases.errors import InvalidOperationError
from canteen.client.api_client import ApiError, CanteenApiClient
from canteen.client.scheduler import RepeatingTask
from canteen.domain.order.entities import LATE_GRACE_PERIOD, OrderStatus, late_deadline

logger = logging.getLogger(__name__)

ETA_OPTIONS_MINUTES = (5, 10, 15, 20, 25, 30, 45, 60)
DEFAULT_ETA_MINUTES = 15


class SnoozePolicy(str, Enum):
    MODAL_ONLY = "modal_only"
    MODAL_AND_AUDIO = "modal_and_audio"


class AlertKind(str, Enum):
    NEW_ORDER = "new_order"
    REMINDER = "reminder"
    LATE = "late"


@dataclass(frozen=True)
class StaffAlertSettings:
    poll_interval: timedelta = timedelta(seconds=5)
    reminder_interval: timedelta = timedelta(seconds=15)
    late_repeat_interval: timedelta = timedelta(seconds=60)
    late_grace: timedelta = LATE_GRACE_PERIOD
    snooze_duration: timedelta = timedelta(minutes=5)
    summary_size: int = 3
    fetch_limit: int = 100
    snooze_policy: SnoozePolicy = SnoozePolicy.MODAL_ONLY


@dataclass(frozen=True)
class StaffAlert:
    kind: AlertKind
    pending_count: int
    summary: tuple[str, ...] = ()
    order_id: str | None = None
    late_count: int = 0

    @property
    def message(self) -> str:
        if self.kind == AlertKind.LATE:
            noun = "order needs" if self.late_count == 1 else "orders need"
            return f"{self.late_count} {noun} delivery confirmation"
        headline = "New order received" if self.kind == AlertKind.NEW_ORDER else "Orders waiting"
        lines = [f"{headline}: {self.pending_count} pending", *self.summary]
        return "\n".join(lines)


class RejectReasonRequiredError(InvalidOperationError):
    pass


class InvalidEtaOptionError(InvalidOperationError):
    pass


def summarize_order(order: OrderResponse) -> str:
    items = ", ".join(f"{item.quantity}x {item.name}" for item in order.items)
    return f"Table {order.tableNumber}: {items}"


def _is_late(order: OrderResponse, now: datetime, grace: timedelta) -> bool:
    deadline = late_deadline(order.eta, order.acceptedAt, grace)
    return deadline is not None and now > deadline


class StaffAlertController:
    def __init__(self, settings: StaffAlertSettings | None = None) -> None:
        self.settings = settings or StaffAlertSettings()
        self.orders: list[OrderResponse] = []
        self.pending: list[OrderResponse] = []
        self.previous_pending_count = 0
        self.last_alert_at: datetime | None = None
        self.late_announcements: dict[str, datetime] = {}
        self.snooze_until: datetime | None = None

    def tick(self, orders: list[OrderResponse], now: datetime) -> list[StaffAlert]:
        """Fold one poll result into the session state and return the alerts it raises."""
        alerts: list[StaffAlert] = []
        pending = [order for order in orders if order.status == OrderStatus.PENDING.value]
        new_pending_count = len(pending)

        if new_pending_count > self.previous_pending_count:
            alerts.append(self._pending_alert(AlertKind.NEW_ORDER, pending))
            self.last_alert_at = now
        elif pending and self._reminder_due(now):
            alerts.append(self._pending_alert(AlertKind.REMINDER, pending))
            self.last_alert_at = now

        self.previous_pending_count = new_pending_count
        self.pending = pending
        self.orders = list(orders)

        alerts.extend(self._scan_late_orders(orders, now))
        return alerts

    def snooze(self, now: datetime) -> datetime:
        self.snooze_until = now + self.settings.snooze_duration
        return self.snooze_until

    def is_snoozed(self, now: datetime) -> bool:
        return self.snooze_until is not None and now < self.snooze_until

    def modal_orders(self, now: datetime) -> list[OrderResponse]:
        if self.is_snoozed(now):
            return []
        return list(self.pending)

    def audio_allowed(self, now: datetime) -> bool:
        if self.settings.snooze_policy == SnoozePolicy.MODAL_AND_AUDIO:
            return not self.is_snoozed(now)
        return True

    def _reminder_due(self, now: datetime) -> bool:
        if self.last_alert_at is None:
            return True
        return now - self.last_alert_at >= self.settings.reminder_interval

    def _pending_alert(self, kind: AlertKind, pending: list[OrderResponse]) -> StaffAlert:
        return StaffAlert(
            kind=kind,
            pending_count=len(pending),
            summary=tuple(
                summarize_order(order) for order in pending[: self.settings.summary_size]
            ),
        )

    def _scan_late_orders(self, orders: list[OrderResponse], now: datetime) -> list[StaffAlert]:
        accepted = {
            order.orderId: order for order in orders if order.status == OrderStatus.ACCEPTED.value
        }
        # orders that left accepted stop escalating
        for order_id in list(self.late_announcements):
            if order_id not in accepted:
                del self.late_announcements[order_id]

        late = [
            order
            for order in accepted.values()
            if _is_late(order, now, self.settings.late_grace)
        ]
        alerts: list[StaffAlert] = []
        for order in late:
            announced_at = self.late_announcements.get(order.orderId)
            if announced_at is not None and now - announced_at < self.settings.late_repeat_interval:
                continue
            self.late_announcements[order.orderId] = now
            alerts.append(
                StaffAlert(
                    kind=AlertKind.LATE,
                    pending_count=len(self.pending),
                    summary=(summarize_order(order),),
                    order_id=order.orderId,
                    late_count=len(late),
                )
            )
        return alerts


class AlertSink(Protocol):
    def play(self, alert: StaffAlert) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StaffNotificationSession:
    """Drives a :class:`StaffAlertController` from a repeating poll of the order list."""

    def __init__(
        self,
        api_client: CanteenApiClient,
        sink: AlertSink,
        controller: StaffAlertController | None = None,
        sound_enabled: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._api_client = api_client
        self._sink = sink
        self.controller = controller or StaffAlertController()
        self._sound_enabled = sound_enabled
        self._clock = clock or _utcnow
        self._task: RepeatingTask | None = None

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    @property
    def running(self) -> bool:
        return self._task is not None and self._task.running

    def start(self) -> None:
        self._arm()

    async def stop(self) -> None:
        if self._task is not None:
            await self._task.cancel()
            self._task = None

    async def set_sound_enabled(self, enabled: bool) -> None:
        was_running = self.running
        await self.stop()
        self._sound_enabled = enabled
        if was_running:
            self._arm()

    def _arm(self) -> None:
        self._task = RepeatingTask(
            name="staff-order-poll",
            interval_seconds=self.controller.settings.poll_interval.total_seconds(),
            callback=self.poll_once,
        )
        self._task.start()

    async def poll_once(self) -> list[StaffAlert]:
        try:
            orders = await self._api_client.list_orders(limit=self.controller.settings.fetch_limit)
        except (httpx.HTTPError, ApiError):
            logger.exception("staff_order_poll_failed")
            return []

        now = self._clock()
        alerts = self.controller.tick(orders, now)
        if self._sound_enabled and self.controller.audio_allowed(now):
            for alert in alerts:
                self._sink.play(alert)
        return alerts

    def snooze(self) -> datetime:
        return self.controller.snooze(self._clock())

    async def accept(
        self,
        order_id: str,
        eta_minutes: int = DEFAULT_ETA_MINUTES,
        comment: str | None = None,
    ) -> OrderResponse:
        if eta_minutes not in ETA_OPTIONS_MINUTES:
            raise InvalidEtaOptionError(
                f"eta must be one of {', '.join(str(option) for option in ETA_OPTIONS_MINUTES)}"
            )
        note = comment.strip() if comment and comment.strip() else None
        order = await self._api_client.update_order(
            order_id,
            UpdateOrderRequest(
                status=OrderStatus.ACCEPTED.value,
                eta=eta_minutes,
                staff_notes=note,
            ),
        )
        await self.poll_once()
        return order

    async def reject(self, order_id: str, reason: str) -> OrderResponse:
        if not reason or not reason.strip():
            raise RejectReasonRequiredError("a reason is required to reject an order")
        order = await self._api_client.update_order(
            order_id,
            UpdateOrderRequest(status=OrderStatus.CANCELLED.value, staff_notes=reason.strip()),
        )
        await self.poll_once()
        return order
