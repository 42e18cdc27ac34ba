from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Callable

import httpx

from canteen.application.dto.responses import OrderResponse
from canteen.client.api_client import ApiError, CanteenApiClient
from canteen.client.scheduler import RepeatingTask
from canteen.domain.order.entities import OrderStatus

logger = logging.getLogger(__name__)

TRACKING_POLL_INTERVAL = timedelta(seconds=10)

# statuses at or past the "Accepted" stage
_ACCEPTED_OR_LATER = frozenset(
    {OrderStatus.ACCEPTED, OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.DELIVERED}
)


class TerminalView(str, Enum):
    CANCELLED = "cancelled"
    THANK_YOU = "thank_you"


@dataclass(frozen=True)
class TrackingStage:
    key: str
    label: str
    completed: bool
    current: bool


@dataclass(frozen=True)
class TrackingView:
    order_id: str
    order_number: str
    status: OrderStatus
    status_label: str
    stages: tuple[TrackingStage, ...]
    terminal: TerminalView | None = None
    eta_display: str | None = None
    staff_notes: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.terminal is not None


def format_eta(eta: datetime, tz: tzinfo | None = None) -> str:
    return eta.astimezone(tz).strftime("%H:%M")


def build_tracking_view(order: OrderResponse, tz: tzinfo | None = None) -> TrackingView:
    status = OrderStatus(order.status)

    terminal: TerminalView | None = None
    if status == OrderStatus.CANCELLED:
        terminal = TerminalView.CANCELLED
    elif status == OrderStatus.DELIVERED:
        terminal = TerminalView.THANK_YOU

    accepted = status in _ACCEPTED_OR_LATER
    stages = (
        TrackingStage(
            key=OrderStatus.PENDING.value,
            label="Order Placed",
            completed=status != OrderStatus.CANCELLED,
            current=status == OrderStatus.PENDING,
        ),
        TrackingStage(
            key=OrderStatus.ACCEPTED.value,
            label="Accepted",
            completed=accepted,
            current=status == OrderStatus.ACCEPTED,
        ),
    )

    eta_display = None
    if order.eta is not None and status == OrderStatus.PENDING:
        eta_display = format_eta(order.eta, tz)

    return TrackingView(
        order_id=order.orderId,
        order_number=order.orderNumber,
        status=status,
        status_label=order.statusLabel,
        stages=stages,
        terminal=terminal,
        eta_display=eta_display,
        staff_notes=order.staffNotes,
    )


class OrderTracker:
    """Polls one order and publishes a fresh view after every successful fetch.

    Polling stops by itself once the order reaches a terminal view or the
    backend reports it as deleted.
    """

    def __init__(
        self,
        api_client: CanteenApiClient,
        order_id: str,
        on_update: Callable[[TrackingView], None],
        interval: timedelta = TRACKING_POLL_INTERVAL,
        tz: tzinfo | None = None,
    ) -> None:
        self._api_client = api_client
        self._order_id = order_id
        self._on_update = on_update
        self._tz = tz
        self._task = RepeatingTask(
            name=f"order-tracking-{order_id}",
            interval_seconds=interval.total_seconds(),
            callback=self._poll,
        )
        self.view: TrackingView | None = None
        self.gone = False

    @property
    def running(self) -> bool:
        return self._task.running

    def start(self) -> None:
        self._task.start()

    async def stop(self) -> None:
        await self._task.cancel()

    async def refresh(self) -> TrackingView | None:
        try:
            order = await self._api_client.get_order(self._order_id)
        except ApiError as exc:
            if exc.status_code != 404:
                logger.exception(
                    "order_tracking_poll_failed", extra={"order_id": self._order_id}
                )
                return self.view
            self.gone = True
            logger.warning("order_tracking_order_gone", extra={"order_id": self._order_id})
            return self.view
        except httpx.HTTPError:
            logger.exception("order_tracking_poll_failed", extra={"order_id": self._order_id})
            return self.view

        self.view = build_tracking_view(order, self._tz)
        self._on_update(self.view)
        return self.view

    async def _poll(self) -> None:
        view = await self.refresh()
        if self.gone:
            self._task.stop()
            return
        if view is not None and view.is_terminal:
            logger.info(
                "order_tracking_finished",
                extra={"order_id": self._order_id, "status": view.status.value},
            )
            self._task.stop()
