from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from canteen.application.dto.responses import OrderItemResponse, OrderResponse
from canteen.client.api_client import ApiError
from canteen.client.order_tracking import (
    OrderTracker,
    TerminalView,
    TrackingView,
    build_tracking_view,
)
from canteen.domain.order.entities import OrderStatus

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
IST = timezone(timedelta(hours=5, minutes=30))


def _order(status: OrderStatus, eta: datetime | None = None) -> OrderResponse:
    return OrderResponse(
        orderId="ord_0001",
        orderNumber="ORD-2026-0001",
        customerName="Guest",
        tableId="tbl_001",
        tableNumber="T1",
        canteenLocation="Main Canteen",
        items=[OrderItemResponse(menuItemId="itm_001", name="Masala Dosa", quantity=1)],
        status=status.value,
        statusLabel=status.label,
        eta=eta,
        createdAt=T0,
        updatedAt=T0,
    )


def _completed(view: TrackingView) -> list[bool]:
    return [stage.completed for stage in view.stages]


def test_pending_order_shows_first_stage() -> None:
    view = build_tracking_view(_order(OrderStatus.PENDING))

    assert [stage.label for stage in view.stages] == ["Order Placed", "Accepted"]
    assert _completed(view) == [True, False]
    assert view.stages[0].current
    assert not view.is_terminal


def test_accepted_order_completes_both_stages() -> None:
    view = build_tracking_view(_order(OrderStatus.ACCEPTED))
    assert _completed(view) == [True, True]
    assert view.stages[1].current


@pytest.mark.parametrize("status", [OrderStatus.PREPARING, OrderStatus.READY])
def test_preparing_and_ready_render_both_stages_complete(status: OrderStatus) -> None:
    view = build_tracking_view(_order(status))

    assert _completed(view) == [True, True]
    assert not any(stage.current for stage in view.stages)
    assert not view.is_terminal


def test_cancelled_and_delivered_are_terminal_views() -> None:
    cancelled = build_tracking_view(_order(OrderStatus.CANCELLED))
    delivered = build_tracking_view(_order(OrderStatus.DELIVERED))

    assert cancelled.terminal == TerminalView.CANCELLED
    assert delivered.terminal == TerminalView.THANK_YOU
    assert delivered.status_label == "Delivered"


def test_eta_is_shown_as_local_time_only_while_pending() -> None:
    eta = T0 + timedelta(minutes=15)

    pending = build_tracking_view(_order(OrderStatus.PENDING, eta=eta), tz=IST)
    accepted = build_tracking_view(_order(OrderStatus.ACCEPTED, eta=eta), tz=IST)

    assert pending.eta_display == "17:45"
    assert accepted.eta_display is None


class FakeApiClient:
    def __init__(self, *responses) -> None:
        self._responses = list(responses)
        self.calls = 0

    async def get_order(self, order_id: str) -> OrderResponse:
        self.calls += 1
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def test_tracker_stops_polling_on_terminal_status() -> None:
    async def scenario() -> tuple[FakeApiClient, list[TrackingView], OrderTracker]:
        api_client = FakeApiClient(
            _order(OrderStatus.PENDING),
            httpx.ReadTimeout("timed out"),
            _order(OrderStatus.ACCEPTED),
            _order(OrderStatus.DELIVERED),
        )
        views: list[TrackingView] = []
        tracker = OrderTracker(
            api_client=api_client,  # type: ignore[arg-type]
            order_id="ord_0001",
            on_update=views.append,
            interval=timedelta(milliseconds=5),
        )
        tracker.start()
        for _ in range(100):
            if not tracker.running:
                break
            await asyncio.sleep(0.01)
        calls = api_client.calls
        await asyncio.sleep(0.05)
        assert api_client.calls == calls
        return api_client, views, tracker

    api_client, views, tracker = asyncio.run(scenario())

    assert api_client.calls == 4
    assert [view.status for view in views] == [
        OrderStatus.PENDING,
        OrderStatus.ACCEPTED,
        OrderStatus.DELIVERED,
    ]
    assert not tracker.running
    assert tracker.view is not None and tracker.view.terminal == TerminalView.THANK_YOU


def test_tracker_stops_once_order_is_deleted(caplog: pytest.LogCaptureFixture) -> None:
    async def scenario() -> tuple[FakeApiClient, OrderTracker]:
        api_client = FakeApiClient(
            _order(OrderStatus.ACCEPTED),
            ApiError(404, "ORDER_NOT_FOUND", "order ord_0001 not found"),
        )
        tracker = OrderTracker(
            api_client=api_client,  # type: ignore[arg-type]
            order_id="ord_0001",
            on_update=lambda view: None,
            interval=timedelta(milliseconds=5),
        )
        tracker.start()
        for _ in range(100):
            if not tracker.running:
                break
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.05)
        return api_client, tracker

    with caplog.at_level("WARNING", logger="canteen.client.order_tracking"):
        api_client, tracker = asyncio.run(scenario())

    assert api_client.calls == 2
    assert tracker.gone
    assert not tracker.running
    assert tracker.view is not None and tracker.view.status == OrderStatus.ACCEPTED
    tracking_logs = [
        record.getMessage()
        for record in caplog.records
        if record.name == "canteen.client.order_tracking"
    ]
    assert tracking_logs == ["order_tracking_order_gone"]
