from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from canteen.application.dto.responses import CleanupOrdersResponse
from canteen.application.metrics.order_lifecycle import record_orders_deleted
from canteen.application.ports.repositories import OrderRepository
from canteen.application.use_cases.authorization import ensure_admin
from canteen.domain.order.entities import TERMINAL_STATUSES
from canteen.domain.user.entities import Principal

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CleanupOrders:
    """Removes delivered/cancelled orders created before the retention cutoff."""

    def __init__(
        self,
        order_repository: OrderRepository,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if retention <= timedelta(0):
            raise ValueError("retention must be positive")
        self._order_repository = order_repository
        self._retention = retention
        self._clock = clock or _utcnow

    def execute(self, principal: Principal) -> CleanupOrdersResponse:
        ensure_admin(principal)

        cutoff = self._clock() - self._retention
        deleted_count = self._order_repository.delete_older_than(
            cutoff=cutoff,
            statuses=TERMINAL_STATUSES,
        )

        record_orders_deleted(reason="retention", count=deleted_count)
        logger.info(
            "orders_cleaned_up",
            extra={"deleted_count": deleted_count, "cutoff": cutoff.isoformat()},
        )
        return CleanupOrdersResponse(deletedCount=deleted_count, cutoffDate=cutoff)
