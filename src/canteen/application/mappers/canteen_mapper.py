from __future__ import annotations

from canteen.application.dto.responses import CanteenResponse
from canteen.domain.canteen.entities import Canteen


def to_canteen_response(canteen: Canteen) -> CanteenResponse:
    return CanteenResponse(
        canteenId=str(canteen.canteen_id),
        name=canteen.name,
        location=canteen.location,
        isActive=canteen.is_active,
    )
