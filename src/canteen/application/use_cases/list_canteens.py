from __future__ import annotations

from canteen.application.dto.responses import CanteenListResponse
from canteen.application.mappers.canteen_mapper import to_canteen_response
from canteen.application.ports.repositories import CanteenRepository


class ListCanteens:
    def __init__(self, canteen_repository: CanteenRepository) -> None:
        self._canteen_repository = canteen_repository

    def execute(self) -> CanteenListResponse:
        canteens = sorted(self._canteen_repository.list_active(), key=lambda canteen: canteen.name)
        return CanteenListResponse(canteens=[to_canteen_response(c) for c in canteens])
