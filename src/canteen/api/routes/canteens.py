from __future__ import annotations

from fastapi import APIRouter

from canteen.application.dto.responses import CanteenListResponse
from canteen.application.use_cases.list_canteens import ListCanteens
from canteen.infrastructure.db.repositories.canteen_repo import SqlAlchemyCanteenRepository

router = APIRouter(tags=["canteens"])


def _list_canteens_use_case() -> ListCanteens:
    return ListCanteens(canteen_repository=SqlAlchemyCanteenRepository())


@router.get("/v1/canteens", response_model=CanteenListResponse)
def list_canteens() -> CanteenListResponse:
    return _list_canteens_use_case().execute()
