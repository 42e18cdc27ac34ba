from __future__ import annotations

from fastapi import APIRouter, Query

from canteen.application.dto.responses import MenuResponse
from canteen.application.use_cases.get_menu import GetMenu
from canteen.infrastructure.cache.cache_store import RedisCacheStore
from canteen.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter(tags=["menu"])


def _get_menu_use_case() -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        ttl_seconds=300,
    )


@router.get("/v1/menu", response_model=MenuResponse)
def get_menu(
    category: str | None = Query(default=None),
    available: bool = Query(default=False),
) -> MenuResponse:
    return _get_menu_use_case().execute(category=category, available_only=available)
