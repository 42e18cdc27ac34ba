from __future__ import annotations

from pydantic import ValidationError

from canteen.application.dto.responses import MenuResponse
from canteen.application.mappers.menu_mapper import to_menu_response
from canteen.application.ports.cache import CacheStore
from canteen.application.ports.repositories import MenuRepository
from canteen.application.use_cases.errors import OrderValidationError
from canteen.domain.menu.entities import MenuCategory


class InvalidMenuCategoryError(OrderValidationError):
    pass


def menu_cache_key(category: MenuCategory | None, available_only: bool) -> str:
    category_part = category.value if category is not None else "all"
    availability_part = "available" if available_only else "any"
    return f"menu:{category_part}:{availability_part}"


def parse_menu_category(value: str | None) -> MenuCategory | None:
    if value is None or value.strip().lower() in {"", "all"}:
        return None
    try:
        return MenuCategory(value.strip().lower())
    except ValueError as exc:
        raise InvalidMenuCategoryError(f"invalid menu category: {value}") from exc


class GetMenu:
    def __init__(
        self,
        repository: MenuRepository,
        cache: CacheStore,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            return

    def execute(self, category: str | None = None, available_only: bool = False) -> MenuResponse:
        parsed_category = parse_menu_category(category)
        key = menu_cache_key(parsed_category, available_only)

        payload = self._cache_get(key)
        if payload:
            try:
                return MenuResponse.model_validate_json(payload)
            except ValidationError:
                pass

        items = self._repository.list_items(
            category=parsed_category,
            available_only=available_only,
        )
        items = sorted(items, key=lambda item: (item.category.value, item.name))
        response = to_menu_response(items)
        self._cache_set(key, response.model_dump_json())
        return response
