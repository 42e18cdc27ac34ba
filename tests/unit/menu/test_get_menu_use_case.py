from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from canteen.application.use_cases.get_menu import (
    GetMenu,
    InvalidMenuCategoryError,
    menu_cache_key,
)
from canteen.application.use_cases.list_canteens import ListCanteens
from canteen.domain.canteen.entities import Canteen
from canteen.domain.common.ids import CanteenId, MenuItemId
from canteen.domain.menu.entities import MenuCategory, MenuItem


class FakeMenuRepository:
    def __init__(self, *items: MenuItem) -> None:
        self._items = list(items)
        self.calls = 0

    def list_items(self, category, available_only) -> list[MenuItem]:
        self.calls += 1
        return [
            item
            for item in self._items
            if (category is None or item.category == category)
            and (not available_only or item.is_available)
        ]


class FakeCache:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.values[key] = value
        self.ttls[key] = ttl_seconds


class BrokenCache:
    def get(self, key: str) -> str | None:
        raise ConnectionError("redis down")

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise ConnectionError("redis down")


def _item(item_id: str, name: str, category: MenuCategory, is_available: bool = True):
    return MenuItem(
        item_id=MenuItemId(item_id),
        name=name,
        description="",
        category=category,
        is_available=is_available,
    )


def _repository() -> FakeMenuRepository:
    return FakeMenuRepository(
        _item("itm_004", "Masala Chai", MenuCategory.BEVERAGES),
        _item("itm_003", "Chicken Biryani", MenuCategory.MAIN_COURSE),
        _item("itm_001", "Masala Dosa", MenuCategory.MAIN_COURSE),
        _item("itm_005", "Gulab Jamun", MenuCategory.DESSERTS, is_available=False),
    )


def test_menu_is_sorted_by_category_then_name() -> None:
    response = GetMenu(repository=_repository(), cache=FakeCache()).execute()

    assert [item.name for item in response.items] == [
        "Masala Chai",
        "Gulab Jamun",
        "Chicken Biryani",
        "Masala Dosa",
    ]


def test_menu_filters_by_category_and_availability() -> None:
    use_case = GetMenu(repository=_repository(), cache=FakeCache())

    main_course = use_case.execute(category="main-course")
    available = use_case.execute(available_only=True)

    assert {item.itemId for item in main_course.items} == {"itm_001", "itm_003"}
    assert "itm_005" not in {item.itemId for item in available.items}


def test_menu_is_served_from_cache_on_second_call() -> None:
    repository = _repository()
    cache = FakeCache()
    use_case = GetMenu(repository=repository, cache=cache, ttl_seconds=300)

    first = use_case.execute(category="beverages")
    second = use_case.execute(category="beverages")

    assert first == second
    assert repository.calls == 1
    assert cache.ttls[menu_cache_key(MenuCategory.BEVERAGES, False)] == 300


def test_menu_survives_cache_outage() -> None:
    repository = _repository()
    response = GetMenu(repository=repository, cache=BrokenCache()).execute()

    assert len(response.items) == 4


def test_unknown_category_is_rejected() -> None:
    with pytest.raises(InvalidMenuCategoryError):
        GetMenu(repository=_repository(), cache=FakeCache()).execute(category="pizza")


class FakeCanteenRepository:
    def list_active(self) -> list[Canteen]:
        return [
            Canteen(canteen_id=CanteenId("cnt_main"), name="Main Canteen"),
            Canteen(canteen_id=CanteenId("cnt_annex"), name="Annex Canteen", location="Block C"),
        ]


def test_list_canteens_sorted_by_name() -> None:
    response = ListCanteens(canteen_repository=FakeCanteenRepository()).execute()
    assert [canteen.name for canteen in response.canteens] == ["Annex Canteen", "Main Canteen"]
