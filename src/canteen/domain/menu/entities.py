from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from canteen.domain.common.ids import MenuItemId


class MenuCategory(str, Enum):
    STARTERS = "starters"
    MAIN_COURSE = "main-course"
    BEVERAGES = "beverages"
    DESSERTS = "desserts"
    SNACKS = "snacks"
    COMBOS = "combos"


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    description: str
    category: MenuCategory
    is_veg: bool = True
    is_available: bool = True
    preparation_time: int = 15
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.preparation_time < 1:
            raise ValueError("preparation_time must be >= 1")
