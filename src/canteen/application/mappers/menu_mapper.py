from __future__ import annotations

from canteen.application.dto.responses import MenuItemResponse, MenuResponse
from canteen.domain.menu.entities import MenuItem


def to_menu_response(items: list[MenuItem]) -> MenuResponse:
    return MenuResponse(
        items=[
            MenuItemResponse(
                itemId=str(item.item_id),
                name=item.name,
                description=item.description,
                category=item.category.value,
                isVeg=item.is_veg,
                isAvailable=item.is_available,
                preparationTime=item.preparation_time,
                tags=list(item.tags),
            )
            for item in items
        ]
    )
