from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from canteen.application.ports.repositories import MenuRepository
from canteen.domain.common.ids import MenuItemId
from canteen.domain.menu.entities import MenuCategory, MenuItem
from canteen.infrastructure.db.models.menu import MenuItemModel
from canteen.infrastructure.db.session import get_engine


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, item_id: MenuItemId) -> MenuItem | None:
        statement = select(MenuItemModel).where(MenuItemModel.id == str(item_id))
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    def list_items(
        self,
        category: MenuCategory | None,
        available_only: bool,
    ) -> list[MenuItem]:
        statement = select(MenuItemModel)
        if category is not None:
            statement = statement.where(MenuItemModel.category == category.value)
        if available_only:
            statement = statement.where(MenuItemModel.is_available.is_(True))
        statement = statement.order_by(MenuItemModel.category, MenuItemModel.name)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            name=model.name,
            description=model.description,
            category=MenuCategory(model.category),
            is_veg=model.is_veg,
            is_available=model.is_available,
            preparation_time=model.preparation_time,
            tags=list(model.tags or []),
        )
