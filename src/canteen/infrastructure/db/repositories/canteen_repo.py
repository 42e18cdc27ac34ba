from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from canteen.application.ports.repositories import CanteenRepository
from canteen.domain.canteen.entities import Canteen
from canteen.domain.common.ids import CanteenId
from canteen.infrastructure.db.models.menu import CanteenModel
from canteen.infrastructure.db.session import get_engine


class SqlAlchemyCanteenRepository(CanteenRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_active(self) -> list[Canteen]:
        statement = (
            select(CanteenModel)
            .where(CanteenModel.is_active.is_(True))
            .order_by(CanteenModel.name)
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())

        return [
            Canteen(
                canteen_id=CanteenId(model.id),
                name=model.name,
                location=model.location,
                is_active=model.is_active,
            )
            for model in models
        ]
