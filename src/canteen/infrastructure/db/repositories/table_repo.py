from __future__ import annotations

from sqlalchemy import Engine, delete, select, update
from sqlalchemy.orm import Session

from canteen.application.ports.repositories import TableRepository
from canteen.domain.common.ids import TableId
from canteen.domain.table.entities import Table
from canteen.infrastructure.db.models.table import TableModel
from canteen.infrastructure.db.session import get_engine


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, table_id: TableId) -> Table | None:
        statement = select(TableModel).where(TableModel.id == str(table_id))
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    def get_by_qr_code(self, qr_code: str) -> Table | None:
        statement = select(TableModel).where(TableModel.qr_code == qr_code)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    def update(self, table: Table) -> None:
        statement = (
            update(TableModel)
            .where(TableModel.id == str(table.table_id))
            .values(
                table_number=table.table_number,
                qr_code=table.qr_code,
                location=table.location,
                canteen_location=table.canteen_location,
                capacity=table.capacity,
                is_active=table.is_active,
            )
        )
        with Session(self._engine) as session:
            session.execute(statement)
            session.commit()

    def delete(self, table_id: TableId) -> bool:
        with Session(self._engine) as session:
            result = session.execute(delete(TableModel).where(TableModel.id == str(table_id)))
            session.commit()
        return result.rowcount == 1

    def _to_domain(self, model: TableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            table_number=model.table_number,
            qr_code=model.qr_code,
            canteen_location=model.canteen_location,
            location=model.location,
            capacity=model.capacity,
            is_active=model.is_active,
        )
