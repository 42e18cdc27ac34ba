from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from canteen.application.ports.repositories import (
    DuplicateOrderNumberError,
    OrderFilter,
    OrderRepository,
)
from canteen.domain.common.ids import MenuItemId, OrderId, TableId
from canteen.domain.order.entities import Order, OrderItem, OrderStatus
from canteen.infrastructure.db.models.order import OrderItemModel, OrderModel
from canteen.infrastructure.db.session import get_engine


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(order))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                taken = session.execute(
                    select(OrderModel.id)
                    .where(OrderModel.order_number == order.order_number)
                    .limit(1)
                ).scalar_one_or_none()
                if taken is None:
                    raise
                raise DuplicateOrderNumberError(
                    f"order number {order.order_number} already exists"
                ) from exc

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def list(self, order_filter: OrderFilter) -> list[Order]:
        statement = select(OrderModel).options(selectinload(OrderModel.items))
        if order_filter.status is not None:
            statement = statement.where(OrderModel.status == order_filter.status.value)
        if order_filter.table_id is not None:
            statement = statement.where(OrderModel.table_id == str(order_filter.table_id))
        if order_filter.canteen_location is not None:
            statement = statement.where(
                OrderModel.canteen_location == order_filter.canteen_location
            )
        if order_filter.created_after is not None:
            statement = statement.where(OrderModel.created_at >= order_filter.created_after)

        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(
            order_filter.limit
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def update(self, order: Order) -> Order | None:
        # lifecycle stamps stay set-once even when two writers race
        statement = (
            update(OrderModel)
            .where(OrderModel.id == str(order.order_id))
            .values(
                status=order.status.value,
                eta=order.eta,
                staff_notes=order.staff_notes,
                accepted_at=func.coalesce(OrderModel.accepted_at, order.accepted_at),
                ready_at=func.coalesce(OrderModel.ready_at, order.ready_at),
                delivered_at=func.coalesce(OrderModel.delivered_at, order.delivered_at),
                updated_at=order.updated_at,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                return None
            session.commit()

        return self.get(order.order_id)

    def delete(self, order_id: OrderId, statuses: Iterable[OrderStatus]) -> bool:
        # rows that left ``statuses`` since they were read stay in place
        statement = delete(OrderModel).where(
            OrderModel.id == str(order_id),
            OrderModel.status.in_([status.value for status in statuses]),
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return result.rowcount == 1

    def delete_older_than(self, cutoff: datetime, statuses: Iterable[OrderStatus]) -> int:
        statement = delete(OrderModel).where(
            OrderModel.created_at < cutoff,
            OrderModel.status.in_([status.value for status in statuses]),
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return int(result.rowcount or 0)

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            order_number=order.order_number,
            customer_name=order.customer_name,
            table_id=str(order.table_id),
            table_number=order.table_number,
            canteen_location=order.canteen_location,
            status=order.status.value,
            eta=order.eta,
            staff_notes=order.staff_notes,
            accepted_at=order.accepted_at,
            ready_at=order.ready_at,
            delivered_at=order.delivered_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        order_model.items = [
            OrderItemModel(
                order_id=str(order.order_id),
                position=position,
                menu_item_id=str(item.menu_item_id),
                name=item.name,
                quantity=item.quantity,
                special_instructions=item.special_instructions,
            )
            for position, item in enumerate(order.items)
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        items = [
            OrderItem(
                menu_item_id=MenuItemId(item.menu_item_id),
                name=item.name,
                quantity=item.quantity,
                special_instructions=item.special_instructions,
            )
            for item in model.items
        ]
        return Order(
            order_id=OrderId(model.id),
            order_number=model.order_number,
            customer_name=model.customer_name,
            table_id=TableId(model.table_id),
            table_number=model.table_number,
            canteen_location=model.canteen_location,
            items=items,
            status=OrderStatus(model.status),
            created_at=_aware(model.created_at),
            updated_at=_aware(model.updated_at),
            eta=_aware_or_none(model.eta),
            staff_notes=model.staff_notes,
            accepted_at=_aware_or_none(model.accepted_at),
            ready_at=_aware_or_none(model.ready_at),
            delivered_at=_aware_or_none(model.delivered_at),
        )


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _aware_or_none(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return _aware(value)
