from __future__ import annotations

import logging

from canteen.application.dto.responses import DeleteTableResponse, TableResponse
from canteen.application.mappers.table_mapper import to_table_response
from canteen.application.ports.repositories import TableRepository
from canteen.application.use_cases.authorization import ensure_admin
from canteen.application.use_cases.errors import InvalidOperationError, TableNotFoundError
from canteen.domain.common.ids import TableId
from canteen.domain.table.entities import TableStillActiveError
from canteen.domain.user.entities import Principal

logger = logging.getLogger(__name__)


class TableStillActiveOperationError(InvalidOperationError):
    pass


class GetTableByQrCode:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, qr_code: str) -> TableResponse:
        table = self._table_repository.get_by_qr_code(qr_code)
        if table is None or not table.is_active:
            raise TableNotFoundError("table not found or inactive")
        return to_table_response(table)


class DeactivateTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, table_id: TableId, principal: Principal) -> TableResponse:
        ensure_admin(principal)
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")

        updated = table.deactivate()
        if updated is not table:
            self._table_repository.update(updated)
            logger.info("table_deactivated", extra={"table_id": str(table_id)})
        return to_table_response(updated)


class DeleteTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, table_id: TableId, principal: Principal) -> DeleteTableResponse:
        ensure_admin(principal)
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(f"table {table_id} not found")
        try:
            table.ensure_removable()
        except TableStillActiveError as exc:
            raise TableStillActiveOperationError(str(exc)) from exc

        if not self._table_repository.delete(table_id):
            raise TableNotFoundError(f"table {table_id} not found")
        logger.info("table_deleted", extra={"table_id": str(table_id)})
        return DeleteTableResponse(tableId=str(table_id), deleted=True)
