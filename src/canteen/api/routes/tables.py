from __future__ import annotations

from fastapi import APIRouter, Depends

from canteen.api.deps import get_principal
from canteen.application.dto.responses import DeleteTableResponse, TableResponse
from canteen.application.use_cases.table_lifecycle import (
    DeactivateTable,
    DeleteTable,
    GetTableByQrCode,
)
from canteen.domain.common.ids import TableId
from canteen.domain.user.entities import Principal
from canteen.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter(tags=["tables"])


def _get_table_by_qr_code_use_case() -> GetTableByQrCode:
    return GetTableByQrCode(table_repository=SqlAlchemyTableRepository())


def _deactivate_table_use_case() -> DeactivateTable:
    return DeactivateTable(table_repository=SqlAlchemyTableRepository())


def _delete_table_use_case() -> DeleteTable:
    return DeleteTable(table_repository=SqlAlchemyTableRepository())


@router.get("/v1/tables/qr/{qr_code}", response_model=TableResponse)
def get_table_by_qr_code(qr_code: str) -> TableResponse:
    return _get_table_by_qr_code_use_case().execute(qr_code)


@router.post("/v1/tables/{table_id}/deactivate", response_model=TableResponse)
def deactivate_table(
    table_id: str,
    principal: Principal = Depends(get_principal),
) -> TableResponse:
    return _deactivate_table_use_case().execute(TableId(table_id), principal)


@router.delete("/v1/tables/{table_id}", response_model=DeleteTableResponse)
def delete_table(
    table_id: str,
    principal: Principal = Depends(get_principal),
) -> DeleteTableResponse:
    return _delete_table_use_case().execute(TableId(table_id), principal)
