from __future__ import annotations

from canteen.application.dto.responses import TableResponse
from canteen.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=str(table.table_id),
        tableNumber=table.table_number,
        qrCode=table.qr_code,
        location=table.location,
        canteenLocation=table.canteen_location,
        capacity=table.capacity,
        isActive=table.is_active,
    )
