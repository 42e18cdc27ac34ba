from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from canteen.domain.common.ids import TableId
from canteen.domain.table.entities import Table, TableInactiveError, TableStillActiveError


def _table(is_active: bool = True) -> Table:
    return Table(
        table_id=TableId("tbl_001"),
        table_number="T1",
        qr_code="qr-main-t1",
        canteen_location="Main Canteen",
        is_active=is_active,
    )


def test_deactivate_flips_flag_once() -> None:
    table = _table()
    inactive = table.deactivate()

    assert table.is_active
    assert not inactive.is_active
    assert inactive.deactivate() is inactive


def test_inactive_table_cannot_take_orders() -> None:
    _table().ensure_active()
    with pytest.raises(TableInactiveError):
        _table(is_active=False).ensure_active()


def test_only_inactive_tables_are_removable() -> None:
    _table(is_active=False).ensure_removable()
    with pytest.raises(TableStillActiveError):
        _table().ensure_removable()


def test_table_requires_number_and_qr_code() -> None:
    with pytest.raises(ValueError):
        Table(table_id=TableId("tbl_x"), table_number=" ", qr_code="qr", canteen_location="Main")
    with pytest.raises(ValueError):
        Table(table_id=TableId("tbl_x"), table_number="T9", qr_code="", canteen_location="Main")
