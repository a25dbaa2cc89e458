import sqlite3

import pytest

from mediaroll.errors import PermissionDeniedError, StoreUnavailableError
from mediaroll.models import StoreCapabilities
from mediaroll.query.builder import AssetQuery, build_selection
from mediaroll.store import RecordStore


def _selection():
    return build_selection(AssetQuery(first=5), StoreCapabilities())


def test_cursor_yields_records_in_store_order(db, add_record) -> None:
    with db.connect() as conn:
        older = add_record(conn, modified_at=10)
        newer = add_record(conn, modified_at=20)

    with RecordStore(db).query(_selection()) as cursor:
        assert cursor.count == 2
        assert [r.id for r in cursor] == [newer, older]


def test_errors_while_reading_rows_are_typed(db, add_record) -> None:
    with db.connect() as conn:
        add_record(conn, modified_at=10)

    with pytest.raises(StoreUnavailableError) as excinfo:
        with RecordStore(db).query(_selection()) as cursor:
            next(iter(cursor))
            raise sqlite3.OperationalError("database is locked")
    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)

    with pytest.raises(PermissionDeniedError):
        with RecordStore(db).query(_selection()):
            raise sqlite3.OperationalError("attempt to write a readonly database")


def test_missing_table_is_unavailable(db) -> None:
    with db.connect() as conn:
        conn.execute("DROP TABLE video_thumbnails")
        conn.execute("DROP TABLE files")

    with pytest.raises(StoreUnavailableError):
        with RecordStore(db).query(_selection()):
            pass
