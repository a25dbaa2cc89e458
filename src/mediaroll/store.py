from __future__ import annotations

from contextlib import contextmanager
import logging
import sqlite3
from typing import Iterator

from mediaroll.db import Database
from mediaroll.errors import PermissionDeniedError, StoreUnavailableError
from mediaroll.models import AssetRecord, MediaKind
from mediaroll.query.builder import Selection

LOGGER = logging.getLogger(__name__)


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _to_record(row: sqlite3.Row) -> AssetRecord:
    try:
        kind = MediaKind(int(row["media_kind"]))
    except ValueError:
        kind = MediaKind.NONE
    return AssetRecord(
        id=int(row["id"]),
        media_kind=kind,
        mime_type=row["mime_type"],
        modified_at=int(row["modified_at"]),
        width=_optional_int(row["width"]),
        height=_optional_int(row["height"]),
        display_name=row["display_name"],
        bucket_id=None if row["bucket_id"] is None else str(row["bucket_id"]),
        bucket_display_name=row["bucket_display_name"],
        duration_ms=_optional_int(row["duration_ms"]),
        path=row["path"],
    )


def _is_permission_error(exc: sqlite3.Error) -> bool:
    msg = str(exc).lower()
    return "readonly" in msg or "permission" in msg or "access" in msg


def _store_error(exc: sqlite3.Error) -> PermissionDeniedError | StoreUnavailableError:
    if _is_permission_error(exc):
        return PermissionDeniedError(f"Could not get photos: {exc}")
    return StoreUnavailableError(f"Could not get photos: {exc}")


class RecordCursor:
    """Forward-only cursor over the records matching one selection.

    Rows are read lazily from SQLite, so a cursor must be consumed by a single
    worker and only while the owning connection is open.
    """

    def __init__(self, conn: sqlite3.Connection, selection: Selection):
        self._conn = conn
        self._selection = selection
        self._count: int | None = None
        self._rows = conn.execute(selection.select_sql(), selection.args)

    @property
    def count(self) -> int:
        if self._count is None:
            row = self._conn.execute(self._selection.count_sql(), self._selection.args).fetchone()
            self._count = int(row["n"]) if row else 0
        return self._count

    def __iter__(self) -> Iterator[AssetRecord]:
        for row in self._rows:
            yield _to_record(row)


class RecordStore:
    def __init__(self, db: Database):
        self.db = db

    @contextmanager
    def query(self, selection: Selection) -> Iterator[RecordCursor]:
        with self.db.connect() as conn:
            # Rows are fetched lazily, so read errors surface inside the caller's block.
            try:
                yield RecordCursor(conn, selection)
            except sqlite3.Error as exc:
                raise _store_error(exc) from exc

    def find_video_thumbnail(self, video_id: int) -> str | None:
        # Fresh connection: the enumeration connection holds a read snapshot
        # that predates thumbnails generated during this request.
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT path FROM video_thumbnails WHERE video_id = ?",
                (video_id,),
            ).fetchone()
        if row is None or not row["path"]:
            return None
        return str(row["path"])

