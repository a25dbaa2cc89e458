from __future__ import annotations

from contextlib import contextmanager
import logging
import os
from pathlib import Path
import sqlite3
from typing import Iterator

from mediaroll.errors import PermissionDeniedError, StoreUnavailableError

LOGGER = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SETUP_SQL = """
CREATE TABLE IF NOT EXISTS files (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  path TEXT NOT NULL UNIQUE,
  media_kind INTEGER NOT NULL DEFAULT 0,
  mime_type TEXT,
  modified_at INTEGER NOT NULL,
  width INTEGER,
  height INTEGER,
  duration_ms INTEGER,
  display_name TEXT,
  bucket_id TEXT,
  bucket_display_name TEXT
);

CREATE INDEX IF NOT EXISTS idx_files_modified ON files(modified_at DESC, id DESC);
CREATE INDEX IF NOT EXISTS idx_files_bucket ON files(bucket_id);
CREATE INDEX IF NOT EXISTS idx_files_kind ON files(media_kind);

CREATE TABLE IF NOT EXISTS video_thumbnails (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  video_id INTEGER NOT NULL UNIQUE REFERENCES files(id) ON DELETE CASCADE,
  path TEXT NOT NULL,
  width INTEGER,
  height INTEGER
);

CREATE TABLE IF NOT EXISTS schema_version (
  id INTEGER PRIMARY KEY CHECK (id = 1),
  version INTEGER NOT NULL
);
"""


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(
        """
        INSERT INTO schema_version(id, version)
        VALUES(1, ?)
        ON CONFLICT(id) DO UPDATE SET version=excluded.version
        """,
        (version,),
    )


class Database:
    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        if self.path.exists() and not os.access(self.path, os.R_OK):
            raise PermissionDeniedError(f"Could not get photos: no read access to {self.path}")
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Could not open media store {self.path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA busy_timeout = 5000")
            yield conn
            conn.commit()
        finally:
            conn.close()

    def initialize(self) -> None:
        with self.connect() as conn:
            conn.executescript(SETUP_SQL)
            _set_schema_version(conn, SCHEMA_VERSION)
        LOGGER.debug("media store ready at %s", self.path)
