from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import sqlite3
from typing import Iterable, Iterator

from mediaroll.db import Database
from mediaroll.ids import bucket_display_name_for, bucket_id_for, content_uri
from mediaroll.importer import ScanCallback
from mediaroll.media.probe import MediaInfo, guess_mime_type, kind_for_mime, probe_media
from mediaroll.models import MediaKind

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanStats:
    scanned: int = 0
    indexed: int = 0
    unchanged: int = 0
    ignored: int = 0


def _upsert_file(conn: sqlite3.Connection, path: Path, info: MediaInfo, modified_at: int) -> int:
    parent = path.parent
    conn.execute(
        """
        INSERT INTO files(
          path, media_kind, mime_type, modified_at, width, height,
          duration_ms, display_name, bucket_id, bucket_display_name
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(path) DO UPDATE SET
          media_kind=excluded.media_kind,
          mime_type=excluded.mime_type,
          modified_at=excluded.modified_at,
          width=excluded.width,
          height=excluded.height,
          duration_ms=excluded.duration_ms,
          display_name=excluded.display_name,
          bucket_id=excluded.bucket_id,
          bucket_display_name=excluded.bucket_display_name
        """,
        (
            str(path),
            int(info.media_kind),
            info.mime_type,
            modified_at,
            info.width,
            info.height,
            info.duration_ms,
            path.name,
            bucket_id_for(parent),
            bucket_display_name_for(parent),
        ),
    )
    row = conn.execute("SELECT id FROM files WHERE path = ?", (str(path),)).fetchone()
    # The old thumbnail no longer matches the new contents.
    conn.execute("DELETE FROM video_thumbnails WHERE video_id = ?", (int(row["id"]),))
    return int(row["id"])


def iter_media_files(paths: Iterable[Path]) -> Iterator[Path]:
    for root in paths:
        root = root.expanduser()
        if root.is_file():
            yield root.resolve()
            continue
        if not root.is_dir():
            continue
        for p in sorted(root.rglob("*")):
            if p.is_file() and not p.name.startswith("."):
                yield p.resolve()


class LibraryScanner:
    """Indexes files into the media store and reports their content URIs."""

    def __init__(self, db: Database, photo_base: str, video_base: str):
        self.db = db
        self.photo_base = photo_base
        self.video_base = video_base

    def _uri_for(self, kind: MediaKind, record_id: int) -> str:
        base = self.photo_base if kind == MediaKind.PHOTO else self.video_base
        return content_uri(base, record_id)

    def index_file(self, path: Path, mime_type: str | None = None) -> str | None:
        path = path.expanduser().resolve()
        if not path.is_file():
            LOGGER.warning("scan rejected %s: not a file", path)
            return None
        mime = mime_type or guess_mime_type(path)
        if kind_for_mime(mime) not in (MediaKind.PHOTO, MediaKind.VIDEO):
            LOGGER.info("scan ignored %s: mime type %s is not photo or video", path, mime)
            return None
        info = probe_media(path, mime)
        modified_at = int(path.stat().st_mtime)
        with self.db.connect() as conn:
            record_id = _upsert_file(conn, path, info, modified_at)
        return self._uri_for(info.media_kind, record_id)

    def scan_file(self, path: Path, mime_type: str | None, on_complete: ScanCallback) -> None:
        on_complete(path, self.index_file(path, mime_type))

    def scan_paths(self, paths: Iterable[Path]) -> ScanStats:
        stats = ScanStats()
        with self.db.connect() as conn:
            known = {
                str(r["path"]): int(r["modified_at"])
                for r in conn.execute("SELECT path, modified_at FROM files").fetchall()
            }
        for path in iter_media_files(paths):
            stats.scanned += 1
            if kind_for_mime(guess_mime_type(path)) not in (MediaKind.PHOTO, MediaKind.VIDEO):
                stats.ignored += 1
                continue
            if known.get(str(path)) == int(path.stat().st_mtime):
                stats.unchanged += 1
                continue
            if self.index_file(path) is None:
                stats.ignored += 1
                continue
            stats.indexed += 1
        LOGGER.info(
            "scan finished: scanned=%d indexed=%d unchanged=%d ignored=%d",
            stats.scanned,
            stats.indexed,
            stats.unchanged,
            stats.ignored,
        )
        return stats
