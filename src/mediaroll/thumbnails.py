from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from PIL import Image

from mediaroll.db import Database
from mediaroll.media.ffmpeg import extract_frame
from mediaroll.models import AssetRecord, MediaKind

LOGGER = logging.getLogger(__name__)

MINI_KIND_SIZE = (512, 384)


class ThumbnailService(Protocol):
    def request_thumbnail(self, record: AssetRecord) -> None:
        """Ensure a thumbnail row exists for the video, if one can be produced."""


class FfmpegThumbnailService:
    def __init__(self, db: Database, thumbnails_dir: Path, size: tuple[int, int] = MINI_KIND_SIZE):
        self.db = db
        self.thumbnails_dir = thumbnails_dir
        self.size = size

    def request_thumbnail(self, record: AssetRecord) -> None:
        if record.media_kind != MediaKind.VIDEO or not record.path:
            return
        with self.db.connect() as conn:
            existing = conn.execute(
                "SELECT 1 FROM video_thumbnails WHERE video_id = ?",
                (record.id,),
            ).fetchone()
        if existing is not None:
            return

        source = Path(record.path)
        if not source.is_file():
            LOGGER.debug("video %s missing on disk: %s", record.id, source)
            return
        dest = self.thumbnails_dir / f"{record.id}.jpg"
        if not extract_frame(source, dest):
            return
        width, height = self._shrink(dest)

        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO video_thumbnails(video_id, path, width, height)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(video_id) DO UPDATE SET
                  path=excluded.path,
                  width=excluded.width,
                  height=excluded.height
                """,
                (record.id, str(dest), width, height),
            )
        LOGGER.debug("generated thumbnail for video %s at %s", record.id, dest)

    def _shrink(self, path: Path) -> tuple[int | None, int | None]:
        try:
            with Image.open(path) as img:
                frame = img.convert("RGB")
            frame.thumbnail(self.size, Image.Resampling.LANCZOS)
            frame.save(path, "JPEG", quality=85)
            return frame.size
        except OSError as exc:
            LOGGER.warning("could not downsize thumbnail %s: %s", path, exc)
            return None, None
