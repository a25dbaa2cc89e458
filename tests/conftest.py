from __future__ import annotations

from itertools import count
from pathlib import Path
import sqlite3
from typing import Callable

import pytest

from mediaroll.config import DEFAULT_PHOTO_BASE, DEFAULT_VIDEO_BASE
from mediaroll.db import Database
from mediaroll.models import AssetRecord, MediaKind, MissingThumbnailPolicy, StoreCapabilities
from mediaroll.projector import AssetProjector

_paths = count()


class StubThumbnails:
    def __init__(self) -> None:
        self.requested: list[int] = []

    def request_thumbnail(self, record: AssetRecord) -> None:
        self.requested.append(record.id)


class StubLookup:
    def __init__(self, thumbs: dict[int, str] | None = None) -> None:
        self.thumbs = dict(thumbs or {})

    def find_video_thumbnail(self, video_id: int) -> str | None:
        return self.thumbs.get(video_id)


def record_id_from_uri(base: str, uri: str) -> int | None:
    prefix = base.rstrip("/") + "/"
    if not uri.startswith(prefix):
        return None
    tail = uri[len(prefix):]
    return int(tail) if tail.isdigit() else None


def _add_record(
    conn: sqlite3.Connection,
    *,
    modified_at: int,
    kind: MediaKind = MediaKind.PHOTO,
    mime_type: str | None = None,
    width: int | None = 640,
    height: int | None = 480,
    bucket_id: str = "100",
    bucket_name: str = "Camera",
    name: str | None = None,
    duration_ms: int | None = None,
) -> int:
    if mime_type is None:
        mime_type = "video/mp4" if kind == MediaKind.VIDEO else "image/jpeg"
    idx = next(_paths)
    ext = ".mp4" if kind == MediaKind.VIDEO else ".jpg"
    filename = name or f"item{idx}{ext}"
    cur = conn.execute(
        """
        INSERT INTO files(
          path, media_kind, mime_type, modified_at, width, height,
          duration_ms, display_name, bucket_id, bucket_display_name
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            f"/storage/{bucket_name}/{idx}-{filename}",
            int(kind),
            mime_type,
            modified_at,
            width,
            height,
            duration_ms,
            filename,
            bucket_id,
            bucket_name,
        ),
    )
    return int(cur.lastrowid)


@pytest.fixture
def add_record() -> Callable[..., int]:
    return _add_record


@pytest.fixture
def stub_thumbnails() -> StubThumbnails:
    return StubThumbnails()


@pytest.fixture
def db(tmp_path: Path) -> Database:
    database = Database(tmp_path / "media.sqlite3")
    database.initialize()
    return database


@pytest.fixture
def make_projector() -> Callable[..., AssetProjector]:
    def _make(
        thumbs: dict[int, str] | None = None,
        policy: MissingThumbnailPolicy = MissingThumbnailPolicy.SKIP,
        capabilities: StoreCapabilities | None = None,
        thumbnails: StubThumbnails | None = None,
    ) -> AssetProjector:
        return AssetProjector(
            thumbnails=thumbnails or StubThumbnails(),
            lookup=StubLookup(thumbs),
            capabilities=capabilities or StoreCapabilities(),
            photo_base=DEFAULT_PHOTO_BASE,
            video_base=DEFAULT_VIDEO_BASE,
            missing_thumbnail=policy,
        )

    return _make
