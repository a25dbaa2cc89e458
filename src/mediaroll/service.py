from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import logging
from pathlib import Path
from typing import Any

from mediaroll.albums import ALL_ALBUM_ID, aggregate_albums
from mediaroll.config import AppConfig
from mediaroll.db import Database
from mediaroll.errors import InvalidArgumentError
from mediaroll.importer import MediaDirectories, ScanNotifier, import_to_library, source_path_from_uri
from mediaroll.models import Album, MediaKind, Page
from mediaroll.output_models import AlbumListOutput, AlbumOutput, PageOutput
from mediaroll.pagination import fetch_page
from mediaroll.projector import AssetProjector
from mediaroll.query.builder import AssetQuery, build_album_selection, build_selection
from mediaroll.scanner import LibraryScanner
from mediaroll.store import RecordStore
from mediaroll.thumbnails import FfmpegThumbnailService, ThumbnailService

LOGGER = logging.getLogger(__name__)


class MediaLibraryService:
    def __init__(
        self,
        config: AppConfig,
        thumbnails: ThumbnailService | None = None,
        notifier: ScanNotifier | None = None,
    ):
        self.config = config
        self.db = Database(config.db_path)
        self.db.initialize()
        self.store = RecordStore(self.db)
        self.scanner = LibraryScanner(self.db, config.uris.photo_base, config.uris.video_base)
        self.thumbnails = thumbnails or FfmpegThumbnailService(self.db, config.thumbnails_dir)
        self.notifier = notifier or self.scanner
        self.projector = AssetProjector(
            thumbnails=self.thumbnails,
            lookup=self.store,
            capabilities=config.store.capabilities,
            photo_base=config.uris.photo_base,
            video_base=config.uris.video_base,
            missing_thumbnail=config.projection.missing_thumbnail,
        )
        self._executor: ThreadPoolExecutor | None = None

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.config.workers, thread_name_prefix="mediaroll")
        return self._executor

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def fetch_assets(self, query: AssetQuery) -> Page:
        selection = build_selection(query, self.config.store.capabilities)
        with self.store.query(selection) as cursor:
            return fetch_page(cursor, self.projector, query.first)

    def list_albums(self) -> list[Album]:
        selection = build_album_selection(self.config.store.capabilities)
        with self.store.query(selection) as cursor:
            return aggregate_albums(cursor, self.projector, all_title=self.config.albums.all_title)

    def get_photos(self, params: dict[str, Any]) -> dict[str, Any]:
        query = AssetQuery.from_params(params)
        page = self.fetch_assets(query)
        LOGGER.debug(
            "page: first=%d returned=%d has_next=%s",
            query.first,
            len(page.assets),
            page.page_info.has_next_page,
        )
        return PageOutput.from_page(page).to_wire()

    def get_albums(self) -> dict[str, Any]:
        albums = self.list_albums()
        return AlbumListOutput(albums=[AlbumOutput.from_album(a) for a in albums]).to_wire()

    def get_default_album(self) -> dict[str, Any] | None:
        for album in self.list_albums():
            if album.id == ALL_ALBUM_ID:
                return AlbumOutput.from_album(album).to_wire()
        return None

    def save_to_library(self, source_uri: str, media_type: str = "photo") -> str:
        try:
            kind = MediaKind.parse(media_type)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
        source = source_path_from_uri(source_uri)
        directories = MediaDirectories(
            pictures_dir=self.config.library.pictures_dir,
            movies_dir=self.config.library.movies_dir,
        )
        return import_to_library(source, kind, directories, self.notifier)

    def scan(self, paths: list[str]) -> dict[str, Any]:
        stats = self.scanner.scan_paths([Path(p) for p in paths])
        return {
            "scanned": stats.scanned,
            "indexed": stats.indexed,
            "unchanged": stats.unchanged,
            "ignored": stats.ignored,
        }

    def submit_photos(self, params: dict[str, Any]) -> Future[dict[str, Any]]:
        return self._pool().submit(self.get_photos, params)

    def submit_albums(self) -> Future[dict[str, Any]]:
        return self._pool().submit(self.get_albums)

    def submit_import(self, source_uri: str, media_type: str = "photo") -> Future[str]:
        return self._pool().submit(self.save_to_library, source_uri, media_type)

    def status(self) -> dict[str, Any]:
        with self.db.connect() as conn:
            rows = conn.execute(
                "SELECT media_kind, COUNT(*) AS n FROM files GROUP BY media_kind"
            ).fetchall()
            thumbs = conn.execute("SELECT COUNT(*) AS n FROM video_thumbnails").fetchone()
        counts = {MediaKind(int(r["media_kind"])).label: int(r["n"]) for r in rows}
        return {
            "db_path": str(self.config.db_path),
            "photos": counts.get("photo", 0),
            "videos": counts.get("video", 0),
            "other": sum(v for k, v in counts.items() if k not in {"photo", "video"}),
            "video_thumbnails": int(thumbs["n"]) if thumbs else 0,
            "pictures_dir": str(self.config.library.pictures_dir),
            "movies_dir": str(self.config.library.movies_dir),
        }
