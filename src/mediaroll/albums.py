from __future__ import annotations

from dataclasses import dataclass
import logging

from mediaroll.models import Album, Asset
from mediaroll.projector import AssetProjector
from mediaroll.store import RecordCursor

LOGGER = logging.getLogger(__name__)

ALL_ALBUM_ID = "-1"


@dataclass(slots=True)
class AlbumBuilder:
    id: str
    title: str | None
    asset_count: int = 0
    preview: Asset | None = None

    def build(self) -> Album:
        previews = [self.preview] if self.preview is not None else []
        return Album(id=self.id, title=self.title, asset_count=self.asset_count, preview_assets=previews)


def aggregate_albums(cursor: RecordCursor, projector: AssetProjector, all_title: str | None = "All") -> list[Album]:
    """Group every matching record by bucket, plus one whole-library album.

    Each album's preview is its first projectable member in store order; a
    bucket with no projectable member is left out.
    """
    builders: dict[str, AlbumBuilder] = {}
    library: AlbumBuilder | None = None

    for record in cursor:
        if library is None:
            library = AlbumBuilder(id=ALL_ALBUM_ID, title=all_title, asset_count=cursor.count)

        bucket_id = record.bucket_id or ""
        builder = builders.get(bucket_id)
        if builder is None:
            builder = AlbumBuilder(id=bucket_id, title=record.bucket_display_name)
            builders[bucket_id] = builder
        builder.asset_count += 1

        if builder.preview is not None and library.preview is not None:
            continue
        asset = projector.project(record)
        if asset is None:
            continue
        if builder.preview is None:
            builder.preview = asset
        if library.preview is None:
            library.preview = asset

    albums: list[Album] = []
    for candidate in ([library] if library else []) + list(builders.values()):
        if candidate.preview is None:
            LOGGER.debug("dropping album %s: no projectable preview", candidate.id)
            continue
        albums.append(candidate.build())
    return albums
