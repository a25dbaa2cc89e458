"""Maps raw store records to the asset descriptors returned to callers."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from mediaroll.ids import content_uri
from mediaroll.models import (
    DIMENSION_SENTINEL,
    Asset,
    AssetRecord,
    MediaKind,
    MissingThumbnailPolicy,
    StoreCapabilities,
)
from mediaroll.thumbnails import ThumbnailService

LOGGER = logging.getLogger(__name__)


class ThumbnailLookup(Protocol):
    def find_video_thumbnail(self, video_id: int) -> str | None: ...


def _dimension(value: int | None, enabled: bool) -> float:
    if not enabled or value is None:
        return float(DIMENSION_SENTINEL)
    return float(value)


class AssetProjector:
    """Projects one record into an ``Asset``, or ``None`` when it must be skipped.

    Photos always resolve to ``photo_base/<id>``. Videos resolve to their
    thumbnail file; without one the record is skipped under
    ``MissingThumbnailPolicy.SKIP`` or emitted with an empty ``uri`` under
    ``KEEP``.
    """

    def __init__(
        self,
        thumbnails: ThumbnailService,
        lookup: ThumbnailLookup,
        capabilities: StoreCapabilities,
        photo_base: str,
        video_base: str,
        missing_thumbnail: MissingThumbnailPolicy = MissingThumbnailPolicy.SKIP,
    ):
        self.thumbnails = thumbnails
        self.lookup = lookup
        self.capabilities = capabilities
        self.photo_base = photo_base
        self.video_base = video_base
        self.missing_thumbnail = missing_thumbnail
        self._by_kind: dict[MediaKind, Callable[[AssetRecord], Asset | None]] = {
            MediaKind.PHOTO: self._project_photo,
            MediaKind.VIDEO: self._project_video,
        }

    def project(self, record: AssetRecord) -> Asset | None:
        handler = self._by_kind.get(record.media_kind)
        if handler is None:
            LOGGER.debug("skipping record %s with media kind %s", record.id, record.media_kind)
            return None
        return handler(record)

    def _base(self, record: AssetRecord, uri: str) -> Asset:
        return Asset(
            id=str(record.id),
            uri=uri,
            width=_dimension(record.width, self.capabilities.dimension_columns),
            height=_dimension(record.height, self.capabilities.dimension_columns),
            filename=record.display_name,
            mime_type=record.mime_type,
            media_type=record.media_kind.label,
            creation_date=record.modified_at,
        )

    def _project_photo(self, record: AssetRecord) -> Asset:
        return self._base(record, content_uri(self.photo_base, record.id))

    def _project_video(self, record: AssetRecord) -> Asset | None:
        self.thumbnails.request_thumbnail(record)
        thumb = self.lookup.find_video_thumbnail(record.id)
        if thumb is None:
            if self.missing_thumbnail == MissingThumbnailPolicy.SKIP:
                LOGGER.debug("skipping video %s: no thumbnail", record.id)
                return None
            uri = ""
        else:
            uri = f"file://{thumb}"
        asset = self._base(record, uri)
        asset.source_uri = content_uri(self.video_base, record.id)
        asset.duration_ms = record.duration_ms
        return asset
