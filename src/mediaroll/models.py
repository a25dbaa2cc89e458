from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class MediaKind(IntEnum):
    NONE = 0
    PHOTO = 1
    AUDIO = 2
    VIDEO = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> MediaKind:
        key = value.strip().lower()
        if key == "photo":
            return cls.PHOTO
        if key == "video":
            return cls.VIDEO
        raise ValueError(f"unsupported media type: {value}")


VISIBLE_KINDS = (MediaKind.PHOTO, MediaKind.VIDEO)
DIMENSION_SENTINEL = -1


class MissingThumbnailPolicy(str, Enum):
    SKIP = "skip"
    KEEP = "keep"


@dataclass(slots=True, frozen=True)
class StoreCapabilities:
    dimension_columns: bool = True


@dataclass(slots=True)
class AssetRecord:
    id: int
    media_kind: MediaKind
    mime_type: str | None
    modified_at: int
    width: int | None
    height: int | None
    display_name: str | None
    bucket_id: str | None
    bucket_display_name: str | None
    duration_ms: int | None = None
    path: str | None = None


@dataclass(slots=True)
class Asset:
    id: str
    uri: str
    width: float
    height: float
    filename: str | None
    mime_type: str | None
    media_type: str
    creation_date: int
    source_uri: str | None = None
    duration_ms: int | None = None


@dataclass(slots=True)
class PageInfo:
    has_next_page: bool
    end_cursor: str | None = None


@dataclass(slots=True)
class Page:
    assets: list[Asset]
    page_info: PageInfo


@dataclass(slots=True)
class Album:
    id: str
    title: str | None
    asset_count: int
    preview_assets: list[Asset] = field(default_factory=list)
