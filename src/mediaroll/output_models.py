from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mediaroll.models import Album, Asset, Page


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AssetOutput(CamelModel):
    id: str
    uri: str
    source_uri: str | None = None
    width: float
    height: float
    filename: str | None = None
    mime_type: str | None = None
    media_type: str
    creation_date: int
    duration_ms: int | None = None

    @classmethod
    def from_asset(cls, asset: Asset) -> AssetOutput:
        return cls(
            id=asset.id,
            uri=asset.uri,
            source_uri=asset.source_uri,
            width=asset.width,
            height=asset.height,
            filename=asset.filename,
            mime_type=asset.mime_type,
            media_type=asset.media_type,
            creation_date=asset.creation_date,
            duration_ms=asset.duration_ms,
        )


class PageInfoOutput(BaseModel):
    has_next_page: bool
    end_cursor: str | None = None


class PageOutput(BaseModel):
    assets: list[AssetOutput] = []
    page_info: PageInfoOutput

    @classmethod
    def from_page(cls, page: Page) -> PageOutput:
        return cls(
            assets=[AssetOutput.from_asset(a) for a in page.assets],
            page_info=PageInfoOutput(
                has_next_page=page.page_info.has_next_page,
                end_cursor=page.page_info.end_cursor,
            ),
        )

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "assets": [a.to_wire() for a in self.assets],
            "page_info": self.page_info.model_dump(exclude_none=True),
        }
        return out


class AlbumOutput(CamelModel):
    id: str
    title: str | None = None
    asset_count: int
    preview_assets: list[AssetOutput] = []

    @classmethod
    def from_album(cls, album: Album) -> AlbumOutput:
        return cls(
            id=album.id,
            title=album.title,
            asset_count=album.asset_count,
            preview_assets=[AssetOutput.from_asset(a) for a in album.preview_assets],
        )


class AlbumListOutput(BaseModel):
    albums: list[AlbumOutput] = []

    def to_wire(self) -> dict[str, Any]:
        return {"albums": [a.to_wire() for a in self.albums]}
