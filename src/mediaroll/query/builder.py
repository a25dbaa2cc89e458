from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mediaroll.errors import InvalidArgumentError, UnsupportedOptionError
from mediaroll.models import VISIBLE_KINDS, StoreCapabilities

BASE_COLUMNS = (
    "id",
    "media_kind",
    "mime_type",
    "modified_at",
    "duration_ms",
    "display_name",
    "bucket_id",
    "bucket_display_name",
    "path",
)
ORDER_BY = "modified_at DESC, id DESC"


@dataclass(slots=True, frozen=True)
class PageCursor:
    modified_at: int
    record_id: int | None = None

    def encode(self) -> str:
        if self.record_id is None:
            return str(self.modified_at)
        return f"{self.modified_at}:{self.record_id}"

    @classmethod
    def decode(cls, value: str) -> PageCursor:
        raw = value.strip()
        head, sep, tail = raw.partition(":")
        try:
            modified_at = int(head)
            record_id = int(tail) if sep else None
        except ValueError as exc:
            raise InvalidArgumentError(f"invalid cursor: {value!r}") from exc
        return cls(modified_at=modified_at, record_id=record_id)


@dataclass(slots=True)
class AssetQuery:
    first: int
    after: PageCursor | None = None
    album_id: str | None = None
    mime_types: list[str] = field(default_factory=list)

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> AssetQuery:
        if "groupTypes" in params:
            raise UnsupportedOptionError("groupTypes is not supported on this platform")

        first = params.get("first")
        if first is None:
            raise InvalidArgumentError("first is required")
        if isinstance(first, bool) or not isinstance(first, int):
            raise InvalidArgumentError(f"first must be an integer, got {first!r}")
        if first <= 0:
            raise InvalidArgumentError(f"first must be positive, got {first}")

        after_raw = params.get("after")
        after: PageCursor | None = None
        if after_raw is not None:
            if not isinstance(after_raw, str):
                raise InvalidArgumentError(f"after must be a string cursor, got {after_raw!r}")
            if after_raw.strip():
                after = PageCursor.decode(after_raw)

        album_raw = params.get("albumId")
        album_id: str | None = None
        if album_raw is not None:
            if not isinstance(album_raw, str):
                raise InvalidArgumentError(f"albumId must be a string, got {album_raw!r}")
            album_id = album_raw.strip() or None

        mime_raw = params.get("mimeTypes")
        mime_types: list[str] = []
        if mime_raw is not None:
            if not isinstance(mime_raw, list) or not all(isinstance(m, str) for m in mime_raw):
                raise InvalidArgumentError("mimeTypes must be a list of strings")
            mime_types = [m for m in mime_raw if m]

        return cls(first=first, after=after, album_id=album_id, mime_types=mime_types)


@dataclass(slots=True)
class Selection:
    columns: list[str]
    where: str
    args: list[Any]
    order_by: str = ORDER_BY

    def select_sql(self, table: str = "files") -> str:
        return f"SELECT {', '.join(self.columns)} FROM {table} WHERE {self.where} ORDER BY {self.order_by}"

    def count_sql(self, table: str = "files") -> str:
        return f"SELECT COUNT(*) AS n FROM {table} WHERE {self.where}"


def _columns(capabilities: StoreCapabilities) -> list[str]:
    cols = list(BASE_COLUMNS)
    if capabilities.dimension_columns:
        cols += ["width", "height"]
    else:
        cols += ["-1 AS width", "-1 AS height"]
    return cols


def _base_clauses() -> tuple[list[str], list[Any]]:
    placeholders = ",".join("?" for _ in VISIBLE_KINDS)
    return [f"media_kind IN ({placeholders})"], [int(k) for k in VISIBLE_KINDS]


def build_selection(query: AssetQuery, capabilities: StoreCapabilities) -> Selection:
    if query.first <= 0:
        raise InvalidArgumentError(f"first must be positive, got {query.first}")

    clauses, args = _base_clauses()

    if query.after is not None:
        if query.after.record_id is None:
            clauses.append("modified_at < ?")
            args.append(query.after.modified_at)
        else:
            clauses.append("(modified_at < ? OR (modified_at = ? AND id < ?))")
            args.extend([query.after.modified_at, query.after.modified_at, query.after.record_id])
    if query.album_id:
        clauses.append("bucket_id = ?")
        args.append(query.album_id)
    if query.mime_types:
        placeholders = ",".join("?" for _ in query.mime_types)
        clauses.append(f"mime_type IN ({placeholders})")
        args.extend(query.mime_types)

    return Selection(columns=_columns(capabilities), where=" AND ".join(clauses), args=args)


def build_album_selection(capabilities: StoreCapabilities) -> Selection:
    clauses, args = _base_clauses()
    return Selection(columns=_columns(capabilities), where=" AND ".join(clauses), args=args)
