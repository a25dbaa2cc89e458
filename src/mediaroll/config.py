from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mediaroll.models import MissingThumbnailPolicy, StoreCapabilities
from mediaroll.paths import (
    config_root,
    default_db_path,
    default_movies_dir,
    default_pictures_dir,
    default_pid_path,
    default_thumbnails_path,
)

DEFAULT_PHOTO_BASE = "content://media/external/images/media"
DEFAULT_VIDEO_BASE = "content://media/external/video/media"


@dataclass(slots=True)
class LibraryConfig:
    pictures_dir: Path = field(default_factory=default_pictures_dir)
    movies_dir: Path = field(default_factory=default_movies_dir)


@dataclass(slots=True)
class StoreConfig:
    dimension_columns: bool = True

    @property
    def capabilities(self) -> StoreCapabilities:
        return StoreCapabilities(dimension_columns=self.dimension_columns)


@dataclass(slots=True)
class UriConfig:
    photo_base: str = DEFAULT_PHOTO_BASE
    video_base: str = DEFAULT_VIDEO_BASE


@dataclass(slots=True)
class ProjectionConfig:
    missing_thumbnail: MissingThumbnailPolicy = MissingThumbnailPolicy.SKIP


@dataclass(slots=True)
class AlbumConfig:
    all_title: str = "All"


@dataclass(slots=True)
class UIConfig:
    show_banner: bool = True


@dataclass(slots=True)
class AppConfig:
    db_path: Path = field(default_factory=default_db_path)
    thumbnails_dir: Path = field(default_factory=default_thumbnails_path)
    pid_path: Path = field(default_factory=default_pid_path)
    workers: int = 4
    library: LibraryConfig = field(default_factory=LibraryConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    uris: UriConfig = field(default_factory=UriConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    albums: AlbumConfig = field(default_factory=AlbumConfig)
    ui: UIConfig = field(default_factory=UIConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _path(value: Any, default: Path) -> Path:
    if value is None:
        return default
    return Path(str(value)).expanduser()


def _to_config(data: dict[str, Any]) -> AppConfig:
    library_data = data.get("library") or {}
    library = LibraryConfig(
        pictures_dir=_path(library_data.get("pictures_dir"), default_pictures_dir()),
        movies_dir=_path(library_data.get("movies_dir"), default_movies_dir()),
    )
    projection_data = data.get("projection") or {}
    try:
        policy = MissingThumbnailPolicy(str(projection_data.get("missing_thumbnail", "skip")).lower())
    except ValueError as exc:
        raise ValueError(f"projection.missing_thumbnail must be 'skip' or 'keep': {exc}") from exc
    workers = int(data.get("workers", 4))
    if workers < 1:
        raise ValueError("workers must be at least 1")
    return AppConfig(
        db_path=_path(data.get("db_path"), default_db_path()),
        thumbnails_dir=_path(data.get("thumbnails_dir"), default_thumbnails_path()),
        pid_path=_path(data.get("pid_path"), default_pid_path()),
        workers=workers,
        library=library,
        store=StoreConfig(**(data.get("store") or {})),
        uris=UriConfig(**(data.get("uris") or {})),
        projection=ProjectionConfig(missing_thumbnail=policy),
        albums=AlbumConfig(**(data.get("albums") or {})),
        ui=UIConfig(**(data.get("ui") or {})),
    )


def default_config_path() -> Path:
    return config_root() / "config.yaml"


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    path = config_path or default_config_path()
    base: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text())
        if isinstance(loaded, dict):
            base = loaded
    if overrides:
        base = _merge(base, overrides)
    cfg = _to_config(base)
    cfg.db_path.parent.mkdir(parents=True, exist_ok=True)
    cfg.thumbnails_dir.mkdir(parents=True, exist_ok=True)
    cfg.pid_path.parent.mkdir(parents=True, exist_ok=True)
    return cfg


def write_default_config(path: Path | None = None) -> Path:
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        return target
    target.write_text(
        yaml.safe_dump(
            {
                "db_path": str(default_db_path()),
                "thumbnails_dir": str(default_thumbnails_path()),
                "pid_path": str(default_pid_path()),
                "workers": 4,
                "library": {
                    "pictures_dir": str(default_pictures_dir()),
                    "movies_dir": str(default_movies_dir()),
                },
                "store": {"dimension_columns": True},
                "uris": {
                    "photo_base": DEFAULT_PHOTO_BASE,
                    "video_base": DEFAULT_VIDEO_BASE,
                },
                "projection": {"missing_thumbnail": MissingThumbnailPolicy.SKIP.value},
                "albums": {"all_title": "All"},
                "ui": {"show_banner": True},
            },
            sort_keys=False,
        )
    )
    return target
