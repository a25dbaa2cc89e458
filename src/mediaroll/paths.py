from __future__ import annotations

from pathlib import Path
import os

APP_NAME = "mediaroll"


def cache_root() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".cache"
    root = base / APP_NAME
    root.mkdir(parents=True, exist_ok=True)
    return root


def config_root() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".config"
    root = base / APP_NAME
    root.mkdir(parents=True, exist_ok=True)
    return root


def default_db_path() -> Path:
    return cache_root() / "media.sqlite3"


def default_thumbnails_path() -> Path:
    return cache_root() / "thumbnails"


def default_pid_path() -> Path:
    return cache_root() / "bridge_http.pid"


def default_pictures_dir() -> Path:
    xdg = os.environ.get("XDG_PICTURES_DIR")
    if xdg:
        return Path(xdg).expanduser()
    return Path.home() / "Pictures"


def default_movies_dir() -> Path:
    xdg = os.environ.get("XDG_VIDEOS_DIR")
    if xdg:
        return Path(xdg).expanduser()
    return Path.home() / "Movies"
