"""Copies external files into the public media directories.

Destination names are claimed with an exclusive create, so concurrent imports
of equally named sources land on distinct ``name_<n>.ext`` paths.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
import logging
from pathlib import Path
import shutil
from typing import BinaryIO, Callable, Optional, Protocol
from urllib.parse import unquote, urlparse

from mediaroll.errors import (
    ImportFailedError,
    InvalidArgumentError,
    MediaIOError,
    MediaRollError,
    PermissionDeniedError,
    StorageUnavailableError,
)
from mediaroll.media.probe import guess_mime_type
from mediaroll.models import MediaKind

LOGGER = logging.getLogger(__name__)

ScanCallback = Callable[[Path, Optional[str]], None]


class ScanNotifier(Protocol):
    def scan_file(self, path: Path, mime_type: str | None, on_complete: ScanCallback) -> None:
        """Index ``path`` and call ``on_complete(path, uri)``; ``uri`` is None on rejection."""


@dataclass(slots=True)
class MediaDirectories:
    pictures_dir: Path
    movies_dir: Path

    def for_kind(self, kind: MediaKind) -> Path:
        if kind == MediaKind.PHOTO:
            return self.pictures_dir
        if kind == MediaKind.VIDEO:
            return self.movies_dir
        raise InvalidArgumentError(f"cannot import media of kind {kind.label}")


def source_path_from_uri(source_uri: str) -> Path:
    raw = source_uri.strip()
    if not raw:
        raise InvalidArgumentError("sourceUri is required")
    parsed = urlparse(raw)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Single-letter schemes are Windows drive letters, not URI schemes.
    if parsed.scheme and len(parsed.scheme) > 1:
        raise InvalidArgumentError(f"unsupported source uri scheme: {parsed.scheme}")
    return Path(raw).expanduser()


def split_name(filename: str) -> tuple[str, str]:
    stem, dot, ext = filename.rpartition(".")
    if not dot:
        return filename, ""
    return stem, dot + ext


def prepare_directory(directory: Path) -> Path:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:
        raise StorageUnavailableError(f"External media storage directory not available: {directory}") from exc
    except PermissionError as exc:
        raise PermissionDeniedError(f"Cannot create media directory {directory}: {exc}") from exc
    except OSError as exc:
        raise StorageUnavailableError(f"External media storage directory not available: {directory}") from exc
    if not directory.is_dir():
        raise StorageUnavailableError(f"External media storage directory not available: {directory}")
    return directory


def claim_destination(directory: Path, filename: str) -> tuple[Path, BinaryIO]:
    """Create and open the first free name among ``filename``, ``stem_0ext``, ``stem_1ext``, ..."""
    stem, ext = split_name(filename)
    candidate = directory / filename
    n = 0
    while True:
        try:
            return candidate, open(candidate, "xb")
        except FileExistsError:
            candidate = directory / f"{stem}_{n}{ext}"
            n += 1


def copy_into(source: Path, directory: Path) -> Path:
    try:
        with open(source, "rb") as src:
            dest, handle = claim_destination(directory, source.name)
            with handle as dst:
                shutil.copyfileobj(src, dst)
    except PermissionError as exc:
        raise PermissionDeniedError(f"Could not copy {source}: {exc}") from exc
    except OSError as exc:
        raise MediaIOError(f"Could not copy {source}: {exc}") from exc
    return dest


def request_rescan(notifier: ScanNotifier, path: Path, mime_type: str | None) -> str:
    done: Future[str | None] = Future()

    def _on_complete(_path: Path, uri: str | None) -> None:
        done.set_result(uri)

    try:
        notifier.scan_file(path, mime_type, _on_complete)
        uri = done.result()
    except MediaRollError:
        raise
    except Exception as exc:
        raise ImportFailedError(f"Could not add {path.name} to gallery: {exc}") from exc
    if not uri:
        raise ImportFailedError(f"Could not add {path.name} to gallery")
    return uri


def import_to_library(
    source: Path,
    kind: MediaKind,
    directories: MediaDirectories,
    notifier: ScanNotifier,
) -> str:
    directory = prepare_directory(directories.for_kind(kind))
    dest = copy_into(source, directory)
    LOGGER.info("copied %s to %s", source, dest)
    uri = request_rescan(notifier, dest, guess_mime_type(dest))
    LOGGER.info("imported %s as %s", dest, uri)
    return uri
