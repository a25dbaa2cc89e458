from __future__ import annotations

from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from mediaroll.media.ffmpeg import probe_video
from mediaroll.models import MediaKind

LOGGER = logging.getLogger(__name__)

# Types mimetypes does not know on every platform.
EXTRA_MIME_TYPES = {
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".webp": "image/webp",
    ".m4v": "video/x-m4v",
    ".mkv": "video/x-matroska",
    ".3gp": "video/3gpp",
}


@dataclass(slots=True)
class MediaInfo:
    media_kind: MediaKind
    mime_type: str | None
    width: int | None = None
    height: int | None = None
    duration_ms: int | None = None


def guess_mime_type(path: Path) -> str | None:
    ext = path.suffix.lower()
    if ext in EXTRA_MIME_TYPES:
        return EXTRA_MIME_TYPES[ext]
    mime, _ = mimetypes.guess_type(path.name)
    return mime


def kind_for_mime(mime_type: str | None) -> MediaKind:
    if not mime_type:
        return MediaKind.NONE
    major = mime_type.split("/", 1)[0]
    if major == "image":
        return MediaKind.PHOTO
    if major == "video":
        return MediaKind.VIDEO
    if major == "audio":
        return MediaKind.AUDIO
    return MediaKind.NONE


def _image_size(path: Path) -> tuple[int | None, int | None]:
    try:
        with Image.open(path) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("could not read image size of %s: %s", path, exc)
        return None, None
    return int(width), int(height)


def probe_media(path: Path, mime_type: str | None = None) -> MediaInfo:
    mime = mime_type or guess_mime_type(path)
    kind = kind_for_mime(mime)
    if kind == MediaKind.PHOTO:
        width, height = _image_size(path)
        return MediaInfo(kind, mime, width, height)
    if kind == MediaKind.VIDEO:
        width, height, duration_ms = probe_video(path)
        return MediaInfo(kind, mime, width, height, duration_ms)
    return MediaInfo(kind, mime)
