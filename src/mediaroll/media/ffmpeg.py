from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import shutil
import subprocess

LOGGER = logging.getLogger(__name__)


def find_tool(name: str) -> str | None:
    env = os.environ.get(f"MEDIAROLL_{name.upper()}")
    if env and Path(env).is_file():
        return env
    return shutil.which(name)


def probe_video(path: Path, timeout: int = 10) -> tuple[int | None, int | None, int | None]:
    """Return (width, height, duration_ms) of the first video stream, or Nones."""
    ffprobe = find_tool("ffprobe")
    if ffprobe is None:
        return None, None, None
    cmd = [
        ffprobe,
        "-v", "error",
        "-select_streams", "v:0",
        "-show_entries", "stream=width,height:format=duration",
        "-of", "json",
        str(path),
    ]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as exc:
        LOGGER.warning("ffprobe failed for %s: %s", path, exc)
        return None, None, None
    if proc.returncode != 0:
        LOGGER.warning("ffprobe exited %s for %s: %s", proc.returncode, path, proc.stderr.strip())
        return None, None, None
    try:
        data = json.loads(proc.stdout or "{}")
    except json.JSONDecodeError:
        return None, None, None

    streams = data.get("streams") or [{}]
    stream = streams[0] if streams else {}
    width = stream.get("width")
    height = stream.get("height")
    duration = (data.get("format") or {}).get("duration")
    duration_ms = None
    if duration is not None:
        try:
            duration_ms = int(round(float(duration) * 1000))
        except ValueError:
            duration_ms = None
    return (
        int(width) if width is not None else None,
        int(height) if height is not None else None,
        duration_ms,
    )


def extract_frame(source: Path, dest: Path, at_seconds: float = 1.0, timeout: int = 20) -> bool:
    ffmpeg = find_tool("ffmpeg")
    if ffmpeg is None:
        LOGGER.debug("ffmpeg not found; cannot extract frame from %s", source)
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        ffmpeg,
        "-v", "error",
        "-ss", f"{at_seconds:g}",
        "-i", str(source),
        "-frames:v", "1",
        "-y",
        str(dest),
    ]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as exc:
        LOGGER.warning("ffmpeg failed for %s: %s", source, exc)
        return False
    if proc.returncode != 0 or not dest.exists() or dest.stat().st_size == 0:
        if at_seconds > 0:
            # Clips shorter than the seek offset produce no frame; retry at the start.
            return extract_frame(source, dest, at_seconds=0.0, timeout=timeout)
        LOGGER.warning("ffmpeg produced no frame for %s: %s", source, proc.stderr.strip())
        return False
    return True
