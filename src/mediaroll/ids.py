from __future__ import annotations

import hashlib
from pathlib import Path


def bucket_id_for(directory: Path | str) -> str:
    """Stable album id for a directory, derived from its lowercased absolute path."""
    seed = str(Path(directory).expanduser().resolve()).lower().encode("utf-8")
    digest = hashlib.sha1(seed).hexdigest()
    return str(int(digest[:8], 16))


def bucket_display_name_for(directory: Path | str) -> str:
    path = Path(directory).expanduser().resolve()
    return path.name or str(path)


def content_uri(base: str, record_id: int | str) -> str:
    return f"{base.rstrip('/')}/{record_id}"

