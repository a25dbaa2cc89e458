from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from mediaroll.errors import InvalidArgumentError, MediaRollError
from mediaroll.service import MediaLibraryService

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BridgeResponse:
    ok: bool
    result: Any | None = None
    code: str | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"ok": self.ok}
        if self.ok:
            out["result"] = self.result
        else:
            out["code"] = self.code or MediaRollError.code
            out["error"] = self.error or "unknown error"
        return out


class BridgeProtocol:
    """Dispatches decoded JSON requests to the media library service."""

    def __init__(self, service: MediaLibraryService):
        self.service = service

    def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        method = payload.get("method") or payload.get("tool")
        params = payload.get("params") or payload.get("args") or {}
        if not isinstance(params, dict):
            return BridgeResponse(ok=False, code=InvalidArgumentError.code, error="params must be an object").as_dict()

        try:
            if method == "getPhotos":
                return BridgeResponse(ok=True, result=self.service.get_photos(params)).as_dict()

            if method == "getAlbums":
                return BridgeResponse(ok=True, result=self.service.get_albums()).as_dict()

            if method == "getDefaultAlbum":
                return BridgeResponse(ok=True, result=self.service.get_default_album()).as_dict()

            if method == "saveToCameraRoll":
                source = params.get("sourceUri") or params.get("uri")
                if not isinstance(source, str):
                    raise InvalidArgumentError("sourceUri is required")
                media_type = params.get("mediaType") or params.get("type") or "photo"
                uri = self.service.save_to_library(source, str(media_type))
                return BridgeResponse(ok=True, result=uri).as_dict()

            return BridgeResponse(ok=False, code=InvalidArgumentError.code, error=f"unknown method: {method}").as_dict()
        except MediaRollError as exc:
            LOGGER.info("%s failed with %s: %s", method, exc.code, exc)
            return BridgeResponse(ok=False, code=exc.code, error=str(exc)).as_dict()
        except Exception as exc:
            LOGGER.exception("%s failed unexpectedly", method)
            return BridgeResponse(ok=False, code=MediaRollError.code, error=str(exc)).as_dict()
