from __future__ import annotations

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
from typing import Any

from mediaroll.bridge.protocol import BridgeProtocol
from mediaroll.errors import InvalidArgumentError
from mediaroll.service import MediaLibraryService

LOGGER = logging.getLogger(__name__)


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    server_version = "mediaroll-bridge"

    def do_GET(self) -> None:  # noqa: N802
        if self.path == "/health":
            self._write_json(200, {"ok": True})
            return
        self._write_json(404, {"ok": False, "error": "not found"})

    def do_POST(self) -> None:  # noqa: N802
        if self.path != "/rpc":
            self._write_json(404, {"ok": False, "error": "not found"})
            return

        length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(length)
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self._write_json(400, {"ok": False, "code": InvalidArgumentError.code, "error": "invalid json"})
            return
        if not isinstance(payload, dict):
            self._write_json(400, {"ok": False, "code": InvalidArgumentError.code, "error": "expected an object"})
            return

        protocol: BridgeProtocol = self.server.protocol  # type: ignore[attr-defined]
        response = protocol.handle(payload)
        self._write_json(200, response)

    def log_message(self, fmt: str, *args: Any) -> None:
        LOGGER.debug("%s %s", self.address_string(), fmt % args)

    def _write_json(self, status: int, payload: dict[str, Any]) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def make_server(service: MediaLibraryService, host: str = "127.0.0.1", port: int = 8282) -> ThreadingHTTPServer:
    protocol = BridgeProtocol(service)

    class _Srv(ThreadingHTTPServer):
        daemon_threads = True

    server = _Srv((host, port), _Handler)
    server.protocol = protocol  # type: ignore[attr-defined]
    return server


def run_http_server(service: MediaLibraryService, host: str = "127.0.0.1", port: int = 8282) -> int:
    server = make_server(service, host=host, port=port)
    LOGGER.info("bridge listening on http://%s:%s", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0
