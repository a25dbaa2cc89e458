from __future__ import annotations

import json
import sys

from mediaroll.bridge.protocol import BridgeProtocol
from mediaroll.errors import InvalidArgumentError
from mediaroll.service import MediaLibraryService


def run_stdio_server(service: MediaLibraryService) -> int:
    protocol = BridgeProtocol(service)

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        if line in {"quit", "exit", "shutdown"}:
            return 0
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            print(json.dumps({"ok": False, "code": InvalidArgumentError.code, "error": "invalid json"}), flush=True)
            continue
        if not isinstance(payload, dict):
            print(json.dumps({"ok": False, "code": InvalidArgumentError.code, "error": "expected an object"}), flush=True)
            continue
        response = protocol.handle(payload)
        if "id" in payload:
            response["id"] = payload["id"]
        print(json.dumps(response), flush=True)

    return 0
