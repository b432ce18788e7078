from __future__ import annotations

import json
import logging
import time
from typing import Any

from flask import Flask, g, request


def init_request_logging(app: Flask) -> None:
    logger = logging.getLogger("app.request")
    trust_proxy = bool(getattr(app.config.get("CFG"), "TRUST_PROXY_HEADERS", False))

    @app.after_request
    def _log(resp):
        start = getattr(g, "start_ts", None)
        latency_ms = int((time.monotonic() - start) * 1000) if isinstance(start, (int, float)) else None

        ip = request.remote_addr or ""
        if trust_proxy:
            ip = request.headers.get("X-Forwarded-For", ip)
        if ip and "," in ip:
            ip = ip.split(",", 1)[0].strip()

        data: dict[str, Any] = {
            "type": "request",
            "request_id": getattr(g, "request_id", ""),
            "method": request.method,
            "path": request.path,
            "status": resp.status_code,
            "latency_ms": latency_ms,
            "ip": ip,
        }
        session_id = (request.view_args or {}).get("session_id")
        if session_id:
            data["session_id"] = session_id

        level = logging.WARNING if resp.status_code >= 500 else logging.INFO
        logger.log(level, json.dumps(data, separators=(",", ":")))
        return resp
